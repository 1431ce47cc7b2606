"""Test destructive-operation detection."""

from migraguard.diagnostics import Level, codes
from migraguard.policy.destructive import detect_destructive_operations


class TestDropTable:
    def test_detects_drop_table_with_line(self) -> None:
        sql = "CREATE TABLE a (id int);\nDROP TABLE users;"
        found = detect_destructive_operations(sql)
        assert len(found) == 1
        assert found[0].code == codes.DROP_TABLE
        assert found[0].level == Level.ERROR
        assert found[0].line == 2
        assert "permanently delete data" in found[0].message
        assert found[0].suggestion.startswith("Consider: 1) Rename table")

    def test_case_insensitive(self) -> None:
        found = detect_destructive_operations("drop   table if exists users;")
        assert [d.code for d in found] == [codes.DROP_TABLE]

    def test_drop_table_in_identifier_not_matched(self) -> None:
        assert detect_destructive_operations("CREATE TABLE dropped_tables (id int);") == []


class TestDropColumn:
    def test_detects_drop_column(self) -> None:
        found = detect_destructive_operations("ALTER TABLE posts DROP COLUMN body;")
        assert [d.code for d in found] == [codes.DROP_COLUMN]
        assert found[0].line == 1

    def test_drop_constraint_is_not_destructive(self) -> None:
        assert detect_destructive_operations("ALTER TABLE posts DROP CONSTRAINT fk;") == []


class TestTruncate:
    def test_detects_truncate(self) -> None:
        found = detect_destructive_operations("\n\nTRUNCATE audit_log;")
        assert [d.code for d in found] == [codes.TRUNCATE]
        assert found[0].line == 3
        assert found[0].suggestion == "Use DELETE with WHERE clause if you need selective deletion"


class TestComments:
    def test_line_comment_ignored(self) -> None:
        assert detect_destructive_operations("-- DROP TABLE users;\nSELECT 1;") == []

    def test_trailing_comment_ignored(self) -> None:
        assert detect_destructive_operations("SELECT 1; -- TRUNCATE users") == []

    def test_inline_block_comment_ignored(self) -> None:
        assert detect_destructive_operations("/* DROP TABLE users */ SELECT 1;") == []

    def test_code_after_block_comment_still_checked(self) -> None:
        found = detect_destructive_operations("/* cleanup */ DROP TABLE users;")
        assert [d.code for d in found] == [codes.DROP_TABLE]

    def test_multiline_block_comment_not_stripped(self) -> None:
        found = detect_destructive_operations("/*\nDROP TABLE users;\n*/")
        assert [(d.code, d.line) for d in found] == [(codes.DROP_TABLE, 2)]


def test_one_error_per_operation_on_same_line():
    found = detect_destructive_operations("DROP TABLE a; TRUNCATE b;")
    assert [d.code for d in found] == [codes.DROP_TABLE, codes.TRUNCATE]


def test_multiple_lines_reported_in_order():
    sql = "ALTER TABLE a DROP COLUMN x;\nSELECT 1;\nDROP TABLE b;"
    found = detect_destructive_operations(sql)
    assert [(d.code, d.line) for d in found] == [
        (codes.DROP_COLUMN, 1),
        (codes.DROP_TABLE, 3),
    ]


def test_empty_sql():
    assert detect_destructive_operations("") == []

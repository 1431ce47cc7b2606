"""Test missing Row Level Security detection."""

from migraguard.diagnostics import Level, codes
from migraguard.policy.rls import detect_missing_rls


def test_table_without_rls_warns():
    found = detect_missing_rls("CREATE TABLE posts (id uuid primary key);")
    assert len(found) == 1
    assert found[0].code == codes.MISSING_RLS
    assert found[0].level == Level.WARNING
    assert found[0].message == "Table 'posts' created without Row Level Security"
    assert "ALTER TABLE posts ENABLE ROW LEVEL SECURITY" in found[0].suggestion


def test_rls_enabled_in_same_migration():
    sql = """
    CREATE TABLE posts (id uuid primary key);
    ALTER TABLE posts ENABLE ROW LEVEL SECURITY;
    """
    assert detect_missing_rls(sql) == []


def test_schema_qualified_and_quoted_names_match():
    sql = """
    CREATE TABLE IF NOT EXISTS public."Posts" (id int);
    ALTER TABLE public.posts ENABLE ROW LEVEL SECURITY;
    """
    assert detect_missing_rls(sql) == []


def test_alter_table_only_form():
    sql = "CREATE TABLE a (id int);\nALTER TABLE ONLY a ENABLE ROW LEVEL SECURITY;"
    assert detect_missing_rls(sql) == []


def test_reports_each_missing_table_once_in_creation_order():
    sql = """CREATE TABLE b (id int);
CREATE TABLE a (id int);
CREATE TABLE IF NOT EXISTS b (id int);
CREATE TABLE c (id int);
ALTER TABLE c ENABLE ROW LEVEL SECURITY;"""
    found = detect_missing_rls(sql)
    assert [d.message for d in found] == [
        "Table 'b' created without Row Level Security",
        "Table 'a' created without Row Level Security",
    ]
    assert [d.line for d in found] == [1, 2]


def test_enable_for_other_table_does_not_count():
    sql = "CREATE TABLE a (id int);\nALTER TABLE b ENABLE ROW LEVEL SECURITY;"
    assert len(detect_missing_rls(sql)) == 1


def test_no_create_table():
    assert detect_missing_rls("ALTER TABLE a ADD COLUMN b int;") == []


def test_idempotent():
    sql = "CREATE TABLE a (id int); CREATE TABLE b (id int);"
    assert detect_missing_rls(sql) == detect_missing_rls(sql)

"""Small text helpers shared by the regex rules."""

from __future__ import annotations

import re

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/")
_LINE_COMMENT = re.compile(r"--.*$")


def strip_line_comments(line: str) -> str:
    """Remove `/* */` and `--` comments from a single line.

    Only comments that open and close on this line are removed; a block
    comment spanning several lines is left in place.
    """
    line = _BLOCK_COMMENT.sub("", line)
    return _LINE_COMMENT.sub("", line).strip()


def line_of(sql: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return sql.count("\n", 0, offset) + 1


def unquote(identifier: str) -> str:
    return identifier.replace('"', "").lower()

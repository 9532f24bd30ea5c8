"""
Table Parser - Quote-aware comma-separated text to headers and rows.

The first line is always the header row. A double quote toggles quoting,
so commas inside quotes stay in the field. Doubled quotes (``""``) are not
an escape: each quote toggles independently. Every field is stripped of
surrounding whitespace, quoted or not. Parsing never fails.
"""

from __future__ import annotations

from .models import ParsedTable

__all__ = ["parse_table", "split_fields"]

DELIMITER = ","
QUOTE = '"'


def split_fields(line: str) -> list[str]:
    """
    Split one line into fields.

    Args:
        line: A single record without its line terminator

    Returns:
        Stripped field values, in order
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def parse_table(text: str) -> ParsedTable:
    """
    Parse raw table text into headers and data rows.

    Args:
        text: Raw delimited text, one record per line

    Returns:
        ParsedTable with the first line as headers. Empty or
        whitespace-only input gives an empty table.

    Example:
        >>> parse_table("a,b,c\\n1,2,3").rows
        [['1', '2', '3']]
    """
    stripped = text.strip()
    if not stripped:
        return ParsedTable()

    lines = stripped.split("\n")
    return ParsedTable(
        headers=split_fields(lines[0]),
        rows=[split_fields(line) for line in lines[1:]],
    )

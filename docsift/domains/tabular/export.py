"""
Table Export - Render headers and rows back to comma-separated text.

Values are joined as-is with no quoting or escaping. A value that contains
a comma or a quote will not survive a round trip through ``parse_table``.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = ["export_table", "export_text"]


def export_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Header line first, then one comma-joined line per row."""
    lines = [",".join(headers)]
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines)


def export_text(content: str) -> str:
    """Text artifacts are exported verbatim."""
    return content

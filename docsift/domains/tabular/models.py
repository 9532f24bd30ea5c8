"""
Tabular Models - Data types for parsed table text.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ParsedTable(BaseModel):
    """Header row plus data rows parsed from delimited text.

    Rows are not required to match the header width.
    """

    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        """Number of data rows."""
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        """True when neither headers nor rows were found."""
        return not self.headers and not self.rows

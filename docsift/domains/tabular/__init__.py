"""
Tabular Domain - Parsing and exporting comma-separated table text.
"""

from .export import export_table, export_text
from .models import ParsedTable
from .parser import parse_table, split_fields

__all__ = [
    # Models
    "ParsedTable",
    # Functions
    "parse_table",
    "split_fields",
    "export_table",
    "export_text",
]

"""
CLI Interface - Command-line tools for docsift.

Provides commands for:
- Document extraction and export
- Tidy-transform of extracted tables
- Local table parsing
"""

from .main import app, main

__all__ = ["app", "main"]

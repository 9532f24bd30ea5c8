"""
Interfaces - Entry points.

- cli: Typer command-line interface
"""

__all__ = ["cli"]

"""
Editing Contracts - Interfaces for editing domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from docsift.adapters.extraction_api.models import TransformOutcome


@runtime_checkable
class TransformService(Protocol):
    """
    Contract for the tidy-transform collaborator.

    Any ExtractionService satisfies it.
    """

    async def transform_to_tidy(self, csv_data: str, table_index: int) -> TransformOutcome:
        """
        Reshape a table into tidy form.

        Args:
            csv_data: Table as comma-separated text, header first
            table_index: Position of the table in extraction order

        Returns:
            TransformSucceeded with the new table, or TransformFailed
        """
        ...

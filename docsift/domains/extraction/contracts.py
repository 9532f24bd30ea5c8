"""
Extraction Contracts - Interfaces for extraction domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from docsift.adapters.extraction_api.models import (
    SubmitResult,
    TableExtractionResult,
    TransformOutcome,
)

from .models import Document


@runtime_checkable
class ExtractionService(Protocol):
    """
    Contract for the remote extraction service.

    Implementations raise ``ServiceError`` for I/O or server failures,
    except ``transform_to_tidy``, which reports failure in its result.

    Example:
        >>> assert isinstance(ExtractionAPIClient(), ExtractionService)
        >>> assert isinstance(InMemoryExtractionService(), ExtractionService)
    """

    async def submit(
        self,
        data: bytes,
        name: str,
        content_type: str | None = None,
    ) -> SubmitResult:
        """Upload a file; the result carries the service's document id."""
        ...

    async def fetch_generated_text(self, document_id: str) -> str:
        """Download the generated text for a document."""
        ...

    async def request_table_extraction(self, document_id: str) -> TableExtractionResult:
        """Extract tables and report their locations."""
        ...

    async def fetch_table(self, document_id: str, location: str) -> str:
        """Download one table as raw comma-separated text."""
        ...

    async def transform_to_tidy(self, csv_data: str, table_index: int) -> TransformOutcome:
        """Reshape a table into tidy form."""
        ...


@runtime_checkable
class Orchestrator(Protocol):
    """Contract for running the extraction workflow for one upload."""

    async def process(
        self,
        data: bytes,
        name: str,
        content_type: str | None = None,
    ) -> Document:
        """
        Run the full workflow for a new upload.

        Returns:
            A terminal document: ``completed`` or ``error``
        """
        ...

    async def run(
        self,
        document: Document,
        data: bytes,
        content_type: str | None = None,
    ) -> Document:
        """Run the workflow for an already created processing document."""
        ...

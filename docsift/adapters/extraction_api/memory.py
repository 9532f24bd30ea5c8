"""
In-Memory Extraction Service - Deterministic stand-in for the HTTP service.

Serves canned markdown and tables without any network I/O. Selected with
``DOCSIFT_SERVICE_BACKEND=memory`` and used throughout the test suite.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import PurePath

from docsift.config import ServiceError
from docsift.domains.tabular import ParsedTable, parse_table

from .client import table_filename
from .models import (
    SubmitResult,
    TableExtractionResult,
    TransformFailed,
    TransformOutcome,
    TransformSucceeded,
)

logger = logging.getLogger(__name__)

__all__ = ["InMemoryExtractionService"]


class InMemoryExtractionService:
    """
    Extraction service backed by dictionaries.

    Example:
        >>> service = InMemoryExtractionService(
        ...     text="# Report",
        ...     tables={"out/table_0.csv": "a,b\\n1,2"},
        ... )
        >>> submitted = await service.submit(b"...", "report.pdf")
    """

    def __init__(
        self,
        text: str | None = None,
        tables: Mapping[str, str] | None = None,
        transform: Callable[[ParsedTable, int], ParsedTable] | None = None,
    ) -> None:
        """
        Initialize service.

        Args:
            text: Markdown returned for every document. Defaults to a heading
                built from the uploaded filename.
            tables: Table location -> CSV text, in extraction order
            transform: Reshape applied by transform_to_tidy. Identity if None.
        """
        self._text = text
        self._tables = dict(tables or {})
        self._transform = transform
        self._documents: dict[str, str] = {}
        self.calls: list[tuple[str, ...]] = []

    async def submit(
        self,
        data: bytes,
        name: str,
        content_type: str | None = None,
    ) -> SubmitResult:
        self.calls.append(("submit", name))
        document_id = PurePath(name).stem or "document"
        self._documents[document_id] = name
        return SubmitResult(document_id=document_id, filename=name)

    async def fetch_generated_text(self, document_id: str) -> str:
        self.calls.append(("fetch_generated_text", document_id))
        if document_id not in self._documents:
            raise ServiceError("Download failed", {"document_id": document_id})
        if self._text is not None:
            return self._text
        return f"# {self._documents[document_id]}\n"

    async def request_table_extraction(self, document_id: str) -> TableExtractionResult:
        self.calls.append(("request_table_extraction", document_id))
        if document_id not in self._documents:
            raise ServiceError("Table extraction failed", {"document_id": document_id})
        locations = list(self._tables)
        return TableExtractionResult(table_count=len(locations), table_locations=locations)

    async def fetch_table(self, document_id: str, location: str) -> str:
        self.calls.append(("fetch_table", document_id, location))
        for known, text in self._tables.items():
            if known == location or table_filename(known) == table_filename(location):
                return text
        raise ServiceError("CSV download failed", {"location": location})

    async def transform_to_tidy(self, csv_data: str, table_index: int) -> TransformOutcome:
        self.calls.append(("transform_to_tidy", str(table_index)))
        table = parse_table(csv_data)
        if self._transform is None:
            return TransformSucceeded(headers=table.headers, rows=table.rows)
        try:
            reshaped = self._transform(table, table_index)
        except ValueError as e:
            logger.warning("Transform of table %d failed: %s", table_index, e)
            return TransformFailed(error=f"Transform failed: {e}")
        return TransformSucceeded(headers=reshaped.headers, rows=reshaped.rows)

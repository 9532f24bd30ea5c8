"""
Extraction Orchestrator - Runs the remote workflow for one upload.

Steps, in order:
1. submit the file (mandatory)
2. fetch the generated text (mandatory)
3. request table extraction (optional: failure means zero tables)
4. fetch every table concurrently and parse it (a failed table is dropped)

Mandatory service failures put the document in ``error`` without artifacts.
Anything that is not a service failure propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import time
from pathlib import Path
from typing import TYPE_CHECKING

from docsift.adapters.extraction_api import table_filename
from docsift.config import DocsiftError, InvalidTransitionError, Settings, get_settings
from docsift.domains.tabular import parse_table

from .models import Document, TableArtifact, TextArtifact

if TYPE_CHECKING:
    from .contracts import ExtractionService

logger = logging.getLogger(__name__)

__all__ = ["ExtractionOrchestrator"]


class ExtractionOrchestrator:
    """
    Drives submit → text → tables for a single upload.

    Example:
        >>> orchestrator = ExtractionOrchestrator(InMemoryExtractionService(text="# Hi"))
        >>> document = await orchestrator.process(b"...", "scan.png", "image/png")
        >>> document.status
        <DocumentStatus.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        service: ExtractionService,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            service: Remote extraction service (HTTP client or a double)
            settings: Configuration. Uses cached settings if None.
        """
        self._service = service
        self._settings = settings or get_settings()

    async def process(
        self,
        data: bytes,
        name: str,
        content_type: str | None = None,
    ) -> Document:
        """Create a processing document for the upload and run the workflow."""
        document = Document.start(name, content_type)
        return await self.run(document, data, content_type)

    async def process_path(self, path: Path) -> Document:
        """Read a local file and process it."""
        data = await asyncio.to_thread(path.read_bytes)
        content_type = mimetypes.guess_type(path.name)[0]
        return await self.process(data, path.name, content_type)

    async def run(
        self,
        document: Document,
        data: bytes,
        content_type: str | None = None,
    ) -> Document:
        """
        Run the workflow for a processing document.

        Args:
            document: Document in ``processing`` status
            data: File bytes
            content_type: MIME type, if known

        Returns:
            The same document, now ``completed`` or ``error``
        """
        if document.is_terminal:
            raise InvalidTransitionError(
                f"Document {document.id} is already {document.status.value}",
                {"document_id": document.id},
            )

        start_time = time.time()
        logger.info("Starting extraction: %s (%s)", document.display_name, document.id)

        try:
            submitted = await self._service.submit(data, document.display_name, content_type)
            remote_id = submitted.document_id
            content = await self._service.fetch_generated_text(remote_id)
        except DocsiftError as e:
            logger.error("Extraction failed for %s: %s", document.display_name, e.message)
            document.fail(e.message or "Failed to process file")
            return document

        logger.debug("Generated text downloaded for %s: %d chars", remote_id, len(content))
        tables = await self._extract_tables(remote_id)

        document.complete(
            remote_id=remote_id,
            text=TextArtifact(content=content, filename=f"{remote_id}.md"),
            tables=tables,
        )
        logger.info(
            "Extraction complete: %s - %d tables in %.1fs",
            document.display_name,
            document.table_count,
            time.time() - start_time,
        )
        return document

    async def _extract_tables(self, remote_id: str) -> list[TableArtifact]:
        """Optional table phase. Never raises; failures yield fewer tables."""
        try:
            extraction = await self._service.request_table_extraction(remote_id)
        except Exception as e:
            # Not every document has tables
            logger.warning("Table extraction failed for %s: %s", remote_id, e)
            return []

        locations = extraction.table_locations
        if extraction.table_count != len(locations):
            logger.debug(
                "Service reported %d tables but %d locations for %s",
                extraction.table_count,
                len(locations),
                remote_id,
            )
        if not locations:
            return []

        semaphore = asyncio.Semaphore(self._settings.max_concurrent_table_fetches)

        async def fetch_with_limit(index: int, location: str) -> TableArtifact:
            async with semaphore:
                return await self._fetch_table(remote_id, index, location)

        tasks = [fetch_with_limit(i, loc) for i, loc in enumerate(locations)]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        # gather keeps request order regardless of completion order
        tables: list[TableArtifact] = []
        for location, result in zip(locations, results):
            if isinstance(result, Exception):
                logger.error("Failed to fetch table %s: %s", location, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                tables.append(result)

        logger.info("Tables downloaded for %s: %d of %d", remote_id, len(tables), len(locations))
        return tables

    async def _fetch_table(self, remote_id: str, index: int, location: str) -> TableArtifact:
        filename = table_filename(location)
        raw = await self._service.fetch_table(remote_id, location)
        parsed = parse_table(raw)
        logger.debug(
            "Parsed table %s: %d headers, %d rows", filename, len(parsed.headers), parsed.row_count
        )
        return TableArtifact(
            id=TableArtifact.id_for(index),
            index=index,
            filename=filename,
            headers=parsed.headers,
            rows=parsed.rows,
        )

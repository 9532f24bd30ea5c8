"""
Edit Session - Override layer over a completed document's artifacts.

Reads always return ``override if present else original``. Saves replace the
whole override, never patch it, and originals are never touched. Every
successful save or transform bumps the session version so cached views keyed
on ``(artifact id, version)`` are never stale.

Operations on different tables may interleave freely. Two mutations of the
same table must not be raced by the caller; the session does not serialize
them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from docsift.adapters.extraction_api.models import (
    TransformFailed,
    TransformOutcome,
    TransformSucceeded,
)
from docsift.config import InvalidTransitionError, UnknownTableError
from docsift.domains.extraction.models import (
    Document,
    DocumentStatus,
    TableArtifact,
    TextArtifact,
)
from docsift.domains.tabular import ParsedTable, export_table, export_text

from .models import TEXT_ARTIFACT_ID, ExportedFile

if TYPE_CHECKING:
    from .contracts import TransformService

logger = logging.getLogger(__name__)

__all__ = ["EditSession"]


class EditSession:
    """
    Mediates reads and writes of a completed document's artifacts.

    Example:
        >>> session = EditSession(document, client)
        >>> session.save_table("table-0", ["a", "b"], [["1", "2"]])
        1
        >>> outcome = await session.transform_table("table-0")
    """

    def __init__(self, document: Document, service: TransformService) -> None:
        """
        Initialize session.

        Args:
            document: A ``completed`` document
            service: Tidy-transform collaborator

        Raises:
            InvalidTransitionError: Document is not completed
        """
        if document.status is not DocumentStatus.COMPLETED or document.text is None:
            raise InvalidTransitionError(
                f"Document {document.id} is {document.status.value}, not completed",
                {"document_id": document.id},
            )
        self._document = document
        self._text: TextArtifact = document.text
        self._service = service
        self._version = 0

    @property
    def document(self) -> Document:
        return self._document

    @property
    def version(self) -> int:
        """Number of successful saves and transforms so far."""
        return self._version

    def cache_key(self, artifact_id: str = TEXT_ARTIFACT_ID) -> tuple[str, int]:
        """Key for caching a derived view of an artifact."""
        return (artifact_id, self._version)

    def table_ids(self) -> list[str]:
        return [table.id for table in self._document.tables]

    # --- Reads ---

    def effective_text(self) -> str:
        return self._text.effective_content

    def effective_table(self, table_id: str) -> ParsedTable:
        """
        Current headers and rows of a table.

        Returns a copy; mutating it does not affect the session.

        Raises:
            UnknownTableError: No table with this id
        """
        table = self._require_table(table_id)
        return ParsedTable(
            headers=list(table.effective_headers),
            rows=[list(row) for row in table.effective_rows],
        )

    # --- Writes ---

    def save_text(self, content: str) -> int:
        """Replace the text override. Returns the new version."""
        self._text.edited_content = content
        return self._bump(TEXT_ARTIFACT_ID)

    def save_table(
        self,
        table_id: str,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
    ) -> int:
        """
        Replace a table's headers and rows together.

        Both are copied, so later changes to the arguments do not leak in.
        Ragged rows are stored as given.

        Returns:
            The new version

        Raises:
            UnknownTableError: No table with this id
        """
        table = self._require_table(table_id)
        self._replace(table, headers, rows)
        return self._bump(table_id)

    async def transform_table(self, table_id: str) -> TransformOutcome:
        """
        Reshape a table through the tidy-transform service.

        The current effective table is sent. On success the result becomes
        the new override (headers and rows together, headers kept when the
        service returns rows only). On failure nothing changes and the
        failure is returned.

        Raises:
            UnknownTableError: No table with this id
        """
        table = self._require_table(table_id)
        current_headers = list(table.effective_headers)
        csv_data = export_table(current_headers, table.effective_rows)

        logger.info("Transforming %s (index %d) to tidy form", table_id, table.index)
        outcome = await self._service.transform_to_tidy(csv_data, table.index)

        if isinstance(outcome, TransformFailed):
            logger.warning("Transform of %s failed: %s", table_id, outcome.error)
            return outcome

        if isinstance(outcome, TransformSucceeded):
            headers = outcome.headers if outcome.headers is not None else current_headers
            self._replace(table, headers, outcome.rows)
            self._bump(table_id)
        return outcome

    # --- Export ---

    def export_text(self) -> ExportedFile:
        """Effective text as a downloadable file."""
        return ExportedFile(
            filename=self._text.filename,
            content=export_text(self._text.effective_content),
            media_type="text/markdown",
        )

    def export_table(self, table_id: str) -> ExportedFile:
        """Effective table as comma-joined lines, header first, unquoted."""
        table = self._require_table(table_id)
        return ExportedFile(
            filename=table.filename,
            content=export_table(table.effective_headers, table.effective_rows),
            media_type="text/csv",
        )

    # --- Internals ---

    def _require_table(self, table_id: str) -> TableArtifact:
        table = self._document.get_table(table_id)
        if table is None:
            raise UnknownTableError(table_id)
        return table

    @staticmethod
    def _replace(
        table: TableArtifact,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
    ) -> None:
        new_headers = list(headers)
        new_rows = [list(row) for row in rows]
        table.edited_headers = new_headers
        table.edited_rows = new_rows

    def _bump(self, artifact_id: str) -> int:
        self._version += 1
        logger.debug("Saved %s, version %d", artifact_id, self._version)
        return self._version

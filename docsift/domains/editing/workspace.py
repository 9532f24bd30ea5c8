"""
Workspace - The single current document and its edit session.

A new upload replaces the current document right away. If an older upload
finishes after a newer one has started, its result is discarded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docsift.domains.extraction.models import Document, DocumentStatus

from .session import EditSession

if TYPE_CHECKING:
    from docsift.domains.extraction.contracts import Orchestrator

    from .contracts import TransformService

logger = logging.getLogger(__name__)

__all__ = ["Workspace"]


class Workspace:
    """
    Holds the current document for an interactive client.

    Example:
        >>> workspace = Workspace(ExtractionOrchestrator(client), client)
        >>> document = await workspace.upload(data, "report.pdf")
        >>> workspace.session.save_text("# Fixed title")
    """

    def __init__(self, orchestrator: Orchestrator, service: TransformService) -> None:
        self._orchestrator = orchestrator
        self._service = service
        self._current: Document | None = None
        self._session: EditSession | None = None

    @property
    def current(self) -> Document | None:
        return self._current

    @property
    def session(self) -> EditSession | None:
        """Edit session for the current document, once it has completed."""
        return self._session

    @property
    def is_processing(self) -> bool:
        return self._current is not None and self._current.status is DocumentStatus.PROCESSING

    async def upload(
        self,
        data: bytes,
        name: str,
        content_type: str | None = None,
    ) -> Document:
        """
        Process a new upload and make it current.

        Returns:
            The terminal document. It is installed as current only if no
            newer upload started in the meantime.

        Raises:
            Whatever the orchestrator raises. The document is marked failed
            first so it never stays ``processing``.
        """
        document = Document.start(name, content_type)
        self._current = document
        self._session = None

        try:
            result = await self._orchestrator.run(document, data, content_type)
        except Exception as e:
            if not document.is_terminal:
                document.fail(str(e) or type(e).__name__)
            raise

        if self._current is not document:
            logger.info(
                "Discarding result for %s (%s): superseded by a newer upload",
                document.display_name,
                document.id,
            )
            return result

        if result.status is DocumentStatus.COMPLETED:
            self._session = EditSession(result, self._service)
        return result

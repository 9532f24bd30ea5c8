"""
Extraction Models - Data types for extraction domain.
"""

from __future__ import annotations

import mimetypes
import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from docsift.config import InvalidTransitionError


class DocumentKind(str, Enum):
    """Kind of uploaded source file."""

    PDF = "pdf"
    IMAGE = "image"

    @classmethod
    def detect(cls, name: str, content_type: str | None = None) -> DocumentKind:
        """Images by MIME type, everything else is treated as PDF."""
        mime = content_type or mimetypes.guess_type(name)[0] or ""
        return cls.IMAGE if mime.startswith("image/") else cls.PDF


class DocumentStatus(str, Enum):
    """Lifecycle status. ``completed`` and ``error`` are terminal."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class TextArtifact(BaseModel):
    """Generated text for a document, with an optional edited override."""

    content: str = Field(frozen=True)
    filename: str = Field(frozen=True)
    edited_content: str | None = None

    @property
    def effective_content(self) -> str:
        """Override if present, else the original content."""
        if self.edited_content is not None:
            return self.edited_content
        return self.content

    @property
    def is_edited(self) -> bool:
        return self.edited_content is not None


class TableArtifact(BaseModel):
    """One extracted table. Overrides always replace headers and rows together."""

    id: str = Field(frozen=True)
    index: int = Field(frozen=True, ge=0)
    filename: str = Field(frozen=True)
    headers: list[str] = Field(default_factory=list, frozen=True)
    rows: list[list[str]] = Field(default_factory=list, frozen=True)
    edited_headers: list[str] | None = None
    edited_rows: list[list[str]] | None = None

    @staticmethod
    def id_for(index: int) -> str:
        return f"table-{index}"

    @property
    def effective_headers(self) -> list[str]:
        if self.edited_headers is not None:
            return self.edited_headers
        return self.headers

    @property
    def effective_rows(self) -> list[list[str]]:
        if self.edited_rows is not None:
            return self.edited_rows
        return self.rows

    @property
    def is_edited(self) -> bool:
        return self.edited_rows is not None

    @property
    def is_rectangular(self) -> bool:
        """True when every effective row matches the header width."""
        width = len(self.effective_headers)
        return all(len(row) == width for row in self.effective_rows)


class Document(BaseModel):
    """
    One uploaded source file and its extraction result.

    Starts in ``processing`` and transitions exactly once to ``completed``
    (with artifacts) or ``error`` (with a reason, no artifacts).
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    display_name: str
    kind: DocumentKind = DocumentKind.PDF
    created_at: datetime = Field(default_factory=datetime.now)
    status: DocumentStatus = DocumentStatus.PROCESSING

    remote_id: str | None = None
    text: TextArtifact | None = None
    tables: list[TableArtifact] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def start(cls, name: str, content_type: str | None = None) -> Document:
        """Create a new processing document for an upload."""
        return cls(display_name=name, kind=DocumentKind.detect(name, content_type))

    @property
    def is_terminal(self) -> bool:
        return self.status is not DocumentStatus.PROCESSING

    @property
    def table_count(self) -> int:
        return len(self.tables)

    def get_table(self, table_id: str) -> TableArtifact | None:
        """Look up a table by id."""
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def complete(
        self,
        remote_id: str,
        text: TextArtifact,
        tables: list[TableArtifact],
    ) -> None:
        """Attach artifacts and mark completed."""
        self._require_processing(DocumentStatus.COMPLETED)
        self.remote_id = remote_id
        self.text = text
        self.tables = list(tables)
        self.status = DocumentStatus.COMPLETED

    def fail(self, reason: str) -> None:
        """Mark failed with a reason for display."""
        self._require_processing(DocumentStatus.ERROR)
        self.error = reason
        self.status = DocumentStatus.ERROR

    def _require_processing(self, target: DocumentStatus) -> None:
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Document {self.id} is already {self.status.value}",
                {"document_id": self.id, "target": target.value},
            )

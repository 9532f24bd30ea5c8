"""
Editing Models - Data types for editing domain.
"""

from __future__ import annotations

from pydantic import BaseModel

TEXT_ARTIFACT_ID = "text"


class ExportedFile(BaseModel):
    """Downloadable content for one artifact."""

    filename: str
    content: str
    media_type: str = "text/plain"

    model_config = {"frozen": True}

    def encode(self) -> bytes:
        return self.content.encode("utf-8")

"""
Extraction API Models - Request/Response types for the extraction service.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Body returned by ``POST /upload``."""

    status: str = ""
    filename: str = ""
    merged_path: str
    processing_time_seconds: float = 0.0


class TableExtractionResponse(BaseModel):
    """Body returned by ``POST /filter_tables``."""

    status: str = ""
    document: str = ""
    markdown_path: str = ""
    tables_count: int = 0
    excel_folder: str = ""
    excel_files: list[str] = Field(default_factory=list)


class TransformRequest(BaseModel):
    """Body sent to ``POST /transform2tidy``."""

    csv_data: str
    table_index: int


class SubmitResult(BaseModel):
    """Outcome of submitting a file for extraction."""

    document_id: str
    filename: str = ""
    processing_seconds: float = 0.0

    model_config = {"frozen": True}


class TableExtractionResult(BaseModel):
    """Table locations reported for a document."""

    table_count: int = 0
    table_locations: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class TransformSucceeded(BaseModel):
    """Reshaped table. ``headers`` is None when the service sent rows only."""

    kind: Literal["succeeded"] = "succeeded"
    headers: list[str] | None = None
    rows: list[list[str]] = Field(default_factory=list)

    model_config = {"frozen": True}


class TransformFailed(BaseModel):
    """Transform call failed; ``error`` is suitable for display."""

    kind: Literal["failed"] = "failed"
    error: str

    model_config = {"frozen": True}


TransformOutcome = Annotated[
    Union[TransformSucceeded, TransformFailed],
    Field(discriminator="kind"),
]

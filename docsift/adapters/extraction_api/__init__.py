"""
Extraction API Adapter - Client for the remote document extraction service.

This is the ONLY place that calls the extraction service.
All domains use this adapter (or its in-memory double) for remote work.
"""

from .client import ExtractionAPIClient, decode_transform_response, table_filename
from .memory import InMemoryExtractionService
from .models import (
    SubmitResult,
    TableExtractionResponse,
    TableExtractionResult,
    TransformFailed,
    TransformOutcome,
    TransformRequest,
    TransformSucceeded,
    UploadResponse,
)

__all__ = [
    "ExtractionAPIClient",
    "InMemoryExtractionService",
    "decode_transform_response",
    "table_filename",
    "SubmitResult",
    "TableExtractionResult",
    "TransformOutcome",
    "TransformSucceeded",
    "TransformFailed",
    "TransformRequest",
    "UploadResponse",
    "TableExtractionResponse",
]

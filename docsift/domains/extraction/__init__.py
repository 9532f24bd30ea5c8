"""
Extraction Domain - Upload to structured result.

This domain handles:
- Document lifecycle (processing → completed | error)
- The ordered remote extraction workflow
- Concurrent table download and parsing
"""

from .contracts import ExtractionService, Orchestrator
from .models import (
    Document,
    DocumentKind,
    DocumentStatus,
    TableArtifact,
    TextArtifact,
)
from .orchestrator import ExtractionOrchestrator

__all__ = [
    # Contracts
    "ExtractionService",
    "Orchestrator",
    # Models
    "Document",
    "DocumentKind",
    "DocumentStatus",
    "TextArtifact",
    "TableArtifact",
    # Implementations
    "ExtractionOrchestrator",
]

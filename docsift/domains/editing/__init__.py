"""
Editing Domain - Corrections and reshaping on top of extraction results.

This domain handles:
- Original vs. edited state for text and tables
- Tidy-transform of tables
- Version counter for cache invalidation
- Export of effective artifacts
- The single current document of an interactive client
"""

from .contracts import TransformService
from .models import TEXT_ARTIFACT_ID, ExportedFile
from .session import EditSession
from .workspace import Workspace

__all__ = [
    # Contracts
    "TransformService",
    # Models
    "ExportedFile",
    "TEXT_ARTIFACT_ID",
    # Implementations
    "EditSession",
    "Workspace",
]

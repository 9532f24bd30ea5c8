"""
Adapters - External service integrations.

All remote calls are wrapped here to isolate domains from transport changes.
"""

from .extraction_api import ExtractionAPIClient, InMemoryExtractionService

__all__ = [
    "ExtractionAPIClient",
    "InMemoryExtractionService",
]

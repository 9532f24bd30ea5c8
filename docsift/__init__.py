"""
docsift - Async client for document extraction: upload, review, correct, export.

Example:
    >>> from docsift.adapters.extraction_api import ExtractionAPIClient
    >>> from docsift.domains.extraction import ExtractionOrchestrator
    >>> orchestrator = ExtractionOrchestrator(ExtractionAPIClient())
    >>> document = await orchestrator.process_path(Path("invoice.pdf"))
"""

__version__ = "0.3.0"
__all__ = ["__version__"]

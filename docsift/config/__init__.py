"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    DocsiftError,
    ErrorCode,
    InvalidTransitionError,
    ServiceError,
    ServiceUnavailableError,
    UnknownTableError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "DocsiftError",
    "ServiceError",
    "ServiceUnavailableError",
    "UnknownTableError",
    "InvalidTransitionError",
]

"""
Scripture Study - Core Module

Foundational components shared by the integrations and the study engine:
- Unified error handling
- Async utilities

Modules here depend on nothing else in the project.

Usage:
    from core import ProviderError, gather_with_concurrency
"""

from core.errors import (
    StudyError,
    StudyConfigError,
    StudyValidationError,
    ProviderError,
    ProviderTimeoutError,
    ProviderResponseError,
    ErrorContext,
    ErrorSeverity,
    classify_error,
)
from core.async_utils import (
    gather_with_concurrency,
    run_periodically,
)

__all__ = [
    # Errors
    "StudyError",
    "StudyConfigError",
    "StudyValidationError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderResponseError",
    "ErrorContext",
    "ErrorSeverity",
    "classify_error",
    # Async
    "gather_with_concurrency",
    "run_periodically",
]

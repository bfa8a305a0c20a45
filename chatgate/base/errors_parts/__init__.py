"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chatgate.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import (
    classify_exception,
    code_for_status,
    error_from_exception,
    error_from_response,
    upstream_message,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "code_for_status",
    "error_from_exception",
    "error_from_response",
    "upstream_message",
]

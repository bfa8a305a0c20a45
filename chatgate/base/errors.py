"""Unified gateway error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``chatgate.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import (
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

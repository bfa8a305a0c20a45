"""Auxiliary logging helpers (formatter, context, redaction) used by base.logging."""

from .json_formatter import JsonFormatter, ISO
from .logging_context import LogContext
from .redaction import mask_secret, redact_headers, redact_url

__all__ = ["JsonFormatter", "ISO", "LogContext", "mask_secret", "redact_headers", "redact_url"]

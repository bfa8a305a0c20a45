"""
Normalized gateway error codes (taxonomy).

Defines the `ErrorCode` enumeration shared by the credential resolver,
endpoint builder, transport and stream reconciler. Values are lowercase
snake_case and are a stable public contract for logging and for the HTTP
service's JSON error bodies.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    NO_CREDENTIAL = "no_credential"
    INCOMPLETE_PROVIDER_CONFIG = "incomplete_provider_config"
    UNKNOWN_PROVIDER = "unknown_provider"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMIT = "rate_limit"
    MALFORMED = "malformed"
    CANCELED = "canceled"
    UNSUPPORTED = "unsupported"
    UPSTREAM = "upstream"
    INTERNAL = "internal"

    @property
    def is_configuration(self) -> bool:
        """Whether the code is raised before any network call is attempted."""
        return self in (
            ErrorCode.NO_CREDENTIAL,
            ErrorCode.INCOMPLETE_PROVIDER_CONFIG,
            ErrorCode.UNKNOWN_PROVIDER,
            ErrorCode.UNSUPPORTED,
        )


__all__ = ["ErrorCode"]

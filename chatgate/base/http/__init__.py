"""HTTP transport package."""

from .transport import HttpTransport, transport_scope

__all__ = ["HttpTransport", "transport_scope"]

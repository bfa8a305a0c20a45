"""Terminal outcome of a chat call."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, Literal, Optional, Tuple

from .provider_metadata import ProviderMetadata
from .tool_call import ToolCall

if TYPE_CHECKING:  # pragma: no cover
    from ..errors import ProviderError

ChatStatus = Literal["done", "error", "canceled"]


@dataclass
class ChatResult:
    """Accumulated result delivered once per chat call.

    ``text`` / ``reasoning`` hold the concatenation of every delta emitted
    before the terminal event; a canceled call keeps what arrived before the
    cancel. ``images`` is filled for image-generation models only.
    """

    status: ChatStatus
    meta: ProviderMetadata
    text: str = ""
    reasoning: str = ""
    tool_calls: Tuple[ToolCall, ...] = ()
    images: Tuple[str, ...] = ()
    finish_reason: Optional[str] = None
    error: Optional["ProviderError"] = None

    @property
    def ok(self) -> bool:
        return self.status == "done"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view used by the HTTP service and the CLI."""
        return {
            "status": self.status,
            "text": self.text,
            "reasoning": self.reasoning,
            "tool_calls": [asdict(c) for c in self.tool_calls],
            "images": list(self.images),
            "finish_reason": self.finish_reason,
            "error": self.error.to_dict() if self.error else None,
            "meta": asdict(self.meta),
        }


__all__ = ["ChatResult", "ChatStatus"]

"""Helpers shared by the dialect payload adapters."""
from __future__ import annotations

from typing import Iterable, Optional

from .descriptor import ProviderDescriptor
from .errors import ErrorCode, ProviderError
from .models import ContentPart, Message

VISION_MIN_MAX_TOKENS = 4000


def check_image_sizes(messages: Iterable[Message], descriptor: ProviderDescriptor, model: str) -> None:
    """Reject inline images larger than the provider accepts.

    Only ``data:`` images can be measured; URL references are left to the
    provider, whose rejection is then surfaced verbatim.

    Raises:
        ProviderError: ``MALFORMED`` naming the offending size and the limit.
    """
    limit = descriptor.max_image_bytes
    if not limit:
        return
    for message in messages:
        for part in message.parts:
            size = part.inline_size()
            if size > limit:
                raise ProviderError(
                    code=ErrorCode.MALFORMED,
                    message=f"image of {size} bytes exceeds {descriptor.id} limit of {limit} bytes",
                    provider=descriptor.id,
                    model=model,
                )


def image_parts(message: Message) -> Iterable[ContentPart]:
    return (p for p in message.parts if p.type == "image_url" and p.image_url)


def vision_max_tokens(requested: Optional[int]) -> int:
    """Output budget for a non-reasoning vision call, never below the floor."""
    return max(requested or 0, VISION_MIN_MAX_TOKENS)


__all__ = ["VISION_MIN_MAX_TOKENS", "check_image_sizes", "image_parts", "vision_max_tokens"]

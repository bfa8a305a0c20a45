"""Content part dataclass for multimodal messages.

A message's content is either plain text or an ordered tuple of parts. Image
parts hold a reference: an ``http(s)`` URL or a ``data:`` URL carrying
base64 bytes.
"""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

PartType = Literal["text", "image_url"]


@dataclass(frozen=True)
class ContentPart:
    """One block of a multimodal message (text or image reference)."""

    type: PartType
    text: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def of_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def of_image(cls, url: str) -> "ContentPart":
        return cls(type="image_url", image_url=url)

    @property
    def is_inline_image(self) -> bool:
        return self.type == "image_url" and bool(self.image_url) and self.image_url.startswith("data:")

    def data_url_parts(self) -> Tuple[str, str]:
        """Split an inline image into ``(mime_type, base64_payload)``.

        Raises ``ValueError`` for parts that are not ``data:`` URLs.
        """
        if not self.is_inline_image:
            raise ValueError("not an inline data URL")
        header, _, payload = (self.image_url or "").partition(",")
        mime = header[5:].split(";")[0] or "application/octet-stream"
        return mime, payload

    def inline_size(self) -> int:
        """Decoded byte size of an inline image (0 for URL references)."""
        if not self.is_inline_image:
            return 0
        _, payload = self.data_url_parts()
        try:
            return len(base64.b64decode(payload, validate=False))
        except (binascii.Error, ValueError):
            # length estimate for undecodable payloads
            return (len(payload) * 3) // 4


__all__ = ["ContentPart", "PartType"]

"""Chat message dataclass."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, Tuple, Union

from .content_part import ContentPart

Role = Literal["system", "user", "assistant", "developer"]
MessageContent = Union[str, Tuple[ContentPart, ...]]


@dataclass(frozen=True)
class Message:
    """A single chat message; immutable once constructed.

    ``content`` may be given as any sequence of :class:`ContentPart`; it is
    stored as a tuple.
    """

    role: Role
    content: MessageContent

    def __post_init__(self) -> None:
        if not isinstance(self.content, (str, tuple)):
            object.__setattr__(self, "content", tuple(self.content))

    @property
    def parts(self) -> Tuple[ContentPart, ...]:
        if isinstance(self.content, str):
            return (ContentPart.of_text(self.content),)
        return self.content

    def text(self) -> str:
        """Return the first text block (the whole content for plain strings)."""
        if isinstance(self.content, str):
            return self.content
        for part in self.content:
            if part.type == "text" and part.text:
                return part.text
        return ""

    def image_urls(self) -> Sequence[str]:
        return [p.image_url for p in self.parts if p.type == "image_url" and p.image_url]

    @property
    def has_images(self) -> bool:
        return bool(self.image_urls())


__all__ = ["Message", "Role", "MessageContent"]

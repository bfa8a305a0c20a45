"""DTO validation package for inbound gateway requests."""

from .chat import ChatRequestDTO, ContentPartDTO, MessageDTO, Role, SpeechRequestDTO

__all__ = [
    "Role",
    "ContentPartDTO",
    "MessageDTO",
    "ChatRequestDTO",
    "SpeechRequestDTO",
]

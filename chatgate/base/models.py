"""Gateway domain models public surface.

Re-exports the dataclasses under ``chatgate.base.models_parts``.
"""

from .models_parts import (
    CallSettings,
    ChatRequest,
    ChatResult,
    ContentPart,
    Credentials,
    Message,
    ModelInfo,
    ModelProvider,
    ProviderMetadata,
    SamplingParams,
    SpeechRequest,
    ToolCall,
    UsageSummary,
)

__all__ = [
    "CallSettings",
    "ChatRequest",
    "ChatResult",
    "ContentPart",
    "Credentials",
    "Message",
    "ModelInfo",
    "ModelProvider",
    "ProviderMetadata",
    "SamplingParams",
    "SpeechRequest",
    "ToolCall",
    "UsageSummary",
]

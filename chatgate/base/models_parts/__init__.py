"""Model dataclasses, one class per file."""

from .content_part import ContentPart
from .message import Message
from .sampling import SamplingParams
from .chat_request import ChatRequest
from .tool_call import ToolCall
from .provider_metadata import ProviderMetadata
from .chat_result import ChatResult
from .model_info import ModelInfo, ModelProvider
from .usage_summary import UsageSummary
from .speech_request import SpeechRequest
from .call_settings import CallSettings, Credentials

__all__ = [
    "ContentPart",
    "Message",
    "SamplingParams",
    "ChatRequest",
    "ToolCall",
    "ProviderMetadata",
    "ChatResult",
    "ModelInfo",
    "ModelProvider",
    "UsageSummary",
    "SpeechRequest",
    "CallSettings",
    "Credentials",
]

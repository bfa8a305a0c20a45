"""chatgate.config.defaults
========================

Small, stable default values used across the package and the service layer.
Plain constants only; no I/O and no imports from other chatgate packages.
"""

from __future__ import annotations

from typing import Dict, Tuple

# ---- Service / HTTP layer ----

# Comma-separated list of allowed origins for the dev server.
SERVICE_CORS_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
SERVICE_DEFAULT_HOST = "127.0.0.1"
SERVICE_DEFAULT_PORT = 8091

# ---- CLI ----
CLI_DEFAULT_PROVIDER = "openai"
CLI_DEFAULT_MODEL = "gpt-4o-mini"

# ---- Configuration file ----
CONFIG_FILE_ENV = "CHATGATE_CONFIG_FILE"

# ---- Azure ----
AZURE_DEFAULT_API_VERSION = "2024-10-21"

# ---- Built-in model catalog ----
# Provider id -> (provider display name, provider sort order, model names).
DEFAULT_MODEL_CATALOG: Dict[str, Tuple[str, int, Tuple[str, ...]]] = {
    "openai": (
        "OpenAI",
        1,
        (
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-4.1",
            "gpt-4.1-mini",
            "gpt-5",
            "gpt-5-mini",
            "o1",
            "o3-mini",
            "o4-mini",
            "dall-e-3",
        ),
    ),
    "azure": ("Azure", 2, ("gpt-4o", "gpt-4o-mini", "gpt-4.1", "dall-e-3")),
    "google": ("Google", 3, ("gemini-2.0-flash", "gemini-2.5-flash", "gemini-2.5-pro")),
    "anthropic": (
        "Anthropic",
        4,
        ("claude-3-5-haiku-20241022", "claude-3-7-sonnet-20250219", "claude-sonnet-4-20250514"),
    ),
    "deepseek": ("DeepSeek", 5, ("deepseek-chat", "deepseek-reasoner")),
    "xai": ("xAI", 6, ("grok-3", "grok-3-mini", "grok-4")),
    "moonshot": ("Moonshot", 7, ("moonshot-v1-8k", "moonshot-v1-32k", "kimi-latest")),
    "siliconflow": ("SiliconFlow", 8, ("deepseek-ai/DeepSeek-V3", "Qwen/Qwen2.5-7B-Instruct")),
    "iflytek": ("Iflytek", 9, ("lite", "generalv3.5", "4.0Ultra")),
}

# Sequence number of the first upstream-listed model (see ChatClient.list_models).
LISTED_MODEL_SEQ_START = 1000
# Sequence number of the first custom (table-only) provider/model.
CUSTOM_SEQ_START = -1000

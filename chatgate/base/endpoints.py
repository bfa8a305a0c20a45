"""Endpoint builder: base URL + operation -> absolute request URL.

Rules
-----
- The base is the caller override, else the descriptor's configured or
  default base URL. Trailing slashes are trimmed, so ``https://h/`` and
  ``https://h`` produce identical URLs.
- A base without a scheme gets ``https://`` prepended, except for Azure whose
  base must be configured in full.
- Azure substitutes the deployment into its path template and appends
  ``api-version``; a missing base URL, deployment or version is an
  ``INCOMPLETE_PROVIDER_CONFIG`` error.
- Gemini places the model in the path and selects the streaming method
  (``:streamGenerateContent?alt=sse``) or the buffered one.
- Query-parameter credentials are appended last.
- Operations the provider does not offer raise ``UNSUPPORTED``.

No I/O happens here; errors are raised before any request is sent.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from .descriptor import PathStyle, ProviderDescriptor
from .errors import ErrorCode, ProviderError


class Operation(str, Enum):
    CHAT = "chat"
    IMAGE = "image"
    SPEECH = "speech"
    MODELS = "models"
    USAGE = "usage"
    SUBSCRIPTION = "subscription"


_OPENAI_PATHS: Dict[Operation, str] = {
    Operation.CHAT: "v1/chat/completions",
    Operation.IMAGE: "v1/images/generations",
    Operation.SPEECH: "v1/audio/speech",
    Operation.MODELS: "v1/models",
    Operation.USAGE: "dashboard/billing/usage",
    Operation.SUBSCRIPTION: "dashboard/billing/subscription",
}
_AZURE_PATHS: Dict[Operation, str] = {
    Operation.CHAT: "deployments/{deployment}/chat/completions",
    Operation.IMAGE: "deployments/{deployment}/images/generations",
    Operation.SPEECH: "deployments/{deployment}/audio/speech",
}
_ANTHROPIC_PATHS: Dict[Operation, str] = {
    Operation.CHAT: "v1/messages",
    Operation.MODELS: "v1/models",
}
_GOOGLE_PATHS: Dict[Operation, str] = {
    Operation.CHAT: "{version}/models/{model}:{method}",
    Operation.MODELS: "{version}/models",
}
_PATHS: Dict[PathStyle, Dict[Operation, str]] = {
    PathStyle.OPENAI: _OPENAI_PATHS,
    PathStyle.AZURE: _AZURE_PATHS,
    PathStyle.ANTHROPIC: _ANTHROPIC_PATHS,
    PathStyle.GOOGLE: _GOOGLE_PATHS,
}
GOOGLE_DEFAULT_VERSION = "v1beta"


def normalize_base_url(base_url: str, *, azure: bool = False) -> str:
    """Trim whitespace and trailing slashes; default the scheme to https."""
    base = (base_url or "").strip().rstrip("/")
    if base and not azure and not base.startswith(("http://", "https://")):
        base = "https://" + base
    return base


def _incomplete(descriptor: ProviderDescriptor, what: str) -> ProviderError:
    return ProviderError(
        code=ErrorCode.INCOMPLETE_PROVIDER_CONFIG,
        message=f"incomplete {descriptor.id} config: missing {what}",
        provider=descriptor.id,
    )


def build_endpoint(  # noqa: PLR0913
    descriptor: ProviderDescriptor,
    operation: Operation,
    *,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    stream: bool = False,
    azure_deployment: Optional[str] = None,
    azure_api_version: Optional[str] = None,
    query: Optional[Mapping[str, str]] = None,
    auth_params: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the absolute URL for ``operation`` on ``descriptor``.

    Raises:
        ProviderError: ``UNSUPPORTED`` for operations the provider lacks,
            ``INCOMPLETE_PROVIDER_CONFIG`` for missing Azure settings or a
            missing base URL.
    """
    template = _PATHS[descriptor.path_style].get(operation)
    if template is None:
        raise ProviderError(
            code=ErrorCode.UNSUPPORTED,
            message=f"{descriptor.id} does not support {operation.value}",
            provider=descriptor.id,
            model=model,
        )

    base = normalize_base_url(base_url or descriptor.base_url, azure=descriptor.is_azure)
    if not base:
        raise _incomplete(descriptor, "base url")

    params: Dict[str, str] = dict(query or {})
    if descriptor.path_style is PathStyle.AZURE:
        deployment = (azure_deployment or "").strip()
        version = (azure_api_version or descriptor.api_version or "").strip()
        if not deployment:
            raise _incomplete(descriptor, "deployment")
        if not version:
            raise _incomplete(descriptor, "api version")
        path = template.format(deployment=quote(deployment, safe=""))
        params["api-version"] = version
    elif descriptor.path_style is PathStyle.GOOGLE:
        if operation is Operation.CHAT and not model:
            raise _incomplete(descriptor, "model")
        method = "streamGenerateContent" if stream else "generateContent"
        path = template.format(
            version=descriptor.api_version or GOOGLE_DEFAULT_VERSION,
            model=quote(model or "", safe=".-_"),
            method=method,
        )
        if operation is Operation.CHAT and stream:
            params["alt"] = "sse"
    else:
        path = template

    params.update(auth_params or {})
    url = f"{base}/{path}"
    return f"{url}?{urlencode(params)}" if params else url


__all__ = ["Operation", "GOOGLE_DEFAULT_VERSION", "build_endpoint", "normalize_base_url"]

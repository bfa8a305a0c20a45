"""chatgate: multi-provider LLM chat gateway core.

The package forwards chat conversations to several LLM HTTP APIs, resolving
credentials, shaping provider payloads and normalizing streamed replies into
one event vocabulary. Import concrete surfaces from their modules, e.g.
``chatgate.service.client.ChatClient`` or ``chatgate.base.errors``.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

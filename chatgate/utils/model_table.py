"""Custom model table.

Grammar
-------
A comma-separated list of entries applied left to right to a base table
(built-in catalog or upstream listing):

``+name`` / ``name``
    mark available (creating a custom entry when unknown)
``-name``
    mark unavailable
``name=Display Name``
    also set the display name (for Azure: the deployment name)
``name@provider``
    restrict to one provider (split on the *last* ``@``)
``all`` / ``-all``
    toggle every entry already in the table

Unknown names become entries of a ``custom`` provider named after the
``@provider`` suffix (or ``Custom``); custom providers and models receive
stable negative sequence numbers so they sort ahead of built-ins. Sequence
numbers are allocated per table, so building a table is a pure function of
its inputs.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from ..base.models import ModelInfo, ModelProvider
from ..config.defaults import CUSTOM_SEQ_START, DEFAULT_MODEL_CATALOG
from .model_traits import is_gpt4_model

ModelTable = Dict[str, ModelInfo]


def split_model_provider(full_name: str) -> Tuple[str, Optional[str]]:
    """``"a@b@azure"`` -> ``("a@b", "azure")``; no ``@`` -> ``(name, None)``."""
    name, sep, provider = full_name.rpartition("@")
    if not sep:
        return full_name, None
    return name, provider


def default_models() -> List[ModelInfo]:
    """Built-in catalog as :class:`ModelInfo` records, in declaration order."""
    models: List[ModelInfo] = []
    seq = 0
    for provider_id, (provider_name, provider_sorted, names) in DEFAULT_MODEL_CATALOG.items():
        provider = ModelProvider(provider_id, provider_name, provider_id, provider_sorted)
        for name in names:
            seq += 1
            models.append(ModelInfo(name=name, available=True, sorted=seq, provider=provider))
    return models


class _Sequence:
    def __init__(self, start: int) -> None:
        self._next = start
        self._seen: Dict[str, int] = {}

    def __call__(self, key: str) -> int:
        if key not in self._seen:
            self._seen[key] = self._next
            self._next += 1
        return self._seen[key]


def collect_model_table(models: Iterable[ModelInfo], custom_models: str) -> ModelTable:
    """Apply ``custom_models`` to ``models`` and return ``key -> ModelInfo``."""
    table: ModelTable = {}
    for m in models:
        table[m.key] = replace(m, display_name=m.display_name or m.name)
    seq = _Sequence(CUSTOM_SEQ_START)

    for entry in (e.strip() for e in (custom_models or "").split(",")):
        if not entry:
            continue
        available = not entry.startswith("-")
        name_config = entry[1:] if entry[0] in "+-" else entry
        name, _, display_name = name_config.partition("=")
        if name == "all":
            for key, model in table.items():
                table[key] = replace(model, available=available)
            continue

        model_name, provider_name = split_model_provider(name)
        matched = False
        for key, model in list(table.items()):
            existing_name, existing_provider = split_model_provider(key)
            if existing_name == model_name and provider_name in (None, existing_provider):
                matched = True
                table[key] = replace(model, available=available, display_name=display_name or model.display_name)
        if matched:
            continue

        label = provider_name or "Custom"
        provider = ModelProvider(
            id=label.lower(),
            provider_name=label,
            provider_type="custom",
            sorted=seq(label),
        )
        key = f"{model_name}@{provider.id}"
        table[key] = ModelInfo(
            name=model_name,
            display_name=display_name or model_name,
            available=available,
            provider=provider,
            sorted=seq(key),
        )
    return table


def mark_default(table: ModelTable, default_model: str) -> ModelTable:
    """Flag ``default_model`` (``name`` or ``name@provider``) as the default."""
    if not default_model:
        return table
    if "@" in default_model:
        if default_model in table:
            table[default_model] = replace(table[default_model], is_default=True)
        return table
    for key, model in table.items():
        if model.available and split_model_provider(key)[0] == default_model:
            table[key] = replace(model, is_default=True)
            break
    return table


def sort_models(models: Iterable[ModelInfo]) -> List[ModelInfo]:
    """Order by provider sequence, then model sequence."""
    return sorted(models, key=lambda m: ((m.provider.sorted if m.provider else 0), m.sorted))


def collect_models(models: Iterable[ModelInfo], custom_models: str, default_model: str = "") -> List[ModelInfo]:
    """Table -> sorted list, with the default model flagged."""
    return sort_models(mark_default(collect_model_table(models, custom_models), default_model).values())


def deployment_for(custom_models: str, model: str, provider_id: str = "azure") -> Optional[str]:
    """Display name of the table entry ``model@provider_id`` (Azure deployment name).

    Only entries naming ``model@provider_id`` in ``custom_models`` count; the
    display name defaults to the model name (``+gpt-4o@azure`` -> ``gpt-4o``).
    Entries apply left to right, so a later ``-model@provider_id`` clears it.
    """
    deployment: Optional[str] = None
    for entry in (e.strip() for e in (custom_models or "").split(",")):
        if not entry:
            continue
        name, _, display = (entry[1:] if entry[0] in "+-" else entry).partition("=")
        model_name, provider = split_model_provider(name)
        if model_name != model or provider != provider_id:
            continue
        deployment = None if entry.startswith("-") else (display or model_name)
    return deployment


def is_model_blocked(
    custom_models: str,
    model: str,
    provider_id: str,
    *,
    disable_gpt4: bool = False,
) -> bool:
    """Whether the server refuses ``model`` for ``provider_id``.

    Blocked when GPT-4 class models are disabled, or when the custom table
    explicitly marks ``model@provider_id`` (or ``model`` for every provider)
    unavailable. Models absent from the table are allowed.
    """
    if disable_gpt4 and is_gpt4_model(model):
        return True
    table = collect_model_table(default_models(), custom_models)
    entry = table.get(f"{model}@{provider_id.lower()}")
    return entry is not None and not entry.available


__all__ = [
    "ModelTable",
    "collect_model_table",
    "collect_models",
    "default_models",
    "deployment_for",
    "is_model_blocked",
    "mark_default",
    "sort_models",
    "split_model_provider",
]

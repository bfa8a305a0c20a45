"""Model listing descriptors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ModelProvider:
    """Provider block attached to every listed model."""

    id: str
    provider_name: str
    provider_type: str
    sorted: int


@dataclass(frozen=True)
class ModelInfo:
    """One selectable model.

    ``name`` is the id sent upstream; ``display_name`` is what a picker shows
    (for Azure it doubles as the deployment name).
    """

    name: str
    available: bool
    sorted: int
    provider: Optional[ModelProvider] = None
    display_name: Optional[str] = None
    is_default: bool = False

    @property
    def key(self) -> str:
        """Table key ``name@provider_id`` (provider id may be absent)."""
        return f"{self.name}@{self.provider.id if self.provider else None}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "displayName": self.display_name or self.name,
            "available": self.available,
            "sorted": self.sorted,
            "isDefault": self.is_default,
        }
        if self.provider is not None:
            data["provider"] = {
                "id": self.provider.id,
                "providerName": self.provider.provider_name,
                "providerType": self.provider.provider_type,
                "sorted": self.provider.sorted,
            }
        return data


__all__ = ["ModelInfo", "ModelProvider"]

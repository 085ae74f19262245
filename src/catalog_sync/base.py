"""Abstract collaborators consumed by the category synchronizer."""

from abc import ABC, abstractmethod
from typing import Any


class CatalogSource(ABC):
    """Remote catalog that serves the category tree and single categories."""

    @abstractmethod
    async def list_categories(self) -> dict[str, Any] | list[dict[str, Any]]:
        """Return the category tree (one root dict, or a list of roots)."""
        pass

    @abstractmethod
    async def get_single_category(self, category_id: int | str) -> dict[str, Any]:
        """Return the full record for one category."""
        pass


class CategoryCache(ABC):
    """Key-value sink for serialized category documents."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store `value` under `key`."""
        pass


class InvalidationNotifier(ABC):
    """Best-effort notification to downstream caches."""

    @abstractmethod
    async def invalidate(self, entity_kind: str, entity_id: int | str) -> None:
        """Invalidate cached entries tagged with `entity_kind` + `entity_id`."""
        pass

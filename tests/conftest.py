"""Shared test fixtures for catalog_sync unit tests.

Provides an in-memory catalog, a pass-through rate limiter and settings that do
not depend on the local environment.
"""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import AsyncMock

import pytest

from catalog_sync.base import CatalogSource
from catalog_sync.config import SyncConfig, get_catalog_config, get_sync_config
from catalog_sync.exceptions import CatalogNotFoundError, CatalogRequestError


class FakeCatalog(CatalogSource):
    """In-memory catalog recording every single-category fetch.

    Args:
        tree: Value returned by `list_categories` (deep-copied per call).
        records: Full records by category id, served by `get_single_category`.
        failing: Ids whose fetch raises CatalogRequestError.
    """

    def __init__(
        self,
        tree: Any,
        records: dict[Any, dict[str, Any]] | None = None,
        failing: set[Any] | None = None,
    ) -> None:
        self.tree = tree
        self.records = records or {}
        self.failing = failing or set()
        self.calls: list[Any] = []

    async def list_categories(self) -> Any:
        return copy.deepcopy(self.tree)

    async def get_single_category(self, category_id: Any) -> dict[str, Any]:
        self.calls.append(category_id)
        if category_id in self.failing:
            raise CatalogRequestError(f"boom {category_id}", status=500)
        if category_id not in self.records:
            raise CatalogNotFoundError(f"/V1/categories/{category_id}")
        return copy.deepcopy(self.records[category_id])


class PassThroughLimiter:
    """Limiter stand-in that admits immediately and counts scheduled tasks."""

    def __init__(self) -> None:
        self.scheduled = 0

    async def acquire(self) -> None:
        return None

    async def schedule(self, task):
        self.scheduled += 1
        return await task()


@pytest.fixture(autouse=True)
def clear_config_caches():
    """Reset cached settings so env changes in one test never leak into another."""
    get_sync_config.cache_clear()
    get_catalog_config.cache_clear()
    yield
    get_sync_config.cache_clear()
    get_catalog_config.cache_clear()


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig(
        generate_unique_url_keys=True,
        extended_categories=False,
        requests_per_second=5,
        cache_key_prefix="category",
        invalidate_cache=False,
    )


@pytest.fixture
def limiter() -> PassThroughLimiter:
    return PassThroughLimiter()


@pytest.fixture
def cache() -> AsyncMock:
    mock_cache = AsyncMock()
    mock_cache.set = AsyncMock(return_value=None)
    return mock_cache


@pytest.fixture
def category_tree() -> dict[str, Any]:
    """Root 2 with children 3 (children 4, 5 (child 6)) and 7 (leaf): 5 descendants."""
    return {
        "id": 2,
        "name": "Default Category",
        "children_data": [
            {
                "id": 3,
                "name": "Men",
                "children_data": [
                    {"id": 4, "name": "Tops", "children_data": []},
                    {
                        "id": 5,
                        "name": "Shoes",
                        "children_data": [{"id": 6, "name": "Running Shoes"}],
                    },
                ],
            },
            {"id": 7, "name": "Sale"},
        ],
    }


@pytest.fixture
def category_records() -> dict[int, dict[str, Any]]:
    """Full records as served by the single-category endpoint."""

    def record(category_id: int, name: str) -> dict[str, Any]:
        return {
            "id": category_id,
            "name": name,
            "is_active": True,
            "children": "",
            "custom_attributes": [
                {"attribute_code": "description", "value": f"All about {name}"},
                {"attribute_code": "display_mode", "value": "PRODUCTS"},
            ],
        }

    names = {
        2: "Default Category",
        3: "Men",
        4: "Tops",
        5: "Shoes",
        6: "Running Shoes",
        7: "Sale",
    }
    return {category_id: record(category_id, name) for category_id, name in names.items()}


@pytest.fixture
def make_catalog():
    """Factory building a FakeCatalog(tree, records, failing)."""
    return FakeCatalog

"""Flatten catalog category records into index-ready documents."""

import logging
from typing import Any

from catalog_sync.slug import build_url_key

logger = logging.getLogger(__name__)

CUSTOM_ATTRIBUTES_FIELD = "custom_attributes"
CHILDREN_FIELD = "children_data"


def normalize_category(node: dict[str, Any], generate_url_key: bool = True) -> dict[str, Any]:
    """Normalize a category record in place and return it.

    Custom attributes are lifted to top-level fields and removed. ``url_key`` is
    regenerated when ``generate_url_key`` is set, otherwise derived only if the
    record has none. ``slug`` always mirrors ``url_key``.

    Args:
        node: Raw category record.
        generate_url_key: Regenerate ``url_key`` even if the record carries one.

    Returns:
        The same ``node`` object.

    Raises:
        CategoryDataError: If a url_key must be derived but ``name`` or ``id``
            is missing.
    """
    attributes = node.pop(CUSTOM_ATTRIBUTES_FIELD, None)
    for attribute in attributes or []:
        code = attribute.get("attribute_code")
        if not code:
            logger.warning(
                f"Skipping custom attribute without attribute_code on category {node.get('id')}"
            )
            continue
        node[code] = attribute.get("value")

    if generate_url_key or not node.get("url_key"):
        node["url_key"] = build_url_key(node.get("name"), node.get("id"))
    node["slug"] = node["url_key"]
    return node


def merge_extended_data(
    node: dict[str, Any], extended: dict[str, Any], generate_url_key: bool = True
) -> dict[str, Any]:
    """Normalize a per-node fetch result and merge it into ``node`` in place.

    The fetched record's fields overwrite or extend ``node``. Its own
    ``children_data`` (if any) is ignored so the tree shape never changes.
    Without regeneration, a fetched record lacking a url_key keeps the one
    already on ``node``.

    Raises:
        CategoryDataError: If the fetched record cannot produce a url_key.
    """
    normalized = dict(extended)
    normalized.pop(CHILDREN_FIELD, None)
    if not generate_url_key and node.get("url_key"):
        normalized.setdefault("url_key", node["url_key"])
    normalize_category(normalized, generate_url_key)
    node.update(normalized)
    return node

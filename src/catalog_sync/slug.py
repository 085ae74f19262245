"""URL key generation for category documents."""

from typing import Any

from slugify import slugify

from catalog_sync.exceptions import CategoryDataError

__all__ = ["build_url_key", "slugify_name"]

_REPLACEMENTS = [["&", " and "]]


def slugify_name(name: str) -> str:
    """Lowercase, ASCII, dash-separated form of a display name.

    Example:
        >>> slugify_name("Shoes & Boots")
        'shoes-and-boots'
    """
    return slugify(str(name), replacements=_REPLACEMENTS)


def build_url_key(name: Any, category_id: Any) -> str:
    """Build a unique url_key from a display name and the category id suffix.

    Args:
        name: Category display name.
        category_id: Catalog identifier used as the uniqueness suffix.

    Returns:
        ``"<slugified name>-<id>"``, e.g. ``"shoes-5"``.

    Raises:
        CategoryDataError: If ``name`` or ``category_id`` is missing.
    """
    if category_id is None or category_id == "":
        raise CategoryDataError(category_id, missing="id")
    if name is None or str(name).strip() == "":
        raise CategoryDataError(category_id, missing="name")
    return f"{slugify_name(name)}-{category_id}"

"""Exceptions for the category synchronization pipeline."""


class CatalogSyncError(Exception):
    """Base exception for catalog synchronization errors."""


class CatalogRequestError(CatalogSyncError):
    """Raised when a catalog API request fails (network, HTTP status or decode)."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class CatalogNotFoundError(CatalogRequestError):
    """Raised when the catalog API reports that a category does not exist."""

    def __init__(self, url: str):
        super().__init__(f"Category not found: {url}", url=url, status=404)


class CategoryDataError(CatalogSyncError, ValueError):
    """Raised when a category record lacks the fields needed to derive its url_key."""

    def __init__(self, category_id: object = None, missing: str = "name"):
        super().__init__(
            f"Category {category_id!r} is missing '{missing}', cannot derive url_key"
        )
        self.category_id = category_id
        self.missing = missing

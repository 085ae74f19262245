"""Catalog REST client.

This module provides a small client responsible for:
- Building category endpoint URLs for the configured store view.
- Performing authenticated HTTP GET requests with a total timeout.
- Returning parsed JSON objects (no business mapping).

Rate limiting is applied by callers (see `CategoryEnricher`), not here, so the
one listing call per run is not charged against the enrichment budget.
"""

import asyncio
import logging
from typing import Any

import aiohttp

from catalog_sync.base import CatalogSource
from catalog_sync.config import CatalogConfig, get_catalog_config
from catalog_sync.exceptions import CatalogNotFoundError, CatalogRequestError

logger = logging.getLogger(__name__)


class CatalogClient(CatalogSource):
    """HTTP client for the catalog category endpoints.

    Args:
        config: Catalog connection settings. Defaults to `get_catalog_config()`.
        session: Optional aiohttp-style session to reuse. When omitted the client
            creates one on first use and closes it in `close()`.
    """

    def __init__(
        self,
        config: CatalogConfig | None = None,
        *,
        session: Any | None = None,
    ) -> None:
        self.config = config or get_catalog_config()
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

    async def close(self) -> None:
        """Close the underlying HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    def endpoint(self, path: str) -> str:
        """Absolute URL for a `V1/...` path under the configured base URL."""
        base = self.config.url.rstrip("/") + "/"
        if self.config.store_code:
            base += f"{self.config.store_code}/"
        return f"{base}V1/{path.lstrip('/')}"

    async def list_categories(self) -> dict[str, Any] | list[dict[str, Any]]:
        """Fetch the category tree."""
        return await self.get_json(self.endpoint("categories"))

    async def get_single_category(self, category_id: int | str) -> dict[str, Any]:
        """Fetch the full record of one category."""
        return await self.get_json(self.endpoint(f"categories/{category_id}"))

    async def get_json(self, url: str) -> Any:
        """GET a URL and decode a JSON object or array.

        Raises:
            CatalogNotFoundError: On HTTP 404.
            CatalogRequestError: On any other non-200 status, network failure,
                timeout, or a body that is not a JSON object/array.
        """
        logger.debug(f"GET {url}")
        session = self._get_session()
        try:
            async with session.get(
                url, headers=self._headers(), timeout=self._timeout
            ) as response:
                if response.status == 404:
                    raise CatalogNotFoundError(url)
                if response.status != 200:
                    raise CatalogRequestError(
                        f"Catalog HTTP {response.status} for {url}",
                        url=url,
                        status=response.status,
                    )
                payload = await response.json()
        except CatalogRequestError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise CatalogRequestError(
                f"Catalog request failed for {url}: {e}", url=url
            ) from e

        if not isinstance(payload, dict | list):
            raise CatalogRequestError(
                f"Unexpected catalog payload type {type(payload).__name__} for {url}",
                url=url,
                status=200,
            )
        return payload

    def _get_session(self) -> Any:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.access_token:
            headers["Authorization"] = f"Bearer {self.config.access_token}"
        return headers

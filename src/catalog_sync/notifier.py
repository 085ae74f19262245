"""Downstream cache invalidation over HTTP.

The synchronizer dispatches `invalidate` as a background task after a category
is emitted; this notifier logs every failure itself and never raises.
"""

import logging
from typing import Any

import aiohttp

from catalog_sync.base import InvalidationNotifier
from catalog_sync.config import SyncConfig, get_sync_config

logger = logging.getLogger(__name__)

CATEGORY_ENTITY_KIND = "C"


class HttpInvalidationNotifier(InvalidationNotifier):
    """Calls the storefront invalidation endpoint with a `<kind><id>` tag.

    Args:
        config: Sync settings (`invalidate_cache_url`, `invalidate_timeout`).
        session: Optional aiohttp-style session to reuse.
    """

    def __init__(self, config: SyncConfig | None = None, *, session: Any | None = None) -> None:
        self.config = config or get_sync_config()
        self._session = session
        self._owns_session = session is None

    async def invalidate(self, entity_kind: str, entity_id: int | str) -> None:
        """Send one invalidation request. Failures are logged, never raised."""
        url = f"{self.config.invalidate_cache_url}{entity_kind}{entity_id}"
        try:
            session = self._get_session()
            timeout = aiohttp.ClientTimeout(total=self.config.invalidate_timeout)
            async with session.get(url, timeout=timeout) as response:
                body = await response.text()
                if response.status != 200:
                    logger.warning(
                        f"Cache invalidation HTTP {response.status} for {url}: {body}"
                    )
                    return
                logger.debug(f"Cache invalidated for {entity_kind}{entity_id}: {body}")
        except Exception:
            logger.exception(f"Cache invalidation failed for {url}")

    async def close(self) -> None:
        """Close the underlying HTTP session if this notifier created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> Any:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

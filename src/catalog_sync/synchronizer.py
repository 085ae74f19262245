"""
Category synchronization orchestrator.

Lists the root categories of the catalog and, per root, either normalizes and
caches it as listed (shallow path) or fetches the full record of the root and
of every descendant before caching and emitting it (extended path). One failed
fetch degrades only the node it belongs to.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from .base import CatalogSource, CategoryCache, InvalidationNotifier
from .config import SyncConfig, get_sync_config
from .enricher import CategoryEnricher
from .exceptions import CatalogSyncError, CategoryDataError
from .models import CategoryNode, CategorySyncState, SyncOptions, SyncSummary
from .normalizer import CHILDREN_FIELD, merge_extended_data, normalize_category
from .notifier import CATEGORY_ENTITY_KIND
from .rate_limiter import CategoryRateLimiter, get_shared_rate_limiter

logger = logging.getLogger(__name__)


class CategorySynchronizer:
    """
    Public entry point for a category sync run.

    Args:
        source: Catalog serving the category tree and single categories.
        cache: Sink receiving each root category as JSON under `<prefix>:<id>`.
        notifier: Optional downstream cache invalidation. None disables it.
        limiter: Optional rate limiter override for per-node fetches. Defaults
            to the process-wide shared limiter.
        config: Sync settings. Defaults to `get_sync_config()`.
    """

    def __init__(
        self,
        source: CatalogSource,
        cache: CategoryCache,
        *,
        notifier: InvalidationNotifier | None = None,
        limiter: CategoryRateLimiter | Any | None = None,
        config: SyncConfig | None = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.notifier = notifier
        self.config = config or get_sync_config()
        self.limiter = limiter or get_shared_rate_limiter()
        self.summary = SyncSummary()
        self._pending_notifications: set[asyncio.Task] = set()

    @staticmethod
    def get_label(node: CategoryNode) -> str:
        """Short log label for a category, e.g. ``[(5) Shoes]``."""
        return f"[({node.get('id')}) {node.get('name')}]"

    def cache_key(self, category_id: Any) -> str:
        return f"{self.config.cache_key_prefix}:{category_id}"

    async def sync(self, options: SyncOptions | None = None) -> AsyncIterator[CategoryNode]:
        """
        Run one synchronization pass and yield each processed root category.

        Parameters:
            options (Optional[SyncOptions]): Per-run flags; defaults come from config.

        Yields:
            CategoryNode: Normalized root category, children enriched in place
            when extended mode is on, ready for the index writer.
        """
        options = options or SyncOptions.from_config(self.config)
        self.summary = SyncSummary()
        enricher = CategoryEnricher(
            self.source,
            limiter=self.limiter,
            generate_url_key=options.generate_unique_url_keys,
        )

        try:
            tree = await self.source.list_categories()
        except Exception as e:
            logger.error(f"Listing categories failed, nothing to synchronize: {e}")
            self.summary.listing_failed = True
            return

        roots = tree if isinstance(tree, list) else [tree]
        self.summary.listed = len(roots)
        logger.info(
            f"Synchronizing {len(roots)} root categories "
            f"(extended={options.extended_categories}, "
            f"unique_url_keys={options.generate_unique_url_keys})"
        )

        for item in roots:
            if not item:
                continue
            node = await self.process_category(item, options, enricher)
            if node is None:
                continue
            yield self.format_document(node)

    async def run(self, options: SyncOptions | None = None) -> list[CategoryNode]:
        """Run `sync` to completion, wait for notifications, and return all roots."""
        emitted = [node async for node in self.sync(options)]
        await self.drain()
        logger.info(f"Category sync finished: {self.summary.as_dict()}")
        return emitted

    async def process_category(
        self,
        item: CategoryNode,
        options: SyncOptions,
        enricher: CategoryEnricher,
    ) -> CategoryNode | None:
        """
        Drive one root category through its state machine.

        Returns:
            The processed node, or None when the root itself cannot be
            normalized (data integrity error) and is skipped.
        """
        category_id = item.get("id")
        self._transition(category_id, CategorySyncState.LISTED)

        try:
            normalize_category(item, options.generate_unique_url_keys)
        except CategoryDataError as e:
            logger.error(f"Skipping category {self.get_label(item)}: {e}")
            self._transition(category_id, CategorySyncState.SKIPPED)
            self.summary.skipped.append(category_id)
            return None

        if not options.extended_categories:
            self._transition(category_id, CategorySyncState.SHALLOW)
            await self._write_cache(item)
            self._transition(category_id, CategorySyncState.CACHED)
            return item

        self._transition(category_id, CategorySyncState.EXTENDED)
        try:
            extended = await self.source.get_single_category(category_id)
            if not isinstance(extended, dict):
                raise TypeError(f"expected a category object, got {type(extended).__name__}")
            merge_extended_data(item, extended, options.generate_unique_url_keys)
        except Exception as e:
            logger.error(
                f"Extended fetch failed for {self.get_label(item)}: {e}",
                exc_info=not isinstance(e, CatalogSyncError),
            )
            return item

        await self._write_cache(item)
        self._transition(category_id, CategorySyncState.CACHED)

        children = item.get(CHILDREN_FIELD)
        if isinstance(children, list) and children:
            handles = enricher.extend_children(category_id, children, [])
            logger.debug(f"Waiting for {len(handles)} subcategory fetches of {category_id}")
            results = await enricher.settle(handles)
            self.summary.record(results)
            failed = sum(1 for r in results if not r.ok)
            if failed:
                logger.warning(
                    f"{failed} of {len(results)} subcategories of {self.get_label(item)} "
                    "kept their listed data"
                )
        return item

    def format_document(self, node: CategoryNode) -> CategoryNode:
        """
        Hand-off hook before indexing: marks the node emitted and dispatches the
        downstream cache invalidation in the background.
        """
        category_id = node.get("id")
        self._transition(category_id, CategorySyncState.EMITTED)
        self.summary.emitted += 1
        self._dispatch_invalidation(category_id)
        return node

    async def drain(self) -> None:
        """Wait for outstanding invalidation notifications."""
        if self._pending_notifications:
            await asyncio.gather(*list(self._pending_notifications), return_exceptions=True)

    async def _write_cache(self, node: CategoryNode) -> None:
        key = self.cache_key(node.get("id"))
        logger.debug(f"Storing category data to cache under: {key}")
        try:
            await self.cache.set(key, json.dumps(node, ensure_ascii=False))
        except Exception as e:
            logger.error(f"Cache write failed for {key}: {e}")

    def _dispatch_invalidation(self, category_id: Any) -> None:
        if self.notifier is None:
            return
        task = asyncio.ensure_future(self._invalidate(category_id))
        self._pending_notifications.add(task)
        task.add_done_callback(self._pending_notifications.discard)

    async def _invalidate(self, category_id: Any) -> None:
        try:
            await self.notifier.invalidate(CATEGORY_ENTITY_KIND, category_id)
        except Exception as e:
            logger.error(f"Cache invalidation for category {category_id} failed: {e}")

    def _transition(self, category_id: Any, state: CategorySyncState) -> None:
        logger.debug(f"Category {category_id} -> {state.value}")
        self.summary.states[category_id] = state

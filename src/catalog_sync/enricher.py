"""Per-category extended data fetching for whole category subtrees.

The walker and the wait policy are separate steps: `extend_children` only
schedules one rate-limited task per descendant into an accumulator, and
`settle` waits for all of them without letting one failure cut the rest short.
"""

import asyncio
import logging
from functools import partial
from typing import Any

from catalog_sync.base import CatalogSource
from catalog_sync.exceptions import CatalogSyncError
from catalog_sync.models import CategoryNode, EnrichmentResult
from catalog_sync.normalizer import CHILDREN_FIELD, merge_extended_data
from catalog_sync.rate_limiter import CategoryRateLimiter, get_shared_rate_limiter

logger = logging.getLogger(__name__)


class CategoryEnricher:
    """Fetch and merge full category records for nodes of a category tree.

    Args:
        source: Catalog providing `get_single_category`.
        limiter: Optional limiter override. Defaults to the process-wide shared
            limiter.
        generate_url_key: url_key regeneration policy of the current run.
    """

    def __init__(
        self,
        source: CatalogSource,
        *,
        limiter: CategoryRateLimiter | Any | None = None,
        generate_url_key: bool = True,
    ) -> None:
        self._source = source
        self._limiter = limiter or get_shared_rate_limiter()
        self.generate_url_key = generate_url_key

    async def enrich_node(self, root_id: Any, node: CategoryNode) -> EnrichmentResult:
        """Fetch one category's full record and merge it into `node` in place.

        Never raises: any failure is logged and reported in the result, and the
        node keeps the fields it had before the call.
        """
        category_id = node.get("id")
        try:
            extended = await self._source.get_single_category(category_id)
            if not isinstance(extended, dict):
                raise TypeError(
                    f"expected a category object, got {type(extended).__name__}"
                )
            merge_extended_data(node, extended, self.generate_url_key)
        except Exception as e:
            logger.error(
                f"Failed to extend category {category_id} (root {root_id}): {e}",
                exc_info=not isinstance(e, CatalogSyncError),
            )
            return EnrichmentResult(category_id=category_id, ok=False, error=str(e))

        logger.info(f"Subcategory data extended for {root_id}, children object {category_id}")
        return EnrichmentResult(category_id=category_id, ok=True)

    def schedule_enrichment(self, root_id: Any, node: CategoryNode) -> asyncio.Task:
        """Start a rate-limited `enrich_node` call as a task and return its handle."""
        return asyncio.ensure_future(
            self._limiter.schedule(partial(self.enrich_node, root_id, node))
        )

    def extend_children(
        self,
        root_id: Any,
        children: list[CategoryNode],
        accumulator: list[asyncio.Task],
    ) -> list[asyncio.Task]:
        """Schedule enrichment for every descendant in `children`.

        A child with children of its own is descended into before its own
        enrichment is scheduled. Every handle is appended to `accumulator`,
        which is also returned. Nothing is awaited here.
        """
        for child in children:
            logger.debug(f"extending child category {child.get('name')} (Cat ID: {child.get('id')})")
            grandchildren = child.get(CHILDREN_FIELD)
            if isinstance(grandchildren, list) and grandchildren:
                self.extend_children(root_id, grandchildren, accumulator)
            accumulator.append(self.schedule_enrichment(root_id, child))
        return accumulator

    @staticmethod
    async def settle(handles: list[asyncio.Future]) -> list[EnrichmentResult]:
        """Wait for every handle to finish, successes and failures alike.

        Returns:
            One EnrichmentResult per handle, in handle order. A handle that
            raised instead of returning a result becomes a failed result.
        """
        outcomes = await asyncio.gather(*handles, return_exceptions=True)
        results: list[EnrichmentResult] = []
        for outcome in outcomes:
            if isinstance(outcome, EnrichmentResult):
                results.append(outcome)
            else:
                logger.error(f"Enrichment task ended without a result: {outcome!r}")
                results.append(
                    EnrichmentResult(category_id=None, ok=False, error=repr(outcome))
                )
        return results

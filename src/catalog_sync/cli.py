#!/usr/bin/env python3
"""
Category sync command line entrypoint.

CLI:
  python -m catalog_sync sync [--extended] [--no-unique-url-keys] [--output FILE]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

from catalog_sync.cache import RedisCategoryCache
from catalog_sync.catalog_client import CatalogClient
from catalog_sync.config import get_catalog_config, get_sync_config
from catalog_sync.models import SyncOptions
from catalog_sync.notifier import HttpInvalidationNotifier
from catalog_sync.synchronizer import CategorySynchronizer

logger = logging.getLogger(__name__)


def _write_json_sync(path: str | None, data: Any) -> None:
    """Write a JSON document to `path`, or to stdout when `path` is None."""
    if path is None:
        json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Synchronize catalog categories")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_sync = sub.add_parser("sync", help="Run one category synchronization pass")
    p_sync.add_argument(
        "--extended",
        action="store_true",
        default=None,
        help="Fetch the full record of every category (overrides EXTENDED_CATEGORIES)",
    )
    p_sync.add_argument(
        "--no-unique-url-keys",
        dest="unique_url_keys",
        action="store_false",
        default=None,
        help="Keep existing url_key values instead of regenerating them",
    )
    p_sync.add_argument("--output", "-o", help="Output JSON file (default: stdout)")
    return parser


async def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint.

    Returns:
        Process exit code (0 for success, 1 when the category listing failed).
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    sync_config = get_sync_config()
    defaults = SyncOptions.from_config(sync_config)
    options = SyncOptions(
        generate_unique_url_keys=(
            defaults.generate_unique_url_keys
            if args.unique_url_keys is None
            else args.unique_url_keys
        ),
        extended_categories=(
            defaults.extended_categories if args.extended is None else args.extended
        ),
    )

    cache = RedisCategoryCache(sync_config)
    notifier = HttpInvalidationNotifier(sync_config) if sync_config.invalidate_cache else None
    try:
        async with CatalogClient(get_catalog_config()) as client:
            synchronizer = CategorySynchronizer(
                client, cache, notifier=notifier, config=sync_config
            )
            emitted = await synchronizer.run(options)
    finally:
        await cache.aclose()
        if notifier is not None:
            await notifier.close()

    if synchronizer.summary.listing_failed:
        logger.error("Category listing failed; no categories were synchronized")
        return 1

    _write_json_sync(args.output, emitted)
    return 0


def run() -> None:
    """Console script wrapper around `main`."""
    sys.exit(asyncio.run(main()))

#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from cashback.stores import (
    FilterSelection,
    InMemoryLocation,
    ListController,
    ListingConfig,
    PageFetcher,
    QueryBuilder,
    SortBy,
    StoreStatus,
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Browse the store listing page by page")
    p.add_argument("letter", nargs="?", default="All", help="Alphabet label (All, 0-9, A-Z)")
    p.add_argument("--search", default="", help="Free-text name filter")
    p.add_argument("--sort", choices=[s.value for s in SortBy], default=SortBy.ALPHABETICAL.value)
    p.add_argument(
        "--status", choices=[s.value for s in StoreStatus], default=StoreStatus.ACTIVE.value
    )
    p.add_argument("--cashback-only", action="store_true")
    p.add_argument("--pages", type=int, default=2, help="Pages to load")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    selection = FilterSelection().with_letter(args.letter)
    if args.search:
        selection = selection.with_search(args.search)
    selection = (
        selection.with_sort(args.sort)
        .with_status(args.status)
        .with_flags(cashback_only=args.cashback_only)
    )

    config = ListingConfig.from_env()
    # Seed the location so the mount query is already the requested one
    location = InMemoryLocation(QueryBuilder().build(selection).to_query_string())
    async with PageFetcher(config) as fetcher:
        async with ListController(fetcher, config=config, location=location) as controller:
            await controller.wait_idle()
            for _ in range(args.pages - 1):
                if controller.load_next_page() is None:
                    break
                await controller.wait_idle()

            print(f"GET {config.collection_url}?{location.search}")
            if controller.state.error:
                print(f"Error: {controller.state.error}")
                return
            print(f"{'ID':>6} | {'Name':30} | Cashback")
            print("-" * 70)
            for store in controller.items:
                print(f"{store.id!s:>6} | {store.name[:30]:30} | {store.cashback_label}")
            more = "more available" if controller.state.has_more else "end of list"
            print(f"{len(controller.items)} stores, {controller.state.page_number} page(s), {more}")


if __name__ == "__main__":
    asyncio.run(main())

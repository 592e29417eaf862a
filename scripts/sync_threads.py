#!/usr/bin/env python3
"""Warm the local thread snapshot, with Logfire error tracking.

Initializes the thread store (serving the snapshot if it is still fresh),
optionally loads further pages and comment trees, then writes the snapshot.
Useful for pre-populating the cache before going offline.

Usage:
    python scripts/sync_threads.py [pages] [--comments]
"""

import asyncio
import sys

import logfire

from threadsync.application.store import ThreadStore
from threadsync.config import Settings
from threadsync.util.di.container import create_container
from threadsync.util.logging import setup_logging
from threadsync.util.observability import configure_logfire


async def sync(pages: int, with_comments: bool) -> int:
    """Initialize the store and load up to ``pages`` pages."""
    container = create_container()
    try:
        async with container() as request_container:
            store = await request_container.get(ThreadStore)
            await store.initialize()

            while store.current_page + 1 < pages and store.has_more_pages:
                await store.load_more()

            if with_comments:
                for thread in store.threads:
                    await store.load_comments(thread.id)

            logfire.info(
                "Thread snapshot synced",
                threads=len(store.threads),
                pages=store.current_page + 1,
                has_more_pages=store.has_more_pages,
            )
            for thread in store.threads:
                marker = "solved" if thread.solved else "open"
                print(f"{thread.id:>6}  [{marker}]  {thread.title}")
            return len(store.threads)
    finally:
        await container.close()


def main() -> int:
    """Run the sync and log any errors to Logfire."""
    settings = Settings()

    setup_logging(settings)
    configure_logfire(settings)

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    pages = int(args[0]) if args else 1
    with_comments = "--comments" in sys.argv[1:]

    try:
        asyncio.run(sync(pages, with_comments))
        return 0
    except Exception as e:
        logfire.error(
            "Thread sync failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())

"""Flow control applied to the repository stream."""

import asyncio
from typing import AsyncIterable, AsyncIterator, Collection, TypeVar

from ..models.repository import RepositorySummary

T = TypeVar('T')


async def take(source: AsyncIterable[T], limit: int) -> AsyncIterator[T]:
    """Yield at most ``limit`` items, then stop pulling from ``source``."""
    if limit <= 0:
        return

    count = 0
    async for item in source:
        yield item
        count += 1
        if count >= limit:
            return


async def skip_excluded(
    source: AsyncIterable[RepositorySummary], excluded: Collection[str]
) -> AsyncIterator[RepositorySummary]:
    """Drop repositories whose slug is excluded."""
    async for repository in source:
        if repository.slug in excluded:
            continue
        yield repository


async def delay_each(source: AsyncIterable[T], seconds: float) -> AsyncIterator[T]:
    """Pause before handing out each item.

    The consumer is suspended too, so every request made while
    processing an item happens after the pause.
    """
    async for item in source:
        if seconds > 0:
            await asyncio.sleep(seconds)
        yield item


def apply_flow_control(
    source: AsyncIterable[RepositorySummary],
    max_items: int,
    excluded: Collection[str] = (),
    delay: float = 0.0,
) -> AsyncIterator[RepositorySummary]:
    """Cap, filter and throttle the repository stream, in that order."""
    capped = take(source, max_items)
    filtered = skip_excluded(capped, frozenset(excluded))
    return delay_each(filtered, delay)

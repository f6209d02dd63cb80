# resource_scout/crawler/scheduler.py
"""
Batch scheduler: drives ``fetch_size`` over a URL list with at most
``concurrency`` requests in flight and yields each result as it settles.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, AsyncIterator, Dict, Iterable, Iterator

from resource_scout.crawler.models import FetchOutcome
from resource_scout.logger import LOGGER_NAME
from resource_scout.utils import file_name, file_type

if TYPE_CHECKING:
    from resource_scout.crawler.fetcher import RelayFetcher

__all__ = ("fetch_batch",)

logger = logging.getLogger(LOGGER_NAME)


async def fetch_batch(
    fetcher: RelayFetcher,
    urls: Iterable[str],
    concurrency: int = 3,
) -> AsyncIterator[FetchOutcome]:
    """
    Yield a :class:`FetchOutcome` for every URL in completion order.

    A new fetch is started only after a settled one has been handed to the
    consumer, so no more than *concurrency* fetches are ever outstanding.
    Closing the generator cancels whatever is still in flight.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    queue: Iterator[str] = iter(urls)
    in_flight: Dict[asyncio.Task[int], str] = {}
    settled = succeeded = 0

    def launch_next() -> None:
        url = next(queue, None)
        if url is not None:
            in_flight[asyncio.create_task(fetcher.fetch_size(url))] = url

    for _ in range(concurrency):
        launch_next()

    try:
        while in_flight:
            done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                url = in_flight.pop(task)
                size = task.result()
                settled += 1
                if size > 0:
                    succeeded += 1
                yield FetchOutcome(url=url, name=file_name(url), type=file_type(url), size=size)
                launch_next()
    finally:
        for task in in_flight:
            task.cancel()
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)
            logger.debug("Cancelled %d outstanding fetches", len(in_flight))

    logger.info("Batch complete: %d/%d resources fetched successfully", succeeded, settled)

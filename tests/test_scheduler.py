# File: tests/test_scheduler.py
import asyncio
from contextlib import aclosing
from typing import Dict, List

import pytest

from resource_scout.crawler.scheduler import fetch_batch


class StubFetcher:
    """Fake fetcher: each URL sleeps for its configured delay and returns its size."""

    def __init__(self, plan: Dict[str, tuple]):
        self.plan = plan
        self.active = 0
        self.peak = 0
        self.started: List[str] = []
        self.cancelled: List[str] = []

    async def fetch_size(self, url: str) -> int:
        delay, size = self.plan[url]
        self.started.append(url)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        finally:
            self.active -= 1
        return size


def _urls(count: int) -> List[str]:
    return [f"https://example.com/r{i}.js" for i in range(count)]


@pytest.mark.asyncio()
@pytest.mark.parametrize("concurrency", [1, 2, 3, 5])
async def test_never_exceeds_concurrency(concurrency):
    urls = _urls(12)
    fetcher = StubFetcher({url: (0.001 * (i % 4 + 1), 100) for i, url in enumerate(urls)})

    outcomes = [o async for o in fetch_batch(fetcher, urls, concurrency)]

    assert len(outcomes) == len(urls)
    assert sorted(o.url for o in outcomes) == sorted(urls)
    assert fetcher.peak == concurrency


@pytest.mark.asyncio()
async def test_small_batch_starts_everything_at_once():
    urls = _urls(2)
    fetcher = StubFetcher({url: (0.01, 1) for url in urls})

    outcomes = [o async for o in fetch_batch(fetcher, urls, concurrency=10)]

    assert len(outcomes) == 2
    assert fetcher.peak == 2


@pytest.mark.asyncio()
async def test_results_arrive_in_completion_order():
    slow, fast = "https://example.com/slow.css", "https://example.com/fast.png"
    fetcher = StubFetcher({slow: (0.2, 10), fast: (0.01, 20)})

    outcomes = [o async for o in fetch_batch(fetcher, [slow, fast], concurrency=2)]

    assert [o.url for o in outcomes] == [fast, slow]
    assert (outcomes[0].name, outcomes[0].type, outcomes[0].size) == ("fast.png", "image", 20)
    assert outcomes[1].type == "css"


@pytest.mark.asyncio()
async def test_failed_fetches_are_reported_with_zero_size():
    urls = _urls(3)
    fetcher = StubFetcher({urls[0]: (0, 5), urls[1]: (0, 0), urls[2]: (0, 7)})

    outcomes = {o.url: o async for o in fetch_batch(fetcher, urls, concurrency=3)}

    assert outcomes[urls[1]].size == 0
    assert not outcomes[urls[1]].succeeded
    assert outcomes[urls[0]].succeeded and outcomes[urls[2]].succeeded


@pytest.mark.asyncio()
async def test_closing_early_cancels_in_flight_fetches():
    urls = _urls(6)
    plan = {urls[0]: (0.0, 1)}
    plan.update({url: (10, 1) for url in urls[1:]})
    fetcher = StubFetcher(plan)

    async with aclosing(fetch_batch(fetcher, urls, concurrency=3)) as outcomes:
        async for outcome in outcomes:
            assert outcome.url == urls[0]
            break

    # the consumer stopped before a replacement fetch could start
    assert fetcher.active == 0
    assert sorted(fetcher.cancelled) == sorted(urls[1:3])
    assert urls[3] not in fetcher.started


@pytest.mark.asyncio()
async def test_empty_url_list_yields_nothing():
    fetcher = StubFetcher({})
    assert [o async for o in fetch_batch(fetcher, [], concurrency=3)] == []


@pytest.mark.asyncio()
async def test_rejects_non_positive_concurrency():
    with pytest.raises(ValueError):
        async for _ in fetch_batch(StubFetcher({}), _urls(1), concurrency=0):
            pass

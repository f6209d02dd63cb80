# File: tests/test_engine.py
# End-to-end runs of ResourceAnalyzer through a local relay
from __future__ import annotations

from contextlib import aclosing
from typing import List

import pytest
from conftest import local_relay

from resource_scout.crawler.fetcher import RelayFetcher
from resource_scout.crawler.models import AnalysisFinished, Progress, ResourceRecorded
from resource_scout.engine import ResourceAnalyzer
from resource_scout.exceptions import FetchFailed, InvalidURL

PAGE = """
<html><head>
  <link rel="stylesheet" href="/style.css">
  <script src="/app.js"></script>
</head><body>
  <img src="/logo.png">
  <img src="/missing.gif">
  <iframe src="https://site.test/"></iframe>
</body></html>
"""


@pytest.fixture()
def site(relay_state):
    files, calls = relay_state
    files.update({
        "/": PAGE,
        "/style.css": b"a" * 100,
        "/app.js": b"b" * 200,
        "/logo.png": b"c" * 300,
    })
    return files, calls


def _analyzer(fast_config, relay_server) -> ResourceAnalyzer:
    config = fast_config.model_copy(update={"direct_probe": False})
    return ResourceAnalyzer(config, fetcher=RelayFetcher(config, relays=[local_relay(relay_server)]))


async def _events(analyzer: ResourceAnalyzer, url: str) -> List:
    async with aclosing(analyzer.events(url)) as stream:
        return [event async for event in stream]


@pytest.mark.asyncio()
async def test_full_run_event_stream(fast_config, relay_server, site):
    async with _analyzer(fast_config, relay_server) as analyzer:
        events = await _events(analyzer, "http://site.test/")

    html_size = len(PAGE.encode("utf-8"))
    assert events[0] == Progress("Fetching main HTML page...", 0, 1)
    assert isinstance(events[1], ResourceRecorded)
    assert (events[1].successful_count, events[1].total_expected, events[1].running_total_size) == (1, 1, html_size)
    assert events[2] == Progress("Parsing HTML and collecting resources...", 1, 1)
    assert events[3] == Progress("Found 4 resources. Starting parallel download...", 1, 5)

    fetch_progress = [e for e in events[4:] if isinstance(e, Progress)]
    assert [e.current for e in fetch_progress] == [2, 3, 4, 5]
    assert all(e.total == 5 for e in fetch_progress)
    assert fetch_progress[-1].message == "Fetching resources... (4/4 checked)"

    recorded = [e for e in events[4:] if isinstance(e, ResourceRecorded)]
    assert [e.successful_count for e in recorded] == [2, 3, 4]
    assert all(e.total_expected == 5 for e in recorded)
    assert recorded[-1].running_total_size == html_size + 600

    assert isinstance(events[-1], AnalysisFinished)
    assert sum(isinstance(e, AnalysisFinished) for e in events) == 1


@pytest.mark.asyncio()
async def test_result_has_root_first_and_skips_failures(fast_config, relay_server, site):
    _, calls = site
    async with _analyzer(fast_config, relay_server) as analyzer:
        result = await analyzer.analyze("site.test")

    root = result.resources[0]
    assert (root.url, root.name, root.type) == ("https://site.test", "site.test.html", "html")
    assert root.size == result.main_html_size == len(PAGE.encode("utf-8"))

    sizes = {r.name: r.size for r in result.resources[1:]}
    assert sizes == {"style.css": 100, "app.js": 200, "logo.png": 300}
    assert result.total_files == 4
    assert result.total_size == root.size + 600
    assert all(r.size > 0 for r in result.resources)
    # the page itself is not fetched again as a resource
    assert calls["/"] == 1
    assert calls["/missing.gif"] == 3


@pytest.mark.asyncio()
async def test_callbacks_receive_progress_and_resources(fast_config, relay_server, site):
    progress: List[tuple] = []
    resources: List[tuple] = []

    async with _analyzer(fast_config, relay_server) as analyzer:
        result = await analyzer.analyze(
            "https://site.test/",
            progress=lambda message, current, total: progress.append((message, current, total)),
            on_resource=lambda record, count, expected, running: resources.append((record.name, count, expected)),
        )

    assert progress[0] == ("Fetching main HTML page...", 0, 1)
    assert len(progress) == 3 + 4
    assert resources[0] == ("site.test.html", 1, 1)
    assert [count for _, count, _ in resources] == [1, 2, 3, 4]
    assert len(resources) == result.total_files


@pytest.mark.asyncio()
async def test_repeated_runs_start_with_empty_cache(fast_config, relay_server, site):
    _, calls = site
    async with _analyzer(fast_config, relay_server) as analyzer:
        await analyzer.analyze("https://site.test/")
        await analyzer.analyze("https://site.test/")

    assert calls["/app.js"] == 2


@pytest.mark.asyncio()
async def test_page_without_resources(fast_config, relay_server, relay_state):
    files, _ = relay_state
    files["/"] = "<html><body><p>plain</p></body></html>"

    async with _analyzer(fast_config, relay_server) as analyzer:
        events = await _events(analyzer, "https://site.test/")

    assert Progress("Found 0 resources. Starting parallel download...", 1, 1) in events
    result = events[-1].result
    assert result.total_files == 1
    assert result.resources[0].type == "html"


@pytest.mark.asyncio()
async def test_invalid_url_fails_before_any_request(fast_config, relay_server, site):
    _, calls = site
    async with _analyzer(fast_config, relay_server) as analyzer:
        with pytest.raises(InvalidURL):
            await analyzer.analyze("exa mple.com")

    assert calls == {}


@pytest.mark.asyncio()
async def test_unreachable_root_raises_fetch_failed(fast_config, relay_server, relay_state):
    files, calls = relay_state
    files["/"] = 500
    seen: List[str] = []

    async with _analyzer(fast_config, relay_server) as analyzer:
        with pytest.raises(FetchFailed):
            await analyzer.analyze("https://site.test/", progress=lambda m, c, t: seen.append(m))

    assert seen == ["Fetching main HTML page..."]
    assert list(calls) == ["/"]

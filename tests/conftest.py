# File: tests/conftest.py
from collections.abc import AsyncIterator
from typing import Callable, Dict, Tuple, Union
from urllib.parse import quote, urlsplit

import pytest
import pytest_asyncio
from aiohttp import web

from resource_scout.config import AnalyzerConfig
from resource_scout.crawler.models import ResourceRecord
from resource_scout.crawler.relays import RelayProfile

#: path -> body (or HTTP status) the local relay serves for a target URL
RelayFiles = Dict[str, Union[bytes, str, int]]


@pytest.fixture()
def fast_config() -> AnalyzerConfig:
    """
    Return an AnalyzerConfig with all delays shrunk so network tests stay quick.
    """
    return AnalyzerConfig(
        concurrency=3,
        document_timeout=2.0,
        probe_timeout=1.0,
        relay_timeout=2.0,
        min_request_delay=0.0,
        document_request_delay=0.0,
        retry_times=2,
        backoff_base=0.01,
        backoff_cap=0.05,
        retry_delay=0.01,
        user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def make_resource() -> Callable[..., ResourceRecord]:
    """Factory for ResourceRecord with a URL derived from the name."""

    def _make(name: str, size: int, type: str = "other", url: str | None = None) -> ResourceRecord:
        return ResourceRecord(url=url or f"https://example.com/{name}", name=name, type=type, size=size)

    return _make


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


def relay_app(files: RelayFiles, calls: Dict[str, int], route: str = "/relay") -> web.Application:
    """
    Build an app with a relay endpoint at *route*.

    The relay looks up the target URL's path in *files*; ints are returned
    as bare HTTP statuses, everything else as the body. Every hit is counted
    in *calls* by target path.
    """
    app = web.Application()

    async def handle_relay(request: web.Request) -> web.Response:
        target = request.query.get("url", "")
        path = urlsplit(target).path or "/"
        calls[path] = calls.get(path, 0) + 1
        payload = files.get(path, 404)
        if isinstance(payload, int):
            return web.Response(status=payload)
        if isinstance(payload, str):
            return web.Response(text=payload, content_type="text/html")
        return web.Response(body=payload, content_type="application/octet-stream")

    app.router.add_get(route, handle_relay)
    return app


def local_relay(base: str, name: str = "local", route: str = "/relay") -> RelayProfile:
    return RelayProfile(name=name, build_url=lambda url: f"{base}{route}?url={quote(url, safe='')}")


@pytest.fixture()
def relay_state() -> Tuple[RelayFiles, Dict[str, int]]:
    return {}, {}


@pytest_asyncio.fixture
async def relay_server(unused_tcp_port: int, relay_state) -> AsyncIterator[str]:
    files, calls = relay_state
    async for url in serve_app(relay_app(files, calls), unused_tcp_port):
        yield url

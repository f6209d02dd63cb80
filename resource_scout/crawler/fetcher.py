# resource_scout/crawler/fetcher.py
"""
Fetcher module: retrieves the root document and resource sizes, directly or
through third-party relays, with caching, request spacing, retry/backoff and
relay failover.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from resource_scout.config import AnalyzerConfig
from resource_scout.crawler.models import PageData
from resource_scout.crawler.relays import RelayProfile, select_relays
from resource_scout.exceptions import FetchFailed
from resource_scout.logger import LOGGER_NAME

__all__ = ("RelayFetcher",)

_FETCH_ERRORS = (ClientError, asyncio.TimeoutError, ValueError)
_REPORTED_ERRORS = 3


def _short(url: str, limit: int = 60) -> str:
    return url if len(url) <= limit else url[:limit] + "..."


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class RelayFetcher:
    """
    Size/document fetch client bound to one analysis run.

    Owns the size cache (0 marks a confirmed failure), the ordered relay
    list and the index of the currently preferred relay. Use as an async
    context manager so the underlying ``aiohttp`` session is closed.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        *,
        relays: Optional[Sequence[RelayProfile]] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        if relays is None:
            relays = select_relays(self.config.relays, allow_manual=self.config.allow_manual_relays)
        self.relays: tuple[RelayProfile, ...] = tuple(relays)
        if not self.relays:
            raise ValueError("at least one relay is required")
        self.current_relay: int = 0
        self.size_cache: Dict[str, int] = {}
        self.session: Optional[ClientSession] = session
        self._owns_session = session is None
        self.logger = logging.getLogger(LOGGER_NAME)
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def __aenter__(self) -> RelayFetcher:
        if self.session is None:
            self.session = ClientSession(
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    # ------------------------------------------------------------------ #
    # Public API                                                          #
    # ------------------------------------------------------------------ #

    @property
    def preferred_relay(self) -> RelayProfile:
        return self.relays[self.current_relay]

    async def fetch_document(self, url: str) -> PageData:
        """
        Fetch the full text of the root page, trying each relay once starting
        from the preferred one. The relay that succeeds becomes preferred.

        Raises :class:`FetchFailed` when every relay fails.
        """
        session = self._require_session()
        self.logger.info("Fetching main HTML from: %s", url)
        errors: List[str] = []
        timeout = ClientTimeout(total=self.config.document_timeout)
        count = len(self.relays)

        for offset in range(count):
            index = (self.current_relay + offset) % count
            relay = self.relays[index]
            await self._wait_for_rate_limit(self.config.document_request_delay)
            try:
                async with session.get(relay.build_url(url), timeout=timeout) as resp:
                    if not 200 <= resp.status < 300:
                        errors.append(f"{relay.name}: HTTP {resp.status}")
                        self.logger.warning("Relay %s returned HTTP %s for %s", relay.name, resp.status, url)
                        continue
                    body = relay.payload(await resp.read())
                    text = self._decode(body, resp.charset)
            except _FETCH_ERRORS as exc:
                errors.append(f"{relay.name}: {_describe(exc)}")
                self.logger.warning("Relay %s failed for %s: %s", relay.name, url, _describe(exc))
                continue

            self.current_relay = index
            size = len(text.encode("utf-8"))
            self.logger.info("HTML fetched via %s (%.2f KB)", relay.name, size / 1024)
            return PageData(url=url, content=text, size=size)

        raise FetchFailed(url, errors[-_REPORTED_ERRORS:])

    async def fetch_size(self, url: str) -> int:
        """
        Return the byte size of *url*.

        Order: cache, direct HEAD probe, relay GET with retries. Exhausting
        the retry budget caches and returns 0.
        """
        if url in self.size_cache:
            self.logger.debug("Cache hit for %s (%d bytes)", _short(url), self.size_cache[url])
            return self.size_cache[url]

        if self.config.direct_probe:
            direct = await self._probe_direct(url)
            if direct is not None:
                self.size_cache[url] = direct
                return direct

        session = self._require_session()
        retries = self.config.retry_times
        timeout = ClientTimeout(total=self.config.relay_timeout)
        self.logger.debug("Falling back to relay for %s", _short(url))

        for attempt in range(retries + 1):
            relay = self.preferred_relay
            await self._wait_for_rate_limit(self.config.min_request_delay)
            status: Optional[int] = None
            try:
                async with session.get(relay.build_url(url), timeout=timeout) as resp:
                    status = resp.status
                    if 200 <= status < 300:
                        size = len(relay.payload(await resp.read()))
                        self.logger.debug("Relay %s: %s is %d bytes", relay.name, _short(url), size)
                        self.size_cache[url] = size
                        return size
                    self.logger.debug("Relay %s returned HTTP %s for %s", relay.name, status, _short(url))
            except _FETCH_ERRORS as exc:
                self.logger.debug(
                    "Relay %s failed for %s (attempt %d/%d): %s",
                    relay.name, _short(url), attempt + 1, retries + 1, _describe(exc),
                )

            if attempt >= retries:
                break
            if status == 429:
                delay = min(self.config.backoff_base * 2 ** attempt, self.config.backoff_cap)
                self.logger.warning(
                    "Rate limited by %s, retrying %s in %.2f s (attempt %d/%d)",
                    relay.name, _short(url), delay, attempt + 1, retries + 1,
                )
            else:
                delay = self.config.retry_delay * (attempt + 1)
            self._advance_relay()
            await asyncio.sleep(delay)

        self.logger.warning("Giving up on %s, caching size 0", _short(url))
        self.size_cache[url] = 0
        return 0

    def clear_cache(self) -> None:
        removed = len(self.size_cache)
        self.size_cache.clear()
        self.logger.debug("Cache cleared (removed %d entries)", removed)

    # ------------------------------------------------------------------ #
    # Internals                                                           #
    # ------------------------------------------------------------------ #

    async def _probe_direct(self, url: str) -> Optional[int]:
        session = self._require_session()
        timeout = ClientTimeout(total=self.config.probe_timeout)
        try:
            async with session.head(url, timeout=timeout, allow_redirects=True) as resp:
                if not 200 <= resp.status < 300:
                    self.logger.debug("Direct probe of %s returned HTTP %s", _short(url), resp.status)
                    return None
                length = resp.headers.get("Content-Length")
        except _FETCH_ERRORS as exc:
            self.logger.debug("Direct probe of %s failed: %s", _short(url), _describe(exc))
            return None

        if length is None:
            self.logger.debug("Direct probe of %s has no Content-Length", _short(url))
            return None
        try:
            size = int(length)
        except ValueError:
            return None
        return size if size >= 0 else None

    async def _wait_for_rate_limit(self, interval: float) -> None:
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                self.logger.debug("Rate limiting: waiting %.3f s", wait)
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()

    def _advance_relay(self) -> None:
        self.current_relay = (self.current_relay + 1) % len(self.relays)

    def _require_session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    @staticmethod
    def _decode(body: bytes, charset: Optional[str]) -> str:
        try:
            return body.decode(charset or "utf-8", errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")

# File: resource_scout/engine.py
"""resource_scout.engine: оркестрация одного анализа страницы.

The run is exposed as an explicit stream of tagged events
(:class:`Progress`, :class:`ResourceRecorded`, :class:`AnalysisFinished`).
:meth:`ResourceAnalyzer.analyze` adapts that stream to the classic
``progress(message, current, total)`` / ``on_resource(...)`` callbacks.
"""

from __future__ import annotations

import time
from contextlib import aclosing
from typing import AsyncIterator, Callable, Optional

from resource_scout.config import AnalyzerConfig
from resource_scout.crawler.fetcher import RelayFetcher
from resource_scout.crawler.models import (
    AnalysisEvent,
    AnalysisFinished,
    AnalysisResult,
    Progress,
    ResourceRecord,
    ResourceRecorded,
)
from resource_scout.crawler.scheduler import fetch_batch
from resource_scout.logger import logger
from resource_scout.parser.html_parser import discover_resources
from resource_scout.utils import format_bytes, normalize_url

__all__ = ["ResourceAnalyzer", "start_analysis", "ProgressSink", "ResourceSink"]

ProgressSink = Callable[[str, int, int], None]
ResourceSink = Callable[[ResourceRecord, int, int, int], None]


class ResourceAnalyzer:
    """Фасад для CLI и тестов: загрузка страницы, поиск ресурсов и сбор их размеров."""

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        *,
        fetcher: Optional[RelayFetcher] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.fetcher = fetcher or RelayFetcher(self.config)

    async def __aenter__(self) -> ResourceAnalyzer:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.fetcher.__aexit__(exc_type, exc, tb)

    def clear_cache(self) -> None:
        self.fetcher.clear_cache()

    async def events(self, url: str) -> AsyncIterator[AnalysisEvent]:
        """
        Analyse *url* and yield events as they happen.

        Raises :class:`~resource_scout.exceptions.InvalidURL` before any
        request and :class:`~resource_scout.exceptions.FetchFailed` when the
        root document is unreachable. The last event is always
        :class:`AnalysisFinished`.
        """
        base = normalize_url(url)
        self.clear_cache()
        started = time.monotonic()

        yield Progress("Fetching main HTML page...", 0, 1)
        page = await self.fetcher.fetch_document(base)

        root = ResourceRecord.from_url(base, page.size, resource_type="html")
        result = AnalysisResult(resources=[root], main_html_size=page.size)
        yield ResourceRecorded(root, 1, 1, page.size)

        yield Progress("Parsing HTML and collecting resources...", 1, 1)
        root_key = base.rstrip("/")
        urls = [u for u in discover_resources(page.content, base) if u.rstrip("/") != root_key]
        total = len(urls)
        yield Progress(f"Found {total} resources. Starting parallel download...", 1, total + 1)

        processed = 0
        successful = 1
        running_total = page.size
        async with aclosing(fetch_batch(self.fetcher, urls, self.config.concurrency)) as outcomes:
            async for outcome in outcomes:
                processed += 1
                message = f"Fetching resources... ({processed}/{total} checked)"
                if not outcome.succeeded:
                    yield Progress(message, processed + 1, total + 1)
                    continue
                record = outcome.to_record()
                result.resources.append(record)
                running_total += record.size
                successful += 1
                yield Progress(message, processed + 1, total + 1)
                yield ResourceRecorded(record, successful, total + 1, running_total)

        logger.info(
            "Analysis of %s finished: %d/%d resources, %s in %.2f s",
            base, result.total_files, total + 1, format_bytes(result.total_size), time.monotonic() - started,
        )
        yield AnalysisFinished(result)

    async def analyze(
        self,
        url: str,
        progress: Optional[ProgressSink] = None,
        on_resource: Optional[ResourceSink] = None,
    ) -> AnalysisResult:
        """Run :meth:`events` to completion, dispatching to the optional callbacks."""
        result: Optional[AnalysisResult] = None
        async with aclosing(self.events(url)) as stream:
            async for event in stream:
                if isinstance(event, Progress):
                    if progress is not None:
                        progress(event.message, event.current, event.total)
                elif isinstance(event, ResourceRecorded):
                    if on_resource is not None:
                        on_resource(
                            event.resource,
                            event.successful_count,
                            event.total_expected,
                            event.running_total_size,
                        )
                elif isinstance(event, AnalysisFinished):
                    result = event.result
        if result is None:  # pragma: no cover
            raise RuntimeError("analysis stream ended without a result")
        return result


async def start_analysis(
    url: str,
    config: Optional[AnalyzerConfig] = None,
    progress: Optional[ProgressSink] = None,
) -> AnalysisResult:
    """
    Запускает анализ в собственном контексте и возвращает AnalysisResult.

    Parameters
    ----------
    url : str
        Адрес страницы, как его ввёл пользователь.
    config : AnalyzerConfig, optional
        Конфигурация анализа.
    progress : callable, optional
        Приёмник сообщений о прогрессе.
    """
    async with ResourceAnalyzer(config) as analyzer:
        return await analyzer.analyze(url, progress=progress)

# File: resource_scout/aggregator.py
"""resource_scout.aggregator: сборка итогового отчёта анализа."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from resource_scout.analysis.duplicates import DuplicateAnalysis, analyze_duplicates, summary_message
from resource_scout.analysis.load_time import LoadTimeEstimate, estimate_load_times
from resource_scout.analysis.scorer import PerformanceScore, calculate_performance_score
from resource_scout.analysis.suggestions import (
    Suggestion,
    SuggestionSummary,
    suggest_optimizations,
    summarize_suggestions,
)
from resource_scout.crawler.models import AnalysisResult
from resource_scout.utils import format_bytes


@dataclass(slots=True)
class AnalysisReport:
    """Результаты анализа страницы: ресурсы, оценка и диагностика."""

    result: AnalysisResult
    score: PerformanceScore
    duplicates: DuplicateAnalysis
    load_times: Optional[Dict[str, LoadTimeEstimate]] = None
    suggestions: List[Suggestion] = field(default_factory=list)
    suggestion_summary: Optional[SuggestionSummary] = None

    @property
    def url(self) -> str:
        return self.result.resources[0].url if self.result.resources else ""

    def to_dict(self) -> dict:
        data = self.result.to_dict()
        data["url"] = self.url
        data["totalSizeFormatted"] = format_bytes(self.result.total_size)
        data["performance"] = self.score.to_dict()
        data["duplicates"] = self.duplicates.to_dict()
        data["duplicates"]["summary"] = summary_message(self.duplicates)
        data["loadTimes"] = (
            {key: estimate.to_dict() for key, estimate in self.load_times.items()}
            if self.load_times
            else None
        )
        data["suggestions"] = [s.to_dict() for s in self.suggestions]
        data["suggestionSummary"] = (
            self.suggestion_summary.to_dict() if self.suggestion_summary else None
        )
        return data

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(result: AnalysisResult) -> AnalysisReport:
    """Прогоняет все анализаторы по списку ресурсов и собирает AnalysisReport."""
    suggestions = suggest_optimizations(result.resources)
    return AnalysisReport(
        result=result,
        score=calculate_performance_score(result),
        duplicates=analyze_duplicates(result.resources),
        load_times=estimate_load_times(result.resources),
        suggestions=suggestions,
        suggestion_summary=summarize_suggestions(suggestions),
    )


__all__ = ["AnalysisReport", "aggregate_results"]

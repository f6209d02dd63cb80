# resource_scout/analysis/scorer.py
"""
Performance score (0 to 100) in the spirit of Lighthouse, computed from the
recorded resource list only.

Weights: page size 30 %, request count 25 %, resource distribution 25 %,
compression 20 %.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence

from resource_scout.crawler.models import AnalysisResult, ResourceRecord
from resource_scout.utils import round_half_up

__all__ = (
    "PerformanceScore",
    "TypeStats",
    "calculate_performance_score",
    "page_size_score",
    "request_count_score",
    "distribution_score",
    "compression_score",
    "WEIGHTS",
)

KB = 1024
MB = 1024 * 1024
LARGE_FILE_BYTES = 500 * KB

WEIGHTS: Dict[str, float] = {
    "pageSize": 0.30,
    "requestCount": 0.25,
    "resourceDistribution": 0.25,
    "compression": 0.20,
}


@dataclass(slots=True)
class TypeStats:
    count: int = 0
    size: int = 0


@dataclass(slots=True)
class PerformanceScore:
    total_score: int
    breakdown: Dict[str, int]
    total_size_mb: str
    request_count: int
    type_distribution: Dict[str, TypeStats] = field(default_factory=dict)
    large_file_count: int = 0

    def to_dict(self) -> dict:
        return {
            "totalScore": self.total_score,
            "breakdown": dict(self.breakdown),
            "metrics": {
                "totalSizeMB": self.total_size_mb,
                "requestCount": self.request_count,
                "typeDistribution": {
                    kind: {"count": s.count, "size": s.size}
                    for kind, s in self.type_distribution.items()
                },
                "largeFileCount": self.large_file_count,
            },
        }


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def page_size_score(total_bytes: int) -> float:
    """Piecewise-linear, breakpoints at 0.5/1/2/5 MB."""
    mb = total_bytes / MB
    if mb < 0.5:
        score = 100.0
    elif mb < 1:
        score = 90 - ((mb - 0.5) / 0.5) * 15
    elif mb < 2:
        score = 75 - ((mb - 1) / 1) * 25
    elif mb < 5:
        score = 50 - ((mb - 2) / 3) * 30
    else:
        score = 20 - ((mb - 5) / 5) * 20
    return _clamp(score)


def request_count_score(count: int) -> float:
    """Piecewise-linear, breakpoints at 25/50/100/150 requests."""
    if count < 25:
        score = 100.0
    elif count < 50:
        score = 90 - ((count - 25) / 25) * 15
    elif count < 100:
        score = 75 - ((count - 50) / 50) * 35
    elif count < 150:
        score = 40 - ((count - 100) / 50) * 20
    else:
        score = 20 - ((count - 150) / 50) * 20
    return _clamp(score)


def type_distribution(resources: Iterable[ResourceRecord]) -> Dict[str, TypeStats]:
    stats: Dict[str, TypeStats] = {}
    for resource in resources:
        entry = stats.setdefault(resource.type, TypeStats())
        entry.count += 1
        entry.size += resource.size
    return stats


def distribution_score(resources: Sequence[ResourceRecord], stats: Dict[str, TypeStats] | None = None) -> float:
    stats = stats if stats is not None else type_distribution(resources)
    total = sum(s.size for s in stats.values())
    score = 100.0

    def ratio(kind: str) -> float:
        return stats[kind].size / total if kind in stats and total else 0.0

    image_ratio = ratio("image")
    if image_ratio > 0.7:
        score -= 30
    elif image_ratio > 0.5:
        score -= 15

    js_ratio = ratio("js")
    if js_ratio > 0.5:
        score -= 25
    elif js_ratio > 0.3:
        score -= 10

    if ratio("css") > 0.3:
        score -= 15

    large_files = sum(1 for r in resources if r.size > LARGE_FILE_BYTES)
    if large_files:
        score -= min(20, large_files * 5)

    return _clamp(score)


def compression_score(resources: Sequence[ResourceRecord], stats: Dict[str, TypeStats] | None = None) -> float:
    stats = stats if stats is not None else type_distribution(resources)
    score = 100.0
    if resources:
        average = sum(r.size for r in resources) / len(resources)
        if average > 200 * KB:
            score -= 30
        elif average > 100 * KB:
            score -= 15

    images = stats.get("image")
    if images and images.count:
        average_image = images.size / images.count
        if average_image > 500 * KB:
            score -= 25
        elif average_image > 200 * KB:
            score -= 10

    return _clamp(score)


def calculate_performance_score(result: AnalysisResult) -> PerformanceScore:
    """Weighted score of the four sub-scores, each clamped to [0, 100] first."""
    resources = result.resources
    stats = type_distribution(resources)
    scores = {
        "pageSize": page_size_score(result.total_size),
        "requestCount": request_count_score(result.total_files),
        "resourceDistribution": distribution_score(resources, stats),
        "compression": compression_score(resources, stats),
    }
    weighted = sum(scores[name] * weight for name, weight in WEIGHTS.items())
    total = int(_clamp(round_half_up(weighted)))

    return PerformanceScore(
        total_score=total,
        breakdown={name: round_half_up(value) for name, value in scores.items()},
        total_size_mb=f"{result.total_size / MB:.2f}",
        request_count=result.total_files,
        type_distribution=stats,
        large_file_count=sum(1 for r in resources if r.size > LARGE_FILE_BYTES),
    )

# resource_scout/analysis/duplicates.py
"""
Duplicate resource detection.

Two resources count as the same asset when their file names (without query
string and fragment) and their byte sizes are equal. The content itself is
never hashed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from resource_scout.crawler.models import ResourceRecord
from resource_scout.utils import format_bytes

__all__ = (
    "DuplicateGroup",
    "DuplicateSuggestion",
    "DuplicateAnalysis",
    "analyze_duplicates",
    "clean_file_name",
    "calculate_severity",
    "categorize_type",
    "summary_message",
)

KB = 1024
MB = 1024 * 1024

_IMAGE_TYPES = frozenset({"image", "jpg", "jpeg", "png", "gif", "svg", "webp", "avif", "ico", "bmp"})
_JS_TYPES = frozenset({"js", "javascript", "mjs"})
_CSS_TYPES = frozenset({"css"})


@dataclass(slots=True)
class DuplicateGroup:
    file_name: str
    type: str
    size: int
    instances: int
    duplicate_count: int
    wasted_size: int
    urls: List[str]
    severity: str

    def to_dict(self) -> dict:
        return {
            "fileName": self.file_name,
            "type": self.type,
            "size": self.size,
            "instances": self.instances,
            "duplicateCount": self.duplicate_count,
            "wastedSize": self.wasted_size,
            "urls": list(self.urls),
            "severity": self.severity,
        }


@dataclass(slots=True)
class DuplicateSuggestion:
    priority: str
    category: str
    title: str
    description: str
    action: str
    impact: str
    resources: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "priority": self.priority,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "action": self.action,
            "impact": self.impact,
            "resources": list(self.resources),
        }


@dataclass(slots=True)
class DuplicateAnalysis:
    groups: List[DuplicateGroup] = field(default_factory=list)
    total_duplicates: int = 0
    wasted_bandwidth: int = 0
    unique_resources: int = 0
    total_resources: int = 0
    duplicate_percentage: float = 0.0
    wasted_percentage: float = 0.0
    suggestions: List[DuplicateSuggestion] = field(default_factory=list)

    @property
    def has_duplicates(self) -> bool:
        return bool(self.groups)

    def to_dict(self) -> dict:
        return {
            "hasDuplicates": self.has_duplicates,
            "duplicateGroups": [g.to_dict() for g in self.groups],
            "totalDuplicates": self.total_duplicates,
            "wastedBandwidth": self.wasted_bandwidth,
            "uniqueResources": self.unique_resources,
            "totalResources": self.total_resources,
            "duplicatePercentage": self.duplicate_percentage,
            "wastedPercentage": self.wasted_percentage,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


def clean_file_name(name: str) -> str:
    return name.split("?", 1)[0].split("#", 1)[0]


def calculate_severity(wasted_size: int, duplicate_count: int) -> str:
    wasted_mb = wasted_size / MB
    if wasted_mb > 1 or duplicate_count >= 5:
        return "high"
    if wasted_mb > 0.1 or duplicate_count >= 3:
        return "medium"
    return "low"


def categorize_type(resource_type: str) -> str:
    """Map a resource type onto the image/js/css/other buckets used for advice."""
    lowered = resource_type.lower()
    if lowered in _IMAGE_TYPES:
        return "image"
    if lowered in _JS_TYPES:
        return "js"
    if lowered in _CSS_TYPES:
        return "css"
    return "other"


def analyze_duplicates(resources: Sequence[ResourceRecord]) -> DuplicateAnalysis:
    """Find groups of resources with the same cleaned file name and byte size."""
    if not resources:
        return DuplicateAnalysis()

    by_name: Dict[str, List[ResourceRecord]] = {}
    for resource in resources:
        by_name.setdefault(clean_file_name(resource.name), []).append(resource)

    groups: List[DuplicateGroup] = []
    for name, members in by_name.items():
        if len(members) < 2:
            continue
        by_size: Dict[int, List[ResourceRecord]] = {}
        for resource in members:
            by_size.setdefault(resource.size, []).append(resource)
        for size, same in by_size.items():
            if len(same) < 2:
                continue
            duplicate_count = len(same) - 1
            wasted = size * duplicate_count
            groups.append(
                DuplicateGroup(
                    file_name=name,
                    type=same[0].type,
                    size=size,
                    instances=len(same),
                    duplicate_count=duplicate_count,
                    wasted_size=wasted,
                    urls=[r.url for r in same],
                    severity=calculate_severity(wasted, duplicate_count),
                )
            )

    groups.sort(key=lambda g: g.wasted_size, reverse=True)

    total_duplicates = sum(g.duplicate_count for g in groups)
    wasted = sum(g.wasted_size for g in groups)
    total_bytes = sum(r.size for r in resources)

    return DuplicateAnalysis(
        groups=groups,
        total_duplicates=total_duplicates,
        wasted_bandwidth=wasted,
        unique_resources=len(resources) - total_duplicates,
        total_resources=len(resources),
        duplicate_percentage=round(total_duplicates / len(resources) * 100, 1),
        wasted_percentage=round(wasted / total_bytes * 100, 1) if total_bytes else 0.0,
        suggestions=_suggestions(groups, wasted),
    )


def _suggestions(groups: List[DuplicateGroup], total_wasted: int) -> List[DuplicateSuggestion]:
    suggestions: List[DuplicateSuggestion] = []
    if not groups:
        return suggestions

    high = [g for g in groups if g.severity == "high"]
    if high:
        suggestions.append(
            DuplicateSuggestion(
                priority="high",
                category="Resource Consolidation",
                title="Critical: Large Resources Loaded Multiple Times",
                description=(
                    f"{len(high)} resource(s) with significant duplication detected. "
                    f"Wasting {format_bytes(sum(g.wasted_size for g in high))} in duplicate downloads."
                ),
                action="Ensure each resource is only loaded once. Check for duplicate <script>, <link>, or <img> tags.",
                impact="High - Significantly reduces page load time and bandwidth usage",
                resources=[g.file_name for g in high],
            )
        )

    medium = [g for g in groups if g.severity == "medium"]
    if medium:
        suggestions.append(
            DuplicateSuggestion(
                priority="medium",
                category="Resource Optimization",
                title="Moderate Duplicate Resources Detected",
                description=(
                    f"{len(medium)} resource(s) loaded multiple times, "
                    f"wasting {format_bytes(sum(g.wasted_size for g in medium))}."
                ),
                action=(
                    "Review your HTML for duplicate resource references. "
                    "Consider using a bundler to consolidate resources."
                ),
                impact="Medium - Improves page load time and reduces bandwidth",
                resources=[g.file_name for g in medium],
            )
        )

    if total_wasted > 100 * KB:
        suggestions.append(
            DuplicateSuggestion(
                priority="medium",
                category="Build Process",
                title="Implement Resource Deduplication",
                description=f"Total of {format_bytes(total_wasted)} wasted on duplicate resources.",
                action=(
                    "Use build tools like Webpack, Rollup, or Parcel to automatically deduplicate "
                    "and bundle resources. Implement proper dependency management."
                ),
                impact="Medium - Prevents duplicate resource loading through automation",
            )
        )

    by_category: Dict[str, List[DuplicateGroup]] = {}
    for group in groups:
        by_category.setdefault(categorize_type(group.type), []).append(group)

    if by_category.get("js"):
        js = by_category["js"]
        suggestions.append(
            DuplicateSuggestion(
                priority="medium",
                category="JavaScript Optimization",
                title="JavaScript Files Loaded Multiple Times",
                description=f"{len(js)} JavaScript file(s) are loaded more than once.",
                action=(
                    "Consolidate JavaScript dependencies. Use a module bundler to create a single bundle. "
                    "Check for duplicate <script> tags in your HTML."
                ),
                impact="Medium - Reduces script parsing time and bandwidth",
                resources=[g.file_name for g in js],
            )
        )

    if by_category.get("css"):
        css = by_category["css"]
        suggestions.append(
            DuplicateSuggestion(
                priority="medium",
                category="CSS Optimization",
                title="CSS Files Loaded Multiple Times",
                description=f"{len(css)} CSS file(s) are loaded more than once.",
                action=(
                    "Combine CSS files into a single stylesheet. Check for duplicate <link> tags. "
                    "Consider using CSS preprocessing tools to manage dependencies."
                ),
                impact="Medium - Reduces render-blocking CSS and bandwidth",
                resources=[g.file_name for g in css],
            )
        )

    if by_category.get("image"):
        images = by_category["image"]
        suggestions.append(
            DuplicateSuggestion(
                priority="low",
                category="Image Optimization",
                title="Images Loaded Multiple Times",
                description=f"{len(images)} image(s) are referenced multiple times from different URLs.",
                action=(
                    "Ensure images are loaded from a single, consistent URL. Use browser caching effectively. "
                    "Consider using CSS sprites for small, frequently used images."
                ),
                impact="Low to Medium - Leverages browser cache and reduces bandwidth",
                resources=[g.file_name for g in images],
            )
        )

    return suggestions


def summary_message(analysis: DuplicateAnalysis) -> str:
    if not analysis.has_duplicates:
        return "No duplicate resources detected. All resources are loaded only once."
    return (
        f"Found {len(analysis.groups)} resource(s) loaded multiple times "
        f"({analysis.total_duplicates} duplicate instances, {analysis.duplicate_percentage}% of all resources). "
        f"Wasting {format_bytes(analysis.wasted_bandwidth)} in duplicate downloads."
    )

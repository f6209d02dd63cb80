# resource_scout/analysis/suggestions.py
"""Actionable optimization advice derived from the recorded resources."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

from resource_scout.analysis.duplicates import analyze_duplicates
from resource_scout.crawler.models import ResourceRecord
from resource_scout.utils import format_bytes

__all__ = ("Suggestion", "SuggestionSummary", "suggest_optimizations", "summarize_suggestions")

KB = 1024
MB = 1024 * 1024

LARGE_IMAGE_BYTES = 200 * KB
IMAGE_HEAVY_BYTES = 2 * MB
MINIFY_MIN_BYTES = 10 * KB
COMPRESSIBLE_MIN_BYTES = 100 * KB
TOO_MANY_REQUESTS = 50
TARGET_REQUESTS = 30
COMPRESSION_RATIO = 0.7

MINIFIABLE_TYPES = ("css", "js")
COMPRESSIBLE_TYPES = ("html", "css", "js", "json", "xml", "svg")
CDN_MARKERS = (
    "cdn.", "cloudfront.net", "cloudflare.com",
    "fastly.net", "akamai.net", "jsdelivr.net",
    "unpkg.com", "cdnjs.com", "gstatic.com",
)

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass(slots=True)
class Suggestion:
    id: str
    category: str
    priority: str
    title: str
    description: str
    impact: float
    impact_text: str
    actions: List[str] = field(default_factory=list)
    resources: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "impactText": self.impact_text,
            "actions": list(self.actions),
            "resources": list(self.resources),
        }


@dataclass(slots=True)
class SuggestionSummary:
    total_suggestions: int
    total_potential_savings: str
    high_priority: int
    medium_priority: int
    low_priority: int
    categories: List[str]

    def to_dict(self) -> dict:
        return {
            "totalSuggestions": self.total_suggestions,
            "totalPotentialSavings": self.total_potential_savings,
            "highPriority": self.high_priority,
            "mediumPriority": self.medium_priority,
            "lowPriority": self.low_priority,
            "categories": list(self.categories),
        }


def _plural(count: int, one: str, many: str) -> str:
    return one if count == 1 else many


def _bytes(size: float) -> str:
    return format_bytes(size, decimals=1)


def _images(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    images = [r for r in resources if r.type == "image"]
    if not images:
        return []
    found: List[Suggestion] = []

    large = [r for r in images if r.size > LARGE_IMAGE_BYTES]
    if large:
        savings = sum(r.size for r in large) * 0.4
        found.append(Suggestion(
            id="compress-images",
            category="Images",
            priority="high",
            title="Compress Images",
            description=(
                f"{len(large)} large image{_plural(len(large), '', 's')} detected. "
                f"Compressing images could reduce size by {_bytes(savings)}."
            ),
            impact=savings,
            impact_text=f"~{_bytes(savings)} savings",
            actions=[
                "Use image compression tools (TinyPNG, ImageOptim, Squoosh)",
                "Optimize images before uploading to your website",
                "Use appropriate quality settings (80-85% for JPEG)",
                "Remove unnecessary metadata from images",
            ],
            resources=[
                {"url": r.url, "size": r.size, "potentialSize": round(r.size * 0.6)} for r in large
            ],
        ))

    image_bytes = sum(r.size for r in images)
    if image_bytes > IMAGE_HEAVY_BYTES:
        share = image_bytes / sum(r.size for r in resources) * 100
        found.append(Suggestion(
            id="image-heavy",
            category="Images",
            priority="medium",
            title="Image-Heavy Page",
            description=(
                f"Images account for {share:.1f}% of total page size ({_bytes(image_bytes)}). "
                "Consider lazy loading or responsive images."
            ),
            impact=image_bytes * 0.3,
            impact_text="Potential improvement",
            actions=[
                "Implement lazy loading for below-the-fold images",
                "Use responsive images with srcset attribute",
                "Consider using CSS sprites for small icons",
                "Load images progressively (progressive JPEG, interlaced PNG)",
            ],
        ))
    return found


def _minification(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    unminified = [
        r for r in resources
        if r.type in MINIFIABLE_TYPES and ".min." not in r.url and r.size > MINIFY_MIN_BYTES
    ]
    if not unminified:
        return []
    savings = sum(r.size for r in unminified) * 0.3
    return [Suggestion(
        id="minify-files",
        category="Code Optimization",
        priority="high",
        title="Minify CSS/JavaScript Files",
        description=(
            f"{len(unminified)} CSS/JS file{_plural(len(unminified), '', 's')} appear to be unminified. "
            f"Minification could reduce size by {_bytes(savings)}."
        ),
        impact=savings,
        impact_text=f"~{_bytes(savings)} savings",
        actions=[
            "Minify JavaScript files using terser or uglify-js",
            "Minify CSS files using cssnano or clean-css",
            "Use build tools (Webpack, Rollup, Parcel) for automatic minification",
            "Remove comments, whitespace, and unused code",
        ],
        resources=[
            {"url": r.url, "type": r.type, "size": r.size, "potentialSize": round(r.size * 0.7)}
            for r in unminified
        ],
    )]


def _compression(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    compressible = sum(r.size for r in resources if r.type in COMPRESSIBLE_TYPES)
    if compressible <= COMPRESSIBLE_MIN_BYTES:
        return []
    savings = compressible * (1 - COMPRESSION_RATIO)
    return [Suggestion(
        id="enable-compression",
        category="Server Configuration",
        priority="high",
        title="Enable Gzip/Brotli Compression",
        description=(
            f"Text-based resources ({_bytes(compressible)}) could benefit from server compression. "
            f"Enable gzip or brotli to reduce bandwidth by ~{_bytes(savings)}."
        ),
        impact=savings,
        impact_text=f"~{_bytes(savings)} savings",
        actions=[
            "Enable Brotli compression (better than gzip) on your web server",
            "Configure gzip compression as fallback for older browsers",
            "Compress HTML, CSS, JavaScript, JSON, XML, and SVG files",
            "Set appropriate compression levels (4-6 for good balance)",
            "Add compression headers to your server configuration",
        ],
    )]


def _request_count(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    total = len(resources)
    if total <= TOO_MANY_REQUESTS:
        return []
    return [Suggestion(
        id="reduce-requests",
        category="Network Optimization",
        priority="medium",
        title="Reduce HTTP Requests",
        description=(
            f"Page makes {total} HTTP requests. Each request adds latency. "
            "Consider combining resources to reduce requests."
        ),
        impact=total - TARGET_REQUESTS,
        impact_text=f"Reduce by {total - TARGET_REQUESTS} requests",
        actions=[
            "Combine multiple CSS files into one",
            "Combine multiple JavaScript files into one",
            "Use CSS sprites for multiple small images",
            "Inline small CSS/JS directly in HTML (for critical resources)",
            "Use HTTP/2 or HTTP/3 for multiplexing",
            "Remove unused third-party scripts",
        ],
    )]


def _cdn(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    total = len(resources)
    if total <= 10:
        return []
    on_cdn = sum(1 for r in resources if any(marker in r.url.lower() for marker in CDN_MARKERS))
    share = on_cdn / total * 100
    if share >= 20:
        return []
    return [Suggestion(
        id="use-cdn",
        category="Network Optimization",
        priority="medium",
        title="Consider Using a CDN",
        description=(
            f"Only {share:.0f}% of resources are served from a CDN. "
            "Using a CDN can significantly improve load times globally."
        ),
        impact=0,
        impact_text="Faster global delivery",
        actions=[
            "Use a CDN for static assets (images, CSS, JavaScript)",
            "Popular CDNs: Cloudflare, AWS CloudFront, Fastly, BunnyCDN",
            "Serve libraries from public CDNs (cdnjs, jsdelivr, unpkg)",
            "Enable CDN caching with appropriate cache headers",
            "Use CDN features like image optimization and compression",
        ],
    )]


def _modern_formats(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    images = [r for r in resources if r.type == "image"]
    modern = [r for r in images if ".webp" in r.url.lower() or ".avif" in r.url.lower()]
    legacy = [r for r in images if any(ext in r.url.lower() for ext in (".jpg", ".jpeg", ".png"))]
    if len(legacy) <= 3 or modern:
        return []
    savings = sum(r.size for r in legacy) * 0.3
    return [Suggestion(
        id="modern-formats",
        category="Images",
        priority="medium",
        title="Convert Images to WebP/AVIF",
        description=(
            f"{len(legacy)} image{_plural(len(legacy), ' uses', 's use')} older formats (JPEG/PNG). "
            f"Converting to WebP/AVIF could save ~{_bytes(savings)}."
        ),
        impact=savings,
        impact_text=f"~{_bytes(savings)} savings",
        actions=[
            "Convert images to WebP format (widely supported)",
            "Use AVIF for even better compression (newer format)",
            "Provide fallbacks for older browsers using <picture> tag",
            "Use tools like Squoosh, cwebp, or online converters",
            "Set up automatic conversion in your build process",
        ],
    )]


def _https(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    insecure = [r for r in resources if r.url.lower().startswith("http://")]
    if not insecure:
        return []
    return [Suggestion(
        id="use-https",
        category="Security",
        priority="high",
        title="Use HTTPS for All Resources",
        description=(
            f"{len(insecure)} resource{_plural(len(insecure), ' is', 's are')} loaded over insecure HTTP. "
            "This can cause security warnings and mixed content issues."
        ),
        impact=0,
        impact_text="Security & SEO improvement",
        actions=[
            "Update all resource URLs to use HTTPS",
            "Enable HTTPS on your server if not already enabled",
            "Use Content Security Policy to enforce HTTPS",
            "Update third-party resources to HTTPS versions",
            "HTTPS is required for modern browser features",
        ],
        resources=[{"url": r.url} for r in insecure],
    )]


def _duplicates(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    groups = analyze_duplicates(resources).groups
    if not groups:
        return []
    wasted = sum(g.wasted_size for g in groups)
    return [Suggestion(
        id="remove-duplicates",
        category="Code Optimization",
        priority="medium",
        title="Remove Duplicate Resources",
        description=(
            f"{len(groups)} resource{_plural(len(groups), ' is', 's are')} loaded multiple times, "
            f"wasting {_bytes(wasted)} of bandwidth."
        ),
        impact=wasted,
        impact_text=f"~{_bytes(wasted)} wasted",
        actions=[
            "Check for duplicate script/link tags in HTML",
            "Ensure libraries are loaded only once",
            "Use a module bundler to prevent duplicate includes",
            "Check for resources loaded by multiple third-party scripts",
        ],
        resources=[
            {"filename": g.file_name, "count": g.instances, "size": g.size, "urls": list(g.urls)}
            for g in groups
        ],
    )]


_ANALYZERS: Sequence[Callable[[Sequence[ResourceRecord]], List[Suggestion]]] = (
    _images,
    _minification,
    _compression,
    _request_count,
    _cdn,
    _modern_formats,
    _https,
    _duplicates,
)


def suggest_optimizations(resources: Sequence[ResourceRecord]) -> List[Suggestion]:
    """Run every check and return suggestions ordered high → medium → low."""
    suggestions: List[Suggestion] = []
    for analyzer in _ANALYZERS:
        suggestions.extend(analyzer(resources))
    suggestions.sort(key=lambda s: _PRIORITY_ORDER[s.priority])
    return suggestions


def summarize_suggestions(suggestions: Sequence[Suggestion]) -> SuggestionSummary:
    categories: List[str] = []
    for suggestion in suggestions:
        if suggestion.category not in categories:
            categories.append(suggestion.category)
    return SuggestionSummary(
        total_suggestions=len(suggestions),
        total_potential_savings=_bytes(sum(s.impact or 0 for s in suggestions)),
        high_priority=sum(1 for s in suggestions if s.priority == "high"),
        medium_priority=sum(1 for s in suggestions if s.priority == "medium"),
        low_priority=sum(1 for s in suggestions if s.priority == "low"),
        categories=categories,
    )

# resource_scout/analysis/load_time.py
"""
Load-time estimation under simulated network profiles.

Downloads are spread largest-first over the profile's parallel connections;
latency is charged three times for the first batch (DNS, TCP, TLS) and once
per further batch; parse/render cost is a per-type multiplier on kilobytes.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from resource_scout.crawler.models import ResourceRecord
from resource_scout.utils import round_half_up

__all__ = (
    "NetworkProfile",
    "LoadTimeEstimate",
    "NETWORK_PROFILES",
    "estimate_load_times",
    "calculate_load_time",
    "parallel_download_time",
    "parse_render_time",
    "format_time",
    "speed_category",
)

BASE_RENDER_MS = 100.0
CSS_FIXED_MS = 50.0

_PARSE_MS_PER_KB: Dict[str, float] = {
    "html": 0.5,
    "css": 0.3,
    "js": 1.0,
    "script": 1.0,
    "image": 0.1,
}
_OTHER_MS_PER_KB = 0.05


@dataclass(frozen=True, slots=True)
class NetworkProfile:
    key: str
    name: str
    download_mbps: float
    latency_ms: float
    max_connections: int

    @property
    def bytes_per_ms(self) -> float:
        return (self.download_mbps * 1024 * 1024) / (8 * 1000)


NETWORK_PROFILES: Tuple[NetworkProfile, ...] = (
    NetworkProfile("3G", "3G", 0.75, 100, 6),
    NetworkProfile("4G", "4G/LTE", 10, 50, 6),
    NetworkProfile("5G", "5G", 100, 10, 10),
    NetworkProfile("WiFi", "WiFi", 50, 20, 8),
    NetworkProfile("Cable", "Cable/Fiber", 200, 10, 10),
)


@dataclass(slots=True)
class LoadTimeEstimate:
    profile: str
    download_time: int
    latency_time: int
    parse_render_time: int
    total_time: int
    total_with_render: int
    total_size: int
    resource_count: int
    average_speed: float
    max_connections: int

    @property
    def speed_category(self) -> str:
        return speed_category(self.total_with_render)

    def to_dict(self) -> dict:
        return {
            "profile": self.profile,
            "downloadTime": self.download_time,
            "latencyTime": self.latency_time,
            "parseRenderTime": self.parse_render_time,
            "totalTime": self.total_time,
            "totalWithRender": self.total_with_render,
            "totalSize": self.total_size,
            "resourceCount": self.resource_count,
            "averageSpeed": self.average_speed,
            "maxConnections": self.max_connections,
            "formatted": format_time(self.total_with_render),
            "speedCategory": self.speed_category,
        }


def parallel_download_time(sizes: Sequence[int], bytes_per_ms: float, max_connections: int) -> float:
    """Greedy largest-first assignment to the least loaded connection; returns the makespan."""
    queues = [0.0] * max(1, max_connections)
    for size in sorted(sizes, reverse=True):
        index = queues.index(min(queues))
        queues[index] += size / bytes_per_ms
    return max(queues)


def parse_render_time(resources: Sequence[ResourceRecord]) -> float:
    total = 0.0
    for resource in resources:
        kb = resource.size / 1024
        total += kb * _PARSE_MS_PER_KB.get(resource.type, _OTHER_MS_PER_KB)
        if resource.type == "css":
            total += CSS_FIXED_MS
    return total + BASE_RENDER_MS


def calculate_load_time(resources: Sequence[ResourceRecord], profile: NetworkProfile) -> LoadTimeEstimate:
    count = len(resources)
    download = parallel_download_time([r.size for r in resources], profile.bytes_per_ms, profile.max_connections)

    initial_latency = profile.latency_ms * 3
    batches = math.ceil(count / profile.max_connections)
    additional_latency = profile.latency_ms * max(0, batches - 1)
    latency = initial_latency + additional_latency

    network_time = latency + download
    render = parse_render_time(resources)

    return LoadTimeEstimate(
        profile=profile.name,
        download_time=round_half_up(download),
        latency_time=round_half_up(latency),
        parse_render_time=round_half_up(render),
        total_time=round_half_up(network_time),
        total_with_render=round_half_up(network_time + render),
        total_size=sum(r.size for r in resources),
        resource_count=count,
        average_speed=profile.download_mbps,
        max_connections=profile.max_connections,
    )


def estimate_load_times(
    resources: Sequence[ResourceRecord],
    profiles: Sequence[NetworkProfile] = NETWORK_PROFILES,
) -> Optional[Dict[str, LoadTimeEstimate]]:
    """Estimate for every profile, keyed by profile key; None for an empty resource list."""
    if not resources:
        return None
    return {profile.key: calculate_load_time(resources, profile) for profile in profiles}


def format_time(ms: float) -> str:
    if ms < 1000:
        return f"{round_half_up(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    minutes = int(ms // 60000)
    seconds = round_half_up((ms % 60000) / 1000)
    return f"{minutes}m {seconds}s"


def speed_category(ms: float) -> str:
    if ms < 1000:
        return "Excellent"
    if ms < 2500:
        return "Good"
    if ms < 5000:
        return "Fair"
    if ms < 10000:
        return "Slow"
    return "Very Slow"

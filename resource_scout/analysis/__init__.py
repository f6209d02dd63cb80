"""resource_scout.analysis: pure functions turning a resource list into metrics."""
from resource_scout.analysis.duplicates import analyze_duplicates
from resource_scout.analysis.load_time import NETWORK_PROFILES, estimate_load_times
from resource_scout.analysis.scorer import calculate_performance_score
from resource_scout.analysis.suggestions import suggest_optimizations, summarize_suggestions

__all__ = [
    "analyze_duplicates",
    "calculate_performance_score",
    "estimate_load_times",
    "suggest_optimizations",
    "summarize_suggestions",
    "NETWORK_PROFILES",
]

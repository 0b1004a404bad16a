from scoring.buckets import analyze_buckets, create_and_analyze_buckets, create_buckets, summarize_buckets
from scoring.engine import AttributionEngine
from scoring.review import ReviewQualityScorer, assess_quality

__all__ = [
    "AttributionEngine",
    "analyze_buckets", "create_and_analyze_buckets", "create_buckets", "summarize_buckets",
    "ReviewQualityScorer", "assess_quality",
]

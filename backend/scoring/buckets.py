"""
Time-bucketed attribution timeline.

Events are cut into fixed-width, half-open windows [start, start + interval)
beginning at the earliest timestamp. Windows continue until the one that
contains the latest timestamp, so every event lands in exactly one bucket,
including an event sitting exactly on a window boundary (it opens the next
window). A single event, or a burst sharing one timestamp, yields a single
bucket.

Each non-empty bucket is re-analysed on its own events only; nothing
carries over between buckets. Buckets below ``min_events_per_bucket`` are
kept, marked empty, for gap display, and never reach the engine.
"""

import logging
from typing import Optional, Sequence

from models.bucket import BucketSummary, TimeBucket
from models.config import (
    AGGREGATION_METHODS,
    AIDetectionConfig,
    AggregationMethod,
    BucketConfig,
    DEFAULT_BUCKET_CONFIG,
)
from models.event import EditEvent
from scoring.engine import AttributionEngine, analyze_events

logger = logging.getLogger(__name__)


def bucket_interval_ms(config: BucketConfig) -> int:
    interval_ms = int(config.interval_minutes * 60_000)
    if interval_ms <= 0:
        raise ValueError(f"Bucket interval must be positive, got {config.interval_minutes} minutes")
    return interval_ms


# ---------- Bucketing ----------

def create_buckets(events: Sequence[EditEvent], config: BucketConfig = DEFAULT_BUCKET_CONFIG) -> list[TimeBucket]:
    if not events:
        return []

    interval_ms = bucket_interval_ms(config)
    start_time = min(e.timestamp for e in events)
    end_time = max(e.timestamp for e in events)
    bucket_count = (end_time - start_time) // interval_ms + 1

    grouped: list[list[EditEvent]] = [[] for _ in range(bucket_count)]
    for event in events:
        grouped[(event.timestamp - start_time) // interval_ms].append(event)

    buckets = []
    for index, bucket_events in enumerate(grouped):
        window_start = start_time + index * interval_ms
        buckets.append(TimeBucket(
            start_time=window_start,
            end_time=window_start + interval_ms,
            events=bucket_events,
            event_count=len(bucket_events),
            is_empty=len(bucket_events) < config.min_events_per_bucket,
        ))
    return buckets


# ---------- Per-bucket analysis ----------

def _analyze_with(bucket: TimeBucket, config: AIDetectionConfig) -> TimeBucket:
    if bucket.is_empty:
        return bucket

    attribution = analyze_events(bucket.events, config)
    return bucket.model_copy(update={
        "ai_probability": attribution.ai_probability,
        "heuristic_scores": attribution.heuristic_scores,
        "attribution": attribution,
    })


def analyze_bucket(bucket: TimeBucket, engine: AttributionEngine) -> TimeBucket:
    """Annotate one bucket. Empty buckets come back unchanged."""
    return _analyze_with(bucket, engine.get_config())


def analyze_buckets(buckets: Sequence[TimeBucket], engine: AttributionEngine) -> list[TimeBucket]:
    # One snapshot for the whole timeline so every bucket is scored the same way
    config = engine.get_config()
    analysed = [_analyze_with(bucket, config) for bucket in buckets]
    logger.debug(
        "Analyzed %d buckets (%d active)",
        len(analysed), sum(1 for b in analysed if not b.is_empty),
    )
    return analysed


def create_and_analyze_buckets(
    events: Sequence[EditEvent],
    engine: AttributionEngine,
    bucket_config: Optional[BucketConfig] = None,
) -> list[TimeBucket]:
    """Bucket and analyse in one step. Defaults to the engine's own bucket config."""
    bucket_config = bucket_config or engine.get_config().bucket_config
    return analyze_buckets(create_buckets(events, bucket_config), engine)


# ---------- Rollups ----------

def _scored(buckets: Sequence[TimeBucket]) -> list[TimeBucket]:
    return [b for b in buckets if not b.is_empty and b.ai_probability is not None]


def aggregate_ai_probability(buckets: Sequence[TimeBucket], method: AggregationMethod = "average") -> float:
    """
    Roll active bucket probabilities into one number.

      average   plain mean over active buckets
      max       the single most AI-like bucket
      weighted  mean weighted by each bucket's event count
    """
    if method not in AGGREGATION_METHODS:
        raise ValueError(f"Unknown aggregation method {method!r}")

    scored = _scored(buckets)
    if not scored:
        return 0.0

    if method == "max":
        return max(b.ai_probability for b in scored)
    if method == "weighted":
        total_events = sum(b.event_count for b in scored)
        if total_events == 0:
            return 0.0
        return sum(b.ai_probability * b.event_count for b in scored) / total_events
    return sum(b.ai_probability for b in scored) / len(scored)


def summarize_buckets(buckets: Sequence[TimeBucket], aggregation_method: AggregationMethod = "average") -> BucketSummary:
    active = [b for b in buckets if not b.is_empty]
    probabilities = [b.ai_probability for b in _scored(buckets)]

    return BucketSummary(
        total_buckets=len(buckets),
        active_buckets=len(active),
        empty_buckets=len(buckets) - len(active),
        average_ai_probability=sum(probabilities) / len(probabilities) if probabilities else 0.0,
        max_ai_probability=max(probabilities) if probabilities else 0.0,
        aggregate_ai_probability=aggregate_ai_probability(buckets, aggregation_method),
        aggregation_method=aggregation_method,
        time_span_ms=buckets[-1].end_time - buckets[0].start_time if buckets else 0,
    )


# ---------- Filters ----------

def filter_buckets_by_time_range(buckets: Sequence[TimeBucket], start_time: int, end_time: int) -> list[TimeBucket]:
    """Buckets lying entirely inside [start_time, end_time]."""
    return [b for b in buckets if b.start_time >= start_time and b.end_time <= end_time]


def filter_buckets_by_ai_probability(buckets: Sequence[TimeBucket], threshold: float) -> list[TimeBucket]:
    return [b for b in buckets if b.ai_probability is not None and b.ai_probability >= threshold]

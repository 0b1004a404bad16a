from typing import Optional

from models.attribution import AIAttribution, HeuristicScores
from models.base import CamelModel
from models.config import AggregationMethod
from models.event import EditEvent


class TimeBucket(CamelModel):
    start_time: int                 # inclusive, ms
    end_time: int                   # exclusive, ms
    events: list[EditEvent] = []
    event_count: int = 0
    is_empty: bool = True
    ai_probability: Optional[float] = None      # None until analysed, and always for empty buckets
    heuristic_scores: Optional[HeuristicScores] = None
    attribution: Optional[AIAttribution] = None


class BucketSummary(CamelModel):
    total_buckets: int
    active_buckets: int
    empty_buckets: int
    average_ai_probability: float
    max_ai_probability: float
    aggregate_ai_probability: float
    aggregation_method: AggregationMethod
    time_span_ms: int

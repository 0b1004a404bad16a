"""
Detection configuration records.

A config is an immutable value: AttributionEngine.update_config builds a
new snapshot instead of mutating this one, so an analysis in flight always
sees a single consistent config.
"""

from typing import Literal

from models.base import FrozenCamelModel

AggregationMethod = Literal["average", "max", "weighted"]
AGGREGATION_METHODS = ("average", "max", "weighted")

HEURISTIC_NAMES = (
    "bulk_insertion_score",
    "typing_speed_score",
    "paste_pattern_score",
    "external_tool_score",
    "content_pattern_score",
    "timing_anomaly_score",
)


class DetectionWeights(FrozenCamelModel):
    """One weight per heuristic; nominally sums to 1.0 but drift is tolerated."""

    bulk_insertion_score: float = 0.25
    typing_speed_score: float = 0.20
    paste_pattern_score: float = 0.15
    external_tool_score: float = 0.25
    content_pattern_score: float = 0.10
    timing_anomaly_score: float = 0.05

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in HEURISTIC_NAMES}

    @property
    def total(self) -> float:
        return sum(self.as_dict().values())


class DetectionThresholds(FrozenCamelModel):
    bulk_insertion_size: float = 100        # chars
    fast_typing_speed: float = 300          # chars/minute
    paste_time_threshold: float = 100       # ms
    long_pause_threshold: float = 30_000    # ms
    rapid_sequence_threshold: float = 100   # ms


class ClassificationThresholds(FrozenCamelModel):
    human_threshold: float = 0.3
    ai_assisted_threshold: float = 0.6
    ai_generated_threshold: float = 0.8


class BucketConfig(FrozenCamelModel):
    interval_minutes: float = 15
    aggregation_method: AggregationMethod = "average"
    min_events_per_bucket: int = 1


class AIDetectionConfig(FrozenCamelModel):
    weights: DetectionWeights = DetectionWeights()
    thresholds: DetectionThresholds = DetectionThresholds()
    classification: ClassificationThresholds = ClassificationThresholds()
    bucket_config: BucketConfig = BucketConfig()


DEFAULT_AI_DETECTION_CONFIG = AIDetectionConfig()
DEFAULT_BUCKET_CONFIG = BucketConfig()

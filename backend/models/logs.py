"""
Metric-log records written alongside the event log, one JSON object per line.

The ``_loggedAt`` / ``_version`` stamps are applied by ingest.records, never
by the engines.
"""

from typing import Optional

from pydantic import Field

from models.attribution import (
    AIEvidence,
    AttributionSource,
    DecisionTraceStep,
    HeuristicScores,
    WeightedScores,
)
from models.base import CamelModel
from models.review import (
    EditPatterns,
    QualityLevel,
    ReviewEvidence,
    ReviewIndicators,
    ReviewScoreBreakdown,
    TimeMetrics,
)

LOG_VERSION = "1.0"


class AIDetectionMetricsLog(CamelModel):
    timestamp: int
    session_id: str
    file_uri: str
    analysis_id: str

    total_changes: int
    time_span_ms: int
    content_length_total: int

    heuristic_scores: HeuristicScores
    weighted_scores: Optional[WeightedScores] = None

    final_confidence: float
    ai_probability: float
    classification: AttributionSource

    evidence: AIEvidence
    decision_trace: list[DecisionTraceStep]

    logged_at: int = Field(alias="_loggedAt")
    version: str = Field(default=LOG_VERSION, alias="_version")


class ReviewQualityMetricsLog(CamelModel):
    timestamp: int
    session_id: str
    file_uri: str
    analysis_id: str

    time_metrics: TimeMetrics
    edit_patterns: EditPatterns
    review_indicators: ReviewIndicators
    score_breakdown: ReviewScoreBreakdown

    quality_level: QualityLevel
    confidence: float
    evidence: ReviewEvidence

    logged_at: int = Field(alias="_loggedAt")
    version: str = Field(default=LOG_VERSION, alias="_version")

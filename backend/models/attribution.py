"""
Attribution output records.

The decision trace is a tagged union keyed on ``step`` so consumers can
match on the step name and get a typed ``input`` / ``output`` back.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from models.base import CamelModel
from models.config import ClassificationThresholds, DetectionWeights
from models.event import EditEvent

AttributionSource = Literal["human", "ai-assisted", "ai-generated", "mixed"]


class HeuristicScores(CamelModel):
    """Raw per-heuristic scores, each 0.0 - 1.0."""

    bulk_insertion_score: float = 0.0
    typing_speed_score: float = 0.0
    paste_pattern_score: float = 0.0
    external_tool_score: float = 0.0
    content_pattern_score: float = 0.0
    timing_anomaly_score: float = 0.0


class WeightedScore(CamelModel):
    raw_score: float
    weight: float
    weighted_score: float


class WeightedScores(CamelModel):
    bulk_insertion_score: WeightedScore
    typing_speed_score: WeightedScore
    paste_pattern_score: WeightedScore
    external_tool_score: WeightedScore
    content_pattern_score: WeightedScore
    timing_anomaly_score: WeightedScore


# ---------- Decision trace ----------

class BulkInsertionInput(CamelModel):
    total_changes: int
    bulk_changes: int
    threshold: float


class TypingSpeedInput(CamelModel):
    speed_count: int
    average_speed: float = 0.0
    high_speed_count: int = 0
    threshold: float


class PastePatternInput(CamelModel):
    paste_indicators: int
    total_changes: int
    time_threshold: float


class ExternalToolInput(CamelModel):
    external_signatures: int
    average_confidence: float = 0.0
    total_changes: int


class ContentPatternInput(CamelModel):
    code_blocks: int
    structured_code: int
    comments: int
    total_changes: int


class TimingAnomalyInput(CamelModel):
    change_count: int
    long_pauses: int = 0
    rapid_sequences: int = 0
    long_threshold: float
    rapid_threshold: float


class CombinationInput(CamelModel):
    heuristic_scores: HeuristicScores
    weights: DetectionWeights


class CombinationOutput(CamelModel):
    weighted_scores: WeightedScores
    total_weighted_score: float


class FinalDecisionInput(CamelModel):
    total_score: float
    has_human_indicators: bool
    has_ai_indicators: bool
    thresholds: ClassificationThresholds


class FinalDecisionOutput(CamelModel):
    source: AttributionSource
    confidence: float
    ai_probability: float


class BulkInsertionStep(CamelModel):
    step: Literal["bulk-insertion-analysis"] = "bulk-insertion-analysis"
    input: BulkInsertionInput
    output: float
    reasoning: str


class TypingSpeedStep(CamelModel):
    step: Literal["typing-speed-analysis"] = "typing-speed-analysis"
    input: TypingSpeedInput
    output: float
    reasoning: str


class PastePatternStep(CamelModel):
    step: Literal["paste-pattern-analysis"] = "paste-pattern-analysis"
    input: PastePatternInput
    output: float
    reasoning: str


class ExternalToolStep(CamelModel):
    step: Literal["external-tool-analysis"] = "external-tool-analysis"
    input: ExternalToolInput
    output: float
    reasoning: str


class ContentPatternStep(CamelModel):
    step: Literal["content-pattern-analysis"] = "content-pattern-analysis"
    input: ContentPatternInput
    output: float
    reasoning: str


class TimingAnomalyStep(CamelModel):
    step: Literal["timing-anomaly-analysis"] = "timing-anomaly-analysis"
    input: TimingAnomalyInput
    output: float
    reasoning: str


class CombinationStep(CamelModel):
    step: Literal["score-combination"] = "score-combination"
    input: CombinationInput
    output: CombinationOutput
    reasoning: str


class FinalDecisionStep(CamelModel):
    step: Literal["final-decision"] = "final-decision"
    input: FinalDecisionInput
    output: FinalDecisionOutput
    reasoning: str


DecisionTraceStep = Annotated[
    Union[
        BulkInsertionStep,
        TypingSpeedStep,
        PastePatternStep,
        ExternalToolStep,
        ContentPatternStep,
        TimingAnomalyStep,
        CombinationStep,
        FinalDecisionStep,
    ],
    Field(discriminator="step"),
]


# ---------- Evidence & timeline ----------

class BulkChange(CamelModel):
    size: int
    timespan: float
    content: str        # truncated preview or "[N chars]"


class TypingBurst(CamelModel):
    speed: float
    duration: float
    content: str


class AIEvidence(CamelModel):
    external_tool_signature: bool = False
    bulk_change_pattern: bool = False
    timing_anomalies: bool = False
    content_characteristics: list[str] = []
    bulk_changes: list[BulkChange] = []
    typing_bursts: list[TypingBurst] = []
    external_indicators: list[str] = []
    suspicious_patterns: list[str] = []


class ExternalChangeEvent(CamelModel):
    timestamp: int
    file_uri: str
    change_type: Literal["bulk-insert", "bulk-replace", "structured-edit"]
    content_length: int
    detected_tool: str
    confidence: float


class TimeGap(CamelModel):
    start_time: int
    end_time: int
    duration: int
    likely_activity: str    # "thinking-pause" | "extended-break"


class AITimeline(CamelModel):
    vs_code_events: list[EditEvent] = []
    external_events: list[ExternalChangeEvent] = []
    gaps: list[TimeGap] = []


class AIAttribution(CamelModel):
    source: AttributionSource
    confidence: float           # 0.0 - 1.0
    ai_probability: float       # 0.0 - 1.0
    total_score: float = 0.0    # weighted sum before clamping; may exceed 1.0
    heuristic_scores: HeuristicScores = Field(default_factory=HeuristicScores)
    weighted_scores: Optional[WeightedScores] = None
    evidence: AIEvidence = Field(default_factory=AIEvidence)
    timeline: AITimeline = Field(default_factory=AITimeline)
    decision_trace: list[DecisionTraceStep] = []

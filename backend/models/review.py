from typing import Literal

from pydantic import Field

from models.base import CamelModel

QualityLevel = Literal["immediate-commit", "light-review", "thorough-review", "extensive-review"]


class CommitInfo(CamelModel):
    commit_time: int    # Unix timestamp in milliseconds


class EditSession(CamelModel):
    start: int
    end: int
    duration: int
    change_count: int


class TimeMetrics(CamelModel):
    total_development_time: int = 0
    time_before_first_commit: int = 0
    number_of_edit_sessions: int = 0
    average_session_length: float = 0.0
    longest_pause_between_edits: int = 0
    editing_velocity_over_time: list[int] = []


class EditPatterns(CamelModel):
    incremental_edits: int = 0
    bulk_replacements: int = 0
    refinement_edits: int = 0
    comment_additions: int = 0
    variable_renames: int = 0
    structural_changes: int = 0


class ReviewIndicators(CamelModel):
    multiple_edit_sessions: bool = False
    pauses_for_reflection: bool = False
    incremental_refinement: bool = False
    commentary_added: bool = False
    code_restructuring: bool = False
    testing_evidence: bool = False


class ReviewScoreBreakdown(CamelModel):
    time_investment: int = 0        # raw ms spent
    iteration_count: int = 0        # number of edit sessions
    external_tool_usage: int = 0    # events carrying a detected external signature
    human_refinement: int = 0       # refinement edits
    time_investment_score: float = 0    # 0-3
    iteration_score: float = 0          # 0-3
    refinement_score: float = 0         # 0-2
    thoughtfulness_score: float = 0     # 0-2
    final_score: float = 0              # 0-10


class ReviewPatterns(CamelModel):
    immediate_commit: bool = True
    multi_session_review: bool = False
    cross_tool_collaboration: bool = False
    incremental_refinement: bool = False
    multiple_edit_sessions: bool = False
    pauses_for_reflection: bool = False
    commentary_added: bool = False
    code_restructuring: bool = False
    testing_evidence: bool = False


class EditTimelineEntry(CamelModel):
    timestamp: int
    edit_type: str      # "<changeType>-<languageConstruct>"
    significance: int   # 1 (small) .. 3 (large)


class PauseAnalysis(CamelModel):
    duration: int
    context: str
    likely_activity: str


class ReviewEvidence(CamelModel):
    edit_timeline: list[EditTimelineEntry] = []
    pause_analysis: list[PauseAnalysis] = []
    refinement_examples: list[str] = []


class ReviewQualityAssessment(CamelModel):
    overall_score: float                # 0-10
    breakdown: ReviewScoreBreakdown = Field(default_factory=ReviewScoreBreakdown)
    patterns: ReviewPatterns = Field(default_factory=ReviewPatterns)
    evidence: ReviewEvidence = Field(default_factory=ReviewEvidence)
    quality_level: QualityLevel
    confidence: float                   # 0.0 - 1.0
    time_metrics: TimeMetrics = Field(default_factory=TimeMetrics)
    edit_patterns: EditPatterns = Field(default_factory=EditPatterns)
    review_indicators: ReviewIndicators = Field(default_factory=ReviewIndicators)

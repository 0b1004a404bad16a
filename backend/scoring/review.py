"""
Review quality scorer: how much deliberate human review followed a set of edits.

Structurally parallel to the attribution engine, but it scores diligence
rather than AI origin. Final score is 0-10, the sum of four parts:

  time investment  (0-3)  +1 span > 30 min, +1 span > 2 h, +1 last edit > 10 min before commit
  iteration        (0-3)  +1 multiple edit sessions, +1 > 2 refinement edits, +1 incremental refinement
  refinement       (0-2)  +0.5 each: comments, renames, restructuring, testing evidence
  thoughtfulness   (0-2)  +1 any pause > 60 s, +1 longest pause > 5 min

Levels: <= 2 immediate-commit, <= 5 light-review, <= 8 thorough-review, else extensive-review.

Confidence starts at 0.7, +0.1 past 10 events, +0.1 past 50 events, +0.1 when
the score sits at an extreme (<= 2 or >= 8), capped at 1.0.
"""

import re
from typing import Optional, Sequence

from models.event import EditEvent
from models.review import (
    CommitInfo,
    EditPatterns,
    EditSession,
    EditTimelineEntry,
    PauseAnalysis,
    QualityLevel,
    ReviewEvidence,
    ReviewIndicators,
    ReviewPatterns,
    ReviewQualityAssessment,
    ReviewScoreBreakdown,
    TimeMetrics,
)

MINUTE_MS = 60_000

SESSION_GAP_MS = 30 * MINUTE_MS
VELOCITY_WINDOW_MS = 5 * MINUTE_MS
REFLECTION_PAUSE_MS = MINUTE_MS
REFINEMENT_GAP_MS = 10_000
INCREMENTAL_GAP_MS = 5_000
IMMEDIATE_COMMIT_MS = 5 * MINUTE_MS

SMALL_EDIT_CHARS = 50
REFINEMENT_MAX_CHARS = 100
BULK_REPLACE_CHARS = 100

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
TESTING_TERMS = ("test", "spec", "assert")


# ---------- Time metrics ----------

def identify_edit_sessions(events: Sequence[EditEvent], gap_threshold: int = SESSION_GAP_MS) -> list[EditSession]:
    """Split the stream wherever consecutive timestamps are more than ``gap_threshold`` apart."""
    if not events:
        return []

    sessions = []
    start = end = events[0].timestamp
    count = 1

    for prev, cur in zip(events, events[1:]):
        if cur.timestamp - prev.timestamp > gap_threshold:
            sessions.append(EditSession(start=start, end=end, duration=end - start, change_count=count))
            start = end = cur.timestamp
            count = 1
        else:
            end = cur.timestamp
            count += 1

    sessions.append(EditSession(start=start, end=end, duration=end - start, change_count=count))
    return sessions


def editing_velocity(events: Sequence[EditEvent], window_ms: int = VELOCITY_WINDOW_MS) -> list[int]:
    """Edit counts per 5-minute window, windows laid out the same way as attribution buckets."""
    if not events:
        return []

    start = min(e.timestamp for e in events)
    end = max(e.timestamp for e in events)

    counts = [0] * ((end - start) // window_ms + 1)
    for event in events:
        index = (event.timestamp - start) // window_ms
        counts[index] += 1
    return counts


def calculate_time_metrics(events: Sequence[EditEvent], commit_info: Optional[CommitInfo] = None) -> TimeMetrics:
    if not events:
        return TimeMetrics()

    first = events[0].timestamp
    last = events[-1].timestamp
    sessions = identify_edit_sessions(events)
    pauses = [cur.timestamp - prev.timestamp for prev, cur in zip(events, events[1:])]

    return TimeMetrics(
        total_development_time=last - first,
        time_before_first_commit=commit_info.commit_time - last if commit_info else 0,
        number_of_edit_sessions=len(sessions),
        average_session_length=sum(s.duration for s in sessions) / len(sessions),
        longest_pause_between_edits=max(pauses) if pauses else 0,
        editing_velocity_over_time=editing_velocity(events),
    )


# ---------- Edit patterns & indicators ----------

def _looks_like_rename(event: EditEvent) -> bool:
    if event.change_type != "replace" or event.content_length >= SMALL_EDIT_CHARS:
        return False
    if event.content is None:
        return False
    return IDENTIFIER.fullmatch(event.content.strip()) is not None


def _is_refinement(event: EditEvent) -> bool:
    return event.time_since_last_change > REFINEMENT_GAP_MS and event.content_length < REFINEMENT_MAX_CHARS


def analyze_edit_patterns(events: Sequence[EditEvent]) -> EditPatterns:
    return EditPatterns(
        incremental_edits=sum(
            1 for e in events if e.content_length < SMALL_EDIT_CHARS and e.change_type != "delete"
        ),
        bulk_replacements=sum(
            1 for e in events if e.change_type == "replace" and e.content_length > BULK_REPLACE_CHARS
        ),
        refinement_edits=sum(1 for e in events if _is_refinement(e)),
        comment_additions=sum(1 for e in events if e.is_comment),
        variable_renames=sum(1 for e in events if _looks_like_rename(e)),
        structural_changes=sum(1 for e in events if e.has_known_construct and e.change_type == "replace"),
    )


def _mentions_testing(event: EditEvent) -> bool:
    if event.content is None:
        return False
    lower = event.content.lower()
    return any(term in lower for term in TESTING_TERMS)


def identify_review_indicators(events: Sequence[EditEvent], time_metrics: TimeMetrics) -> ReviewIndicators:
    # Each step smaller than the last, after a short think
    shrinking_steps = sum(
        1 for prev, cur in zip(events, events[1:])
        if cur.time_since_last_change >= INCREMENTAL_GAP_MS and cur.content_length < prev.content_length
    )

    return ReviewIndicators(
        multiple_edit_sessions=time_metrics.number_of_edit_sessions > 1,
        pauses_for_reflection=any(e.time_since_last_change > REFLECTION_PAUSE_MS for e in events),
        incremental_refinement=shrinking_steps > 2,
        commentary_added=any(e.is_comment for e in events),
        code_restructuring=any(
            e.change_type == "replace" and e.content_length > SMALL_EDIT_CHARS and e.has_known_construct
            for e in events
        ),
        testing_evidence=any(_mentions_testing(e) for e in events),
    )


# ---------- Scoring ----------

def calculate_score_breakdown(
    events: Sequence[EditEvent],
    time_metrics: TimeMetrics,
    patterns: EditPatterns,
    indicators: ReviewIndicators,
) -> ReviewScoreBreakdown:
    time_score = 0
    if time_metrics.total_development_time > 30 * MINUTE_MS:
        time_score += 1
    if time_metrics.total_development_time > 120 * MINUTE_MS:
        time_score += 1
    if time_metrics.time_before_first_commit > 10 * MINUTE_MS:
        time_score += 1

    iteration_score = 0
    if indicators.multiple_edit_sessions:
        iteration_score += 1
    if patterns.refinement_edits > 2:
        iteration_score += 1
    if indicators.incremental_refinement:
        iteration_score += 1

    refinement_score = 0.0
    if patterns.comment_additions > 0:
        refinement_score += 0.5
    if patterns.variable_renames > 0:
        refinement_score += 0.5
    if indicators.code_restructuring:
        refinement_score += 0.5
    if indicators.testing_evidence:
        refinement_score += 0.5

    thoughtfulness_score = 0
    if indicators.pauses_for_reflection:
        thoughtfulness_score += 1
    if time_metrics.longest_pause_between_edits > 5 * MINUTE_MS:
        thoughtfulness_score += 1

    return ReviewScoreBreakdown(
        time_investment=time_metrics.total_development_time,
        iteration_count=time_metrics.number_of_edit_sessions,
        external_tool_usage=sum(1 for e in events if e.has_external_signature),
        human_refinement=patterns.refinement_edits,
        time_investment_score=time_score,
        iteration_score=iteration_score,
        refinement_score=refinement_score,
        thoughtfulness_score=thoughtfulness_score,
        final_score=time_score + iteration_score + refinement_score + thoughtfulness_score,
    )


def determine_quality_level(score: float) -> QualityLevel:
    if score <= 2:
        return "immediate-commit"
    if score <= 5:
        return "light-review"
    if score <= 8:
        return "thorough-review"
    return "extensive-review"


def calculate_confidence(event_count: int, score: float) -> float:
    confidence = 0.7
    if event_count > 10:
        confidence += 0.1
    if event_count > 50:
        confidence += 0.1
    if score <= 2 or score >= 8:
        confidence += 0.1
    return min(round(confidence, 2), 1.0)


# ---------- Evidence ----------

def _significance(content_length: int) -> int:
    if content_length > 100:
        return 3
    if content_length > 20:
        return 2
    return 1


def _pause_activity(duration: int) -> str:
    if duration > 300_000:
        return "extended-break"
    if duration > 60_000:
        return "thinking-reviewing"
    return "brief-pause"


def extract_review_evidence(events: Sequence[EditEvent]) -> ReviewEvidence:
    edit_timeline = [
        EditTimelineEntry(
            timestamp=e.timestamp,
            edit_type=f"{e.change_type}-{e.language_construct}",
            significance=_significance(e.content_length),
        )
        for e in events
    ]

    pause_analysis = []
    for prev, cur in zip(events, events[1:]):
        duration = cur.timestamp - prev.timestamp
        if duration > 30_000:
            pause_analysis.append(PauseAnalysis(
                duration=duration,
                context=prev.language_construct,
                likely_activity=_pause_activity(duration),
            ))

    refinement_examples = [
        e.content[:50] for e in events if _is_refinement(e) and e.content
    ][:5]

    return ReviewEvidence(
        edit_timeline=edit_timeline,
        pause_analysis=pause_analysis,
        refinement_examples=refinement_examples,
    )


# ---------- Public entry point ----------

def empty_assessment() -> ReviewQualityAssessment:
    """No activity at all: certain that nothing was reviewed."""
    return ReviewQualityAssessment(overall_score=0, quality_level="immediate-commit", confidence=1.0)


def assess_quality(events: Sequence[EditEvent], commit_info: Optional[CommitInfo] = None) -> ReviewQualityAssessment:
    if not events:
        return empty_assessment()

    time_metrics = calculate_time_metrics(events, commit_info)
    edit_patterns = analyze_edit_patterns(events)
    indicators = identify_review_indicators(events, time_metrics)
    breakdown = calculate_score_breakdown(events, time_metrics, edit_patterns, indicators)

    patterns = ReviewPatterns(
        immediate_commit=time_metrics.time_before_first_commit < IMMEDIATE_COMMIT_MS,
        multi_session_review=indicators.multiple_edit_sessions,
        cross_tool_collaboration=breakdown.external_tool_usage > 0 and edit_patterns.incremental_edits > 0,
        incremental_refinement=indicators.incremental_refinement,
        multiple_edit_sessions=indicators.multiple_edit_sessions,
        pauses_for_reflection=indicators.pauses_for_reflection,
        commentary_added=indicators.commentary_added,
        code_restructuring=indicators.code_restructuring,
        testing_evidence=indicators.testing_evidence,
    )

    return ReviewQualityAssessment(
        overall_score=breakdown.final_score,
        breakdown=breakdown,
        patterns=patterns,
        evidence=extract_review_evidence(events),
        quality_level=determine_quality_level(breakdown.final_score),
        confidence=calculate_confidence(len(events), breakdown.final_score),
        time_metrics=time_metrics,
        edit_patterns=edit_patterns,
        review_indicators=indicators,
    )


class ReviewQualityScorer:
    """Scores review quality for a stream of edits, optionally against a commit time."""

    def assess_quality(self, events: Sequence[EditEvent], commit_info: Optional[CommitInfo] = None) -> ReviewQualityAssessment:
        return assess_quality(events, commit_info)

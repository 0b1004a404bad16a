"""
The six attribution heuristics.

Each scorer takes the event list and the threshold section of the config
snapshot, and returns ``(score, trace_step)``. Scores are clamped to
0.0 - 1.0. Missing signal scores 0 rather than raising.
"""

from typing import Sequence

from models.attribution import (
    BulkInsertionInput,
    BulkInsertionStep,
    ContentPatternInput,
    ContentPatternStep,
    ExternalToolInput,
    ExternalToolStep,
    PastePatternInput,
    PastePatternStep,
    TimingAnomalyInput,
    TimingAnomalyStep,
    TypingSpeedInput,
    TypingSpeedStep,
)
from models.config import DetectionThresholds
from models.event import EditEvent
from scoring.signals import clamp

# An insert larger than this that lands right after the previous change looks pasted
PASTE_MIN_LENGTH = 50

# Content-pattern blend
CODE_BLOCK_WEIGHT = 0.4
STRUCTURED_WEIGHT = 0.4
COMMENT_WEIGHT = 0.2


def _num(value: float) -> str:
    """Render a threshold without a trailing .0 so trace strings read naturally."""
    return f"{value:g}"


# ---------- Predicates shared with evidence extraction ----------

def is_bulk_insertion(event: EditEvent, t: DetectionThresholds) -> bool:
    return event.change_type == "insert" and event.content_length > t.bulk_insertion_size


def is_paste_like(event: EditEvent, t: DetectionThresholds) -> bool:
    return (
        event.time_since_last_change < t.paste_time_threshold
        and event.content_length > PASTE_MIN_LENGTH
        and event.change_type == "insert"
    )


def is_long_pause(event: EditEvent, t: DetectionThresholds) -> bool:
    return event.time_since_last_change > t.long_pause_threshold


def is_rapid_sequence(event: EditEvent, t: DetectionThresholds) -> bool:
    return 0 < event.time_since_last_change < t.rapid_sequence_threshold


def is_timing_anomaly(event: EditEvent, t: DetectionThresholds) -> bool:
    return is_long_pause(event, t) or is_rapid_sequence(event, t)


# ---------- Scorers ----------

def score_bulk_insertion(events: Sequence[EditEvent], t: DetectionThresholds):
    """Share of inserts larger than ``bulk_insertion_size``."""
    bulk = sum(1 for e in events if is_bulk_insertion(e, t))
    score = clamp(bulk / len(events)) if events else 0.0

    step = BulkInsertionStep(
        input=BulkInsertionInput(
            total_changes=len(events),
            bulk_changes=bulk,
            threshold=t.bulk_insertion_size,
        ),
        output=score,
        reasoning=(
            f"Found {bulk} bulk insertions (>{_num(t.bulk_insertion_size)} chars) "
            f"out of {len(events)} total changes"
        ),
    )
    return score, step


def score_typing_speed(events: Sequence[EditEvent], t: DetectionThresholds):
    """
    Average of two views of the same signal:
      speed      mean speed relative to 1.5x the fast-typing threshold
      frequency  share of samples above the fast-typing threshold
    A lone spike moves the frequency term only a little; sustained
    superhuman speed saturates both.
    """
    speeds = [e.instant_typing_speed for e in events if e.instant_typing_speed > 0]

    if not speeds:
        step = TypingSpeedStep(
            input=TypingSpeedInput(speed_count=0, threshold=t.fast_typing_speed),
            output=0.0,
            reasoning="No typing speed data available",
        )
        return 0.0, step

    average = sum(speeds) / len(speeds)
    high_speed = sum(1 for s in speeds if s > t.fast_typing_speed)

    ceiling = t.fast_typing_speed * 1.5
    speed_score = min(average / ceiling, 1.0) if ceiling > 0 else 1.0
    frequency_score = high_speed / len(speeds)
    score = clamp((speed_score + frequency_score) / 2)

    step = TypingSpeedStep(
        input=TypingSpeedInput(
            speed_count=len(speeds),
            average_speed=average,
            high_speed_count=high_speed,
            threshold=t.fast_typing_speed,
        ),
        output=score,
        reasoning=(
            f"Average speed: {average:.0f} CPM, {high_speed} high-speed events "
            f"(>{_num(t.fast_typing_speed)} CPM)"
        ),
    )
    return score, step


def score_paste_pattern(events: Sequence[EditEvent], t: DetectionThresholds):
    """Share of events that are large inserts arriving almost instantly."""
    pastes = sum(1 for e in events if is_paste_like(e, t))
    score = clamp(pastes / max(len(events), 1))

    step = PastePatternStep(
        input=PastePatternInput(
            paste_indicators=pastes,
            total_changes=len(events),
            time_threshold=t.paste_time_threshold,
        ),
        output=score,
        reasoning=(
            f"Found {pastes} paste-like patterns "
            f"(<{_num(t.paste_time_threshold)}ms, >{PASTE_MIN_LENGTH} chars)"
        ),
    )
    return score, step


def score_external_tool(events: Sequence[EditEvent], t: DetectionThresholds):
    """
    (detected / total) * mean confidence of the detected signatures.

    Multiplicative, so a single confident signature in a long session stays
    small unless it recurs.
    """
    detected = [e.external_tool_signature for e in events if e.has_external_signature]

    if not detected:
        step = ExternalToolStep(
            input=ExternalToolInput(external_signatures=0, total_changes=len(events)),
            output=0.0,
            reasoning="No external tool signatures detected",
        )
        return 0.0, step

    average_confidence = sum(clamp(sig.confidence) for sig in detected) / len(detected)
    score = clamp(len(detected) / len(events) * average_confidence)

    step = ExternalToolStep(
        input=ExternalToolInput(
            external_signatures=len(detected),
            average_confidence=average_confidence,
            total_changes=len(events),
        ),
        output=score,
        reasoning=(
            f"Found {len(detected)} external tool signatures "
            f"with avg confidence {average_confidence:.3f}"
        ),
    )
    return score, step


def score_content_pattern(events: Sequence[EditEvent], t: DetectionThresholds):
    """0.4 * code-block ratio + 0.4 * structured-construct ratio + 0.2 * comment ratio."""
    total = max(len(events), 1)
    code_blocks = sum(1 for e in events if e.is_code_block)
    structured = sum(1 for e in events if e.has_known_construct)
    comments = sum(1 for e in events if e.is_comment)

    code_ratio = code_blocks / total
    structured_ratio = structured / total
    comment_ratio = comments / total
    score = clamp(
        code_ratio * CODE_BLOCK_WEIGHT
        + structured_ratio * STRUCTURED_WEIGHT
        + comment_ratio * COMMENT_WEIGHT
    )

    step = ContentPatternStep(
        input=ContentPatternInput(
            code_blocks=code_blocks,
            structured_code=structured,
            comments=comments,
            total_changes=len(events),
        ),
        output=score,
        reasoning=(
            f"Code blocks: {code_ratio:.2f}, Structured: {structured_ratio:.2f}, "
            f"Comments: {comment_ratio:.2f}"
        ),
    )
    return score, step


def score_timing_anomaly(events: Sequence[EditEvent], t: DetectionThresholds):
    """Share of events that follow either a long pause or a rapid-fire gap."""
    if len(events) < 2:
        step = TimingAnomalyStep(
            input=TimingAnomalyInput(
                change_count=len(events),
                long_threshold=t.long_pause_threshold,
                rapid_threshold=t.rapid_sequence_threshold,
            ),
            output=0.0,
            reasoning="Insufficient changes for timing analysis",
        )
        return 0.0, step

    long_pauses = sum(1 for e in events if is_long_pause(e, t))
    rapid = sum(1 for e in events if is_rapid_sequence(e, t))
    score = clamp(sum(1 for e in events if is_timing_anomaly(e, t)) / len(events))

    step = TimingAnomalyStep(
        input=TimingAnomalyInput(
            change_count=len(events),
            long_pauses=long_pauses,
            rapid_sequences=rapid,
            long_threshold=t.long_pause_threshold,
            rapid_threshold=t.rapid_sequence_threshold,
        ),
        output=score,
        reasoning=(
            f"Found {long_pauses} long pauses (>{_num(t.long_pause_threshold)}ms) and "
            f"{rapid} rapid sequences (<{_num(t.rapid_sequence_threshold)}ms)"
        ),
    )
    return score, step


# Order matters: it fixes the order of the decision trace.
HEURISTICS = (
    ("bulk_insertion_score", score_bulk_insertion),
    ("typing_speed_score", score_typing_speed),
    ("paste_pattern_score", score_paste_pattern),
    ("external_tool_score", score_external_tool),
    ("content_pattern_score", score_content_pattern),
    ("timing_anomaly_score", score_timing_anomaly),
)

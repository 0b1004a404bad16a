"""
Builders for the metric-log records written next to the event log.

Identifiers and wall-clock stamps are added here so the engines stay pure.
``now_ms`` can be pinned by callers that need reproducible logs.
"""

import time
import uuid
from typing import Optional, Sequence

from models.attribution import AIAttribution
from models.event import EditEvent
from models.logs import AIDetectionMetricsLog, ReviewQualityMetricsLog
from models.review import ReviewQualityAssessment
from scoring.signals import calculate_time_span, calculate_total_content_length


def _now_ms() -> int:
    return int(time.time() * 1000)


def _origin(events: Sequence[EditEvent], session_id: Optional[str], file_uri: Optional[str]):
    first = events[0] if events else None
    return (
        session_id if session_id is not None else (first.session_id if first else ""),
        file_uri if file_uri is not None else (first.file_uri if first else ""),
    )


def build_detection_log(
    events: Sequence[EditEvent],
    attribution: AIAttribution,
    session_id: Optional[str] = None,
    file_uri: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> AIDetectionMetricsLog:
    """Wrap one attribution in a log record. Session and file default to the first event's."""
    now = now_ms if now_ms is not None else _now_ms()
    session_id, file_uri = _origin(events, session_id, file_uri)

    return AIDetectionMetricsLog(
        timestamp=now,
        session_id=session_id,
        file_uri=file_uri,
        analysis_id=str(uuid.uuid4()),
        total_changes=len(events),
        time_span_ms=calculate_time_span(events),
        content_length_total=calculate_total_content_length(events),
        heuristic_scores=attribution.heuristic_scores,
        weighted_scores=attribution.weighted_scores,
        final_confidence=attribution.confidence,
        ai_probability=attribution.ai_probability,
        classification=attribution.source,
        evidence=attribution.evidence,
        decision_trace=attribution.decision_trace,
        logged_at=now,
    )


def build_review_log(
    events: Sequence[EditEvent],
    assessment: ReviewQualityAssessment,
    session_id: Optional[str] = None,
    file_uri: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> ReviewQualityMetricsLog:
    now = now_ms if now_ms is not None else _now_ms()
    session_id, file_uri = _origin(events, session_id, file_uri)

    return ReviewQualityMetricsLog(
        timestamp=now,
        session_id=session_id,
        file_uri=file_uri,
        analysis_id=str(uuid.uuid4()),
        time_metrics=assessment.time_metrics,
        edit_patterns=assessment.edit_patterns,
        review_indicators=assessment.review_indicators,
        score_breakdown=assessment.breakdown,
        quality_level=assessment.quality_level,
        confidence=assessment.confidence,
        evidence=assessment.evidence,
        logged_at=now,
    )

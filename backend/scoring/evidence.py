"""
Evidence and timeline extraction.

Computed for every analysis regardless of the final classification, so a
"human" verdict still carries whatever suspicious fragments were seen.
Content previews are truncated, and fall back to a length placeholder when
the capture layer stripped the text.
"""

from typing import Optional, Sequence

from models.attribution import (
    AIEvidence,
    AITimeline,
    BulkChange,
    ExternalChangeEvent,
    TimeGap,
    TypingBurst,
)
from models.config import DetectionThresholds
from models.event import EditEvent
from scoring.heuristics import is_timing_anomaly
from scoring.signals import clamp

BULK_PREVIEW_CHARS = 100
BURST_PREVIEW_CHARS = 50

GAP_THRESHOLD_MS = 10_000
EXTENDED_BREAK_MS = 300_000
EXTERNAL_BULK_SIZE = 200


def preview(content: Optional[str], content_length: int, limit: int) -> str:
    if content is None:
        return f"[{content_length} chars]"
    if len(content) > limit:
        return content[:limit] + "..."
    return content


# ---------- Evidence ----------

def _content_characteristics(events: Sequence[EditEvent]) -> list[str]:
    tags = []
    if any(e.is_code_block for e in events):
        tags.append("contains-code-blocks")
    if any(e.is_comment for e in events):
        tags.append("contains-comments")
    if any(e.language_construct == "function" for e in events):
        tags.append("contains-functions")
    if any(e.language_construct == "class" for e in events):
        tags.append("contains-classes")
    return tags


def _suspicious_patterns(events: Sequence[EditEvent], t: DetectionThresholds) -> list[str]:
    patterns = []

    if any(
        e.content_length > t.bulk_insertion_size and e.time_since_last_change < t.paste_time_threshold
        for e in events
    ):
        patterns.append("rapid-large-insertion")

    # Multi-line, already-indented bulk text; needs content to judge
    if any(
        e.content_length > t.bulk_insertion_size
        and e.content is not None
        and "\n" in e.content
        and e.indentation_level > 0
        for e in events
    ):
        patterns.append("formatted-bulk-code")

    return patterns


def extract_evidence(events: Sequence[EditEvent], t: DetectionThresholds) -> AIEvidence:
    bulk_changes = [
        BulkChange(
            size=e.content_length,
            timespan=e.time_since_last_change,
            content=preview(e.content, e.content_length, BULK_PREVIEW_CHARS),
        )
        for e in events
        if e.content_length > t.bulk_insertion_size
    ]

    typing_bursts = [
        TypingBurst(
            speed=e.instant_typing_speed,
            duration=e.time_since_last_change,
            content=preview(e.content, e.content_length, BURST_PREVIEW_CHARS),
        )
        for e in events
        if e.burst_detected
    ]

    external_indicators = [
        indicator
        for e in events
        if e.has_external_signature
        for indicator in e.external_tool_signature.indicators
    ]

    return AIEvidence(
        external_tool_signature=any(e.has_external_signature for e in events),
        bulk_change_pattern=bool(bulk_changes),
        timing_anomalies=any(is_timing_anomaly(e, t) for e in events),
        content_characteristics=_content_characteristics(events),
        bulk_changes=bulk_changes,
        typing_bursts=typing_bursts,
        external_indicators=external_indicators,
        suspicious_patterns=_suspicious_patterns(events, t),
    )


# ---------- Timeline ----------

def _external_projection(event: EditEvent) -> ExternalChangeEvent:
    sig = event.external_tool_signature
    return ExternalChangeEvent(
        timestamp=event.timestamp,
        file_uri=event.file_uri,
        change_type="bulk-insert" if event.content_length > EXTERNAL_BULK_SIZE else "structured-edit",
        content_length=event.content_length,
        detected_tool=sig.tool_type,
        confidence=clamp(sig.confidence),
    )


def find_gaps(events: Sequence[EditEvent]) -> list[TimeGap]:
    """Pauses over 10s between consecutive events, labelled by length."""
    gaps = []
    for prev, cur in zip(events, events[1:]):
        duration = cur.timestamp - prev.timestamp
        if duration > GAP_THRESHOLD_MS:
            gaps.append(TimeGap(
                start_time=prev.timestamp,
                end_time=cur.timestamp,
                duration=duration,
                likely_activity="extended-break" if duration > EXTENDED_BREAK_MS else "thinking-pause",
            ))
    return gaps


def extract_timeline(events: Sequence[EditEvent]) -> AITimeline:
    """Split events into editor-origin and detected-external, plus the gaps between them all."""
    return AITimeline(
        vs_code_events=[e for e in events if not e.has_external_signature],
        external_events=[_external_projection(e) for e in events if e.has_external_signature],
        gaps=find_gaps(events),
    )

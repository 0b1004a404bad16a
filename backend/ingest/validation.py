"""
Shape checks and partitioning helpers that run before data reaches the engine.

Validators take raw camelCase dicts (as decoded from JSON) and return a
bool; they never raise. JSON booleans are not accepted where a number is
expected, even though Python treats ``True`` as an int.
"""

from typing import Any, Iterable, Sequence, Union

from models.config import AGGREGATION_METHODS, AIDetectionConfig
from models.event import CHANGE_TYPES, EVENT_SOURCES, TOOL_TYPES, EditEvent

EVENT_WHOLE_NUMBER_FIELDS = ("timestamp", "contentLength", "indentationLevel")
EVENT_NUMBER_FIELDS = (
    "timeSinceLastChange",
    "timeSinceSessionStart",
    "timeSinceFileOpen",
    "instantTypingSpeed",
    "rollingTypingSpeed",
    "pauseBeforeChange",
)
EVENT_STRING_FIELDS = ("sessionId", "fileUri", "eventId", "languageConstruct")
EVENT_BOOL_FIELDS = ("vsCodeActive", "burstDetected", "isCodeBlock", "isComment", "isWhitespace")

WEIGHT_FIELDS = (
    "bulkInsertionScore",
    "typingSpeedScore",
    "pastePatternScore",
    "externalToolScore",
    "contentPatternScore",
    "timingAnomalyScore",
)
THRESHOLD_FIELDS = (
    "bulkInsertionSize",
    "fastTypingSpeed",
    "pasteTimeThreshold",
    "longPauseThreshold",
    "rapidSequenceThreshold",
)
CLASSIFICATION_FIELDS = ("humanThreshold", "aiAssistedThreshold", "aiGeneratedThreshold")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_whole_number(value: Any) -> bool:
    return _is_number(value) and float(value).is_integer()


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and _is_whole_number(value.get("line"))
        and _is_whole_number(value.get("character"))
    )


def _is_tool_signature(value: Any) -> bool:
    if not isinstance(value, dict) or not isinstance(value.get("detected"), bool):
        return False
    if "toolType" in value and value["toolType"] not in TOOL_TYPES:
        return False
    if "confidence" in value and not (_is_number(value["confidence"]) and 0 <= value["confidence"] <= 1):
        return False
    if "indicators" in value and not isinstance(value["indicators"], list):
        return False
    return True


# ---------- Event validation ----------

def validate_edit_event(data: Any) -> bool:
    """True when ``data`` has every field the engine reads, with the right JSON types."""
    if not isinstance(data, dict):
        return False

    if not all(_is_whole_number(data.get(f)) for f in EVENT_WHOLE_NUMBER_FIELDS):
        return False
    if not all(_is_number(data.get(f)) for f in EVENT_NUMBER_FIELDS):
        return False
    if not all(isinstance(data.get(f), str) for f in EVENT_STRING_FIELDS):
        return False
    if not all(isinstance(data.get(f), bool) for f in EVENT_BOOL_FIELDS):
        return False

    if data.get("changeType") not in CHANGE_TYPES or data.get("source") not in EVENT_SOURCES:
        return False
    if not _is_position(data.get("position")) or not _is_position(data.get("cursorPosition")):
        return False

    content = data.get("content")
    if content is not None and not isinstance(content, str):
        return False

    signature = data.get("externalToolSignature")
    if signature is not None and not _is_tool_signature(signature):
        return False

    return True


# ---------- Config validation ----------

def _section(data: dict, name: str) -> Any:
    section = data.get(name)
    return section if isinstance(section, dict) else None


def _in_unit_range(section: dict, fields: Sequence[str]) -> bool:
    return all(_is_number(section.get(f)) and 0 <= section[f] <= 1 for f in fields)


def validate_config(config: Union[dict, AIDetectionConfig]) -> bool:
    """
    Range and ordering rules the engine itself does not enforce.

    Weights and classification thresholds must sit in [0, 1], detection
    thresholds must be non-negative, and the three classification cut-offs
    must be strictly increasing. A ``bucketConfig`` section is optional, but
    when present needs a positive interval, a non-negative minimum event
    count and a known aggregation method.
    """
    if isinstance(config, AIDetectionConfig):
        config = config.to_wire()
    if not isinstance(config, dict):
        return False

    weights = _section(config, "weights")
    if weights is None or not _in_unit_range(weights, WEIGHT_FIELDS):
        return False

    thresholds = _section(config, "thresholds")
    if thresholds is None:
        return False
    if not all(_is_number(thresholds.get(f)) and thresholds[f] >= 0 for f in THRESHOLD_FIELDS):
        return False

    classification = _section(config, "classification")
    if classification is None or not _in_unit_range(classification, CLASSIFICATION_FIELDS):
        return False
    human, assisted, generated = (classification[f] for f in CLASSIFICATION_FIELDS)
    if not human < assisted < generated:
        return False

    if "bucketConfig" in config:
        buckets = _section(config, "bucketConfig")
        if buckets is None:
            return False
        interval = buckets.get("intervalMinutes")
        min_events = buckets.get("minEventsPerBucket")
        if not _is_number(interval) or interval <= 0:
            return False
        if not _is_number(min_events) or min_events < 0:
            return False
        if buckets.get("aggregationMethod") not in AGGREGATION_METHODS:
            return False

    return True


# ---------- Sanitising & partitioning ----------

def sanitize_edit_event(event: EditEvent) -> EditEvent:
    """Copy with the raw content dropped; every derived field is kept."""
    return event.model_copy(update={"content": None})


def sanitize_edit_events(events: Iterable[EditEvent]) -> list[EditEvent]:
    return [sanitize_edit_event(e) for e in events]


def filter_events_by_time_range(events: Iterable[EditEvent], start_time: int, end_time: int) -> list[EditEvent]:
    """Both ends inclusive."""
    return [e for e in events if start_time <= e.timestamp <= end_time]


def filter_events_by_file(events: Iterable[EditEvent], file_uri: str) -> list[EditEvent]:
    return [e for e in events if e.file_uri == file_uri]


def group_events_by_session(events: Iterable[EditEvent]) -> dict[str, list[EditEvent]]:
    groups: dict[str, list[EditEvent]] = {}
    for event in events:
        groups.setdefault(event.session_id, []).append(event)
    return groups


def group_events_by_file(events: Iterable[EditEvent]) -> dict[str, list[EditEvent]]:
    groups: dict[str, list[EditEvent]] = {}
    for event in events:
        groups.setdefault(event.file_uri, []).append(event)
    return groups

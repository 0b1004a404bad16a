"""
Newline-delimited JSON ingestion.

A capture log interleaves two kinds of lines:

  * edit events: objects carrying ``timestamp``, ``changeType`` and
    ``contentLength`` (plus the rest of the event fields)
  * review-quality metric records: objects carrying ``evidence.editTimeline``

Metric records are expanded into synthetic events so sessions that only
kept aggregate metrics can still be analysed. Anything else, and any line
that fails to decode or validate, is skipped with a warning and counted.
"""

import json
import logging
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ValidationError

from ingest.validation import validate_edit_event
from models.event import EditEvent

logger = logging.getLogger(__name__)

# Synthetic events have no real length; significance 1-3 maps to 10-30 chars
SIGNIFICANCE_LENGTH_FACTOR = 10


class IngestError(ValueError):
    """The payload as a whole cannot be ingested."""


class PayloadTooLarge(IngestError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"Payload of {size} bytes exceeds the {limit} byte limit")
        self.size = size
        self.limit = limit


class ParseResult(BaseModel):
    events: list[EditEvent] = []
    skipped: int = 0


# ---------- Line classification ----------

def _is_event_line(obj: dict) -> bool:
    return bool(obj.get("timestamp")) and bool(obj.get("changeType")) and "contentLength" in obj


def _is_review_metric_line(obj: dict) -> bool:
    evidence = obj.get("evidence")
    return isinstance(evidence, dict) and isinstance(evidence.get("editTimeline"), list)


def _change_type_for(edit_type: str) -> str:
    if "insert" in edit_type:
        return "insert"
    if "delete" in edit_type:
        return "delete"
    return "replace"


def convert_review_metric_to_events(metric: dict) -> list[EditEvent]:
    """
    Rebuild an approximate event stream from a review metric's edit timeline.

    Only timestamps, edit types and significance survive in the metric, so
    every other field is a fixed stand-in. Typing speeds are left at 0,
    which the typing-speed heuristic treats as "no data".
    """
    timeline = metric["evidence"]["editTimeline"]
    metric_time = metric["timestamp"]
    events = []

    for index, entry in enumerate(timeline):
        timestamp = entry["timestamp"]
        edit_type = entry["editType"]
        significance = entry["significance"]
        delta = timestamp - timeline[index - 1]["timestamp"] if index > 0 else 0

        events.append(EditEvent(
            event_id=f"{metric['analysisId']}-{index}",
            session_id=metric["sessionId"],
            file_uri=metric["fileUri"],
            timestamp=timestamp,
            time_since_last_change=delta,
            time_since_session_start=timestamp - metric_time,
            time_since_file_open=timestamp - metric_time,
            change_type=_change_type_for(edit_type),
            position={"line": 0, "character": 0},
            content_length=significance * SIGNIFICANCE_LENGTH_FACTOR,
            source="live",
            vs_code_active=True,
            cursor_position={"line": 0, "character": 0},
            instant_typing_speed=0,
            rolling_typing_speed=0,
            burst_detected=significance > 2,
            pause_before_change=delta,
            is_code_block="unknown" in edit_type,
            is_comment=False,
            is_whitespace=False,
            language_construct="unknown",
            indentation_level=0,
        ))
    return events


# ---------- Parsing ----------

def _decode(payload: Union[str, bytes], max_bytes: Optional[int]) -> str:
    size = len(payload) if isinstance(payload, bytes) else len(payload.encode("utf-8"))
    if max_bytes is not None and size > max_bytes:
        raise PayloadTooLarge(size, max_bytes)

    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IngestError(f"Payload is not valid UTF-8: {e}") from e

    if not payload.strip():
        raise IngestError("Payload is empty")
    return payload


def _parse_line(line: str) -> list[EditEvent]:
    """Events contributed by one line. Raises ValueError (or KeyError/TypeError) when unusable."""
    obj = json.loads(line)
    if not isinstance(obj, dict):
        raise ValueError("not a JSON object")

    if _is_event_line(obj):
        if not validate_edit_event(obj):
            raise ValueError("event record is missing fields or has wrong types")
        return [EditEvent.model_validate(obj)]

    if _is_review_metric_line(obj):
        return convert_review_metric_to_events(obj)

    raise ValueError("not a change event or review metric")


def parse_jsonl(payload: Union[str, bytes], max_bytes: Optional[int] = None) -> ParseResult:
    """
    Parse a whole JSONL payload.

    Raises PayloadTooLarge when ``max_bytes`` is exceeded and IngestError
    for an empty or undecodable payload. Individual bad lines never raise.
    """
    text = _decode(payload, max_bytes)
    result = ParseResult()

    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            result.events.extend(_parse_line(line))
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            result.skipped += 1
            logger.warning("Skipping line %d: %s", number, e)

    if result.skipped:
        logger.warning("Parsed %d events, skipped %d lines", len(result.events), result.skipped)
    return result


def dump_jsonl(records: Iterable[Any]) -> str:
    """One JSON object per line, using camelCase wire names for models."""
    lines = []
    for record in records:
        if isinstance(record, BaseModel):
            lines.append(record.model_dump_json(by_alias=True))
        else:
            lines.append(json.dumps(record))
    return "".join(line + "\n" for line in lines)

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

import settings
import store
from ingest.jsonl import IngestError, PayloadTooLarge, dump_jsonl, parse_jsonl
from ingest.records import build_detection_log, build_review_log
from ingest.validation import sanitize_edit_events
from models.attribution import AIAttribution
from models.base import CamelModel
from models.event import EditEvent
from models.review import CommitInfo, ReviewQualityAssessment
from routes.analysis import BucketsResponse, EventsRequest, bucket_timeline, events_from_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


# ---------- Request / Response schemas ----------

class AppendEventsResponse(CamelModel):
    session_id: str
    received: int
    skipped: int = 0
    total: int


# ---------- Helpers ----------

def _append(session_id: str, events: list[EditEvent]) -> int:
    buffer = store.sessions.setdefault(session_id, [])
    buffer.extend(events)
    # Engines expect chronological order; uploads may interleave files
    buffer.sort(key=lambda e: e.timestamp)
    return len(buffer)


def _session_events(session_id: str) -> list[EditEvent]:
    events = store.sessions.get(session_id)
    if events is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return events


# ---------- Endpoints ----------

@router.post("/{session_id}/events", response_model=AppendEventsResponse)
async def append_events(session_id: str, body: EventsRequest):
    """
    Buffers raw edit events on the session, creating it on first use.
    Every event must validate; otherwise nothing is stored and the bad indexes are returned.
    """
    events = events_from_payload(body.events)
    total = _append(session_id, events)
    return AppendEventsResponse(session_id=session_id, received=len(events), total=total)


@router.post("/{session_id}/upload", response_model=AppendEventsResponse)
async def upload_events(session_id: str, request: Request):
    """
    Accepts a JSONL capture log as the raw request body.

    Event lines and review-metric lines are both understood; unusable lines
    are skipped and counted. 400 for an empty or undecodable body, 413 when
    the body exceeds MAX_UPLOAD_BYTES.
    """
    payload = await request.body()
    try:
        result = parse_jsonl(payload, max_bytes=settings.MAX_UPLOAD_BYTES)
    except PayloadTooLarge as e:
        raise HTTPException(status_code=413, detail=str(e))
    except IngestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    total = _append(session_id, result.events)
    logger.info("Session %s: uploaded %d events (%d lines skipped)", session_id, len(result.events), result.skipped)
    return AppendEventsResponse(
        session_id=session_id,
        received=len(result.events),
        skipped=result.skipped,
        total=total,
    )


@router.get("/{session_id}/attribution", response_model=AIAttribution)
async def session_attribution(session_id: str):
    events = _session_events(session_id)
    attribution = store.engine.analyze(events)
    logger.info("Session %s: %d events -> %s", session_id, len(events), attribution.source)
    return attribution


@router.get("/{session_id}/timeline", response_model=BucketsResponse)
async def session_timeline(session_id: str):
    """Bucketed attribution over the session, using the engine's bucketConfig."""
    events = _session_events(session_id)
    return bucket_timeline(events)


@router.get("/{session_id}/review-quality", response_model=ReviewQualityAssessment)
async def session_review_quality(session_id: str, commit_time: Optional[int] = None):
    """
    Review quality of the buffered session.
    Pass ?commit_time=<ms> to score the gap between the last edit and the commit.
    """
    events = _session_events(session_id)
    commit_info = CommitInfo(commit_time=commit_time) if commit_time is not None else None
    assessment = store.review_scorer.assess_quality(events, commit_info)
    logger.info("Session %s: review quality %s", session_id, assessment.quality_level)
    return assessment


@router.get("/{session_id}/export", response_class=PlainTextResponse)
async def export_session(session_id: str):
    """
    Content-free JSONL export: sanitised events, then one detection and one review metric log.
    The review log leaves out its edit timeline, so uploading the export restores the same events.
    """
    events = sanitize_edit_events(_session_events(session_id))
    # Logs come from the stripped events; previews fall back to "[N chars]"
    detection_log = build_detection_log(events, store.engine.analyze(events), session_id=session_id)
    review_log = build_review_log(events, store.review_scorer.assess_quality(events), session_id=session_id)
    # Event lines already carry the timeline
    review_log.evidence = review_log.evidence.model_copy(update={"edit_timeline": []})

    body = dump_jsonl([*events, detection_log, review_log])
    return PlainTextResponse(body, media_type="application/x-ndjson")

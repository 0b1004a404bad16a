import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException

import store
from ingest.validation import validate_edit_event
from models.attribution import AIAttribution
from models.base import CamelModel
from models.bucket import BucketSummary, TimeBucket
from models.config import BucketConfig
from models.event import EditEvent
from models.review import CommitInfo, ReviewQualityAssessment
from scoring.buckets import create_and_analyze_buckets, summarize_buckets

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


# ---------- Request / Response schemas ----------

class EventsRequest(CamelModel):
    events: list[Any]           # raw camelCase event dicts, checked by validate_edit_event


class BucketsRequest(EventsRequest):
    bucket_config: Optional[BucketConfig] = None


class ReviewQualityRequest(EventsRequest):
    commit_info: Optional[CommitInfo] = None


class BucketsResponse(CamelModel):
    buckets: list[TimeBucket]
    summary: BucketSummary


# ---------- Helpers ----------

def events_from_payload(raw_events: list[Any]) -> list[EditEvent]:
    """Validate raw dicts and build EditEvents, or 422 listing every bad index."""
    invalid = [i for i, raw in enumerate(raw_events) if not validate_edit_event(raw)]
    if invalid:
        raise HTTPException(
            status_code=422,
            detail={"message": "Invalid edit events", "invalidIndexes": invalid},
        )
    return [EditEvent.model_validate(raw) for raw in raw_events]


def bucket_timeline(events: list[EditEvent], bucket_config: Optional[BucketConfig] = None) -> BucketsResponse:
    config = bucket_config or store.engine.get_config().bucket_config
    try:
        buckets = create_and_analyze_buckets(events, store.engine, config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return BucketsResponse(buckets=buckets, summary=summarize_buckets(buckets, config.aggregation_method))


# ---------- Endpoints ----------

@router.post("/analyze", response_model=AIAttribution)
async def analyze(body: EventsRequest):
    """
    Runs the attribution engine over the posted events.
    Returns the verdict with heuristic scores, evidence, timeline and decision trace.
    """
    events = events_from_payload(body.events)
    attribution = store.engine.analyze(events)
    logger.info("Analyzed %d events -> %s", len(events), attribution.source)
    return attribution


@router.post("/buckets", response_model=BucketsResponse)
async def buckets(body: BucketsRequest):
    """
    Cuts the events into fixed time windows and analyses each window on its own.
    Uses the engine's bucketConfig unless the request supplies one.
    """
    events = events_from_payload(body.events)
    response = bucket_timeline(events, body.bucket_config)
    logger.info("Bucketed %d events into %d buckets", len(events), response.summary.total_buckets)
    return response


@router.post("/review-quality", response_model=ReviewQualityAssessment)
async def review_quality(body: ReviewQualityRequest):
    """Scores how much deliberate review the edits show before commit."""
    events = events_from_payload(body.events)
    assessment = store.review_scorer.assess_quality(events, body.commit_info)
    logger.info("Assessed review quality of %d events -> %s", len(events), assessment.quality_level)
    return assessment

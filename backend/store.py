"""
In-memory state shared across all routes.
One engine for the whole process; edit events are buffered per session in a plain dict.
"""

import settings
from models.config import DEFAULT_AI_DETECTION_CONFIG
from models.event import EditEvent
from scoring.engine import AttributionEngine
from scoring.review import ReviewQualityScorer


def startup_config():
    if settings.BUCKET_INTERVAL_MINUTES is None:
        return DEFAULT_AI_DETECTION_CONFIG
    bucket_config = DEFAULT_AI_DETECTION_CONFIG.bucket_config.model_copy(
        update={"interval_minutes": settings.BUCKET_INTERVAL_MINUTES}
    )
    return DEFAULT_AI_DETECTION_CONFIG.model_copy(update={"bucket_config": bucket_config})


engine = AttributionEngine(startup_config())
review_scorer = ReviewQualityScorer()

sessions: dict[str, list[EditEvent]] = {}

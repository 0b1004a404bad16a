from models.attribution import AIAttribution, AIEvidence, AITimeline, HeuristicScores
from models.bucket import BucketSummary, TimeBucket
from models.config import AIDetectionConfig, BucketConfig, DEFAULT_AI_DETECTION_CONFIG
from models.event import EditEvent, ExternalToolSignature, Position
from models.review import CommitInfo, ReviewQualityAssessment

__all__ = [
    "AIAttribution", "AIEvidence", "AITimeline", "HeuristicScores",
    "BucketSummary", "TimeBucket",
    "AIDetectionConfig", "BucketConfig", "DEFAULT_AI_DETECTION_CONFIG",
    "EditEvent", "ExternalToolSignature", "Position",
    "CommitInfo", "ReviewQualityAssessment",
]

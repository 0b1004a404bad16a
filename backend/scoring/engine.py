"""
Attribution engine: turns a stream of edit events into a human / AI verdict.

Pipeline (every step appends one entry to the decision trace):
  1. Six heuristics, each 0.0 - 1.0 (scoring.heuristics)
       bulk insertion, typing speed, paste pattern,
       external tool, content pattern, timing anomaly
  2. Combination: weighted_score = raw * weight; total = sum of weighted scores
  3. Decision: threshold bands on total, then the mixed-signal override

Bands (first match wins):
  total <  human                      -> human,        confidence 1 - total
  human        <= total < ai_assisted -> ai-assisted,  confidence 0.8
  ai_assisted  <= total < ai_generated-> ai-generated, confidence total
  total >= ai_generated               -> ai-generated, confidence total, probability total + 0.1

Mixed override: if the stream shows both slow, small human typing and an
AI-shaped insertion (detected external signature, or a bulk insert that
arrived within the paste window), any non-human verdict becomes "mixed"
with confidence capped at 0.8.

``total_score`` itself is never clamped; only the reported confidence and
ai_probability are. Weights that drift above 1.0 in sum therefore still
produce in-range outputs.

The engine is a pure function of (events, config snapshot). It reads no
clock and no randomness, so identical input gives byte-identical output,
trace strings included.
"""

import logging
from typing import Any, Mapping, Sequence

from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from models.attribution import (
    AIAttribution,
    AttributionSource,
    CombinationInput,
    CombinationOutput,
    CombinationStep,
    FinalDecisionInput,
    FinalDecisionOutput,
    FinalDecisionStep,
    HeuristicScores,
    WeightedScore,
    WeightedScores,
)
from models.config import (
    AIDetectionConfig,
    DEFAULT_AI_DETECTION_CONFIG,
    DetectionThresholds,
    DetectionWeights,
    HEURISTIC_NAMES,
)
from models.event import EditEvent
from scoring.evidence import extract_evidence, extract_timeline
from scoring.heuristics import HEURISTICS
from scoring.signals import clamp

logger = logging.getLogger(__name__)

AI_ASSISTED_CONFIDENCE = 0.8
MIXED_CONFIDENCE_CAP = 0.8
AI_GENERATED_PROBABILITY_BOOST = 0.1

# Small, slow edits count as human evidence for the mixed override
HUMAN_EDIT_MAX_LENGTH = 50

CONFIG_SECTIONS = ("weights", "thresholds", "classification", "bucket_config")


# ---------- Heuristics & combination ----------

def _score_heuristics(events: Sequence[EditEvent], thresholds: DetectionThresholds, trace: list):
    scores = {}
    for name, scorer in HEURISTICS:
        score, step = scorer(events, thresholds)
        scores[name] = score
        trace.append(step)
    return HeuristicScores(**scores)


def combine_scores(scores: HeuristicScores, weights: DetectionWeights, trace: list):
    """Apply per-heuristic weights. Returns (WeightedScores, unclamped total)."""
    combined = {}
    for name in HEURISTIC_NAMES:
        raw = getattr(scores, name)
        weight = getattr(weights, name)
        combined[name] = WeightedScore(raw_score=raw, weight=weight, weighted_score=raw * weight)

    weighted = WeightedScores(**combined)
    total = sum(combined[name].weighted_score for name in HEURISTIC_NAMES)

    trace.append(CombinationStep(
        input=CombinationInput(heuristic_scores=scores, weights=weights),
        output=CombinationOutput(weighted_scores=weighted, total_weighted_score=total),
        reasoning=f"Combined weighted scores: {total:.3f}",
    ))
    return weighted, total


# ---------- Final decision ----------

def _has_human_indicators(events: Sequence[EditEvent], t: DetectionThresholds) -> bool:
    return any(
        0 < e.instant_typing_speed < t.fast_typing_speed and e.content_length < HUMAN_EDIT_MAX_LENGTH
        for e in events
    )


def _has_ai_indicators(events: Sequence[EditEvent], t: DetectionThresholds) -> bool:
    return any(
        e.has_external_signature
        or (e.content_length > t.bulk_insertion_size and e.time_since_last_change < t.paste_time_threshold)
        for e in events
    )


def classify(total: float, config: AIDetectionConfig) -> tuple[AttributionSource, float, float]:
    """Threshold bands only, without the mixed override. Returns (source, confidence, probability)."""
    c = config.classification
    if total < c.human_threshold:
        return "human", 1 - total, total
    if total < c.ai_assisted_threshold:
        return "ai-assisted", AI_ASSISTED_CONFIDENCE, total
    if total < c.ai_generated_threshold:
        return "ai-generated", total, total
    return "ai-generated", total, min(total + AI_GENERATED_PROBABILITY_BOOST, 1.0)


def make_final_decision(total: float, events: Sequence[EditEvent], config: AIDetectionConfig, trace: list):
    source, confidence, probability = classify(total, config)

    has_human = _has_human_indicators(events, config.thresholds)
    has_ai = _has_ai_indicators(events, config.thresholds)
    if has_human and has_ai and source != "human":
        source = "mixed"
        confidence = min(confidence, MIXED_CONFIDENCE_CAP)

    confidence = clamp(confidence)
    probability = clamp(probability)

    trace.append(FinalDecisionStep(
        input=FinalDecisionInput(
            total_score=total,
            has_human_indicators=has_human,
            has_ai_indicators=has_ai,
            thresholds=config.classification,
        ),
        output=FinalDecisionOutput(source=source, confidence=confidence, ai_probability=probability),
        reasoning=f"Total score: {total:.3f} -> {source} (confidence: {confidence:.3f})",
    ))
    return source, confidence, probability


# ---------- Public entry points ----------

def empty_attribution() -> AIAttribution:
    """Canonical result for an empty event list: human, zero confidence, nothing observed."""
    return AIAttribution(source="human", confidence=0.0, ai_probability=0.0)


def analyze_events(events: Sequence[EditEvent], config: AIDetectionConfig) -> AIAttribution:
    if not events:
        return empty_attribution()

    trace: list = []
    scores = _score_heuristics(events, config.thresholds, trace)
    weighted, total = combine_scores(scores, config.weights, trace)
    source, confidence, probability = make_final_decision(total, events, config, trace)

    logger.debug("Analyzed %d events: total=%.3f source=%s", len(events), total, source)

    return AIAttribution(
        source=source,
        confidence=confidence,
        ai_probability=probability,
        total_score=total,
        heuristic_scores=scores,
        weighted_scores=weighted,
        evidence=extract_evidence(events, config.thresholds),
        timeline=extract_timeline(events),
        decision_trace=trace,
    )


def _snake_keys(section: Any) -> dict:
    if isinstance(section, BaseModel):
        return section.model_dump()
    return {to_snake(key): value for key, value in section.items()}


def merge_config(current: AIDetectionConfig, partial: Mapping[str, Any]) -> AIDetectionConfig:
    """
    Build a new config from ``current`` with ``partial`` laid over it.

    Merges per section, so ``{"weights": {"bulkInsertionScore": 0.5}}``
    keeps the other five weights. Keys may be camelCase or snake_case.
    Range and ordering rules are not enforced here; see
    ingest.validation.validate_config.
    """
    merged = current.model_dump()
    for key, section in partial.items():
        name = to_snake(key)
        if name not in CONFIG_SECTIONS:
            logger.warning("Ignoring unknown config section %r", key)
            continue
        merged[name] = {**merged[name], **_snake_keys(section)}
    return AIDetectionConfig.model_validate(merged)


class AttributionEngine:
    """
    Holds the current config snapshot and runs analyses against it.

    update_config swaps in a new frozen snapshot; an analyze call that has
    already started keeps the snapshot it read on entry.
    """

    def __init__(self, config: AIDetectionConfig = DEFAULT_AI_DETECTION_CONFIG):
        self._config = config

    def get_config(self) -> AIDetectionConfig:
        return self._config

    def update_config(self, partial: Mapping[str, Any]) -> AIDetectionConfig:
        self._config = merge_config(self._config, partial)
        return self._config

    def analyze(self, events: Sequence[EditEvent]) -> AIAttribution:
        snapshot = self._config
        return analyze_events(events, snapshot)

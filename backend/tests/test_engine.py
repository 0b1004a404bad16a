"""
Regression tests for the attribution engine.

Covers the empty case, score bounds, determinism, the bulk-paste and
human-typing fixtures, weight monotonicity and drift, the mixed override,
the decision trace, config snapshots, evidence and the timeline split.
"""

import pytest

from models.config import AIDetectionConfig, DetectionWeights, HEURISTIC_NAMES
from scoring.engine import AttributionEngine, classify, merge_config

from event_factory import AI_SNIPPET, BASE_TS, MINUTE, ai_paste, human_typing, make_event

TRACE_STEPS = [
    "bulk-insertion-analysis",
    "typing-speed-analysis",
    "paste-pattern-analysis",
    "external-tool-analysis",
    "content-pattern-analysis",
    "timing-anomaly-analysis",
    "score-combination",
    "final-decision",
]


def _assert_in_unit_range(attribution):
    assert 0.0 <= attribution.confidence <= 1.0
    assert 0.0 <= attribution.ai_probability <= 1.0
    for name in HEURISTIC_NAMES:
        assert 0.0 <= getattr(attribution.heuristic_scores, name) <= 1.0, name


# ── Empty input ────────────────────────────────────────────────────────────


class TestEmptyInput:

    def setup_method(self):
        self.result = AttributionEngine().analyze([])

    def test_empty_is_human_with_zero_confidence(self):
        assert self.result.source == "human"
        assert self.result.confidence == 0.0
        assert self.result.ai_probability == 0.0

    def test_empty_has_no_evidence_or_timeline(self):
        evidence = self.result.evidence
        assert evidence.bulk_changes == []
        assert evidence.typing_bursts == []
        assert evidence.external_indicators == []
        assert evidence.suspicious_patterns == []
        assert evidence.content_characteristics == []
        assert self.result.timeline.vs_code_events == []
        assert self.result.timeline.external_events == []
        assert self.result.timeline.gaps == []

    def test_empty_has_no_trace(self):
        assert self.result.decision_trace == []
        assert self.result.weighted_scores is None


# ── Score bounds ───────────────────────────────────────────────────────────


class TestScoreBounds:

    def setup_method(self):
        self.engine = AttributionEngine()

    @pytest.mark.parametrize("events", [
        human_typing(20),
        [ai_paste()],
        [ai_paste(), *human_typing(5, start=BASE_TS + 2000)],
        [make_event(BASE_TS + i * 20, instant_typing_speed=900, time_since_last_change=20) for i in range(30)],
        [make_event(BASE_TS + i * MINUTE, time_since_last_change=MINUTE) for i in range(5)],
    ])
    def test_scores_within_unit_range(self, events):
        _assert_in_unit_range(self.engine.analyze(events))

    def test_weight_sum_above_one_still_clamps(self):
        weights = DetectionWeights(
            bulk_insertion_score=0.4,
            typing_speed_score=0.2,
            paste_pattern_score=0.3,
            external_tool_score=0.3,
            content_pattern_score=0.05,
            timing_anomaly_score=0.05,
        )
        assert weights.total == pytest.approx(1.3)

        engine = AttributionEngine(AIDetectionConfig(weights=weights))
        result = engine.analyze([ai_paste()])

        assert result.total_score > 1.0
        assert result.source == "ai-generated"
        assert result.confidence == 1.0
        assert result.ai_probability == 1.0

    def test_overconfident_signature_clamped(self):
        result = self.engine.analyze([ai_paste(confidence=1.7)])

        assert result.timeline.external_events[0].confidence == 1.0
        external = next(s for s in result.decision_trace if s.step == "external-tool-analysis")
        assert external.input.average_confidence == 1.0
        assert external.output == 1.0


# ── Determinism ────────────────────────────────────────────────────────────


class TestDeterminism:

    def test_identical_input_gives_identical_output(self):
        engine = AttributionEngine()
        events = [ai_paste(), *human_typing(10, start=BASE_TS + 5000)]

        first = engine.analyze(events).model_dump_json(by_alias=True)
        second = engine.analyze(events).model_dump_json(by_alias=True)
        assert first == second

    def test_separate_engines_agree(self):
        events = human_typing(15)
        assert AttributionEngine().analyze(events) == AttributionEngine().analyze(events)


# ── Reference fixtures ─────────────────────────────────────────────────────


class TestBulkInsertion:
    """One 500-char insert arriving 10ms after the previous change."""

    def setup_method(self):
        event = make_event(
            content="x" * 500,
            content_length=500,
            time_since_last_change=10,
            instant_typing_speed=0,
        )
        self.result = AttributionEngine().analyze([event])

    def test_bulk_and_paste_scores_fire(self):
        assert self.result.heuristic_scores.bulk_insertion_score > 0
        assert self.result.heuristic_scores.paste_pattern_score > 0

    def test_bulk_evidence(self):
        assert self.result.evidence.bulk_change_pattern is True
        assert "rapid-large-insertion" in self.result.evidence.suspicious_patterns

    def test_bulk_reasoning(self):
        step = self.result.decision_trace[0]
        assert step.reasoning == "Found 1 bulk insertions (>100 chars) out of 1 total changes"


class TestHumanTyping:
    """Twenty one-character inserts at 120 CPM with 50-200ms gaps."""

    def setup_method(self):
        self.result = AttributionEngine().analyze(human_typing(20))

    def test_classified_human(self):
        assert self.result.source == "human"
        assert self.result.ai_probability < 0.3

    def test_confidence_is_inverse_of_total(self):
        assert self.result.confidence == pytest.approx(1 - self.result.total_score)

    def test_no_bulk_or_paste(self):
        assert self.result.heuristic_scores.bulk_insertion_score == 0
        assert self.result.heuristic_scores.paste_pattern_score == 0
        assert self.result.evidence.bulk_changes == []


class TestExternalPaste:

    def setup_method(self):
        self.result = AttributionEngine().analyze([ai_paste()])

    def test_single_signed_paste_is_ai_generated(self):
        # bulk 0.25 + paste 0.15 + external 0.9 * 0.25 + content 0.8 * 0.10
        assert self.result.total_score == pytest.approx(0.705)
        assert self.result.source == "ai-generated"
        assert self.result.confidence == pytest.approx(0.705)

    def test_timing_needs_two_events(self):
        assert self.result.heuristic_scores.timing_anomaly_score == 0
        timing_step = self.result.decision_trace[5]
        assert timing_step.reasoning == "Insufficient changes for timing analysis"

    def test_no_typing_speed_data(self):
        typing_step = self.result.decision_trace[1]
        assert typing_step.output == 0
        assert typing_step.reasoning == "No typing speed data available"


# ── Weights ────────────────────────────────────────────────────────────────


class TestWeightMonotonicity:

    def setup_method(self):
        self.events = [ai_paste(), ai_paste(BASE_TS + 2000), *human_typing(10, start=BASE_TS + 3000)]

    @pytest.mark.parametrize("heuristic", HEURISTIC_NAMES)
    def test_raising_one_weight_never_lowers_total(self, heuristic):
        engine = AttributionEngine()
        before = engine.analyze(self.events)

        current = getattr(engine.get_config().weights, heuristic)
        engine.update_config({"weights": {heuristic: current + 0.1}})
        after = engine.analyze(self.events)

        assert after.heuristic_scores == before.heuristic_scores
        assert after.total_score >= before.total_score

    def test_weighted_scores_are_raw_times_weight(self):
        result = AttributionEngine().analyze(self.events)
        for name in HEURISTIC_NAMES:
            weighted = getattr(result.weighted_scores, name)
            assert weighted.weighted_score == pytest.approx(weighted.raw_score * weighted.weight)


# ── Classification ─────────────────────────────────────────────────────────


class TestClassification:

    def setup_method(self):
        self.config = AIDetectionConfig()

    @pytest.mark.parametrize("total, expected", [
        (0.0, "human"),
        (0.29, "human"),
        (0.3, "ai-assisted"),
        (0.59, "ai-assisted"),
        (0.6, "ai-generated"),
        (0.8, "ai-generated"),
    ])
    def test_threshold_bands(self, total, expected):
        source, _, _ = classify(total, self.config)
        assert source == expected

    def test_ai_assisted_confidence_is_fixed(self):
        _, confidence, probability = classify(0.45, self.config)
        assert confidence == 0.8
        assert probability == 0.45

    def test_top_band_boosts_probability(self):
        _, confidence, probability = classify(0.85, self.config)
        assert confidence == 0.85
        assert probability == pytest.approx(0.95)

    def test_mixed_override(self):
        # Two signed pastes plus slow human typing: AI-shaped total with human indicators
        events = [ai_paste(), ai_paste(BASE_TS + 2000), make_event(BASE_TS + 3000)]
        result = AttributionEngine().analyze(events)

        assert result.total_score >= 0.3
        assert result.source == "mixed"
        assert result.confidence <= 0.8

    def test_human_verdict_is_never_mixed(self):
        events = [ai_paste(), *human_typing(30, start=BASE_TS + 2000)]
        result = AttributionEngine().analyze(events)
        assert result.total_score < 0.3
        assert result.source == "human"


# ── Decision trace ─────────────────────────────────────────────────────────


class TestDecisionTrace:

    def setup_method(self):
        self.result = AttributionEngine().analyze([ai_paste(), *human_typing(5, start=BASE_TS + 2000)])

    def test_eight_steps_in_order(self):
        assert [step.step for step in self.result.decision_trace] == TRACE_STEPS

    def test_heuristic_outputs_match_scores(self):
        for step, name in zip(self.result.decision_trace[:6], HEURISTIC_NAMES):
            assert step.output == getattr(self.result.heuristic_scores, name)

    def test_combination_total(self):
        combination = self.result.decision_trace[6]
        assert combination.output.total_weighted_score == self.result.total_score
        assert combination.reasoning == f"Combined weighted scores: {self.result.total_score:.3f}"

    def test_final_decision_reasoning(self):
        final = self.result.decision_trace[7]
        assert final.output.source == self.result.source
        assert final.reasoning == (
            f"Total score: {self.result.total_score:.3f} -> {self.result.source} "
            f"(confidence: {self.result.confidence:.3f})"
        )

    def test_trace_serializes_with_step_tags(self):
        wire = self.result.to_wire()
        assert [step["step"] for step in wire["decisionTrace"]] == TRACE_STEPS
        assert "bulkChanges" in wire["decisionTrace"][0]["input"]


# ── Config snapshots ───────────────────────────────────────────────────────


class TestConfigUpdates:

    def setup_method(self):
        self.engine = AttributionEngine()

    def test_partial_section_keeps_siblings(self):
        updated = self.engine.update_config({"weights": {"bulkInsertionScore": 0.5}})
        assert updated.weights.bulk_insertion_score == 0.5
        assert updated.weights.typing_speed_score == 0.20
        assert updated.thresholds == self.engine.get_config().thresholds

    def test_snake_case_keys(self):
        updated = self.engine.update_config({"classification": {"human_threshold": 0.2}})
        assert updated.classification.human_threshold == 0.2
        assert updated.classification.ai_assisted_threshold == 0.6

    def test_previous_snapshot_is_untouched(self):
        before = self.engine.get_config()
        self.engine.update_config({"thresholds": {"bulkInsertionSize": 500}})

        assert before.thresholds.bulk_insertion_size == 100
        assert self.engine.get_config().thresholds.bulk_insertion_size == 500
        assert self.engine.get_config() is not before

    def test_unknown_section_ignored(self):
        before = self.engine.get_config()
        assert merge_config(before, {"colours": {"x": 1}}) == before

    def test_threshold_change_moves_verdict(self):
        event = make_event(content="x" * 150, content_length=150, time_since_last_change=10, instant_typing_speed=0)
        assert self.engine.analyze([event]).heuristic_scores.bulk_insertion_score == 1.0

        self.engine.update_config({"thresholds": {"bulkInsertionSize": 200}})
        assert self.engine.analyze([event]).heuristic_scores.bulk_insertion_score == 0.0


# ── Evidence & timeline ────────────────────────────────────────────────────


class TestEvidence:

    def setup_method(self):
        self.engine = AttributionEngine()

    def test_bulk_preview_truncated(self):
        result = self.engine.analyze([make_event(content="y" * 150, content_length=150)])
        assert result.evidence.bulk_changes[0].content == "y" * 100 + "..."

    def test_placeholder_when_content_stripped(self):
        result = self.engine.analyze([make_event(content=None, content_length=500)])
        assert result.evidence.bulk_changes[0].content == "[500 chars]"

    def test_burst_preview(self):
        event = make_event(content="z" * 80, content_length=80, burst_detected=True)
        result = self.engine.analyze([event])
        assert result.evidence.typing_bursts[0].content == "z" * 50 + "..."

    def test_external_signature_evidence(self):
        result = self.engine.analyze([ai_paste()])
        evidence = result.evidence
        assert evidence.external_tool_signature is True
        assert evidence.external_indicators == ["bulk-insertion", "external-paste"]
        assert "contains-code-blocks" in evidence.content_characteristics
        assert "contains-functions" in evidence.content_characteristics
        assert "formatted-bulk-code" in evidence.suspicious_patterns

    def test_evidence_kept_for_human_verdict(self):
        events = [*human_typing(30), make_event(BASE_TS + 10_000, content="q" * 120, content_length=120)]
        result = self.engine.analyze(events)
        assert result.source == "human"
        assert result.evidence.bulk_change_pattern is True


class TestTimeline:

    def setup_method(self):
        self.events = [
            make_event(BASE_TS),
            ai_paste(BASE_TS + 15_000),
            make_event(BASE_TS + 15_000 + 400_000),
        ]
        self.timeline = AttributionEngine().analyze(self.events).timeline

    def test_events_partitioned(self):
        assert [e.event_id for e in self.timeline.vs_code_events] == [
            self.events[0].event_id, self.events[2].event_id,
        ]
        assert len(self.timeline.external_events) == 1

    def test_external_projection(self):
        external = self.timeline.external_events[0]
        assert external.timestamp == BASE_TS + 15_000
        assert external.detected_tool == "claude-code"
        assert external.confidence == 0.9
        assert external.content_length == len(AI_SNIPPET)

    def test_gaps_labelled(self):
        assert [(g.duration, g.likely_activity) for g in self.timeline.gaps] == [
            (15_000, "thinking-pause"),
            (400_000, "extended-break"),
        ]

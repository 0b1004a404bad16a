"""
Tests for the review quality scorer.

The thorough-review fixture is laid out so every scoring rule fires once;
the comments beside each event say which.
"""

import pytest

from ingest.validation import sanitize_edit_events
from models.review import CommitInfo
from scoring.review import (
    ReviewQualityScorer,
    assess_quality,
    calculate_confidence,
    determine_quality_level,
    editing_velocity,
    identify_edit_sessions,
)

from event_factory import BASE_TS, MINUTE, ai_paste, make_event


def _thorough_session():
    return [
        # opening draft
        make_event(
            BASE_TS, time_since_last_change=0, content_length=120,
            content="def total(values):\n    result = 0\n    for v in values:\n        result += v\n    return result",
            language_construct="function",
        ),
        # three shrinking refinements, a minute apart
        make_event(BASE_TS + MINUTE, time_since_last_change=MINUTE, content_length=80, content="    if not values:"),
        make_event(
            BASE_TS + 2 * MINUTE, time_since_last_change=MINUTE, content_length=40,
            content="# empty input returns zero", is_comment=True,
        ),
        make_event(
            BASE_TS + 3 * MINUTE, time_since_last_change=MINUTE, change_type="replace",
            content_length=10, content="totalCount",
        ),
        # second session after a 42 minute break: restructure
        make_event(
            BASE_TS + 45 * MINUTE, time_since_last_change=42 * MINUTE, change_type="replace",
            content_length=90, content="def total(values):\n    return sum(values)",
            language_construct="function",
        ),
        # third session: a test
        make_event(
            BASE_TS + 130 * MINUTE, time_since_last_change=85 * MINUTE, content_length=60,
            content="assert total([1, 2]) == 3",
        ),
    ]


THOROUGH_COMMIT = CommitInfo(commit_time=BASE_TS + 141 * MINUTE)


# ── Empty & trivial input ──────────────────────────────────────────────────


class TestEmptyInput:

    def test_empty_is_immediate_commit(self):
        result = assess_quality([])
        assert result.overall_score == 0
        assert result.quality_level == "immediate-commit"
        assert result.confidence == 1.0

    def test_scorer_object_delegates(self):
        assert ReviewQualityScorer().assess_quality([]) == assess_quality([])


class TestImmediateCommit:

    def setup_method(self):
        self.events = [make_event(BASE_TS + i * 200) for i in range(3)]
        self.result = assess_quality(self.events, CommitInfo(commit_time=BASE_TS + 1000))

    def test_scores_zero(self):
        assert self.result.overall_score == 0
        assert self.result.quality_level == "immediate-commit"

    def test_extreme_score_raises_confidence(self):
        assert self.result.confidence == 0.8

    def test_patterns(self):
        assert self.result.patterns.immediate_commit is True
        assert self.result.patterns.multi_session_review is False

    def test_without_commit_info(self):
        result = assess_quality(self.events)
        assert result.time_metrics.time_before_first_commit == 0
        assert result.patterns.immediate_commit is True


# ── Full scoring ───────────────────────────────────────────────────────────


class TestThoroughSession:

    def setup_method(self):
        self.result = assess_quality(_thorough_session(), THOROUGH_COMMIT)

    def test_time_metrics(self):
        metrics = self.result.time_metrics
        assert metrics.total_development_time == 130 * MINUTE
        assert metrics.time_before_first_commit == 11 * MINUTE
        assert metrics.number_of_edit_sessions == 3
        assert metrics.longest_pause_between_edits == 85 * MINUTE

    def test_edit_patterns(self):
        patterns = self.result.edit_patterns
        assert patterns.refinement_edits == 5
        assert patterns.comment_additions == 1
        assert patterns.variable_renames == 1
        assert patterns.structural_changes == 1
        assert patterns.bulk_replacements == 0

    def test_indicators(self):
        indicators = self.result.review_indicators
        assert indicators.multiple_edit_sessions
        assert indicators.pauses_for_reflection
        assert indicators.incremental_refinement
        assert indicators.commentary_added
        assert indicators.code_restructuring
        assert indicators.testing_evidence

    def test_breakdown_maxes_out(self):
        breakdown = self.result.breakdown
        assert breakdown.time_investment_score == 3
        assert breakdown.iteration_score == 3
        assert breakdown.refinement_score == 2
        assert breakdown.thoughtfulness_score == 2
        assert breakdown.final_score == 10

    def test_level_and_confidence(self):
        assert self.result.overall_score == 10
        assert self.result.quality_level == "extensive-review"
        assert self.result.confidence == 0.8
        assert self.result.patterns.immediate_commit is False

    def test_evidence(self):
        evidence = self.result.evidence
        assert [entry.edit_type for entry in evidence.edit_timeline][:2] == ["insert-function", "insert-unknown"]
        assert [entry.significance for entry in evidence.edit_timeline] == [3, 2, 2, 1, 2, 2]
        assert [p.likely_activity for p in evidence.pause_analysis] == [
            "brief-pause", "brief-pause", "brief-pause",
            "extended-break", "extended-break",
        ]
        assert evidence.refinement_examples[0] == "    if not values:"


class TestContentAbsent:
    """Stripped content loses only the content-based signals."""

    def setup_method(self):
        self.result = assess_quality(sanitize_edit_events(_thorough_session()), THOROUGH_COMMIT)

    def test_renames_and_tests_not_detected(self):
        assert self.result.edit_patterns.variable_renames == 0
        assert self.result.review_indicators.testing_evidence is False
        assert self.result.evidence.refinement_examples == []

    def test_other_signals_survive(self):
        assert self.result.breakdown.refinement_score == 1.0
        assert self.result.overall_score == 9
        assert self.result.quality_level == "extensive-review"


class TestExternalCollaboration:

    def test_external_edits_counted(self):
        events = [ai_paste(BASE_TS), make_event(BASE_TS + 5000)]
        result = assess_quality(events)
        assert result.breakdown.external_tool_usage == 1
        assert result.patterns.cross_tool_collaboration is True

    def test_no_external_edits(self):
        result = assess_quality([make_event(BASE_TS)])
        assert result.patterns.cross_tool_collaboration is False


# ── Helpers ────────────────────────────────────────────────────────────────


class TestLevelsAndConfidence:

    @pytest.mark.parametrize("score, level", [
        (0, "immediate-commit"),
        (2, "immediate-commit"),
        (2.5, "light-review"),
        (5, "light-review"),
        (5.5, "thorough-review"),
        (8, "thorough-review"),
        (8.5, "extensive-review"),
        (10, "extensive-review"),
    ])
    def test_quality_levels(self, score, level):
        assert determine_quality_level(score) == level

    @pytest.mark.parametrize("event_count, score, expected", [
        (5, 5, 0.7),
        (11, 5, 0.8),
        (51, 5, 0.9),
        (51, 9, 1.0),
        (3, 1, 0.8),
    ])
    def test_confidence(self, event_count, score, expected):
        assert calculate_confidence(event_count, score) == expected


class TestSessions:

    def test_split_on_long_gaps(self):
        events = [
            make_event(BASE_TS),
            make_event(BASE_TS + 10 * MINUTE),
            make_event(BASE_TS + 50 * MINUTE),
        ]
        sessions = identify_edit_sessions(events)
        assert [(s.duration, s.change_count) for s in sessions] == [(10 * MINUTE, 2), (0, 1)]

    def test_editing_velocity_windows(self):
        events = [make_event(BASE_TS), make_event(BASE_TS + MINUTE), make_event(BASE_TS + 12 * MINUTE)]
        assert editing_velocity(events) == [2, 0, 1]

"""
Unit tests for the screening score.

Tests cover:
- Feature summary statistics
- Raw score, normalization and rounding
- Tier classification boundaries
- End-to-end capture window scenarios
"""

import random
from datetime import datetime, timezone

import pytest # pyright: ignore[reportMissingImports]
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from video_pipeline.feature_extractor import AsymmetryFeatures
from scoring.asymmetry_score import (
    DEFAULT_CONSTANTS,
    RiskTier,
    ScoringConstants,
    aggregate,
    classify_score,
    compute_raw_score,
    explain_report,
    normalize_score,
    report_to_dict,
    summarize_features,
)


def _features(mouth_asym, gaze_asym, mouth_width, face_scale=0.16):
    return AsymmetryFeatures(
        mouth_asym=mouth_asym,
        gaze_asym=gaze_asym,
        mouth_width=mouth_width,
        face_scale=face_scale
    )


class TestFeatureSummary:
    """Test per-session statistics."""

    def test_means_and_population_std(self):
        """Test mean and ddof=0 std."""
        summary = summarize_features([
            _features(0.1, 0.0, 0.6),
            _features(0.3, 0.2, 0.8),
        ])

        assert summary.mouth_asym_mean == pytest.approx(0.2)
        assert summary.gaze_asym_mean == pytest.approx(0.1)
        assert summary.mouth_width_mean == pytest.approx(0.7)
        assert summary.mouth_asym_std == pytest.approx(0.1)

    def test_single_frame_std_is_zero(self):
        """Test std of one frame."""
        summary = summarize_features([_features(0.4, 0.0, 0.6)])
        assert summary.mouth_asym_std == 0.0

    def test_empty_rejected(self):
        """Test summarizing nothing is an error."""
        with pytest.raises(ValueError):
            summarize_features([])


class TestScoreComputation:
    """Test raw score and normalization."""

    def test_width_term_only_counts_shortfall(self):
        """Test wide mouths do not lower the score."""
        wide = summarize_features([_features(0.0, 0.0, 0.9)])
        assert compute_raw_score(wide) == 0.0

    def test_absolute_asymmetry(self):
        """Test left and right droop score the same."""
        left = summarize_features([_features(0.2, 0.1, 0.7)])
        right = summarize_features([_features(-0.2, -0.1, 0.7)])
        assert compute_raw_score(left) == pytest.approx(compute_raw_score(right))

    def test_normalize_clamps_high(self):
        """Test scores above 100 are clamped."""
        assert normalize_score(10.0) == 100

    def test_normalize_clamps_negative(self):
        """Test negative raw scores map to 0."""
        assert normalize_score(-1.0) == 0

    def test_normalize_rounds_half_up(self):
        """Test x.5 rounds up."""
        unit_scale = ScoringConstants(score_scale=1.0)
        assert normalize_score(34.5, unit_scale) == 35
        assert normalize_score(59.5, unit_scale) == 60
        assert normalize_score(34.49, unit_scale) == 34

    def test_constants_from_config(self):
        """Test partial config override."""
        constants = ScoringConstants.from_config({'score_scale': 50, 'high_risk_threshold': 70})

        assert constants.score_scale == 50.0
        assert constants.high_risk_threshold == 70
        assert constants.mouth_asym_weight == 2.5

    def test_inverted_thresholds_rejected(self):
        """Test moderate threshold above high threshold."""
        with pytest.raises(ValueError):
            ScoringConstants(high_risk_threshold=30, moderate_risk_threshold=40)


class TestClassification:
    """Test tier boundaries (lower bound inclusive)."""

    @pytest.mark.parametrize("score,tier", [
        (0, RiskTier.LOW),
        (34, RiskTier.LOW),
        (35, RiskTier.MODERATE),
        (59, RiskTier.MODERATE),
        (60, RiskTier.HIGH),
        (100, RiskTier.HIGH),
    ])
    def test_boundaries(self, score, tier):
        """Test exact boundary scores."""
        assert classify_score(score) is tier

    def test_each_tier_has_advisory(self):
        """Test every tier carries a fixed message."""
        for tier in RiskTier:
            assert tier.advisory
        assert "emergency" in RiskTier.HIGH.advisory
        assert "clinician" in RiskTier.MODERATE.advisory


class TestAggregate:
    """Test reduction of a capture window."""

    def test_empty_window_is_insufficient(self):
        """Test no frames → None, never a score."""
        assert aggregate([]) is None

    def test_neutral_face_scenario(self):
        """Test 10 frames alternating ±0.02 mouth asymmetry."""
        features = [
            _features(0.02 if i % 2 == 0 else -0.02, 0.0, 0.65)
            for i in range(10)
        ]

        report = aggregate(features)

        assert report is not None
        assert report.score == 0
        assert report.tier is RiskTier.LOW
        assert report.frame_count == 10
        assert report.details.mouth_asym_mean == pytest.approx(0.0, abs=1e-12)
        assert report.details.mouth_asym_std == pytest.approx(0.02)

    def test_moderate_boundary_scenario(self):
        """Test 5 constant frames giving a raw score of 1.0 → exactly 35."""
        features = [_features(0.3, 0.1, 0.5) for _ in range(5)]

        report = aggregate(features)

        assert report.raw_score == pytest.approx(1.0)
        assert report.score == 35
        assert report.tier is RiskTier.MODERATE

    def test_high_risk_scenario(self):
        """Test strong droop reaches the high tier."""
        features = [_features(0.8, 0.0, 0.6) for _ in range(20)]

        report = aggregate(features)

        # 0.8 * 2.5 * 35 = 70
        assert report.score == 70
        assert report.tier is RiskTier.HIGH

    def test_order_insensitive(self):
        """Test permuting frames does not change the report."""
        rng = random.Random(7)
        features = [
            _features(rng.uniform(-0.2, 0.3), rng.uniform(-0.1, 0.1), rng.uniform(0.4, 0.8))
            for _ in range(40)
        ]
        shuffled = list(features)
        rng.shuffle(shuffled)

        ts = datetime(2026, 1, 1, tzinfo=timezone.utc)
        a = aggregate(features, timestamp=ts)
        b = aggregate(shuffled, timestamp=ts)

        assert a.score == b.score
        assert a.tier is b.tier
        assert a.frame_count == b.frame_count
        assert a.details.mouth_asym_mean == pytest.approx(b.details.mouth_asym_mean)
        assert a.details.gaze_asym_mean == pytest.approx(b.details.gaze_asym_mean)
        assert a.details.mouth_width_mean == pytest.approx(b.details.mouth_width_mean)
        assert a.details.mouth_asym_std == pytest.approx(b.details.mouth_asym_std)

    def test_timestamp_is_iso8601(self):
        """Test the report timestamp format."""
        ts = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        report = aggregate([_features(0.0, 0.0, 0.6)], timestamp=ts)

        assert report.timestamp == "2026-03-04T05:06:07+00:00"
        assert datetime.fromisoformat(report.timestamp) == ts

    def test_custom_constants(self):
        """Test constants flow into scoring and classification."""
        constants = ScoringConstants(score_scale=100.0, high_risk_threshold=90, moderate_risk_threshold=50)
        report = aggregate([_features(0.3, 0.1, 0.5)] * 3, constants)

        assert report.score == 100
        assert report.tier is RiskTier.HIGH


class TestReportHelpers:
    """Test explanation and serialization helpers."""

    def test_explanation_names_drooped_side(self):
        """Test explanation mentions the lower mouth corner."""
        report = aggregate([_features(0.4, 0.0, 0.6)])
        assert "left mouth corner lower" in explain_report(report)

        report = aggregate([_features(-0.4, 0.0, 0.6)])
        assert "right mouth corner lower" in explain_report(report)

    def test_explanation_without_factors(self):
        """Test neutral explanation."""
        report = aggregate([_features(0.0, 0.0, 0.7)])
        assert "No single feature" in explain_report(report, DEFAULT_CONSTANTS)

    def test_report_to_dict(self):
        """Test flattened report fields."""
        report = aggregate([_features(0.3, 0.1, 0.5)] * 5)
        data = report_to_dict(report)

        assert data['score'] == 35
        assert data['tier'] == "moderate risk"
        assert data['frame_count'] == 5
        assert set(data['details']) == {'mouthAsymMean', 'gazeMean', 'mouthWidthMean', 'mouthAsymStd'}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

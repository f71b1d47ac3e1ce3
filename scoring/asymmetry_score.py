"""
Asymmetry screening score.

Reduces the per-frame features of one capture window to a single 0-100
score and an advisory tier.

Formula:
    raw = |mean(mouth_asym)| * 2.5
        + |mean(gaze_asym)| * 1.5
        + max(0, 0.6 - mean(mouth_width)) * 1.0
    score = clip(round(max(0, raw) * 35), 0, 100)

Tiers (lower bound inclusive):
- score >= 60: high risk
- 35 <= score < 60: moderate risk
- score < 35: low risk

The weights, the 0.6 mouth-width baseline, the x35 scale and the tier
thresholds were tuned by eye so that demo sessions produce plausible
numbers. They are not calibrated against any clinical ground truth and the
score has no diagnostic meaning.
"""

import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from video_pipeline.feature_extractor import AsymmetryFeatures

logger = logging.getLogger(__name__)


class RiskTier(Enum):
    """Advisory tiers with their fixed user-facing messages."""
    LOW = "low risk"
    MODERATE = "moderate risk"
    HIGH = "high risk"

    @property
    def label(self) -> str:
        return self.value

    @property
    def advisory(self) -> str:
        return TIER_ADVISORIES[self]


TIER_ADVISORIES = {
    RiskTier.HIGH: (
        "High risk flag: suggest immediate medical evaluation. "
        "If sudden onset, call emergency services."
    ),
    RiskTier.MODERATE: (
        "Moderate risk: recommend contacting a clinician for evaluation."
    ),
    RiskTier.LOW: (
        "Low risk: no immediate alarm; if symptoms persist or are sudden, "
        "seek medical care."
    ),
}


@dataclass(frozen=True)
class ScoringConstants:
    """
    Tuning constants for the screening score.

    Attributes:
        mouth_asym_weight: Weight of |mean mouth asymmetry|
        gaze_asym_weight: Weight of |mean gaze asymmetry|
        mouth_width_weight: Weight of the mouth-width shortfall
        mouth_width_baseline: Mouth width below which a shortfall is counted
        score_scale: Multiplier from raw score to the 0-100 range
        high_risk_threshold: Lowest score in the high tier
        moderate_risk_threshold: Lowest score in the moderate tier
    """
    mouth_asym_weight: float = 2.5
    gaze_asym_weight: float = 1.5
    mouth_width_weight: float = 1.0
    mouth_width_baseline: float = 0.6
    score_scale: float = 35.0
    high_risk_threshold: int = 60
    moderate_risk_threshold: int = 35

    def __post_init__(self):
        if self.moderate_risk_threshold > self.high_risk_threshold:
            raise ValueError(
                f"moderate_risk_threshold ({self.moderate_risk_threshold}) must not exceed "
                f"high_risk_threshold ({self.high_risk_threshold})"
            )

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "ScoringConstants":
        """Build constants from the ``scoring`` config section."""
        if not config:
            return cls()

        defaults = cls()
        return cls(
            mouth_asym_weight=float(config.get('mouth_asym_weight', defaults.mouth_asym_weight)),
            gaze_asym_weight=float(config.get('gaze_asym_weight', defaults.gaze_asym_weight)),
            mouth_width_weight=float(config.get('mouth_width_weight', defaults.mouth_width_weight)),
            mouth_width_baseline=float(config.get('mouth_width_baseline', defaults.mouth_width_baseline)),
            score_scale=float(config.get('score_scale', defaults.score_scale)),
            high_risk_threshold=int(config.get('high_risk_threshold', defaults.high_risk_threshold)),
            moderate_risk_threshold=int(config.get('moderate_risk_threshold', defaults.moderate_risk_threshold))
        )


DEFAULT_CONSTANTS = ScoringConstants()


@dataclass(frozen=True)
class FeatureSummary:
    """
    Per-session feature statistics.

    Attributes:
        mouth_asym_mean: Mean mouth asymmetry
        gaze_asym_mean: Mean gaze asymmetry
        mouth_width_mean: Mean normalized mouth width
        mouth_asym_std: Population std of mouth asymmetry (report only)
    """
    mouth_asym_mean: float
    gaze_asym_mean: float
    mouth_width_mean: float
    mouth_asym_std: float

    def to_export_dict(self) -> Dict[str, float]:
        """Field names used in the exported report."""
        return {
            'mouthAsymMean': self.mouth_asym_mean,
            'gazeMean': self.gaze_asym_mean,
            'mouthWidthMean': self.mouth_width_mean,
            'mouthAsymStd': self.mouth_asym_std,
        }


@dataclass(frozen=True)
class ScreeningReport:
    """
    Result of one completed capture window.

    Attributes:
        timestamp: ISO-8601 creation time (UTC)
        score: Integer screening score (0-100)
        tier: Advisory tier for the score
        details: Feature means and mouth asymmetry std
        frame_count: Number of frames with a detected face
        raw_score: Unscaled weighted sum, kept for explanation
    """
    timestamp: str
    score: int
    tier: RiskTier
    details: FeatureSummary
    frame_count: int
    raw_score: float = field(default=0.0, compare=False)

    @property
    def advisory(self) -> str:
        return self.tier.advisory


def summarize_features(features: Sequence[AsymmetryFeatures]) -> FeatureSummary:
    """
    Compute means and the mouth asymmetry std over a non-empty sequence.

    Raises:
        ValueError: If the sequence is empty
    """
    if not features:
        raise ValueError("Cannot summarize an empty feature sequence")

    mouth_asym = np.array([f.mouth_asym for f in features], dtype=np.float64)
    gaze_asym = np.array([f.gaze_asym for f in features], dtype=np.float64)
    mouth_width = np.array([f.mouth_width for f in features], dtype=np.float64)

    return FeatureSummary(
        mouth_asym_mean=float(np.mean(mouth_asym)),
        gaze_asym_mean=float(np.mean(gaze_asym)),
        mouth_width_mean=float(np.mean(mouth_width)),
        mouth_asym_std=float(np.std(mouth_asym))
    )


def compute_raw_score(summary: FeatureSummary, constants: ScoringConstants = DEFAULT_CONSTANTS) -> float:
    """Weighted sum of the three asymmetry terms."""
    mouth_term = abs(summary.mouth_asym_mean) * constants.mouth_asym_weight
    gaze_term = abs(summary.gaze_asym_mean) * constants.gaze_asym_weight
    width_term = max(0.0, constants.mouth_width_baseline - summary.mouth_width_mean) * constants.mouth_width_weight
    return float(mouth_term + gaze_term + width_term)


def normalize_score(raw_score: float, constants: ScoringConstants = DEFAULT_CONSTANTS) -> int:
    """
    Map a raw score onto the integer 0-100 range.

    Halves round up, so 34.5 becomes 35.
    """
    scaled = max(0.0, raw_score) * constants.score_scale
    rounded = int(np.floor(scaled + 0.5))
    return int(np.clip(rounded, 0, 100))


def classify_score(score: int, constants: ScoringConstants = DEFAULT_CONSTANTS) -> RiskTier:
    """Map a 0-100 score to its advisory tier."""
    if score >= constants.high_risk_threshold:
        return RiskTier.HIGH
    if score >= constants.moderate_risk_threshold:
        return RiskTier.MODERATE
    return RiskTier.LOW


def aggregate(
    features: Sequence[AsymmetryFeatures],
    constants: ScoringConstants = DEFAULT_CONSTANTS,
    timestamp: Optional[datetime] = None
) -> Optional[ScreeningReport]:
    """
    Reduce one capture window to a screening report.

    Args:
        features: Per-frame features collected during the window
        constants: Scoring weights and thresholds
        timestamp: Report time (defaults to now, UTC)

    Returns:
        ScreeningReport, or None when no frame had a detected face
    """
    if not features:
        logger.warning("No usable frames in capture window - insufficient data")
        return None

    summary = summarize_features(features)
    raw_score = compute_raw_score(summary, constants)
    score = normalize_score(raw_score, constants)
    tier = classify_score(score, constants)

    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    logger.info(
        f"Screening score {score}/100 ({tier.label}) from {len(features)} frames "
        f"[raw={raw_score:.4f}]"
    )

    return ScreeningReport(
        timestamp=timestamp.isoformat(),
        score=score,
        tier=tier,
        details=summary,
        frame_count=len(features),
        raw_score=raw_score
    )


def explain_report(report: ScreeningReport, constants: ScoringConstants = DEFAULT_CONSTANTS) -> str:
    """Generate human-readable explanation of the score."""
    summary = report.details

    explanation = f"Screening score {report.score}/100 ({report.tier.label}). "

    components: List[str] = []
    mouth_points = abs(summary.mouth_asym_mean) * constants.mouth_asym_weight * constants.score_scale
    gaze_points = abs(summary.gaze_asym_mean) * constants.gaze_asym_weight * constants.score_scale
    width_shortfall = constants.mouth_width_baseline - summary.mouth_width_mean
    width_points = max(0.0, width_shortfall) * constants.mouth_width_weight * constants.score_scale

    if mouth_points >= 1.0:
        side = "left" if summary.mouth_asym_mean > 0 else "right"
        components.append(f"{side} mouth corner lower ({mouth_points:.1f} pts)")

    if gaze_points >= 1.0:
        components.append(f"horizontal eye-position asymmetry ({gaze_points:.1f} pts)")

    if width_points >= 1.0:
        components.append(f"narrow mouth width ({width_points:.1f} pts)")

    if components:
        explanation += "Contributing factors: " + ", ".join(components) + "."
    else:
        explanation += "No single feature contributed noticeably."

    return explanation


def report_to_dict(report: ScreeningReport) -> Dict[str, Any]:
    """Flatten a report into plain JSON-serializable values."""
    data = asdict(report)
    data['tier'] = report.tier.label
    data['advisory'] = report.advisory
    data['details'] = report.details.to_export_dict()
    return data

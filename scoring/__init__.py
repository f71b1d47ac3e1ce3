"""
Screening score module.

Reduces a capture window of per-frame asymmetry features to:
1. Feature summary (means, mouth asymmetry std)
2. Screening score (0-100, higher = more asymmetry)
3. Advisory tier (low / moderate / high risk)

All scores are:
- Heuristic (opaque demo tuning constants)
- Explainable (transparent weighted sum)
- Non-diagnostic (not a medical assessment)
"""

from .asymmetry_score import (
    aggregate,
    classify_score,
    compute_raw_score,
    explain_report,
    normalize_score,
    report_to_dict,
    summarize_features,
    FeatureSummary,
    RiskTier,
    ScoringConstants,
    ScreeningReport,
    DEFAULT_CONSTANTS
)

__all__ = [
    'aggregate',
    'classify_score',
    'compute_raw_score',
    'explain_report',
    'normalize_score',
    'report_to_dict',
    'summarize_features',
    'FeatureSummary',
    'RiskTier',
    'ScoringConstants',
    'ScreeningReport',
    'DEFAULT_CONSTANTS',
]

"""
Video analysis pipeline for asymmetry screening.

This package turns camera frames into per-frame features:
1. Landmark source (MediaPipe FaceLandmarker, first face only)
2. Anatomical index map (role → landmark index)
3. Feature extraction (scale-normalized asymmetry proxies)

The landmark detector is an opaque pre-trained model; everything downstream
works on its normalized point coordinates only.
"""

from .landmarks import (
    LandmarkIndexMap,
    LandmarkPoint,
    LandmarkRole,
    LandmarkSetError,
    validate_landmarks,
    DEFAULT_INDEX_MAP
)
from .feature_extractor import (
    AsymmetryFeatures,
    compute_features,
    FACE_SCALE_EPSILON
)
from .face_analyzer import FaceMeshLandmarkSource

__all__ = [
    'LandmarkIndexMap',
    'LandmarkPoint',
    'LandmarkRole',
    'LandmarkSetError',
    'validate_landmarks',
    'DEFAULT_INDEX_MAP',
    'AsymmetryFeatures',
    'compute_features',
    'FACE_SCALE_EPSILON',
    'FaceMeshLandmarkSource',
]

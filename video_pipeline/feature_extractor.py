"""
Per-frame asymmetry features from facial landmarks.

Features (all normalized by inter-eye distance):
1. mouth_asym - signed vertical mouth-corner offset difference relative to
   the nose tip (positive: left corner sits lower)
2. gaze_asym - signed horizontal eye-center offset difference relative to
   the nose tip, with the right-side offset mirrored (zero when the eye
   centers are reflections of each other across the nose line)
3. mouth_width - mouth-corner distance (unilateral drooping narrows it)
4. face_scale - inter-eye distance, the normalization denominator

These are heuristic proxies, not measurements with diagnostic value.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .landmarks import (
    DEFAULT_INDEX_MAP,
    LandmarkIndexMap,
    LandmarkRole,
    LandmarkSet,
    validate_landmarks,
)

logger = logging.getLogger(__name__)

# Substituted for a zero inter-eye distance
FACE_SCALE_EPSILON = 1e-6


@dataclass(frozen=True)
class AsymmetryFeatures:
    """
    Scale-normalized geometric features for one frame.

    Attributes:
        mouth_asym: Vertical mouth-corner asymmetry (positive = left lower)
        gaze_asym: Horizontal eye-center asymmetry relative to the nose
        mouth_width: Mouth-corner distance divided by face_scale
        face_scale: Inter-eye distance in normalized frame units
    """
    mouth_asym: float
    gaze_asym: float
    mouth_width: float
    face_scale: float


def _xy(point) -> np.ndarray:
    return np.array([point[0], point[1]], dtype=np.float64)


def _eye_center(landmarks: LandmarkSet, first: int, second: int) -> np.ndarray:
    return (_xy(landmarks[first]) + _xy(landmarks[second])) / 2.0


def _distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(a - b))


def eye_centers(
    landmarks: LandmarkSet,
    index_map: LandmarkIndexMap = DEFAULT_INDEX_MAP
) -> Tuple[np.ndarray, np.ndarray]:
    """Return (left_eye_center, right_eye_center) as (x, y) arrays."""
    left = _eye_center(
        landmarks,
        index_map.index_of(LandmarkRole.LEFT_EYE_OUTER),
        index_map.index_of(LandmarkRole.LEFT_EYE_INNER)
    )
    right = _eye_center(
        landmarks,
        index_map.index_of(LandmarkRole.RIGHT_EYE_INNER),
        index_map.index_of(LandmarkRole.RIGHT_EYE_OUTER)
    )
    return left, right


def compute_features(
    landmarks: LandmarkSet,
    index_map: LandmarkIndexMap = DEFAULT_INDEX_MAP
) -> AsymmetryFeatures:
    """
    Compute asymmetry features for one frame.

    Args:
        landmarks: Full landmark set of the first detected face
        index_map: Anatomical role → landmark index mapping

    Returns:
        AsymmetryFeatures

    Raises:
        LandmarkSetError: If the set is shorter than the largest anchor index
    """
    validate_landmarks(landmarks, index_map)

    left_mouth = _xy(landmarks[index_map.index_of(LandmarkRole.LEFT_MOUTH)])
    right_mouth = _xy(landmarks[index_map.index_of(LandmarkRole.RIGHT_MOUTH)])
    nose = _xy(landmarks[index_map.index_of(LandmarkRole.NOSE_TIP)])
    left_eye, right_eye = eye_centers(landmarks, index_map)

    face_scale = _distance(left_eye, right_eye)
    if face_scale == 0.0:
        logger.debug("Degenerate eye geometry, substituting epsilon face scale")
        face_scale = FACE_SCALE_EPSILON

    # Vertical mouth offsets relative to nose
    left_offset_y = (left_mouth[1] - nose[1]) / face_scale
    right_offset_y = (right_mouth[1] - nose[1]) / face_scale
    mouth_asym = left_offset_y - right_offset_y

    # Horizontal eye offsets relative to nose. The right offset is mirrored
    # across the nose line so a symmetric face yields zero.
    left_eye_dx = (left_eye[0] - nose[0]) / face_scale
    right_eye_dx = (nose[0] - right_eye[0]) / face_scale
    gaze_asym = left_eye_dx - right_eye_dx

    mouth_width = _distance(left_mouth, right_mouth) / face_scale

    return AsymmetryFeatures(
        mouth_asym=float(mouth_asym),
        gaze_asym=float(gaze_asym),
        mouth_width=float(mouth_width),
        face_scale=float(face_scale)
    )

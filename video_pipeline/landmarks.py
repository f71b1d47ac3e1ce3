"""
Landmark types and the anatomical index map.

The landmark detector is treated as a black box that returns normalized
points: x and y in [0, 1] relative to frame width/height, z a relative depth.
Only a handful of indices carry meaning for asymmetry screening; they are
bound to anatomical roles here instead of being scattered through the code.

Default indices follow the MediaPipe Face Mesh topology (468 points, 478
with iris refinement).
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

FACE_MESH_NUM_LANDMARKS = 468


class LandmarkSetError(ValueError):
    """Raised when a landmark set cannot supply every anchor point."""


class LandmarkPoint(NamedTuple):
    """One detected facial point in normalized frame coordinates."""
    x: float
    y: float
    z: float = 0.0


LandmarkSet = Sequence[LandmarkPoint]


class LandmarkRole(Enum):
    """Anatomical roles used by the feature extractor."""
    LEFT_MOUTH = "left_mouth"
    RIGHT_MOUTH = "right_mouth"
    NOSE_TIP = "nose_tip"
    LEFT_EYE_OUTER = "left_eye_outer"
    LEFT_EYE_INNER = "left_eye_inner"
    RIGHT_EYE_INNER = "right_eye_inner"
    RIGHT_EYE_OUTER = "right_eye_outer"


@dataclass(frozen=True)
class LandmarkIndexMap:
    """
    Role → index mapping into the detector's output.

    Attributes:
        left_mouth: Left mouth corner
        right_mouth: Right mouth corner
        nose_tip: Nose tip
        left_eye_outer: Left eye outer corner
        left_eye_inner: Left eye inner corner
        right_eye_inner: Right eye inner corner
        right_eye_outer: Right eye outer corner
    """
    left_mouth: int = 61
    right_mouth: int = 291
    nose_tip: int = 1
    left_eye_outer: int = 33
    left_eye_inner: int = 133
    right_eye_inner: int = 362
    right_eye_outer: int = 263

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"Landmark index for '{f.name}' must be a non-negative int, got {value!r}")

    def index_of(self, role: LandmarkRole) -> int:
        return getattr(self, role.value)

    @property
    def max_index(self) -> int:
        return max(getattr(self, f.name) for f in fields(self))

    @property
    def required_length(self) -> int:
        """Minimum landmark set length that covers every anchor."""
        return self.max_index + 1

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "LandmarkIndexMap":
        """
        Build an index map from the ``landmarks`` config section.

        Unknown keys are ignored with a warning; missing keys keep defaults.
        """
        if not config:
            return cls()

        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, value in config.items():
            if key not in known:
                logger.warning(f"Ignoring unknown landmark role in config: {key}")
                continue
            overrides[key] = int(value)

        return cls(**overrides)


DEFAULT_INDEX_MAP = LandmarkIndexMap()


def validate_landmarks(landmarks: LandmarkSet, index_map: LandmarkIndexMap = DEFAULT_INDEX_MAP) -> None:
    """
    Check that a landmark set covers every anchor index.

    Raises:
        LandmarkSetError: If the set is missing or too short
    """
    if landmarks is None:
        raise LandmarkSetError("Landmark set is missing")

    if len(landmarks) < index_map.required_length:
        raise LandmarkSetError(
            f"Landmark set has {len(landmarks)} points, "
            f"need at least {index_map.required_length}"
        )


def to_landmark_set(raw_points) -> list:
    """
    Convert detector output (objects with x/y/z attributes) to LandmarkPoints.

    A missing or None z becomes 0.0.
    """
    points = []
    for pt in raw_points:
        z = getattr(pt, 'z', None)
        points.append(LandmarkPoint(float(pt.x), float(pt.y), float(z) if z is not None else 0.0))
    return points

"""
Live preview overlay.

Draws the anchors used for scoring (mouth corners, nose tip) and a sparse
face mesh on the camera frame, plus status text lines.
"""

import logging
from typing import Iterable, Optional

import cv2
import numpy as np

from video_pipeline.landmarks import DEFAULT_INDEX_MAP, LandmarkIndexMap, LandmarkSet

logger = logging.getLogger(__name__)

# BGR
MOUTH_COLOR = (102, 102, 255)
NOSE_COLOR = (255, 176, 102)
MESH_COLOR = (32, 18, 11)
TEXT_COLOR = (255, 255, 255)

POINT_RADIUS = 4
MESH_STRIDE = 4


def _to_pixel(point, width: int, height: int):
    return int(round(point[0] * width)), int(round(point[1] * height))


def draw_landmark_overlay(
    frame: np.ndarray,
    landmarks: Optional[LandmarkSet],
    index_map: LandmarkIndexMap = DEFAULT_INDEX_MAP
) -> np.ndarray:
    """
    Draw anchors and a sparse mesh onto a BGR frame in place.

    Args:
        frame: BGR frame (H, W, 3)
        landmarks: Normalized landmark set, or None to draw nothing
        index_map: Anchor indices to highlight

    Returns:
        The same frame, for chaining
    """
    if landmarks is None or len(landmarks) < index_map.required_length:
        return frame

    h, w = frame.shape[:2]

    # Sparse mesh: connect every MESH_STRIDE-th point to its successor
    mesh = frame.copy()
    for i in range(0, len(landmarks) - 1, MESH_STRIDE):
        a = _to_pixel(landmarks[i], w, h)
        b = _to_pixel(landmarks[i + 1], w, h)
        cv2.line(mesh, a, b, MESH_COLOR, 1, cv2.LINE_AA)
    cv2.addWeighted(mesh, 0.25, frame, 0.75, 0, dst=frame)

    for idx in (index_map.left_mouth, index_map.right_mouth):
        cv2.circle(frame, _to_pixel(landmarks[idx], w, h), POINT_RADIUS, MOUTH_COLOR, -1, cv2.LINE_AA)
    cv2.circle(frame, _to_pixel(landmarks[index_map.nose_tip], w, h), POINT_RADIUS, NOSE_COLOR, -1, cv2.LINE_AA)

    return frame


def draw_status(frame: np.ndarray, lines: Iterable[str], origin=(10, 24), line_height: int = 22) -> np.ndarray:
    """Draw status text lines (top-left) onto a BGR frame in place."""
    x, y = origin
    for line in lines:
        if not line:
            continue
        # Dark outline keeps text readable on bright backgrounds
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (0, 0, 0), 3, cv2.LINE_AA)
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, TEXT_COLOR, 1, cv2.LINE_AA)
        y += line_height
    return frame

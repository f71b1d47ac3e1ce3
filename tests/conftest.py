"""Shared fixtures for the screening tests."""

import sys
from pathlib import Path

import pytest # pyright: ignore[reportMissingImports]

sys.path.insert(0, str(Path(__file__).parent.parent))

from video_pipeline.landmarks import DEFAULT_INDEX_MAP, FACE_MESH_NUM_LANDMARKS, LandmarkPoint


def make_landmarks(
    nose=(0.5, 0.5),
    left_mouth=(0.45, 0.65),
    right_mouth=(0.55, 0.65),
    left_eye=((0.38, 0.40), (0.46, 0.40)),
    right_eye=((0.54, 0.40), (0.62, 0.40)),
    length=FACE_MESH_NUM_LANDMARKS,
    index_map=DEFAULT_INDEX_MAP
):
    """
    Build a full landmark set with the anchors placed explicitly.

    Defaults describe a face that is mirror-symmetric about x=0.5:
    eye centers (0.42, 0.40) and (0.58, 0.40), face scale 0.16.
    """
    points = [LandmarkPoint(0.5, 0.5, 0.0) for _ in range(length)]
    points[index_map.nose_tip] = LandmarkPoint(*nose)
    points[index_map.left_mouth] = LandmarkPoint(*left_mouth)
    points[index_map.right_mouth] = LandmarkPoint(*right_mouth)
    points[index_map.left_eye_outer] = LandmarkPoint(*left_eye[0])
    points[index_map.left_eye_inner] = LandmarkPoint(*left_eye[1])
    points[index_map.right_eye_inner] = LandmarkPoint(*right_eye[0])
    points[index_map.right_eye_outer] = LandmarkPoint(*right_eye[1])
    return points


@pytest.fixture
def symmetric_landmarks():
    return make_landmarks()


@pytest.fixture
def drooped_landmarks():
    """Left mouth corner 0.04 lower than the right."""
    return make_landmarks(left_mouth=(0.45, 0.69))

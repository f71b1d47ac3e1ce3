"""
Landmark source using the MediaPipe FaceLandmarker (Tasks API).

The detector is an opaque pre-trained model; this module only turns its
output into LandmarkSets for the first detected face.

Engineering decisions:
- VIDEO running mode: temporal tracking between frames, requires strictly
  increasing timestamps
- One face only (the person in front of the camera)
- Output length validated once against the anchor index map, on the first
  detection, instead of on every frame
"""

import logging
from pathlib import Path
from typing import Optional
import warnings

import cv2
import numpy as np

from .landmarks import (
    DEFAULT_INDEX_MAP,
    LandmarkIndexMap,
    LandmarkSet,
    to_landmark_set,
    validate_landmarks,
)

logger = logging.getLogger(__name__)

# Suppress MediaPipe warnings
warnings.filterwarnings('ignore', category=UserWarning, module='google.protobuf')

try:
    import mediapipe as mp
    from mediapipe.tasks import python as mp_tasks
    from mediapipe.tasks.python import vision as mp_vision
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False
    logger.warning("MediaPipe not installed. Landmark detection unavailable.")


class FaceMeshLandmarkSource:
    """
    Produce per-frame landmark sets from BGR frames.

    Usage:
        with FaceMeshLandmarkSource('models/face_landmarker.task') as source:
            landmarks = source.process_frame(frame, timestamp_ms)
            if landmarks is not None:
                ...
    """

    def __init__(
        self,
        model_path: str,
        index_map: LandmarkIndexMap = DEFAULT_INDEX_MAP,
        min_detection_confidence: float = 0.6,
        min_presence_confidence: float = 0.6,
        min_tracking_confidence: float = 0.6
    ):
        """
        Initialize the landmark source.

        Args:
            model_path: Path to the FaceLandmarker ``.task`` model bundle
            index_map: Anchor indices the output must cover
            min_detection_confidence: Minimum face detection confidence
            min_presence_confidence: Minimum face presence confidence
            min_tracking_confidence: Minimum landmark tracking confidence
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ImportError("MediaPipe not installed. Install with: pip install mediapipe")

        model_path = Path(model_path)
        if not model_path.exists():
            raise FileNotFoundError(f"FaceLandmarker model not found: {model_path}")

        self.index_map = index_map
        self._validated = False
        self._last_timestamp_ms = -1

        options = mp_vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=str(model_path)),
            running_mode=mp_vision.RunningMode.VIDEO,
            num_faces=1,
            min_face_detection_confidence=min_detection_confidence,
            min_face_presence_confidence=min_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=False
        )
        self._landmarker = mp_vision.FaceLandmarker.create_from_options(options)

        logger.info(f"Landmark source initialized (MediaPipe FaceLandmarker, model={model_path.name})")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Release the detector."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None

    def process_frame(self, frame_bgr: np.ndarray, timestamp_ms: int) -> Optional[LandmarkSet]:
        """
        Detect landmarks in a single frame.

        Args:
            frame_bgr: BGR frame (H, W, 3) as delivered by OpenCV
            timestamp_ms: Frame timestamp in milliseconds

        Returns:
            Landmark set of the first detected face, or None if no face

        Raises:
            RuntimeError: If the source has been closed
            LandmarkSetError: If the detector output does not cover the anchors
        """
        if self._landmarker is None:
            raise RuntimeError("Landmark source is closed")

        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        if not result.face_landmarks:
            logger.debug(f"No face detected at {timestamp_ms} ms")
            return None

        landmarks = to_landmark_set(result.face_landmarks[0])

        if not self._validated:
            validate_landmarks(landmarks, self.index_map)
            self._validated = True
            logger.info(f"Detector output confirmed: {len(landmarks)} landmarks per face")

        return landmarks

"""
Camera / video input for the screening loop.

Engineering decisions:
- OpenCV for capture (webcam index or any file format it can decode)
- Frames stay BGR; the landmark source converts for the detector
- Timestamps are milliseconds and strictly increasing (required by the
  detector's video mode)
"""

import logging
import time
from pathlib import Path
from typing import Generator, Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def parse_source(source: str) -> Union[int, str]:
    """Interpret a CLI source string: digits → camera index, else a path."""
    source = str(source).strip()
    if source.isdigit():
        return int(source)
    return source


class CameraReader:
    """
    Frame reader for a webcam or a video file.

    Live cameras are timestamped from a monotonic clock; files use their
    own playback position so a recording replays with its real cadence.

    Usage:
        with CameraReader(0, frame_size=(640, 480)) as reader:
            for timestamp_ms, frame in reader.iter_frames():
                process(frame)
    """

    def __init__(
        self,
        source: Union[int, str],
        frame_size: Optional[Tuple[int, int]] = (640, 480)
    ):
        """
        Open a capture source.

        Args:
            source: Camera index or path to a video file
            frame_size: Requested (width, height) for cameras; ignored for files

        Raises:
            FileNotFoundError: If a video path does not exist
            RuntimeError: If the source cannot be opened
        """
        self.source = source
        self.is_live = isinstance(source, int)

        if not self.is_live and not Path(source).exists():
            raise FileNotFoundError(f"Video not found: {source}")

        self.cap = cv2.VideoCapture(source if self.is_live else str(source))

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open capture source: {source}")

        if self.is_live and frame_size is not None:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, frame_size[0])
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, frame_size[1])

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = self.cap.get(cv2.CAP_PROP_FPS)

        self._t0 = time.monotonic()
        self._last_timestamp_ms = -1

        kind = "camera" if self.is_live else "video"
        logger.info(f"Opened {kind} source {source}: {self.width}x{self.height} @ {self.fps:.1f} FPS")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def release(self):
        """Release capture resources."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def _timestamp_ms(self) -> int:
        if self.is_live:
            ts = int((time.monotonic() - self._t0) * 1000)
        else:
            ts = int(self.cap.get(cv2.CAP_PROP_POS_MSEC))

        ts = max(ts, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = ts
        return ts

    def read(self) -> Optional[Tuple[int, np.ndarray]]:
        """
        Read the next frame.

        Returns:
            (timestamp_ms, BGR frame) or None when the source is exhausted
        """
        if self.cap is None:
            return None

        ret, frame = self.cap.read()
        if not ret:
            return None

        return self._timestamp_ms(), frame

    def iter_frames(self) -> Generator[Tuple[int, np.ndarray], None, None]:
        """
        Iterate until the source runs out.

        Yields:
            Tuple of (timestamp_ms, frame)
        """
        while True:
            item = self.read()
            if item is None:
                logger.info(f"Capture source {self.source} exhausted")
                break
            yield item

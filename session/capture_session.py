"""
Capture session state machine.

Lifecycle:
    IDLE --start()--> COLLECTING --deadline | stop()--> SEALED
         --one reduction--> IDLE

Rules:
- Frames only contribute while COLLECTING; frames without a face contribute
  nothing
- start() while a session is active cancels its timer and discards its
  unsealed features
- Each session is reduced exactly once. A deadline timer that fires after a
  manual stop, or that belongs to a replaced session, is ignored

Threading:
    The deadline timer fires on its own thread while frames arrive on the
    capture loop, so all transitions run under one lock. Listener callbacks
    are made after the lock is released.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from video_pipeline.feature_extractor import AsymmetryFeatures, compute_features
from video_pipeline.landmarks import (
    DEFAULT_INDEX_MAP,
    LandmarkIndexMap,
    LandmarkSet,
    LandmarkSetError,
)
from scoring.asymmetry_score import (
    DEFAULT_CONSTANTS,
    ScoringConstants,
    ScreeningReport,
    aggregate,
)

logger = logging.getLogger(__name__)

DEFAULT_CAPTURE_DURATION_SEC = 8.0


class SessionPhase(Enum):
    """Capture session phases."""
    IDLE = "idle"
    COLLECTING = "collecting"
    SEALED = "sealed"


@dataclass
class CaptureSession:
    """
    Mutable state of one capture window.

    Attributes:
        session_id: Monotonic id, used to recognise stale timers
        duration_sec: Length of the capture window
        started_at: Monotonic start time in seconds
        phase: Current phase
        features: Features of frames with a detected face, in arrival order
        frames_processed: Frames received while collecting (face or not)
        frames_rejected: Frames whose landmark set was malformed
    """
    session_id: int
    duration_sec: float
    started_at: float
    phase: SessionPhase = SessionPhase.COLLECTING
    features: List[AsymmetryFeatures] = field(default_factory=list)
    frames_processed: int = 0
    frames_rejected: int = 0

    @property
    def deadline(self) -> float:
        return self.started_at + self.duration_sec

    @property
    def is_collecting(self) -> bool:
        return self.phase is SessionPhase.COLLECTING

    def append(self, features: AsymmetryFeatures) -> None:
        if not self.is_collecting:
            raise RuntimeError(f"Session {self.session_id} is not collecting")
        self.features.append(features)

    def seal(self) -> List[AsymmetryFeatures]:
        """Stop accepting frames and hand over the collected features."""
        if not self.is_collecting:
            raise RuntimeError(f"Session {self.session_id} is already sealed")
        self.phase = SessionPhase.SEALED
        return list(self.features)


class SessionListener(ABC):
    """Receives capture lifecycle events."""

    @abstractmethod
    def on_collection_started(self, session_id: int, duration_sec: float) -> None:
        """A new capture window has opened."""
        pass

    @abstractmethod
    def on_report(self, session_id: int, report: ScreeningReport) -> None:
        """A capture window closed with at least one usable frame."""
        pass

    @abstractmethod
    def on_insufficient_data(self, session_id: int, frames_processed: int) -> None:
        """A capture window closed without any usable frame."""
        pass


class NullSessionListener(SessionListener):
    """Listener that ignores every event."""

    def on_collection_started(self, session_id: int, duration_sec: float) -> None:
        pass

    def on_report(self, session_id: int, report: ScreeningReport) -> None:
        pass

    def on_insufficient_data(self, session_id: int, frames_processed: int) -> None:
        pass


TimerFactory = Callable[[float, Callable[[], None]], "threading.Timer"]


def _daemon_timer(interval: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class CaptureController:
    """
    Owns the active capture session, its deadline timer and the reduction.

    Usage:
        controller = CaptureController(listener=ConsoleListener())
        controller.start()
        for landmarks in stream:
            controller.on_frame(landmarks)
    """

    def __init__(
        self,
        listener: Optional[SessionListener] = None,
        duration_sec: float = DEFAULT_CAPTURE_DURATION_SEC,
        constants: ScoringConstants = DEFAULT_CONSTANTS,
        index_map: LandmarkIndexMap = DEFAULT_INDEX_MAP,
        timer_factory: Optional[TimerFactory] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the controller.

        Args:
            listener: Receives start / report / insufficient-data events
            duration_sec: Capture window length
            constants: Scoring constants passed to the aggregator
            index_map: Landmark anchors passed to the feature extractor
            timer_factory: Creates a startable/cancellable timer
                           (default: daemon threading.Timer)
            clock: Monotonic clock in seconds
        """
        if duration_sec <= 0:
            raise ValueError(f"duration_sec must be positive, got {duration_sec}")

        self.listener = listener or NullSessionListener()
        self.duration_sec = float(duration_sec)
        self.constants = constants
        self.index_map = index_map
        self._timer_factory = timer_factory or _daemon_timer
        self._clock = clock

        self._lock = threading.Lock()
        self._session: Optional[CaptureSession] = None
        self._timer = None
        self._next_session_id = 1
        self.last_report: Optional[ScreeningReport] = None

    @property
    def phase(self) -> SessionPhase:
        with self._lock:
            if self._session is None:
                return SessionPhase.IDLE
            return self._session.phase

    @property
    def is_collecting(self) -> bool:
        return self.phase is SessionPhase.COLLECTING

    @property
    def session(self) -> Optional[CaptureSession]:
        return self._session

    def start(self) -> int:
        """
        Open a new capture window.

        An active session is discarded and its timer cancelled.

        Returns:
            Id of the new session
        """
        with self._lock:
            if self._session is not None and self._session.is_collecting:
                logger.warning(
                    f"Restarting capture: discarding session {self._session.session_id} "
                    f"with {len(self._session.features)} unsealed frames"
                )
            self._cancel_timer()

            session_id = self._next_session_id
            self._next_session_id += 1
            self._session = CaptureSession(
                session_id=session_id,
                duration_sec=self.duration_sec,
                started_at=self._clock()
            )

            self._timer = self._timer_factory(
                self.duration_sec,
                lambda: self._on_deadline(session_id)
            )
            self._timer.start()

        logger.info(f"Capture session {session_id} started ({self.duration_sec:.1f}s window)")
        self.listener.on_collection_started(session_id, self.duration_sec)
        return session_id

    def on_frame(self, landmarks: Optional[LandmarkSet]) -> bool:
        """
        Feed one frame's landmarks (None when no face was detected).

        Returns:
            True if the frame contributed features to the active session
        """
        with self._lock:
            session = self._session
            if session is None or not session.is_collecting:
                return False

            session.frames_processed += 1

            if landmarks is None:
                return False

            try:
                features = compute_features(landmarks, self.index_map)
            except LandmarkSetError as e:
                session.frames_rejected += 1
                logger.warning(f"Skipping frame in session {session.session_id}: {e}")
                return False

            session.append(features)

        logger.debug(
            f"Session {session.session_id} frame {len(session.features)}: "
            f"mouth_asym={features.mouth_asym:.4f}, gaze_asym={features.gaze_asym:.4f}, "
            f"mouth_width={features.mouth_width:.4f}"
        )
        return True

    def stop(self) -> Optional[ScreeningReport]:
        """
        Seal the active session early and reduce it.

        Returns:
            The report, or None for insufficient data or when nothing was
            collecting
        """
        with self._lock:
            self._cancel_timer()
            sealed = self._seal_locked()

        if sealed is None:
            logger.debug("Stop requested with no active capture session")
            return None

        logger.info(f"Capture session {sealed.session_id} stopped manually")
        return self._reduce(sealed)

    def cancel(self) -> None:
        """Drop the active session without reducing it."""
        with self._lock:
            self._cancel_timer()
            if self._session is not None and self._session.is_collecting:
                logger.info(f"Capture session {self._session.session_id} cancelled")
            self._session = None

    def _on_deadline(self, session_id: int) -> None:
        with self._lock:
            if self._session is None or self._session.session_id != session_id:
                logger.debug(f"Ignoring stale deadline for session {session_id}")
                return
            self._timer = None
            sealed = self._seal_locked()

        if sealed is None:
            logger.debug(f"Deadline for session {session_id} fired after it was sealed")
            return

        logger.info(f"Capture session {session_id} reached its {self.duration_sec:.1f}s deadline")
        self._reduce(sealed)

    def _seal_locked(self) -> Optional[CaptureSession]:
        session = self._session
        if session is None or not session.is_collecting:
            return None
        session.seal()
        return session

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reduce(self, session: CaptureSession) -> Optional[ScreeningReport]:
        report = aggregate(session.features, self.constants)

        with self._lock:
            # A start() may have replaced the session meanwhile
            if self._session is session:
                self._session = None
            if report is not None:
                self.last_report = report

        if report is None:
            logger.warning(
                f"Session {session.session_id}: no face in {session.frames_processed} frames"
            )
            self.listener.on_insufficient_data(session.session_id, session.frames_processed)
        else:
            self.listener.on_report(session.session_id, report)

        return report

"""
Capture session management.

One capture window at a time: frames are accumulated while collecting, the
window is sealed by its deadline or a manual stop, and the collected
features are reduced exactly once into a screening report.
"""

from .capture_session import (
    CaptureController,
    CaptureSession,
    NullSessionListener,
    SessionListener,
    SessionPhase,
    DEFAULT_CAPTURE_DURATION_SEC
)

__all__ = [
    'CaptureController',
    'CaptureSession',
    'NullSessionListener',
    'SessionListener',
    'SessionPhase',
    'DEFAULT_CAPTURE_DURATION_SEC',
]

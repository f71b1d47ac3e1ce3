"""Shared utilities for the asymmetry screening demo."""

from .config_loader import load_config, load_screening_config, get_nested_config
from .video_io import CameraReader, parse_source

__all__ = [
    'load_config',
    'load_screening_config',
    'get_nested_config',
    'CameraReader',
    'parse_source',
]

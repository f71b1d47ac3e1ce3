"""Configuration management utilities."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'capture': {
        'duration_sec': 8.0,
        'frame_width': 640,
        'frame_height': 480,
    },
    'scoring': {
        'mouth_asym_weight': 2.5,
        'gaze_asym_weight': 1.5,
        'mouth_width_weight': 1.0,
        'mouth_width_baseline': 0.6,
        'score_scale': 35.0,
        'high_risk_threshold': 60,
        'moderate_risk_threshold': 35,
    },
    'landmarks': {
        'left_mouth': 61,
        'right_mouth': 291,
        'nose_tip': 1,
        'left_eye_outer': 33,
        'left_eye_inner': 133,
        'right_eye_inner': 362,
        'right_eye_outer': 263,
    },
    'detector': {
        'model_path': 'models/face_landmarker.task',
        'min_detection_confidence': 0.6,
        'min_presence_confidence': 0.6,
        'min_tracking_confidence': 0.6,
    },
    'report': {
        'output_dir': 'data/reports',
        'format': 'txt',
    },
}


def load_config(config_path) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file (str or Path)

    Returns:
        Dictionary containing configuration (empty file → empty dict)

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
        ValueError: If the top level is not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping at the top level: {config_path}")

    logger.debug(f"Loaded config keys: {list(config.keys())}")

    return config


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_screening_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the screening configuration layered over DEFAULT_CONFIG.

    Args:
        config_path: Optional YAML path; None returns the defaults

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        logger.info("No config file given, using built-in defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    return merge_config(DEFAULT_CONFIG, load_config(config_path))


def get_nested_config(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get nested configuration value using dot notation.

    Example:
        get_nested_config(config, 'capture.duration_sec', default=8.0)

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path to value
        default: Default value if path not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value

"""Reexportaciones para poder escribir ``from formcheck import config``."""

from __future__ import annotations

from .constants import DEFAULT_OUTPUT_DIR, MIN_DETECTION_CONFIDENCE, PROJECT_ROOT, VIDEO_EXTENSIONS
from .models import Config, OutputConfig, PoseConfig, RunnerConfig, SamplingConfig
from .settings import DEFAULT_FRAME_COUNT, DEFAULT_LANDMARK_MIN_VISIBILITY
from .utils import from_yaml, load_default

__all__ = [
    # Models
    "Config",
    "SamplingConfig",
    "PoseConfig",
    "RunnerConfig",
    "OutputConfig",

    # Utilities
    "load_default",
    "from_yaml",

    # Constants
    "DEFAULT_OUTPUT_DIR",
    "PROJECT_ROOT",
    "VIDEO_EXTENSIONS",
    "MIN_DETECTION_CONFIDENCE",
    "DEFAULT_FRAME_COUNT",
    "DEFAULT_LANDMARK_MIN_VISIBILITY",
]

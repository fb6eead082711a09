"""Exportaciones principales del paquete de utilidades de estimación de pose."""

from .constants import LANDMARK_COUNT, LandmarkName
from .geometry import abs_delta, confidence_ok, midpoint_y, observed, pair_midpoint_y
from .types import Landmark, LandmarkSet

__all__ = [
    "Landmark",
    "LandmarkSet",
    "LandmarkName",
    "LANDMARK_COUNT",
    "confidence_ok",
    "midpoint_y",
    "abs_delta",
    "observed",
    "pair_midpoint_y",
]

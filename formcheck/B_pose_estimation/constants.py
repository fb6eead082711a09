"""Constantes compartidas de *landmarks* empleadas por la estimación de pose."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

LANDMARK_COUNT: int = 33


class LandmarkName(str, Enum):
    """Articulaciones que consumen las reglas de técnica."""

    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"


# Atajos de índice que replican el orden de landmarks de Mediapipe.
LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12
LEFT_ELBOW = 13
RIGHT_ELBOW = 14
LEFT_WRIST = 15
RIGHT_WRIST = 16
LEFT_HIP = 23
RIGHT_HIP = 24
LEFT_KNEE = 25
RIGHT_KNEE = 26
LEFT_ANKLE = 27
RIGHT_ANKLE = 28

MEDIAPIPE_INDEX: Dict[LandmarkName, int] = {
    LandmarkName.LEFT_SHOULDER: LEFT_SHOULDER,
    LandmarkName.RIGHT_SHOULDER: RIGHT_SHOULDER,
    LandmarkName.LEFT_ELBOW: LEFT_ELBOW,
    LandmarkName.RIGHT_ELBOW: RIGHT_ELBOW,
    LandmarkName.LEFT_WRIST: LEFT_WRIST,
    LandmarkName.RIGHT_WRIST: RIGHT_WRIST,
    LandmarkName.LEFT_HIP: LEFT_HIP,
    LandmarkName.RIGHT_HIP: RIGHT_HIP,
    LandmarkName.LEFT_KNEE: LEFT_KNEE,
    LandmarkName.RIGHT_KNEE: RIGHT_KNEE,
    LandmarkName.LEFT_ANKLE: LEFT_ANKLE,
    LandmarkName.RIGHT_ANKLE: RIGHT_ANKLE,
}

SHOULDERS: Tuple[LandmarkName, LandmarkName] = (LandmarkName.LEFT_SHOULDER, LandmarkName.RIGHT_SHOULDER)
ELBOWS: Tuple[LandmarkName, LandmarkName] = (LandmarkName.LEFT_ELBOW, LandmarkName.RIGHT_ELBOW)
HIPS: Tuple[LandmarkName, LandmarkName] = (LandmarkName.LEFT_HIP, LandmarkName.RIGHT_HIP)
KNEES: Tuple[LandmarkName, LandmarkName] = (LandmarkName.LEFT_KNEE, LandmarkName.RIGHT_KNEE)

# Cadenas articulares por lado, usadas por las reglas "en cualquiera de los lados".
LEG_CHAINS: Dict[str, Tuple[LandmarkName, LandmarkName]] = {
    "left": (LandmarkName.LEFT_KNEE, LandmarkName.LEFT_ANKLE),
    "right": (LandmarkName.RIGHT_KNEE, LandmarkName.RIGHT_ANKLE),
}
ARM_CHAINS: Dict[str, Tuple[LandmarkName, LandmarkName, LandmarkName]] = {
    "left": (LandmarkName.LEFT_SHOULDER, LandmarkName.LEFT_ELBOW, LandmarkName.LEFT_WRIST),
    "right": (LandmarkName.RIGHT_SHOULDER, LandmarkName.RIGHT_ELBOW, LandmarkName.RIGHT_WRIST),
}

__all__ = [
    "LANDMARK_COUNT",
    "LandmarkName",
    "MEDIAPIPE_INDEX",
    "SHOULDERS",
    "ELBOWS",
    "HIPS",
    "KNEES",
    "LEG_CHAINS",
    "ARM_CHAINS",
]

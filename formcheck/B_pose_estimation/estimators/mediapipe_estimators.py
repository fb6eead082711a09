"""Estimador de pose basado en Mediapipe listo para usar."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import cv2
import numpy as np

from formcheck.config.constants import MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE
from formcheck.config.models import PoseConfig
from formcheck.config.settings import MODEL_COMPLEXITY, POSE_STATIC_IMAGE_MODE, build_pose_kwargs
from formcheck.core.errors import PoseEstimationError

from ..geometry import landmark_set_from_proto, mean_confidence
from ..types import LandmarkSet
from .base import PoseEstimatorBase

logger = logging.getLogger(__name__)


def _load_pose_solution() -> Any:
    """Importa la solución ``pose`` de MediaPipe solo cuando se necesita."""

    from mediapipe.python.solutions import pose as mp_pose

    return mp_pose


class MediaPipePoseEstimator(PoseEstimatorBase):
    """Estima la pose de imágenes BGR sueltas con el grafo ``Pose`` de MediaPipe.

    El grafo se crea en la primera llamada a ``estimate`` y se libera en
    ``close``. No admite llamadas concurrentes, así que ``estimate`` se
    serializa con un *lock*; con varios trabajadores el paralelismo útil queda
    en la decodificación."""

    def __init__(
        self,
        static_image_mode: bool = POSE_STATIC_IMAGE_MODE,
        model_complexity: int = MODEL_COMPLEXITY,
        min_detection_confidence: float = MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence: float = MIN_TRACKING_CONFIDENCE,
    ) -> None:
        self.pose_kwargs = build_pose_kwargs(
            static_image_mode=static_image_mode,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self.pose: Optional[Any] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: PoseConfig) -> "MediaPipePoseEstimator":
        return cls(
            static_image_mode=cfg.static_image_mode,
            model_complexity=cfg.model_complexity,
            min_detection_confidence=cfg.min_detection_confidence,
            min_tracking_confidence=cfg.min_tracking_confidence,
        )

    def _ensure_pose(self) -> None:
        if self.pose is None:
            logger.debug("Creating MediaPipe Pose graph %s", self.pose_kwargs)
            self.pose = _load_pose_solution().Pose(**self.pose_kwargs)

    def estimate(self, image_bgr: np.ndarray) -> LandmarkSet:
        if image_bgr is None or getattr(image_bgr, "size", 0) == 0:
            raise PoseEstimationError("Empty image")
        try:
            rgb_image = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
            with self._lock:
                self._ensure_pose()
                results = self.pose.process(rgb_image)  # type: ignore[union-attr]
        except (cv2.error, RuntimeError, ValueError) as exc:
            raise PoseEstimationError(f"Pose graph failed on frame: {exc}") from exc
        if not results.pose_landmarks:
            raise PoseEstimationError("No pose detected in frame")
        landmarks = landmark_set_from_proto(results.pose_landmarks.landmark)
        if not landmarks:
            raise PoseEstimationError("Pose detected without usable landmarks")
        logger.debug(
            "Pose estimated: %d landmarks, mean confidence %.2f",
            len(landmarks),
            mean_confidence(landmarks.values()),
        )
        return landmarks

    def close(self) -> None:
        with self._lock:
            if self.pose is not None:
                self.pose.close()
                self.pose = None


__all__ = ["MediaPipePoseEstimator"]

# tests/conftest.py
"""Dobles de prueba comunes: landmarks sintéticos, decodificador y estimador falsos."""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Iterable, Mapping, Optional

import numpy as np
import pytest

from formcheck.A_preprocessing.video_decoder import VideoDecoderBase
from formcheck.B_pose_estimation.estimators.base import PoseEstimatorBase
from formcheck.B_pose_estimation.types import Landmark, LandmarkSet
from formcheck.core.errors import FrameDecodeError, PoseEstimationError, VideoOpenError


def build_landmarks(confidence: float = 0.9, **points: Iterable[float]) -> LandmarkSet:
    """``build_landmarks(left_hip=(0.5, 0.6), right_hip=(0.5, 0.6, 0.3))``.

    El tercer valor opcional sustituye a ``confidence`` para ese punto."""

    data = {}
    for name, values in points.items():
        values = tuple(values)
        conf = values[2] if len(values) > 2 else confidence
        data[name] = Landmark(x=float(values[0]), y=float(values[1]), confidence=float(conf))
    return LandmarkSet(data)


class FakeDecoder(VideoDecoderBase):
    """Decodificador guionizado.

    La "imagen" devuelta es un array 1x1 con el instante solicitado, de modo que
    :class:`FakePoseEstimator` puede saber a qué fotograma corresponde."""

    def __init__(
        self,
        duration: float = 60.0,
        *,
        fail_at: Iterable[float] = (),
        probe_error: Optional[Exception] = None,
        gate: Optional[threading.Event] = None,
    ) -> None:
        self.duration = duration
        self.fail_at = {round(float(t), 6) for t in fail_at}
        self.probe_error = probe_error
        self.gate = gate
        self.probe_calls = 0
        self.decoded: list[float] = []
        self._lock = threading.Lock()

    def probe(self, video: Any) -> float:
        self.probe_calls += 1
        if self.gate is not None:
            self.gate.wait(timeout=5.0)
        if self.probe_error is not None:
            raise self.probe_error
        return self.duration

    def decode_frame(self, video: Any, timestamp_sec: float) -> np.ndarray:
        with self._lock:
            self.decoded.append(timestamp_sec)
        if round(float(timestamp_sec), 6) in self.fail_at:
            raise FrameDecodeError(f"cannot decode {timestamp_sec:.2f}s")
        return np.full((1, 1), float(timestamp_sec), dtype=np.float64)


class FakePoseEstimator(PoseEstimatorBase):
    """Estimador que responde según el instante codificado en la imagen.

    ``landmarks_for(t)`` devuelve un :class:`LandmarkSet` o ``None`` para
    simular que no se detecta a nadie en ese fotograma."""

    def __init__(
        self,
        landmarks_for: Callable[[float], Optional[LandmarkSet]],
        *,
        delays: Optional[Mapping[float, float]] = None,
    ) -> None:
        self.landmarks_for = landmarks_for
        self.delays = {round(float(k), 6): v for k, v in (delays or {}).items()}
        self.closed = False

    def estimate(self, image_bgr: np.ndarray) -> LandmarkSet:
        timestamp = float(image_bgr[0, 0])
        delay = self.delays.get(round(timestamp, 6))
        if delay:
            time.sleep(delay)
        landmarks = self.landmarks_for(timestamp)
        if landmarks is None:
            raise PoseEstimationError(f"no pose at {timestamp:.2f}s")
        return landmarks

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_landmarks() -> Callable[..., LandmarkSet]:
    return build_landmarks


@pytest.fixture
def shallow_squat() -> LandmarkSet:
    """Caderas 0.20 por debajo de las rodillas y rodillas bien separadas de los tobillos."""

    return build_landmarks(
        left_hip=(0.45, 0.80),
        right_hip=(0.55, 0.80),
        left_knee=(0.40, 0.60),
        right_knee=(0.60, 0.60),
        left_ankle=(0.30, 0.90),
        right_ankle=(0.70, 0.90),
    )


@pytest.fixture
def clean_push_up() -> LandmarkSet:
    return build_landmarks(
        left_shoulder=(0.30, 0.40),
        right_shoulder=(0.35, 0.40),
        left_hip=(0.60, 0.45),
        right_hip=(0.65, 0.45),
        left_elbow=(0.30, 0.42),
        right_elbow=(0.35, 0.42),
    )


@pytest.fixture
def missing_video_decoder() -> FakeDecoder:
    return FakeDecoder(probe_error=VideoOpenError("Could not open the video: missing.mp4"))

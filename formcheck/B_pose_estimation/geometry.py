"""Utilidades geométricas sobre conjuntos de landmarks.

Todas las funciones son totales: nunca lanzan excepciones por datos ausentes.
Cuando un cálculo no es posible (landmark ausente o poco fiable) se devuelve
``None`` y la regla que lo necesitaba se omite para ese fotograma."""

from __future__ import annotations

import math
from typing import Iterable, Literal, Optional, Sequence

import numpy as np

from formcheck.config.settings import DEFAULT_LANDMARK_MIN_VISIBILITY

from .constants import MEDIAPIPE_INDEX
from .types import Landmark, LandmarkSet, NameLike

Axis = Literal["x", "y"]


def confidence_ok(landmark: Optional[Landmark], threshold: float = DEFAULT_LANDMARK_MIN_VISIBILITY) -> bool:
    """Indica si ``landmark`` existe y su confianza alcanza ``threshold``."""

    if landmark is None:
        return False
    confidence = float(landmark.confidence)
    if not math.isfinite(confidence):
        return False
    return confidence >= float(threshold)


def midpoint_y(a: Landmark, b: Landmark) -> float:
    """Altura media de dos landmarks (p. ej. la línea de hombros)."""

    return (float(a.y) + float(b.y)) * 0.5


def abs_delta(a: Landmark, b: Landmark, axis: Axis = "y") -> float:
    """Distancia absoluta entre dos landmarks sobre un único eje."""

    if axis == "x":
        return abs(float(a.x) - float(b.x))
    if axis == "y":
        return abs(float(a.y) - float(b.y))
    raise ValueError(f"Unsupported axis: {axis!r}")


def observed(
    landmarks: LandmarkSet,
    *names: NameLike,
    threshold: float = DEFAULT_LANDMARK_MIN_VISIBILITY,
) -> Optional[tuple[Landmark, ...]]:
    """Devuelve los landmarks pedidos si todos están presentes y son fiables."""

    found: list[Landmark] = []
    for name in names:
        landmark = landmarks.get(name)
        if not confidence_ok(landmark, threshold):
            return None
        found.append(landmark)  # type: ignore[arg-type]
    return tuple(found)


def pair_midpoint_y(
    landmarks: LandmarkSet,
    left: NameLike,
    right: NameLike,
    *,
    threshold: float = DEFAULT_LANDMARK_MIN_VISIBILITY,
) -> Optional[float]:
    """``midpoint_y`` de un par izquierda/derecha o ``None`` si no es computable."""

    pair = observed(landmarks, left, right, threshold=threshold)
    if pair is None:
        return None
    return midpoint_y(*pair)


def landmark_set_from_proto(
    landmarks: Sequence[object],
    *,
    index_map=MEDIAPIPE_INDEX,
) -> LandmarkSet:
    """Convierte los 33 landmarks de Mediapipe en un :class:`LandmarkSet`.

    Se conservan solo las articulaciones que usan las reglas; la ``visibility``
    de MediaPipe se interpreta como confianza. Los puntos con coordenadas no
    finitas se descartan para que cuenten como no observados."""

    converted: dict = {}
    for name, idx in index_map.items():
        if idx >= len(landmarks):
            continue
        lm = landmarks[idx]
        x = float(getattr(lm, "x", np.nan))
        y = float(getattr(lm, "y", np.nan))
        if not (np.isfinite(x) and np.isfinite(y)):
            continue
        converted[name] = Landmark(x=x, y=y, confidence=float(getattr(lm, "visibility", np.nan)))
    return LandmarkSet(converted)


def mean_confidence(landmarks: Iterable[Landmark]) -> float:
    """Media de confianza de ``landmarks`` (NaN si no hay valores finitos)."""

    values = np.asarray([float(lm.confidence) for lm in landmarks], dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return float("nan")
    return float(np.mean(values))


__all__ = [
    "confidence_ok",
    "midpoint_y",
    "abs_delta",
    "observed",
    "pair_midpoint_y",
    "landmark_set_from_proto",
    "mean_confidence",
]

"""Muestreo uniforme de instantes a lo largo de la duración de un vídeo."""

from __future__ import annotations

import logging
import math

from formcheck.config.settings import DEFAULT_FRAME_COUNT

logger = logging.getLogger(__name__)


def sample_timestamps(duration: float, frame_count: int = DEFAULT_FRAME_COUNT) -> list[float]:
    """Calcular ``frame_count`` instantes equiespaciados en ``[0, duration)``.

    ``t[i] = i * duration / frame_count``: el primero es 0.0 y el último queda
    estrictamente antes del final, de modo que nunca se pide un fotograma en o
    más allá de ``duration``. Una duración no positiva (o no finita) produce una
    lista vacía; las etapas posteriores terminan entonces sin hallazgos."""

    frame_count = int(frame_count)
    if frame_count <= 0:
        raise ValueError(f"frame_count must be positive, got {frame_count}")

    duration = float(duration)
    if not math.isfinite(duration) or duration <= 0.0:
        logger.warning("Video duration %.3f is not usable; no frames will be sampled", duration)
        return []

    return [i * duration / frame_count for i in range(frame_count)]


__all__ = ["sample_timestamps"]

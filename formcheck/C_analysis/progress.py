"""Notificación de progreso compatible con *callbacks* de una o dos posiciones."""

from __future__ import annotations

from typing import Callable, Optional, Protocol


class ProgressCallback(Protocol):
    def __call__(self, progress: int, message: str, /) -> None:
        """Firma preferida: porcentaje [0..100] y un mensaje legible."""


# Tramo del porcentaje reservado al bucle de fotogramas.
FRAMES_START = 10
FRAMES_END = 90


def notify(cb: Optional[Callable[..., None]], progress: int, message: str) -> None:
    """Invocar *callbacks* compatibles con firmas antiguas y nuevas."""

    if not cb:
        return
    try:
        cb(progress, message)
    except TypeError:
        cb(progress)


def frame_progress(done: int, total: int) -> int:
    """Traduce ``done/total`` fotogramas al tramo 10-90 % de la barra."""

    if total <= 0:
        return FRAMES_END
    fraction = max(0.0, min(1.0, done / float(total)))
    return int(round(FRAMES_START + fraction * (FRAMES_END - FRAMES_START)))


def phase_for(p: int) -> str:
    value = int(max(0, min(100, p)))
    if value < 5:
        return "Preparing…"
    if value < FRAMES_START:
        return "Sampling frames…"
    if value < FRAMES_END:
        return "Analyzing frames…"
    if value < 95:
        return "Consolidating feedback…"
    if value < 100:
        return "Scoring…"
    return "Finishing up…"


__all__ = ["ProgressCallback", "notify", "frame_progress", "phase_for"]

"""Decodificadores de vídeo: duración del archivo e imagen en un instante dado."""

from __future__ import annotations

import logging
import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import cv2
import numpy as np

from formcheck.core.errors import FrameDecodeError, VideoOpenError

logger = logging.getLogger(__name__)

__all__ = ["VideoInfo", "VideoDecoderBase", "OpenCVVideoDecoder", "probe_video_info"]


@dataclass(slots=True)
class VideoInfo:
    """Metadatos estructurados derivados de un archivo de vídeo."""
    path: Path
    width: int | None
    height: int | None
    fps: float | None              # None si no hay un valor válido
    frame_count: int | None        # None si no se puede determinar
    duration_sec: float            # 0.0 si no hay duración fiable


class VideoDecoderBase(ABC):
    """Contrato mínimo que necesita la *pipeline* de un decodificador de vídeo.

    ``video`` es un identificador opaco para la *pipeline* (normalmente una
    ruta); solo el decodificador sabe interpretarlo."""

    @abstractmethod
    def probe(self, video: Any) -> float:
        """Devuelve la duración en segundos o lanza :class:`VideoOpenError`."""

    @abstractmethod
    def decode_frame(self, video: Any, timestamp_sec: float) -> np.ndarray:
        """Devuelve la imagen BGR en ``timestamp_sec`` o lanza :class:`FrameDecodeError`."""

    def close(self) -> None:
        """Libera recursos asociados al decodificador (sobrescribible)."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> Optional[bool]:
        self.close()
        return None


def _estimate_duration_seconds(cap: cv2.VideoCapture, frame_count: int) -> float:
    """Calcula la duración aproximada usando la marca temporal del último frame."""
    if frame_count <= 1:
        return 0.0

    original_pos = cap.get(cv2.CAP_PROP_POS_FRAMES)
    try:
        cap.set(cv2.CAP_PROP_POS_FRAMES, max(frame_count - 1, 0))
        if cap.grab():
            duration_msec = cap.get(cv2.CAP_PROP_POS_MSEC) or 0.0
            return float(duration_msec) / 1000.0 if duration_msec > 0 else 0.0
    finally:
        if original_pos is not None and original_pos >= 0:
            cap.set(cv2.CAP_PROP_POS_FRAMES, original_pos)
    return 0.0


def probe_video_info(path: Path, cap: cv2.VideoCapture) -> VideoInfo:
    """Lee dimensiones, FPS y duración desde un ``VideoCapture`` ya abierto.

    Reglas:
    - Con FPS válido (> 1 y finito) la duración es ``frame_count / fps``.
    - Si no, se estima con la marca temporal del último fotograma.
    - Si nada funciona la duración queda en 0.0 y el llamador decide.
    """
    width_val = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
    height_val = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
    fps_raw = float(cap.get(cv2.CAP_PROP_FPS) or 0.0)
    frame_count_raw = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)

    fps: float | None = fps_raw if math.isfinite(fps_raw) and fps_raw > 1.0 else None
    if fps is not None and frame_count_raw > 0:
        duration = frame_count_raw / fps
    else:
        duration = _estimate_duration_seconds(cap, frame_count_raw)
        if duration > 0.0 and frame_count_raw > 0:
            fps = frame_count_raw / duration
            logger.warning("Invalid metadata FPS. Estimated from duration: %.2f fps.", fps)

    info = VideoInfo(
        path=path,
        width=width_val if width_val > 0 else None,
        height=height_val if height_val > 0 else None,
        fps=fps,
        frame_count=frame_count_raw if frame_count_raw > 0 else None,
        duration_sec=float(duration),
    )
    logger.info(
        "VideoInfo: path=%s size=%sx%s frames=%s fps=%s duration=%.2fs",
        path.name, info.width, info.height, info.frame_count, info.fps, info.duration_sec,
    )
    return info


class OpenCVVideoDecoder(VideoDecoderBase):
    """Decodificador basado en ``cv2.VideoCapture`` con búsqueda por milisegundos.

    Mantiene un ``VideoCapture`` abierto por ruta. Los accesos se serializan con
    un *lock* porque un mismo ``VideoCapture`` no puede buscar y leer desde
    varios hilos a la vez."""

    def __init__(self) -> None:
        self._captures: dict[Path, cv2.VideoCapture] = {}
        self._infos: dict[Path, VideoInfo] = {}
        self._lock = threading.Lock()

    def _capture_for(self, path: Path) -> cv2.VideoCapture:
        cap = self._captures.get(path)
        if cap is not None:
            return cap
        if not path.is_file():
            raise VideoOpenError(f"Video path does not exist: {path}")
        cap = cv2.VideoCapture(str(path))
        if not cap.isOpened():
            cap.release()
            raise VideoOpenError(f"Could not open the video: {path}")
        self._captures[path] = cap
        return cap

    def info(self, video: Any) -> VideoInfo:
        """Metadatos del vídeo; se calculan una vez y se reutilizan."""

        path = Path(video).expanduser()
        with self._lock:
            cached = self._infos.get(path)
            if cached is not None:
                return cached
            cap = self._capture_for(path)
            info = probe_video_info(path, cap)
            if info.duration_sec <= 0.0:
                ok, _frame = cap.read()
                cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
                if not ok:
                    raise VideoOpenError(f"Video has no decodable frames: {path}")
            self._infos[path] = info
            return info

    def probe(self, video: Any) -> float:
        return self.info(video).duration_sec

    def decode_frame(self, video: Any, timestamp_sec: float) -> np.ndarray:
        path = Path(video).expanduser()
        with self._lock:
            try:
                cap = self._capture_for(path)
            except VideoOpenError as exc:
                raise FrameDecodeError(str(exc)) from exc
            try:
                cap.set(cv2.CAP_PROP_POS_MSEC, float(timestamp_sec) * 1000.0)
                ok, frame = cap.read()
            except cv2.error as exc:
                raise FrameDecodeError(f"OpenCV failed at {timestamp_sec:.3f}s in {path.name}: {exc}") from exc
        if not ok or frame is None:
            raise FrameDecodeError(f"Could not decode frame at {timestamp_sec:.3f}s from {path.name}")
        return frame

    def close(self) -> None:
        with self._lock:
            for cap in self._captures.values():
                cap.release()
            self._captures.clear()
            self._infos.clear()

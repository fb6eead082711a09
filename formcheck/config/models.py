"""Modelos ``dataclass`` que describen la configuración del pipeline."""
from __future__ import annotations
from dataclasses import dataclass, field, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import hashlib
import json

from .constants import DEFAULT_OUTPUT_DIR, MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE
from .settings import (
    DEFAULT_FRAME_COUNT,
    DEFAULT_FRAME_TIMEOUT_SEC,
    DEFAULT_MAX_WORKERS,
    MODEL_COMPLEXITY,
    POSE_STATIC_IMAGE_MODE,
)


@dataclass
class SamplingConfig:
    """Cuántos fotogramas se muestrean a lo largo del vídeo."""
    frame_count: int = DEFAULT_FRAME_COUNT


@dataclass
class PoseConfig:
    """Parámetros del estimador de pose."""
    static_image_mode: bool = POSE_STATIC_IMAGE_MODE
    model_complexity: int = MODEL_COMPLEXITY
    min_detection_confidence: float = float(MIN_DETECTION_CONFIDENCE)
    min_tracking_confidence: float = float(MIN_TRACKING_CONFIDENCE)


@dataclass
class RunnerConfig:
    """Ejecución por fotograma: paralelismo y límite de tiempo."""
    max_workers: int = DEFAULT_MAX_WORKERS
    frame_timeout_sec: Optional[float] = DEFAULT_FRAME_TIMEOUT_SEC


@dataclass
class OutputConfig:
    """Carpeta donde la CLI deja los informes cuando no se indica otra ruta."""
    base_dir: Path = DEFAULT_OUTPUT_DIR


@dataclass
class Config:
    """Configuración de alto nivel consumida por el pipeline completo."""
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    pose: PoseConfig = field(default_factory=PoseConfig)
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def copy(self) -> "Config":
        """Devuelve una copia profunda del objeto de configuración."""
        return copy.deepcopy(self)

    # --- Serialisation helpers -------------------------------------------------
    def _to_dict(self, convert_paths: bool = False) -> Dict[str, Any]:
        return _dataclass_to_dict(self, convert_paths=convert_paths)

    def to_dict(self) -> Dict[str, Any]:
        """Entrega la configuración como diccionario de Python."""
        return self._to_dict(convert_paths=False)

    def to_serializable_dict(self) -> Dict[str, Any]:
        """Genera una representación serializable en JSON."""
        return self._to_dict(convert_paths=True)

    # --- Fingerprint -----------------------------------------------------------
    def fingerprint(self) -> str:
        """Calcula un hash SHA1 de los parámetros que alteran el resultado."""
        payload = {
            "sampling": _dataclass_to_dict(self.sampling, convert_paths=True),
            "pose": _dataclass_to_dict(self.pose, convert_paths=True),
        }
        encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
        return hashlib.sha1(encoded).hexdigest()


# --- Internal utilities -------------------------------------------------------

def _dataclass_to_dict(obj: Any, *, convert_paths: bool = False) -> Any:
    """Convierte recursivamente ``dataclasses`` (y anidados) en diccionarios."""
    if is_dataclass(obj):
        return {key: _dataclass_to_dict(value, convert_paths=convert_paths) for key, value in obj.__dict__.items()}
    if isinstance(obj, dict):
        return {key: _dataclass_to_dict(value, convert_paths=convert_paths) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_dataclass_to_dict(value, convert_paths=convert_paths) for value in obj]
    if isinstance(obj, Path):
        return str(obj) if convert_paths else obj
    return obj


def _update_dataclass(instance: Any, updates: Dict[str, Any]) -> Any:
    """Actualiza recursivamente ``instance`` respetando los límites de cada ``dataclass``."""
    for key, value in updates.items():
        if not hasattr(instance, key):
            continue
        current = getattr(instance, key)
        if is_dataclass(current) and isinstance(value, dict):
            _update_dataclass(current, value)
        elif isinstance(current, Path) and isinstance(value, str):
            setattr(instance, key, Path(value))
        else:
            setattr(instance, key, value)
    return instance

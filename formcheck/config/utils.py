"""Utilidades para cargar configuraciones por defecto o desde archivos YAML.

Los valores del YAML se mezclan sobre la configuración base; las claves que no
existen en los ``dataclasses`` se ignoran en lugar de fallar."""
from pathlib import Path

import yaml

from .models import Config, _update_dataclass


def load_default() -> Config:
    """Obtener la configuración por defecto empleada por la CLI y las sesiones."""
    return Config()


def from_yaml(path: str | Path) -> Config:
    """Cargar una configuración desde un YAML y mezclarla con los valores base."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    cfg = load_default()
    _update_dataclass(cfg, data)
    return cfg

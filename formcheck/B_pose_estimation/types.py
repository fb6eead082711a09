"""Tipos ligeros que describen landmarks y conjuntos de pose por fotograma."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Union

import numpy as np

from .constants import LandmarkName

NameLike = Union[LandmarkName, str]


@dataclass(frozen=True)
class Landmark:
    """Punto anatómico en coordenadas normalizadas de imagen con su confianza."""

    x: float
    y: float
    confidence: float

    def to_dict(self) -> dict[str, float]:
        """Exporta el landmark a un diccionario simple de floats."""

        return {"x": float(self.x), "y": float(self.y), "confidence": float(self.confidence)}

    @classmethod
    def from_mapping(cls, data: Mapping[str, float]) -> "Landmark":
        """Crea un ``Landmark`` tomando valores de cualquier ``Mapping`` compatible.

        Se acepta ``visibility`` como sinónimo de ``confidence`` para poder
        reutilizar volcados de MediaPipe."""

        confidence = data.get("confidence", data.get("visibility", np.nan))
        return cls(
            x=float(data.get("x", np.nan)),
            y=float(data.get("y", np.nan)),
            confidence=float(confidence),
        )


def _as_name(key: NameLike) -> LandmarkName:
    return key if isinstance(key, LandmarkName) else LandmarkName(str(key))


class LandmarkSet(Mapping[LandmarkName, Landmark]):
    """Conjunto inmutable de landmarks de un fotograma, posiblemente parcial.

    La ausencia de un landmark es un caso normal: ``get`` devuelve ``None`` y
    ``in`` devuelve ``False``. Las claves pueden indicarse como
    :class:`LandmarkName` o con su valor textual (``"left_knee"``)."""

    __slots__ = ("_data",)

    def __init__(self, landmarks: Optional[Mapping[NameLike, Landmark]] = None) -> None:
        data = {_as_name(name): lm for name, lm in (landmarks or {}).items()}
        self._data = MappingProxyType(data)

    def __getitem__(self, key: NameLike) -> Landmark:
        try:
            return self._data[_as_name(key)]
        except ValueError:
            raise KeyError(key) from None

    def __iter__(self) -> Iterator[LandmarkName]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        try:
            return _as_name(key) in self._data  # type: ignore[arg-type]
        except ValueError:
            return False

    def __repr__(self) -> str:
        inner = ", ".join(f"{name.value}={lm!r}" for name, lm in self._data.items())
        return f"LandmarkSet({inner})"

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Exporta el conjunto con nombres textuales como claves."""

        return {name.value: lm.to_dict() for name, lm in self._data.items()}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, float]]) -> "LandmarkSet":
        """Construye un conjunto a partir de un diccionario anidado de floats."""

        return cls({name: Landmark.from_mapping(values) for name, values in data.items()})


__all__ = ["Landmark", "LandmarkSet", "NameLike"]

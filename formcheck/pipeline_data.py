"""Estructuras de datos compartidas por todo el pipeline de análisis."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import pandas as pd

from formcheck.core.types import ExerciseType, FeedbackCategory, Severity


@dataclass(frozen=True)
class Finding:
    """Un problema de técnica detectado; objeto valor sin identidad."""

    category: FeedbackCategory
    severity: Severity
    message: str
    suggestion: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class FrameFinding:
    """Hallazgo etiquetado con el fotograma del que procede."""

    frame_index: int
    timestamp_sec: float
    finding: Finding


@dataclass
class RunStats:
    """Estadísticas de ejecución que acompañan al resultado."""

    config_sha1: str
    duration_sec: float
    frames_sampled: int
    frames_analyzed: int
    decode_failures: int = 0
    pose_failures: int = 0
    timeouts: int = 0
    # Tiempos por etapa (milisegundos).
    t_probe_ms: Optional[float] = None
    t_frames_ms: Optional[float] = None
    t_total_ms: Optional[float] = None

    @property
    def frames_skipped(self) -> int:
        return self.decode_failures + self.pose_failures + self.timeouts


@dataclass(frozen=True)
class AnalysisResult:
    """Resultado completo e inmutable de un análisis terminado con éxito.

    Attributes:
        findings: hallazgos consolidados, como mucho uno por par
            ``(category, message)``.
        frame_findings: hallazgos por fotograma previos a la consolidación,
            útiles para trazar en qué instantes apareció cada problema.
    """

    exercise_type: ExerciseType
    overall_score: float
    findings: tuple[Finding, ...]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    video: Optional[Union[str, Path]] = None
    stats: Optional[RunStats] = None
    frame_findings: tuple[FrameFinding, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convierte el resultado en un diccionario serializable en JSON."""

        stats_dict = asdict(self.stats) if self.stats is not None else None
        if stats_dict is not None:
            stats_dict["frames_skipped"] = self.stats.frames_skipped  # type: ignore[union-attr]
        return {
            "exercise_type": self.exercise_type.value,
            "overall_score": float(self.overall_score),
            "findings": [finding.to_dict() for finding in self.findings],
            "timestamp": self.timestamp.isoformat(),
            "video": str(self.video) if self.video is not None else None,
            "stats": stats_dict,
        }


class RunStatus(str, Enum):
    """Fases por las que pasa una sesión de análisis."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineState:
    """Instantánea observable del estado de una sesión."""

    status: RunStatus = RunStatus.IDLE
    result: Optional[AnalysisResult] = None
    error: Optional[BaseException] = None
    progress: int = 0
    message: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.status in (RunStatus.SUCCEEDED, RunStatus.FAILED)

    @classmethod
    def idle(cls) -> "PipelineState":
        return cls()

    @classmethod
    def running(cls, progress: int = 0, message: str = "") -> "PipelineState":
        return cls(status=RunStatus.RUNNING, progress=progress, message=message)

    @classmethod
    def succeeded(cls, result: AnalysisResult) -> "PipelineState":
        return cls(status=RunStatus.SUCCEEDED, result=result, progress=100, message="Done")

    @classmethod
    def failed(cls, error: BaseException, progress: int = 0) -> "PipelineState":
        return cls(status=RunStatus.FAILED, error=error, progress=progress, message=str(error))


FRAME_FINDING_COLUMNS = ["frame_idx", "time_s", "category", "severity", "message", "suggestion"]


def frame_findings_to_dataframe(frame_findings: Iterable[FrameFinding]) -> pd.DataFrame:
    """Tabla con una fila por hallazgo y fotograma, ordenada por fotograma."""

    rows = [
        {
            "frame_idx": item.frame_index,
            "time_s": float(item.timestamp_sec),
            "category": item.finding.category.value,
            "severity": item.finding.severity.value,
            "message": item.finding.message,
            "suggestion": item.finding.suggestion,
        }
        for item in frame_findings
    ]
    df = pd.DataFrame(rows, columns=FRAME_FINDING_COLUMNS)
    if not df.empty:
        df = df.sort_values(["frame_idx", "category", "message"], kind="stable").reset_index(drop=True)
    return df

"""Exportación del resultado: resumen legible, JSON y CSV por fotograma."""

from __future__ import annotations

import json
import math
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from formcheck import config
from formcheck.pipeline_data import AnalysisResult, frame_findings_to_dataframe


def _json_safe(value: Any) -> Any:
    """Convierte recursivamente ``value`` en una estructura JSON estricta.

    NaN/Inf pasan a ``None``; ``Path``, ``Enum`` y ``datetime`` a texto."""

    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    if isinstance(value, np.generic):
        return _json_safe(value.item())
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    return value


def build_report_payload(result: AnalysisResult, cfg: Optional[config.Config] = None) -> Dict[str, Any]:
    """Diccionario completo del informe, con la configuración usada si se indica."""

    payload = result.to_dict()
    payload["instructions"] = list(result.exercise_type.instructions)
    if cfg is not None:
        payload["config"] = cfg.to_serializable_dict()
    return _json_safe(payload)


def write_json_report(result: AnalysisResult, path: str | Path, cfg: Optional[config.Config] = None) -> Path:
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps(build_report_payload(result, cfg), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return out


def write_findings_csv(result: AnalysisResult, path: str | Path) -> Path:
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    frame_findings_to_dataframe(result.frame_findings).to_csv(out, index=False)
    return out


def summarize_result(result: AnalysisResult) -> str:
    """Texto breve para consola con puntuación, hallazgos e indicaciones."""

    exercise = result.exercise_type
    lines = [f"{exercise.label}: score {result.overall_score:.1f}/100"]
    if result.stats is not None:
        lines.append(
            f"Frames analyzed: {result.stats.frames_analyzed}/{result.stats.frames_sampled}"
        )
    if result.findings:
        lines.append("Feedback:")
        for finding in result.findings:
            lines.append(f"  [{finding.severity.value.upper()}] {finding.message}")
            lines.append(f"      {finding.suggestion}")
    else:
        lines.append("No form issues detected.")
    lines.append("Instructions:")
    lines.extend(f"  {idx}. {text}" for idx, text in enumerate(exercise.instructions, start=1))
    return "\n".join(lines)


__all__ = ["build_report_payload", "write_json_report", "write_findings_csv", "summarize_result"]

"""Paquete que agrupa reglas, consolidación, puntuación y orquestación del análisis."""

from formcheck.core.errors import (
    AnalysisCancelled,
    FrameDecodeError,
    FrameError,
    PipelineBusy,
    PipelineError,
    PoseEstimationError,
    SessionFinished,
    SessionStateError,
    VideoOpenError,
)
from .consolidation import consolidate
from .pipeline import AnalysisSession, analyze_video
from .rules import RULES, evaluate_frame, evaluator_for
from .runner import FrameRunResult, run_frames
from .scoring import score_findings

__all__ = [
    "AnalysisSession",
    "analyze_video",
    "run_frames",
    "FrameRunResult",
    "consolidate",
    "score_findings",
    "RULES",
    "evaluate_frame",
    "evaluator_for",
    "PipelineError",
    "VideoOpenError",
    "AnalysisCancelled",
    "FrameError",
    "FrameDecodeError",
    "PoseEstimationError",
    "SessionStateError",
    "PipelineBusy",
    "SessionFinished",
]

"""Procesamiento fotograma a fotograma: decodificar, estimar pose y evaluar reglas.

Los fallos de un fotograma (decodificación, pose o tiempo agotado) nunca son
fatales: el fotograma se omite, se contabiliza y se sigue con el siguiente.
Con ``max_workers > 1`` o un ``frame_timeout`` los fotogramas se procesan en un
``ThreadPoolExecutor`` con como mucho ``max_workers`` fotogramas en vuelo; el
resultado se reordena por índice, así que la salida es la misma que la del
recorrido secuencial.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from formcheck.A_preprocessing.video_decoder import VideoDecoderBase
from formcheck.B_pose_estimation.estimators.base import PoseEstimatorBase
from formcheck.core.errors import AnalysisCancelled, FrameDecodeError, PoseEstimationError
from formcheck.core.types import ExerciseType
from formcheck.pipeline_data import FrameFinding

from .rules import RuleEvaluator, evaluator_for

logger = logging.getLogger(__name__)

FrameCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


class FrameOutcome(str, Enum):
    ANALYZED = "analyzed"
    DECODE_FAILED = "decode_failed"
    POSE_FAILED = "pose_failed"
    TIMED_OUT = "timed_out"


@dataclass
class FrameRunResult:
    """Hallazgos aplanados de todos los fotogramas y contadores de la pasada."""

    findings: List[FrameFinding] = field(default_factory=list)
    frames_analyzed: int = 0
    decode_failures: int = 0
    pose_failures: int = 0
    timeouts: int = 0

    @property
    def frames_skipped(self) -> int:
        return self.decode_failures + self.pose_failures + self.timeouts

    def _record(self, outcome: FrameOutcome, findings: Sequence[FrameFinding]) -> None:
        if outcome is FrameOutcome.ANALYZED:
            self.frames_analyzed += 1
            self.findings.extend(findings)
        elif outcome is FrameOutcome.DECODE_FAILED:
            self.decode_failures += 1
        elif outcome is FrameOutcome.POSE_FAILED:
            self.pose_failures += 1
        else:
            self.timeouts += 1


def _process_frame(
    video: Any,
    frame_index: int,
    timestamp: float,
    evaluate: RuleEvaluator,
    decoder: VideoDecoderBase,
    estimator: PoseEstimatorBase,
) -> tuple[FrameOutcome, List[FrameFinding]]:
    try:
        image = decoder.decode_frame(video, timestamp)
    except FrameDecodeError as exc:
        logger.debug("Frame %d (%.2fs) skipped: decode failed: %s", frame_index, timestamp, exc)
        return FrameOutcome.DECODE_FAILED, []
    except Exception:
        # Un decodificador de terceros puede fallar con sus propios tipos.
        logger.warning("Frame %d (%.2fs) skipped: unexpected decoder error", frame_index, timestamp, exc_info=True)
        return FrameOutcome.DECODE_FAILED, []

    try:
        landmarks = estimator.estimate(image)
    except PoseEstimationError as exc:
        logger.debug("Frame %d (%.2fs) skipped: pose failed: %s", frame_index, timestamp, exc)
        return FrameOutcome.POSE_FAILED, []
    except Exception:
        logger.warning("Frame %d (%.2fs) skipped: unexpected pose error", frame_index, timestamp, exc_info=True)
        return FrameOutcome.POSE_FAILED, []

    tagged = [
        FrameFinding(frame_index=frame_index, timestamp_sec=timestamp, finding=finding)
        for finding in evaluate(landmarks, frame_index)
    ]
    return FrameOutcome.ANALYZED, tagged


def run_frames(
    video: Any,
    timestamps: Sequence[float],
    exercise: ExerciseType,
    decoder: VideoDecoderBase,
    estimator: PoseEstimatorBase,
    *,
    max_workers: int = 1,
    frame_timeout: Optional[float] = None,
    should_cancel: Optional[CancelCheck] = None,
    on_frame: Optional[FrameCallback] = None,
) -> FrameRunResult:
    """Evaluar cada instante de ``timestamps`` y acumular sus hallazgos.

    ``should_cancel`` se consulta antes de cada fotograma; si devuelve ``True``
    se lanza :class:`AnalysisCancelled`. ``on_frame(done, total)`` se invoca
    tras cada fotograma, haya fallado o no.
    """

    evaluate = evaluator_for(exercise)
    total = len(timestamps)
    result = FrameRunResult()
    if total == 0:
        return result

    def _check_cancel() -> None:
        if should_cancel is not None and should_cancel():
            raise AnalysisCancelled("Analysis cancelled by the caller")

    if max_workers <= 1 and frame_timeout is None:
        for frame_index, timestamp in enumerate(timestamps):
            _check_cancel()
            outcome, findings = _process_frame(video, frame_index, timestamp, evaluate, decoder, estimator)
            result._record(outcome, findings)
            if on_frame is not None:
                on_frame(frame_index + 1, total)
    else:
        _run_with_executor(
            video,
            timestamps,
            evaluate,
            decoder,
            estimator,
            result,
            max_workers=max(1, int(max_workers)),
            frame_timeout=frame_timeout,
            check_cancel=_check_cancel,
            on_frame=on_frame,
        )

    result.findings.sort(key=lambda item: item.frame_index)
    if result.frames_skipped:
        logger.warning(
            "Skipped %d of %d frames (decode=%d pose=%d timeout=%d)",
            result.frames_skipped,
            total,
            result.decode_failures,
            result.pose_failures,
            result.timeouts,
        )
    return result


def _run_with_executor(
    video: Any,
    timestamps: Sequence[float],
    evaluate: RuleEvaluator,
    decoder: VideoDecoderBase,
    estimator: PoseEstimatorBase,
    result: FrameRunResult,
    *,
    max_workers: int,
    frame_timeout: Optional[float],
    check_cancel: Callable[[], None],
    on_frame: Optional[FrameCallback],
) -> None:
    """Ventana deslizante de ``max_workers`` fotogramas en vuelo.

    El plazo de cada fotograma cuenta desde que un hilo empieza a procesarlo.
    Un fotograma que lo agota se abandona; su hilo queda bloqueado, así que se
    retira el ejecutor actual y los fotogramas siguientes van a uno nuevo."""

    total = len(timestamps)
    started: Dict[int, float] = {}

    def _timed(frame_index: int, timestamp: float) -> tuple[FrameOutcome, List[FrameFinding]]:
        started[frame_index] = time.monotonic()
        return _process_frame(video, frame_index, timestamp, evaluate, decoder, estimator)

    def _new_executor() -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="formcheck-frame")

    executors = [_new_executor()]
    in_flight: Dict[Future, int] = {}
    next_index = 0
    done_count = 0

    def _finish(frame_index: int, outcome: FrameOutcome, findings: List[FrameFinding]) -> None:
        nonlocal done_count
        result._record(outcome, findings)
        done_count += 1
        if on_frame is not None:
            on_frame(done_count, total)

    try:
        while next_index < total or in_flight:
            check_cancel()
            while next_index < total and len(in_flight) < max_workers:
                future = executors[-1].submit(_timed, next_index, timestamps[next_index])
                in_flight[future] = next_index
                next_index += 1

            wait_for: Optional[float] = None
            if frame_timeout is not None:
                now = time.monotonic()
                remaining = [
                    started[idx] + frame_timeout - now for idx in in_flight.values() if idx in started
                ]
                wait_for = max(0.0, min(remaining)) if remaining else frame_timeout

            done, _pending = wait(list(in_flight), timeout=wait_for, return_when=FIRST_COMPLETED)
            for future in sorted(done, key=in_flight.__getitem__):
                frame_index = in_flight.pop(future)
                outcome, findings = future.result()
                _finish(frame_index, outcome, findings)

            if frame_timeout is None:
                continue
            now = time.monotonic()
            expired = [
                (future, idx)
                for future, idx in in_flight.items()
                if idx in started and now - started[idx] >= frame_timeout
            ]
            for future, frame_index in sorted(expired, key=lambda item: item[1]):
                del in_flight[future]
                logger.debug(
                    "Frame %d (%.2fs) skipped: timed out after %.2fs",
                    frame_index,
                    timestamps[frame_index],
                    frame_timeout,
                )
                _finish(frame_index, FrameOutcome.TIMED_OUT, [])
            if expired:
                executors[-1].shutdown(wait=False)
                executors.append(_new_executor())
    finally:
        # Los hilos colgados o pendientes tras una cancelación no se esperan.
        for executor in executors:
            executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["FrameOutcome", "FrameRunResult", "run_frames"]

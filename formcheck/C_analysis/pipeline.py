"""Orquestador principal del análisis de técnica de un vídeo.

Una :class:`AnalysisSession` ejecuta un único análisis y recorre los estados
``IDLE -> RUNNING -> SUCCEEDED | FAILED``. No vuelve a ``IDLE``: para analizar
otro vídeo se crea una sesión nueva. El decodificador y el estimador son
colaboradores que pertenecen al llamador; la sesión no los cierra.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, Union

from formcheck import config
from formcheck.A_preprocessing.frame_sampling import sample_timestamps
from formcheck.A_preprocessing.video_decoder import VideoDecoderBase
from formcheck.B_pose_estimation.estimators.base import PoseEstimatorBase
from formcheck.core.types import ExerciseType, as_exercise
from formcheck.pipeline_data import AnalysisResult, PipelineState, RunStats, RunStatus

from .consolidation import consolidate
from formcheck.core.errors import PipelineBusy, PipelineError, SessionFinished, VideoOpenError
from .progress import ProgressCallback, frame_progress, notify
from .runner import run_frames
from .scoring import score_findings

logger = logging.getLogger(__name__)


class AnalysisSession:
    """Sesión de un solo uso que analiza un vídeo y conserva su estado final."""

    def __init__(
        self,
        decoder: VideoDecoderBase,
        estimator: PoseEstimatorBase,
        cfg: Optional[config.Config] = None,
    ) -> None:
        self.decoder = decoder
        self.estimator = estimator
        self.cfg = (cfg or config.load_default()).copy()
        self._lock = threading.Lock()
        self._state = PipelineState.idle()
        self._cancel_event = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None

    # --- Estado observable ------------------------------------------------------
    @property
    def state(self) -> PipelineState:
        with self._lock:
            return self._state

    def _set_state(self, state: PipelineState) -> None:
        with self._lock:
            self._state = state

    def _begin(self) -> None:
        """Única puerta de entrada a ``RUNNING``."""

        with self._lock:
            if self._state.status is RunStatus.RUNNING:
                raise PipelineBusy("An analysis is already running in this session")
            if self._state.is_terminal:
                raise SessionFinished("This session already finished; start a new one")
            self._state = PipelineState.running(0, "Starting analysis")

    def cancel(self) -> None:
        """Pide detener el análisis en curso; se atiende entre fotogramas."""

        self._cancel_event.set()

    # --- Ejecución --------------------------------------------------------------
    def run(
        self,
        video: Any,
        exercise: Union[ExerciseType, str],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """Ejecutar el análisis en el hilo actual.

        Devuelve el :class:`AnalysisResult` o relanza el :class:`PipelineError`
        fatal tras dejar la sesión en ``FAILED``."""

        exercise_type = as_exercise(exercise)
        self._begin()
        return self._execute(video, exercise_type, progress_callback)

    def start(
        self,
        video: Any,
        exercise: Union[ExerciseType, str],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Future:
        """Lanzar el análisis en segundo plano y devolver su ``Future``.

        La comprobación de ``PipelineBusy`` ocurre aquí, de forma síncrona, antes
        de encolar nada."""

        exercise_type = as_exercise(exercise)
        self._begin()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="formcheck-session")
        self._executor = executor
        future = executor.submit(self._execute, video, exercise_type, progress_callback)
        # El hilo se libera al terminar aunque nadie llame a ``close``.
        future.add_done_callback(lambda _done: executor.shutdown(wait=False))
        return future

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "AnalysisSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _execute(
        self,
        video: Any,
        exercise: ExerciseType,
        progress_callback: Optional[ProgressCallback],
    ) -> AnalysisResult:
        progress = 0

        def report(value: int, message: str, *, stage: bool = True) -> None:
            nonlocal progress
            progress = value
            if stage:
                logger.info(message)
            else:
                logger.debug(message)
            self._set_state(PipelineState.running(value, message))
            notify(progress_callback, value, message)

        try:
            result = self._analyze(video, exercise, report)
        except PipelineError as exc:
            logger.error("Analysis failed: %s", exc)
            self._set_state(PipelineState.failed(exc, progress))
            raise
        except Exception as exc:
            logger.exception("Unexpected error while analysing %s", video)
            self._set_state(PipelineState.failed(exc, progress))
            raise
        self._set_state(PipelineState.succeeded(result))
        notify(progress_callback, 100, "Analysis complete")
        return result

    def _analyze(
        self,
        video: Any,
        exercise: ExerciseType,
        report: Callable[..., None],
    ) -> AnalysisResult:
        cfg = self.cfg
        config_sha1 = cfg.fingerprint()
        logger.info("CONFIG_SHA1=%s", config_sha1)

        t0 = time.perf_counter()
        report(2, "STAGE 1: Validating video...")
        try:
            duration = float(self.decoder.probe(video))
        except VideoOpenError:
            raise
        except (OSError, ValueError) as exc:
            raise VideoOpenError(f"Could not open the video: {video}: {exc}") from exc
        t1 = time.perf_counter()

        report(5, "STAGE 2: Sampling frames...")
        timestamps = sample_timestamps(duration, cfg.sampling.frame_count)
        logger.info("Sampled %d timestamps over %.2fs", len(timestamps), duration)

        report(10, f"STAGE 3: Analyzing {len(timestamps)} frames for {exercise.label}...")
        frames = run_frames(
            video,
            timestamps,
            exercise,
            self.decoder,
            self.estimator,
            max_workers=cfg.runner.max_workers,
            frame_timeout=cfg.runner.frame_timeout_sec,
            should_cancel=self._cancel_event.is_set,
            on_frame=lambda done, total: report(
                frame_progress(done, total), f"Analyzed frame {done}/{total}", stage=False
            ),
        )
        t2 = time.perf_counter()

        report(90, "STAGE 4: Consolidating feedback...")
        findings = consolidate(frames.findings)

        report(95, "STAGE 5: Scoring...")
        overall_score = score_findings(findings)
        t3 = time.perf_counter()

        stats = RunStats(
            config_sha1=config_sha1,
            duration_sec=duration,
            frames_sampled=len(timestamps),
            frames_analyzed=frames.frames_analyzed,
            decode_failures=frames.decode_failures,
            pose_failures=frames.pose_failures,
            timeouts=frames.timeouts,
            t_probe_ms=(t1 - t0) * 1000.0,
            t_frames_ms=(t2 - t1) * 1000.0,
            t_total_ms=(t3 - t0) * 1000.0,
        )
        logger.info(
            "Analysis done: exercise=%s score=%.1f findings=%d frames=%d/%d",
            exercise.value,
            overall_score,
            len(findings),
            stats.frames_analyzed,
            stats.frames_sampled,
        )
        return AnalysisResult(
            exercise_type=exercise,
            overall_score=overall_score,
            findings=tuple(findings),
            video=video if isinstance(video, (str, Path)) else None,
            stats=stats,
            frame_findings=tuple(frames.findings),
        )


def analyze_video(
    video: Any,
    exercise: Union[ExerciseType, str],
    decoder: VideoDecoderBase,
    estimator: PoseEstimatorBase,
    cfg: Optional[config.Config] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> AnalysisResult:
    """Atajo que crea una sesión, la ejecuta y la descarta."""

    with AnalysisSession(decoder, estimator, cfg) as session:
        return session.run(video, exercise, progress_callback)


__all__ = ["AnalysisSession", "analyze_video"]

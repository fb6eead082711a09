"""Command-line runner for the form-analysis pipeline."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Iterable

from formcheck import config
from formcheck.A_preprocessing.video_decoder import OpenCVVideoDecoder, VideoDecoderBase
from formcheck.B_pose_estimation.estimators import MediaPipePoseEstimator, PoseEstimatorBase
from formcheck.C_analysis.pipeline import AnalysisSession
from formcheck.C_analysis.progress import phase_for
from formcheck.config.settings import configure_environment
from formcheck.core.errors import PipelineError
from formcheck.core.types import ExerciseType, as_exercise
from formcheck.report import summarize_result, write_findings_csv, write_json_report

LOGGER = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} no es un entero válido") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("El valor debe ser un entero positivo")
    return number


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} no es un número válido") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("El valor debe ser mayor que 0")
    return number


def _exercise(value: str) -> ExerciseType:
    try:
        return as_exercise(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analiza la técnica de un ejercicio grabado en vídeo.",
    )
    parser.add_argument("--video", required=True, help="Ruta al archivo de vídeo a analizar")
    parser.add_argument(
        "--exercise",
        required=True,
        type=_exercise,
        help="Ejercicio grabado: push_up, squat o bench_press (se aceptan alias como 'pushup').",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML opcional cuyos valores se mezclan sobre la configuración por defecto.",
    )
    parser.add_argument(
        "--frames",
        type=_positive_int,
        default=None,
        help="Número de fotogramas a muestrear (por defecto 30).",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Hilos para procesar fotogramas en paralelo (por defecto 1).",
    )
    parser.add_argument(
        "--frame_timeout",
        type=_positive_float,
        default=None,
        help="Segundos máximos por fotograma; los que lo superan se omiten.",
    )
    parser.add_argument(
        "--output_json",
        default=None,
        help="Ruta donde guardar el informe completo en JSON.",
    )
    parser.add_argument(
        "--findings_csv",
        default=None,
        help="Ruta donde guardar los hallazgos por fotograma en CSV.",
    )
    parser.add_argument(
        "--save_report",
        action="store_true",
        help="Guarda el informe JSON en la carpeta de salida configurada (output.base_dir).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Muestra mensajes de log detallados durante la ejecución.",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")


def _phase_logger() -> Callable[[int, str], None]:
    """Callback de progreso que solo registra los cambios de fase."""

    last_phase: list[str] = []

    def _log(progress: int, message: str) -> None:
        phase = phase_for(progress)
        if not last_phase or last_phase[-1] != phase:
            last_phase.append(phase)
            LOGGER.info("[%3d%%] %s", progress, phase)

    return _log


def _build_decoder() -> VideoDecoderBase:
    return OpenCVVideoDecoder()


def _build_estimator(cfg: config.Config) -> PoseEstimatorBase:
    return MediaPipePoseEstimator.from_config(cfg.pose)


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    configure_environment()

    video_path = Path(args.video).expanduser()
    if not video_path.is_file():
        parser.error(f"No se encontró el vídeo: {video_path}")
    if video_path.suffix.lower() not in config.VIDEO_EXTENSIONS:
        LOGGER.warning("Unexpected video extension %s; trying to decode it anyway", video_path.suffix)

    try:
        cfg = config.from_yaml(args.config) if args.config else config.load_default()
    except (OSError, ValueError) as exc:
        parser.error(f"No se pudo leer la configuración: {exc}")

    if args.frames is not None:
        cfg.sampling.frame_count = int(args.frames)
    if args.workers is not None:
        cfg.runner.max_workers = int(args.workers)
    if args.frame_timeout is not None:
        cfg.runner.frame_timeout_sec = float(args.frame_timeout)

    decoder = _build_decoder()
    estimator = _build_estimator(cfg)
    try:
        with AnalysisSession(decoder, estimator, cfg) as session:
            result = session.run(str(video_path), args.exercise, _phase_logger())
    except PipelineError:
        LOGGER.exception("Fallo ejecutando el análisis")
        return 1
    finally:
        estimator.close()
        decoder.close()

    print(summarize_result(result))

    if args.output_json:
        out = write_json_report(result, args.output_json, cfg)
        print(f"Report saved to: {out}")
    if args.save_report:
        target = Path(cfg.output.base_dir) / f"{video_path.stem}_{result.exercise_type.value}.json"
        out = write_json_report(result, target, cfg)
        print(f"Report saved to: {out}")
    if args.findings_csv:
        out = write_findings_csv(result, args.findings_csv)
        print(f"Per-frame findings saved to: {out}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())

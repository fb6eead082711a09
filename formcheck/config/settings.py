"""Parámetros por defecto y utilidades de configuración para el pipeline y la CLI."""

from __future__ import annotations

import os

from .constants import MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE


def configure_environment() -> None:
    """Ajusta variables de entorno necesarias antes de cargar MediaPipe."""

    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "2"
    os.environ["GLOG_minloglevel"] = "2"

    try:
        from absl import logging as absl_logging  # type: ignore[import-not-found]
    except ImportError:
        pass
    else:
        # Forzamos a ``absl`` a emitir solo errores para no saturar la consola.
        absl_logging.set_verbosity(absl_logging.ERROR)


# --- MUESTREO ---
# Número de fotogramas repartidos uniformemente a lo largo del vídeo.
DEFAULT_FRAME_COUNT = 30

# --- PARÁMETROS DE POSE ---
# Complejidad del grafo de MediaPipe (0/1/2). Con 30 fotogramas por vídeo el
# modelo "full" (1) basta y mantiene el análisis por debajo de unos segundos.
MODEL_COMPLEXITY = 1

# Cada fotograma muestreado está separado del anterior por varios segundos,
# por lo que no hay continuidad temporal que aprovechar.
POSE_STATIC_IMAGE_MODE = True
POSE_ENABLE_SEGMENTATION = False
POSE_SMOOTH_SEGMENTATION = False
POSE_SMOOTH_LANDMARKS = False

# Confianza mínima de un landmark para considerarlo observado. Todas las
# reglas de técnica usan este mismo umbral.
DEFAULT_LANDMARK_MIN_VISIBILITY = 0.5

# --- EJECUCIÓN POR FOTOGRAMA ---
# Con 1 trabajador los fotogramas se procesan en orden en el hilo llamador.
DEFAULT_MAX_WORKERS = 1
# Sin límite de tiempo por fotograma salvo que se configure explícitamente.
DEFAULT_FRAME_TIMEOUT_SEC: float | None = None

# --- UMBRALES DE LAS REGLAS (coordenadas normalizadas, y crece hacia abajo) ---
# Flexiones
PUSH_UP_BODY_LINE_MAX_DELTA = 0.10
PUSH_UP_ELBOW_FLARE_MARGIN = 0.05
# Sentadilla
SQUAT_DEPTH_MARGIN = 0.15
SQUAT_KNEE_CAVE_MIN_DX = 0.02
# Press de banca
BENCH_ELBOW_HEIGHT_MARGIN = 0.10
BENCH_WRIST_ELBOW_MAX_DX = 0.10

# --- PUNTUACIÓN ---
# Puntuación cuando no se detecta ningún problema; no es 100 porque el
# análisis por muestreo deja incertidumbre residual.
NO_ISSUES_SCORE = 85.0
MAX_SCORE = 100.0
MIN_SCORE = 0.0
MODERATE_DEDUCTION = 5.0
SEVERE_DEDUCTION = 15.0


def build_pose_kwargs(
    *,
    static_image_mode: bool | None = None,
    model_complexity: int | None = None,
    min_detection_confidence: float | None = None,
    min_tracking_confidence: float | None = None,
) -> dict[str, object]:
    """Configuración estándar para el grafo ``Pose`` de MediaPipe.

    Centralizar estos parámetros garantiza que todos los estimadores del
    paquete compartan modo estático y umbrales, de modo que el *pool* de grafos
    pueda reutilizar instancias entre sesiones.
    """

    return {
        "static_image_mode": POSE_STATIC_IMAGE_MODE if static_image_mode is None else bool(static_image_mode),
        "model_complexity": MODEL_COMPLEXITY if model_complexity is None else int(model_complexity),
        "smooth_landmarks": POSE_SMOOTH_LANDMARKS,
        "enable_segmentation": POSE_ENABLE_SEGMENTATION,
        "smooth_segmentation": POSE_SMOOTH_SEGMENTATION,
        "min_detection_confidence": (
            MIN_DETECTION_CONFIDENCE if min_detection_confidence is None else float(min_detection_confidence)
        ),
        "min_tracking_confidence": (
            MIN_TRACKING_CONFIDENCE if min_tracking_confidence is None else float(min_tracking_confidence)
        ),
    }

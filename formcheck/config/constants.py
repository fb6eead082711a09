"""Constantes globales de la aplicación, extensiones y rutas de vídeo."""
from pathlib import Path

# --- CONFIGURACIÓN GENERAL ---
VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv", ".m4v", ".mpg", ".mpeg", ".wmv"}

# --- RUTAS DE ARCHIVOS ---
# NOTA: usamos ``parents[2]`` porque este archivo vive en ``formcheck/config/``.
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "data" / "reports"

# --- CONSTANTES DE MEDIAPIPE ---
# Cada fotograma se analiza de forma aislada (modo imagen estática), así que
# solo interviene el umbral de detección; el de seguimiento se mantiene por
# compatibilidad con la firma de ``Pose``.
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5

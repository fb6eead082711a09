"""Tipos y utilidades comunes para etiquetar ejercicios y hallazgos de técnica.

El objetivo del módulo es normalizar las etiquetas que circulan entre la CLI,
las configuraciones y los evaluadores de reglas, evitando condicionales
repetidos. El catálogo de ejercicios es cerrado: una etiqueta desconocida es un
error del llamador y no se degrada silenciosamente."""

from __future__ import annotations

from enum import Enum
from typing import Union


class ExerciseType(str, Enum):
    """Catálogo cerrado de ejercicios que sabe evaluar la aplicación."""

    PUSH_UP = "push_up"
    SQUAT = "squat"
    BENCH_PRESS = "bench_press"

    @property
    def label(self) -> str:
        return EXERCISE_HUMAN_LABEL[self]

    @property
    def instructions(self) -> tuple[str, ...]:
        """Indicaciones de ejecución, en el orden en que se muestran al usuario."""

        return EXERCISE_INSTRUCTIONS[self]


class FeedbackCategory(str, Enum):
    """Aspecto de la técnica al que se refiere un hallazgo."""

    POSTURE = "posture"
    FORM = "form"
    RANGE_OF_MOTION = "range_of_motion"
    BODY_ALIGNMENT = "body_alignment"
    TEMPO = "tempo"


class Severity(str, Enum):
    """Gravedad de un hallazgo; ``rank`` define el orden total entre valores."""

    GOOD = "good"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.GOOD: 0,
    Severity.MODERATE: 1,
    Severity.SEVERE: 2,
}


_EXERCISE_ALIAS_MAP = {
    # Unificamos alias comunes para que "pushup" y "push-up" signifiquen lo mismo.
    "pushup": ExerciseType.PUSH_UP.value,
    "pushups": ExerciseType.PUSH_UP.value,
    "push_ups": ExerciseType.PUSH_UP.value,
    "squats": ExerciseType.SQUAT.value,
    "bench": ExerciseType.BENCH_PRESS.value,
    "benchpress": ExerciseType.BENCH_PRESS.value,
}


def _normalize_label(value: str) -> str:
    """Limpiar una etiqueta textual para compararla de forma consistente."""

    normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
    while "__" in normalized:
        normalized = normalized.replace("__", "_")
    return normalized


def as_exercise(value: Union[str, "ExerciseType"]) -> "ExerciseType":
    """Convertir una entrada libre en un ``ExerciseType`` reconocido.

    Se aceptan cadenas provenientes de archivos de configuración, argumentos en
    CLI o instancias del propio ``ExerciseType``. Al ser un catálogo cerrado,
    cualquier valor no reconocido lanza ``ValueError``."""

    if isinstance(value, ExerciseType):
        return value
    if not value:
        raise ValueError("An exercise type is required")
    normalized = _normalize_label(str(value))
    mapped = _EXERCISE_ALIAS_MAP.get(normalized, normalized)
    try:
        return ExerciseType(mapped)
    except ValueError:
        choices = ", ".join(item.value for item in ExerciseType)
        raise ValueError(f"Unknown exercise type {value!r} (expected one of: {choices})") from None


EXERCISE_HUMAN_LABEL = {
    ExerciseType.PUSH_UP: "Push-Up",
    ExerciseType.SQUAT: "Squat",
    ExerciseType.BENCH_PRESS: "Bench Press",
}


EXERCISE_INSTRUCTIONS: dict[ExerciseType, tuple[str, ...]] = {
    ExerciseType.PUSH_UP: (
        "Place your hands slightly wider than shoulder-width apart.",
        "Keep your body in a straight line from head to heels.",
        "Lower your chest until it nearly touches the floor.",
        "Keep your elbows at about 45 degrees from your body.",
        "Push back up to the starting position while exhaling.",
    ),
    ExerciseType.SQUAT: (
        "Stand with your feet shoulder-width apart, toes slightly turned out.",
        "Keep your chest up and your back straight.",
        "Push your hips back and bend your knees as if sitting in a chair.",
        "Lower until your thighs are parallel to the floor.",
        "Keep your knees in line with your toes.",
        "Drive through your heels to return to the starting position.",
    ),
    ExerciseType.BENCH_PRESS: (
        "Lie flat on the bench with your eyes under the bar.",
        "Grip the bar slightly wider than shoulder-width.",
        "Keep your feet flat on the floor and your shoulder blades retracted.",
        "Lower the bar to mid-chest with your elbows slightly below shoulder level.",
        "Keep your wrists straight and in line with your elbows.",
        "Press the bar back up until your arms are fully extended.",
    ),
}

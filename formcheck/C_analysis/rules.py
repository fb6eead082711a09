"""Reglas biomecánicas por ejercicio evaluadas sobre un único fotograma.

Cada evaluador es una función pura ``(landmarks, frame_index) -> list[Finding]``
registrada en :data:`RULES` bajo su :class:`ExerciseType`. Ninguno lanza
excepciones: si falta un landmark, o su confianza no llega al umbral, la
comprobación correspondiente simplemente no produce hallazgo.

Las coordenadas son normalizadas y ``y`` crece hacia abajo, así que "más bajo
en la imagen" equivale a una ``y`` mayor.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from formcheck.B_pose_estimation.constants import ARM_CHAINS, ELBOWS, HIPS, KNEES, LEG_CHAINS, SHOULDERS
from formcheck.B_pose_estimation.geometry import abs_delta, observed, pair_midpoint_y
from formcheck.B_pose_estimation.types import LandmarkSet
from formcheck.config.settings import (
    BENCH_ELBOW_HEIGHT_MARGIN,
    BENCH_WRIST_ELBOW_MAX_DX,
    DEFAULT_LANDMARK_MIN_VISIBILITY,
    PUSH_UP_BODY_LINE_MAX_DELTA,
    PUSH_UP_ELBOW_FLARE_MARGIN,
    SQUAT_DEPTH_MARGIN,
    SQUAT_KNEE_CAVE_MIN_DX,
)
from formcheck.core.types import ExerciseType, FeedbackCategory, Severity
from formcheck.pipeline_data import Finding

logger = logging.getLogger(__name__)

RuleEvaluator = Callable[[LandmarkSet, int], List[Finding]]

_THRESHOLD = DEFAULT_LANDMARK_MIN_VISIBILITY


# --- Catálogo de hallazgos ----------------------------------------------------
BODY_NOT_STRAIGHT = Finding(
    category=FeedbackCategory.BODY_ALIGNMENT,
    severity=Severity.MODERATE,
    message="Body not in straight line",
    suggestion="Keep your body straight from head to feet. Engage your core and squeeze your glutes.",
)
ELBOWS_FLARING = Finding(
    category=FeedbackCategory.FORM,
    severity=Severity.MODERATE,
    message="Elbows flaring too wide",
    suggestion="Keep your elbows at about 45 degrees from your body to protect your shoulders.",
)
SQUAT_TOO_SHALLOW = Finding(
    category=FeedbackCategory.RANGE_OF_MOTION,
    severity=Severity.MODERATE,
    message="Squat depth insufficient",
    suggestion="Lower until your thighs are parallel to the floor while keeping your chest up.",
)
KNEES_CAVING = Finding(
    category=FeedbackCategory.BODY_ALIGNMENT,
    severity=Severity.SEVERE,
    message="Knees caving inward",
    suggestion="Keep your knees in line with your toes and push them slightly outward.",
)
ELBOWS_TOO_HIGH = Finding(
    category=FeedbackCategory.POSTURE,
    severity=Severity.SEVERE,
    message="Elbows too high - risk of shoulder injury",
    suggestion="Keep your elbows slightly below shoulder level, at roughly 45 to 75 degrees from your torso.",
)
WRISTS_MISALIGNED = Finding(
    category=FeedbackCategory.BODY_ALIGNMENT,
    severity=Severity.MODERATE,
    message="Wrists not aligned with elbows",
    suggestion="Keep your wrists straight and in line with your elbows throughout the press.",
)


def evaluate_push_up(landmarks: LandmarkSet, frame_index: int) -> List[Finding]:
    findings: List[Finding] = []

    shoulders_y = pair_midpoint_y(landmarks, *SHOULDERS, threshold=_THRESHOLD)
    hips_y = pair_midpoint_y(landmarks, *HIPS, threshold=_THRESHOLD)
    if shoulders_y is not None and hips_y is not None:
        if abs(shoulders_y - hips_y) > PUSH_UP_BODY_LINE_MAX_DELTA:
            findings.append(BODY_NOT_STRAIGHT)

    elbows_y = pair_midpoint_y(landmarks, *ELBOWS, threshold=_THRESHOLD)
    if shoulders_y is not None and elbows_y is not None:
        if elbows_y > shoulders_y + PUSH_UP_ELBOW_FLARE_MARGIN:
            findings.append(ELBOWS_FLARING)

    return findings


def evaluate_squat(landmarks: LandmarkSet, frame_index: int) -> List[Finding]:
    findings: List[Finding] = []

    hips_y = pair_midpoint_y(landmarks, *HIPS, threshold=_THRESHOLD)
    knees_y = pair_midpoint_y(landmarks, *KNEES, threshold=_THRESHOLD)
    if hips_y is not None and knees_y is not None:
        if hips_y > knees_y + SQUAT_DEPTH_MARGIN:
            findings.append(SQUAT_TOO_SHALLOW)

    for side, names in LEG_CHAINS.items():
        leg = observed(landmarks, *names, threshold=_THRESHOLD)
        if leg is None:
            continue
        knee, ankle = leg
        if abs_delta(knee, ankle, axis="x") < SQUAT_KNEE_CAVE_MIN_DX:
            logger.debug("Frame %d: %s knee over ankle", frame_index, side)
            findings.append(KNEES_CAVING)
            break

    return findings


def evaluate_bench_press(landmarks: LandmarkSet, frame_index: int) -> List[Finding]:
    findings: List[Finding] = []

    elbows_high = False
    wrists_off = False
    for side, (shoulder_name, elbow_name, wrist_name) in ARM_CHAINS.items():
        upper = observed(landmarks, shoulder_name, elbow_name, threshold=_THRESHOLD)
        if upper is not None and not elbows_high:
            shoulder, elbow = upper
            if elbow.y > shoulder.y + BENCH_ELBOW_HEIGHT_MARGIN:
                logger.debug("Frame %d: %s elbow above safe height", frame_index, side)
                elbows_high = True

        forearm = observed(landmarks, elbow_name, wrist_name, threshold=_THRESHOLD)
        if forearm is not None and not wrists_off:
            elbow, wrist = forearm
            if abs_delta(wrist, elbow, axis="x") > BENCH_WRIST_ELBOW_MAX_DX:
                logger.debug("Frame %d: %s wrist off the elbow line", frame_index, side)
                wrists_off = True

    if elbows_high:
        findings.append(ELBOWS_TOO_HIGH)
    if wrists_off:
        findings.append(WRISTS_MISALIGNED)
    return findings


RULES: Dict[ExerciseType, RuleEvaluator] = {
    ExerciseType.PUSH_UP: evaluate_push_up,
    ExerciseType.SQUAT: evaluate_squat,
    ExerciseType.BENCH_PRESS: evaluate_bench_press,
}


def evaluator_for(exercise: ExerciseType) -> RuleEvaluator:
    """Evaluador registrado para ``exercise``."""

    try:
        return RULES[exercise]
    except KeyError:
        raise ValueError(f"No rules registered for exercise {exercise!r}") from None


def evaluate_frame(exercise: ExerciseType, landmarks: LandmarkSet, frame_index: int) -> List[Finding]:
    """Atajo que despacha ``landmarks`` al evaluador del ejercicio."""

    return evaluator_for(exercise)(landmarks, frame_index)


__all__ = [
    "RULES",
    "RuleEvaluator",
    "evaluate_push_up",
    "evaluate_squat",
    "evaluate_bench_press",
    "evaluator_for",
    "evaluate_frame",
]

from __future__ import annotations

import pytest

from formcheck.core.types import ExerciseType, Severity, as_exercise


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("push_up", ExerciseType.PUSH_UP),
        ("Push-Up", ExerciseType.PUSH_UP),
        ("pushup", ExerciseType.PUSH_UP),
        (" squat ", ExerciseType.SQUAT),
        ("SQUATS", ExerciseType.SQUAT),
        ("bench press", ExerciseType.BENCH_PRESS),
        ("bench", ExerciseType.BENCH_PRESS),
        (ExerciseType.SQUAT, ExerciseType.SQUAT),
    ],
)
def test_exercise_aliases(raw, expected: ExerciseType) -> None:
    assert as_exercise(raw) is expected


@pytest.mark.parametrize("raw", ["deadlift", "", "unknown"])
def test_unknown_exercise_raises(raw: str) -> None:
    with pytest.raises(ValueError):
        as_exercise(raw)


def test_every_exercise_has_label_and_instructions() -> None:
    for exercise in ExerciseType:
        assert exercise.label
        assert len(exercise.instructions) >= 3
        assert all(line.endswith(".") for line in exercise.instructions)


def test_severity_rank_orders_good_moderate_severe() -> None:
    assert Severity.GOOD.rank < Severity.MODERATE.rank < Severity.SEVERE.rank

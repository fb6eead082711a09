from __future__ import annotations

import threading
import time

import pytest

from conftest import FakeDecoder, FakePoseEstimator
from formcheck import config
from formcheck.core.errors import (
    AnalysisCancelled,
    PipelineBusy,
    SessionFinished,
    VideoOpenError,
)
from formcheck.C_analysis.pipeline import AnalysisSession, analyze_video
from formcheck.C_analysis.rules import SQUAT_TOO_SHALLOW
from formcheck.core.types import ExerciseType, FeedbackCategory, Severity
from formcheck.pipeline_data import RunStatus


def test_sixty_second_shallow_squat_end_to_end(shallow_squat) -> None:
    session = AnalysisSession(FakeDecoder(60.0), FakePoseEstimator(lambda t: shallow_squat))

    result = session.run("squat.mp4", ExerciseType.SQUAT)

    assert result.exercise_type is ExerciseType.SQUAT
    assert result.findings == (SQUAT_TOO_SHALLOW,)
    assert result.findings[0].category is FeedbackCategory.RANGE_OF_MOTION
    assert result.findings[0].severity is Severity.MODERATE
    assert result.overall_score == 95.0
    assert result.stats is not None
    assert result.stats.frames_sampled == 30
    assert result.stats.frames_analyzed == 30
    assert len(result.frame_findings) == 30
    assert session.state.status is RunStatus.SUCCEEDED
    assert session.state.result is result


def test_every_frame_failing_still_succeeds_with_baseline_score() -> None:
    session = AnalysisSession(FakeDecoder(30.0), FakePoseEstimator(lambda t: None))

    result = session.run("empty.mp4", "squat")

    assert result.findings == ()
    assert result.overall_score == 85.0
    assert result.stats.pose_failures == 30
    assert session.state.status is RunStatus.SUCCEEDED


def test_zero_duration_video_succeeds_without_frames() -> None:
    result = AnalysisSession(FakeDecoder(0.0), FakePoseEstimator(lambda t: None)).run("v.mp4", "push-up")

    assert result.overall_score == 85.0
    assert result.stats.frames_sampled == 0


def test_unopenable_video_fails_the_session(missing_video_decoder) -> None:
    session = AnalysisSession(missing_video_decoder, FakePoseEstimator(lambda t: None))

    with pytest.raises(VideoOpenError):
        session.run("missing.mp4", ExerciseType.PUSH_UP)

    state = session.state
    assert state.status is RunStatus.FAILED
    assert isinstance(state.error, VideoOpenError)
    assert state.result is None


def test_probe_os_errors_are_reported_as_video_open_errors() -> None:
    decoder = FakeDecoder(probe_error=OSError("permission denied"))
    session = AnalysisSession(decoder, FakePoseEstimator(lambda t: None))

    with pytest.raises(VideoOpenError):
        session.run("locked.mp4", ExerciseType.SQUAT)
    assert session.state.status is RunStatus.FAILED


def test_second_start_while_running_is_rejected(shallow_squat) -> None:
    gate = threading.Event()
    decoder = FakeDecoder(60.0, gate=gate)
    with AnalysisSession(decoder, FakePoseEstimator(lambda t: shallow_squat)) as session:
        future = session.start("squat.mp4", ExerciseType.SQUAT)
        try:
            assert session.state.status is RunStatus.RUNNING
            with pytest.raises(PipelineBusy):
                session.start("other.mp4", ExerciseType.SQUAT)
            with pytest.raises(PipelineBusy):
                session.run("other.mp4", ExerciseType.SQUAT)
        finally:
            gate.set()
        result = future.result(timeout=5.0)

    assert result.overall_score == 95.0
    assert decoder.probe_calls == 1
    assert session.state.status is RunStatus.SUCCEEDED


def test_finished_session_cannot_be_reused(shallow_squat) -> None:
    session = AnalysisSession(FakeDecoder(60.0), FakePoseEstimator(lambda t: shallow_squat))
    session.run("squat.mp4", ExerciseType.SQUAT)

    with pytest.raises(SessionFinished):
        session.run("squat.mp4", ExerciseType.SQUAT)


def test_unknown_exercise_is_rejected_before_running() -> None:
    session = AnalysisSession(FakeDecoder(60.0), FakePoseEstimator(lambda t: None))

    with pytest.raises(ValueError):
        session.run("v.mp4", "deadlift")
    assert session.state.status is RunStatus.IDLE


def test_cancelled_session_ends_failed(shallow_squat) -> None:
    session = AnalysisSession(FakeDecoder(60.0), FakePoseEstimator(lambda t: shallow_squat))
    session.cancel()

    with pytest.raises(AnalysisCancelled):
        session.run("squat.mp4", ExerciseType.SQUAT)
    assert session.state.status is RunStatus.FAILED
    with pytest.raises(SessionFinished):
        session.run("squat.mp4", ExerciseType.SQUAT)


def test_progress_callback_sees_monotonic_updates(shallow_squat) -> None:
    updates: list[tuple[int, str]] = []
    session = AnalysisSession(FakeDecoder(20.0), FakePoseEstimator(lambda t: shallow_squat))

    session.run("squat.mp4", ExerciseType.SQUAT, lambda p, msg: updates.append((p, msg)))

    values = [p for p, _ in updates]
    assert values == sorted(values)
    assert values[-1] == 100
    assert any(msg.startswith("STAGE 3") for _, msg in updates)


def test_single_argument_progress_callback_is_supported(shallow_squat) -> None:
    values: list[int] = []
    analyze_video(
        "squat.mp4", ExerciseType.SQUAT, FakeDecoder(20.0), FakePoseEstimator(lambda t: shallow_squat),
        progress_callback=values.append,
    )

    assert values[-1] == 100


def test_frame_count_comes_from_config(shallow_squat) -> None:
    cfg = config.load_default()
    cfg.sampling.frame_count = 12
    decoder = FakeDecoder(60.0)

    result = analyze_video("squat.mp4", "squat", decoder, FakePoseEstimator(lambda t: shallow_squat), cfg)

    assert result.stats.frames_sampled == 12
    assert len(decoder.decoded) == 12
    assert result.stats.config_sha1 == cfg.fingerprint()


def test_result_serializes_to_plain_dict(shallow_squat) -> None:
    result = analyze_video(
        "squat.mp4", ExerciseType.SQUAT, FakeDecoder(60.0), FakePoseEstimator(lambda t: shallow_squat)
    )

    payload = result.to_dict()

    assert payload["exercise_type"] == "squat"
    assert payload["overall_score"] == 95.0
    assert payload["findings"] == [SQUAT_TOO_SHALLOW.to_dict()]
    assert payload["video"] == "squat.mp4"
    assert payload["stats"]["frames_skipped"] == 0


class _GraphErrorEstimator(FakePoseEstimator):
    def estimate(self, image_bgr):
        if float(image_bgr[0, 0]) == 2.0:
            raise RuntimeError("graph error on one frame")
        return super().estimate(image_bgr)


def test_unexpected_estimator_error_on_one_frame_does_not_fail_the_run(shallow_squat) -> None:
    cfg = config.load_default()
    cfg.sampling.frame_count = 5
    session = AnalysisSession(FakeDecoder(10.0), _GraphErrorEstimator(lambda t: shallow_squat), cfg)

    result = session.run("squat.mp4", ExerciseType.SQUAT)

    assert session.state.status is RunStatus.SUCCEEDED
    assert result.stats.pose_failures == 1
    assert result.stats.frames_analyzed == 4
    assert result.findings == (SQUAT_TOO_SHALLOW,)


def _session_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name.startswith("formcheck-session")]


def test_background_run_releases_its_thread_without_close(shallow_squat) -> None:
    session = AnalysisSession(FakeDecoder(60.0), FakePoseEstimator(lambda t: shallow_squat))

    session.start("squat.mp4", ExerciseType.SQUAT).result(timeout=5.0)

    deadline = time.monotonic() + 2.0
    while _session_threads() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert _session_threads() == []

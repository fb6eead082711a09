from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from conftest import FakeDecoder, FakePoseEstimator, build_landmarks
from formcheck import run_pipeline
from formcheck.core.errors import VideoOpenError


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00")
    return path


@pytest.fixture
def fakes(monkeypatch: pytest.MonkeyPatch):
    shallow = build_landmarks(
        left_hip=(0.45, 0.80), right_hip=(0.55, 0.80),
        left_knee=(0.40, 0.60), right_knee=(0.60, 0.60),
    )
    decoder = FakeDecoder(60.0)
    estimator = FakePoseEstimator(lambda t: shallow)
    monkeypatch.setattr(run_pipeline, "_build_decoder", lambda: decoder)
    monkeypatch.setattr(run_pipeline, "_build_estimator", lambda cfg: estimator)
    return decoder, estimator


def test_cli_writes_reports(video_file: Path, tmp_path: Path, fakes, capsys) -> None:
    decoder, estimator = fakes
    json_path = tmp_path / "out" / "report.json"
    csv_path = tmp_path / "out" / "findings.csv"

    code = run_pipeline.main([
        "--video", str(video_file),
        "--exercise", "squats",
        "--frames", "10",
        "--workers", "2",
        "--output_json", str(json_path),
        "--findings_csv", str(csv_path),
    ])

    assert code == 0
    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert payload["overall_score"] == 95.0
    assert payload["stats"]["frames_sampled"] == 10
    assert payload["config"]["runner"]["max_workers"] == 2
    assert csv_path.is_file()
    assert "Squat depth insufficient" in capsys.readouterr().out
    assert estimator.closed


def test_cli_reads_yaml_config(video_file: Path, tmp_path: Path, fakes) -> None:
    decoder, _ = fakes
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text("sampling:\n  frame_count: 6\n", encoding="utf-8")

    assert run_pipeline.main(["--video", str(video_file), "--exercise", "squat", "--config", str(cfg_path)]) == 0
    assert len(decoder.decoded) == 6


def test_cli_returns_one_on_fatal_error(video_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        run_pipeline, "_build_decoder", lambda: FakeDecoder(probe_error=VideoOpenError("corrupt"))
    )
    monkeypatch.setattr(run_pipeline, "_build_estimator", lambda cfg: FakePoseEstimator(lambda t: None))

    assert run_pipeline.main(["--video", str(video_file), "--exercise", "push_up"]) == 1


def test_cli_rejects_unknown_exercise(video_file: Path, fakes) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_pipeline.main(["--video", str(video_file), "--exercise", "deadlift"])
    assert excinfo.value.code == 2


def test_cli_rejects_missing_video(tmp_path: Path, fakes) -> None:
    with pytest.raises(SystemExit):
        run_pipeline.main(["--video", str(tmp_path / "nope.mp4"), "--exercise", "squat"])


@pytest.mark.parametrize("value", ["0", "-2", "abc"])
def test_cli_rejects_non_positive_frame_count(video_file: Path, fakes, value: str) -> None:
    with pytest.raises(SystemExit):
        run_pipeline.main(["--video", str(video_file), "--exercise", "squat", "--frames", value])


def test_cli_saves_report_under_configured_output_dir(video_file: Path, tmp_path: Path, fakes) -> None:
    out_dir = tmp_path / "reports"
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text(f"output:\n  base_dir: {out_dir.as_posix()}\n", encoding="utf-8")

    code = run_pipeline.main([
        "--video", str(video_file), "--exercise", "squat", "--config", str(cfg_path), "--save_report",
    ])

    assert code == 0
    assert (out_dir / "clip_squat.json").is_file()


def test_cli_logs_each_phase_once(video_file: Path, fakes, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="formcheck.run_pipeline")

    code = run_pipeline.main(["--video", str(video_file), "--exercise", "squat"])

    phases = [
        record.getMessage()
        for record in caplog.records
        if record.name == "formcheck.run_pipeline" and record.getMessage().startswith("[")
    ]
    assert code == 0
    assert phases == [
        "[  2%] Preparing…",
        "[  5%] Sampling frames…",
        "[ 10%] Analyzing frames…",
        "[ 90%] Consolidating feedback…",
        "[ 95%] Scoring…",
        "[100%] Finishing up…",
    ]

from __future__ import annotations

from pathlib import Path

import pytest

from formcheck import config


def test_defaults() -> None:
    cfg = config.load_default()

    assert cfg.sampling.frame_count == 30
    assert cfg.pose.model_complexity == 1
    assert cfg.pose.min_detection_confidence == 0.5
    assert cfg.runner.max_workers == 1
    assert cfg.runner.frame_timeout_sec is None


def test_yaml_values_are_merged_over_defaults(tmp_path: Path) -> None:
    path = tmp_path / "run.yaml"
    path.write_text(
        "sampling:\n  frame_count: 12\n"
        "runner:\n  max_workers: 4\n  frame_timeout_sec: 2.5\n"
        "output:\n  base_dir: reports\n"
        "unknown_section:\n  foo: 1\n",
        encoding="utf-8",
    )

    cfg = config.from_yaml(path)

    assert cfg.sampling.frame_count == 12
    assert cfg.runner.max_workers == 4
    assert cfg.runner.frame_timeout_sec == pytest.approx(2.5)
    assert cfg.output.base_dir == Path("reports")
    assert cfg.pose.model_complexity == config.load_default().pose.model_complexity
    assert not hasattr(cfg, "unknown_section")


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert config.from_yaml(path).to_dict() == config.load_default().to_dict()


def test_yaml_must_be_a_mapping(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError):
        config.from_yaml(path)


def test_fingerprint_tracks_result_affecting_settings_only() -> None:
    base = config.load_default()
    other = base.copy()
    other.runner.max_workers = 8
    other.output.base_dir = Path("/tmp/elsewhere")

    assert other.fingerprint() == base.fingerprint()

    other.sampling.frame_count = 10
    assert other.fingerprint() != base.fingerprint()


def test_copy_is_deep() -> None:
    base = config.load_default()
    clone = base.copy()
    clone.pose.min_detection_confidence = 0.9

    assert base.pose.min_detection_confidence == 0.5


def test_serializable_dict_converts_paths() -> None:
    data = config.load_default().to_serializable_dict()

    assert isinstance(data["output"]["base_dir"], str)
    assert set(data) == {"sampling", "pose", "runner", "output"}

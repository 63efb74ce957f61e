from __future__ import annotations

import json
from pathlib import Path

import pytest

from lesson_gestures.tracking.config import (
    DEFAULT_GESTURE_CONFIG,
    DetectorSettings,
    detector_settings_from_dict,
    load_gesture_config,
    load_tracking_config,
)
from lesson_gestures.tracking.mapper import GestureConfigError, GestureMapper

ROOT = Path(__file__).resolve().parents[1]


def test_tracking_config_from_yaml(tmp_path) -> None:
    path = tmp_path / "tracking.yaml"
    path.write_text(
        "camera_id: 2\n"
        "flip: false\n"
        "unused_key: 1\n"
        "detector:\n"
        "  pinch_threshold: 0.04\n"
        "  swipe_enabled: true\n"
        "  release_after_frames: 4\n",
        encoding="utf-8",
    )
    cfg = load_tracking_config(path)
    assert cfg.camera_id == 2
    assert cfg.flip is False
    assert cfg.frame_width == 1280
    assert cfg.detector.pinch_threshold == 0.04
    assert cfg.detector.swipe_enabled is True
    assert cfg.detector.release_after_frames == 4
    assert cfg.detector.extension_ratio == 1.2


def test_missing_tracking_config_uses_defaults(tmp_path) -> None:
    cfg = load_tracking_config(tmp_path / "nope.yaml")
    assert cfg.detector == DetectorSettings()
    assert cfg.gesture_config_path is None


def test_repo_default_config_loads() -> None:
    cfg = load_tracking_config(ROOT / "configs" / "tracking.default.yaml")
    assert cfg.gesture_config_path
    assert cfg.detector.pinch_threshold == 0.05


@pytest.mark.parametrize(
    "payload",
    [
        {"pinch_threshold": 0},
        {"max_hands": 0},
        {"release_after_frames": 0},
        {"fold_ratio": 1.0},
        {"pose_confidence_min": 1.5},
        {"pinch_out_min": 0.2, "pinch_out_max": 0.1},
        {"pinch_threshold": 0.08, "pinch_out_min": 0.06},
    ],
)
def test_invalid_detector_settings(payload) -> None:
    with pytest.raises(ValueError):
        detector_settings_from_dict(payload)


def test_load_gesture_config_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_gesture_config(tmp_path / "missing.json")

    bad = tmp_path / "list.json"
    bad.write_text(json.dumps(["pinch"]), encoding="utf-8")
    with pytest.raises(GestureConfigError):
        load_gesture_config(bad)

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_gesture_config(broken)


@pytest.mark.parametrize("path", sorted((ROOT / "configs" / "gestures").glob("*.json")))
def test_bundled_lesson_configs_are_valid(path) -> None:
    mapper = GestureMapper(load_gesture_config(path))
    assert mapper.model_name
    for gesture in mapper.get_available_gestures():
        assert mapper.get_action_config(mapper.map_gesture(gesture))


def test_default_gesture_config_is_valid() -> None:
    mapper = GestureMapper(DEFAULT_GESTURE_CONFIG)
    assert mapper.map_gesture("pinch") == "zoomIn"

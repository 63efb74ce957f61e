from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from lesson_gestures.tracking.mapper import GestureConfigError

logger = logging.getLogger(__name__)

DEFAULT_GESTURE_CONFIG: dict[str, Any] = {
    "modelName": "Demo Model",
    "gestureMap": {
        "pinch": "zoomIn",
        "v_sign": "zoomOut",
        "pinch_out": "zoomOut",
        "open_palm": "resetView",
        "swipe_left": "rotateLeft",
        "swipe_right": "rotateRight",
        "swipe_up": "rotateUp",
        "swipe_down": "rotateDown",
    },
}


@dataclass(slots=True)
class DetectorSettings:
    pinch_threshold: float = 0.05
    drag_min_delta: float = 0.003
    extension_ratio: float = 1.2
    fold_ratio: float = 1.1
    point_up_margin: float = 0.02
    use_depth: bool = False
    max_hands: int = 2
    release_after_frames: int = 1
    swipe_enabled: bool = False
    swipe_threshold: float = 0.05
    swipe_cooldown_frames: int = 6
    pinch_zoom_enabled: bool = False
    pinch_zoom_min_delta: float = 0.01
    extended_poses: bool = False
    pose_confidence_min: float = 0.7
    pinch_out_min: float = 0.1
    pinch_out_max: float = 0.2

    def __post_init__(self) -> None:
        if self.pinch_threshold <= 0:
            raise ValueError("pinch_threshold must be positive.")
        if self.drag_min_delta < 0:
            raise ValueError("drag_min_delta must not be negative.")
        if self.extension_ratio <= 1.0 or self.fold_ratio <= 1.0:
            raise ValueError("extension_ratio and fold_ratio must be greater than 1.")
        if self.max_hands < 1:
            raise ValueError("max_hands must be at least 1.")
        if self.release_after_frames < 1:
            raise ValueError("release_after_frames must be at least 1.")
        if self.swipe_threshold <= 0:
            raise ValueError("swipe_threshold must be positive.")
        if self.swipe_cooldown_frames < 0:
            raise ValueError("swipe_cooldown_frames must not be negative.")
        if not 0.0 <= self.pose_confidence_min <= 1.0:
            raise ValueError("pose_confidence_min must be within [0, 1].")
        if not self.pinch_threshold <= self.pinch_out_min < self.pinch_out_max:
            raise ValueError("pinch_out range must lie above pinch_threshold and be non-empty.")


@dataclass(slots=True)
class TrackingConfig:
    camera_id: int = 0
    frame_width: int = 1280
    frame_height: int = 720
    model_path: str = "models/hand_landmarker.task"
    gesture_config_path: str | None = None
    output_dir: str = "outputs/tracking"
    flip: bool = True
    show_debug: bool = False
    detector: DetectorSettings = field(default_factory=DetectorSettings)


def _known(cls: type, payload: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(payload) - names)
    if unknown:
        logger.debug("Ignoring unknown %s keys: %s", cls.__name__, ", ".join(unknown))
    return {k: v for k, v in payload.items() if k in names}


def detector_settings_from_dict(payload: dict[str, Any] | None) -> DetectorSettings:
    return DetectorSettings(**_known(DetectorSettings, payload or {}))


def load_tracking_config(path: str | Path | None = None) -> TrackingConfig:
    if path is None:
        root = Path(__file__).resolve().parents[3]
        path = root / "configs" / "tracking.default.yaml"
    p = Path(path)
    if not p.exists():
        logger.info("Tracking config %s not found, using defaults", p)
        return TrackingConfig()

    with p.open("r", encoding="utf-8") as f:
        payload = yaml.safe_load(f) or {}

    detector = detector_settings_from_dict(payload.pop("detector", None))
    config = TrackingConfig(**_known(TrackingConfig, payload))
    config.detector = detector
    return config


def load_gesture_config(path: str | Path) -> dict[str, Any]:
    """Read a lesson gesture configuration JSON document.

    Only the parsed shape is returned; validation happens when a
    ``GestureMapper`` is built from it.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Gesture config not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise GestureConfigError(f"Gesture config must be a JSON object: {p}")
    return payload

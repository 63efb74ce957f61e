from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

LANDMARK_COUNT = 21

GestureName = Literal[
    "pinch_start",
    "pinch_end",
    "pinch_drag",
    "pinch_zoom",
    "point_up",
    "point_up_end",
    "v_sign",
    "v_sign_end",
    "swipe_left",
    "swipe_right",
    "swipe_up",
    "swipe_down",
    "open_palm",
    "open_palm_end",
    "fist",
    "fist_end",
    "thumbs_up",
    "thumbs_up_end",
    "point_down",
    "point_down_end",
    "pinch_out",
    "pinch_out_end",
]

PoseLabel = Literal[
    "unknown", "open_palm", "fist", "thumbs_up", "point_down", "pinch_out"
]


@dataclass(frozen=True, slots=True)
class Landmark:
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True, slots=True)
class HandFrame:
    """One hand's landmarks for a single detection cycle."""

    landmarks: tuple[Landmark, ...]
    handedness: str | None = None

    @property
    def is_complete(self) -> bool:
        return len(self.landmarks) >= LANDMARK_COUNT


@dataclass(slots=True)
class HandState:
    pinch_active: bool = False
    pinch_position: tuple[float, float] | None = None
    pinch_distance: float | None = None
    point_up_active: bool = False
    v_sign_active: bool = False
    last_position: tuple[float, float] | None = None
    swipe_cooldown: int = 0
    pose_label: str | None = None
    missing_frames: int = 0

    def active_gestures(self) -> list[str]:
        active: list[str] = []
        if self.pinch_active:
            active.append("pinch")
        if self.point_up_active:
            active.append("point_up")
        if self.v_sign_active:
            active.append("v_sign")
        if self.pose_label is not None:
            active.append(self.pose_label)
        return active


@dataclass(frozen=True, slots=True)
class GestureEvent:
    name: str
    handedness: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class PosePrediction:
    label: PoseLabel
    confidence: float


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    gesture: str
    action: str
    confidence: float
    timestamp: int
    config: dict[str, Any] = field(default_factory=dict)

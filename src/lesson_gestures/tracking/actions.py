from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from lesson_gestures.tracking.types import ActionDescriptor

logger = logging.getLogger(__name__)

_AXES = {"x": 0, "y": 1, "z": 2}


def _default_camera() -> np.ndarray:
    return np.array([0.0, 0.0, 5.0])


def _default_rotation() -> np.ndarray:
    return np.zeros(3)


@dataclass(slots=True)
class ViewState:
    camera_position: np.ndarray = field(default_factory=_default_camera)
    rotation: np.ndarray = field(default_factory=_default_rotation)
    paused: bool = False
    time_multiplier: float = 1.0
    highlighted: str | None = None
    focus: str | None = None
    orbits_visible: bool = False
    orbit_opacity: float = 1.0

    @property
    def camera_distance(self) -> float:
        return float(np.linalg.norm(self.camera_position))


@dataclass(slots=True)
class ViewerActionExecutor:
    """Applies action descriptors to a viewer camera/model transform.

    Transitions are applied immediately; ``duration`` and ``easing`` are left
    to the renderer.
    """

    state: ViewState = field(default_factory=ViewState)
    drag_gain: float = math.pi
    min_distance: float = 0.5
    max_distance: float = 50.0

    def reset(self) -> None:
        self.state.camera_position = _default_camera()
        self.state.rotation = _default_rotation()

    def _zoom(self, factor: float) -> None:
        if factor <= 0:
            return
        position = self.state.camera_position / factor
        distance = float(np.linalg.norm(position))
        if distance > 0:
            clamped = max(self.min_distance, min(self.max_distance, distance))
            position = position * (clamped / distance)
        self.state.camera_position = position

    def apply_drag(self, dx: float, dy: float) -> None:
        # Horizontal motion spins about y, vertical motion tilts about x.
        self.state.rotation = self.state.rotation + np.array(
            [dy * self.drag_gain, dx * self.drag_gain, 0.0]
        )

    def execute(self, descriptor: ActionDescriptor) -> bool:
        action = descriptor.action
        cfg = descriptor.config
        try:
            if action in {"zoomIn", "zoomOut"}:
                self._zoom(float(cfg["factor"]))
                return True
            if action in {"rotateLeft", "rotateRight", "rotateUp", "rotateDown"}:
                rotation = self.state.rotation.copy()
                rotation[_AXES[cfg["axis"]]] += math.radians(float(cfg["angle"]))
                self.state.rotation = rotation
                return True
            if action == "resetView":
                self.reset()
                return True
            if action == "pauseAnimation":
                self.state.paused = not self.state.paused
                return True
            if action in {"highlightAorta", "highlightVentricles"}:
                self.state.highlighted = str(cfg["hotspot"])
                return True
            if action in {"speedUpTime", "slowDownTime"}:
                self.state.time_multiplier *= float(cfg["multiplier"])
                return True
            if action == "focusEarth":
                self.state.focus = str(cfg["hotspot"])
                self._zoom(float(cfg.get("zoom", 1.0)))
                return True
            if action == "showOrbits":
                self.state.orbits_visible = not self.state.orbits_visible
                self.state.orbit_opacity = float(cfg.get("opacity", 1.0))
                return True
        except (KeyError, TypeError, ValueError):
            logger.warning("Malformed parameters for %s: %r", action, cfg)
            return False
        logger.info("Action not implemented: %s", action)
        return False

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from lesson_gestures.tracking.types import ActionDescriptor

logger = logging.getLogger(__name__)


class GestureConfigError(ValueError):
    """Raised when a lesson gesture configuration is malformed."""


class ActionKind(str, Enum):
    ZOOM_IN = "zoomIn"
    ZOOM_OUT = "zoomOut"
    ROTATE_LEFT = "rotateLeft"
    ROTATE_RIGHT = "rotateRight"
    ROTATE_UP = "rotateUp"
    ROTATE_DOWN = "rotateDown"
    RESET_VIEW = "resetView"
    PAUSE_ANIMATION = "pauseAnimation"
    HIGHLIGHT_AORTA = "highlightAorta"
    HIGHLIGHT_VENTRICLES = "highlightVentricles"
    SPEED_UP_TIME = "speedUpTime"
    SLOW_DOWN_TIME = "slowDownTime"
    FOCUS_EARTH = "focusEarth"
    SHOW_ORBITS = "showOrbits"


ACTION_CONFIGS: Mapping[ActionKind, Mapping[str, Any]] = MappingProxyType(
    {
        ActionKind.ZOOM_IN: {"factor": 1.2, "duration": 300},
        ActionKind.ZOOM_OUT: {"factor": 0.8, "duration": 300},
        ActionKind.ROTATE_LEFT: {"angle": -15, "axis": "y", "duration": 500},
        ActionKind.ROTATE_RIGHT: {"angle": 15, "axis": "y", "duration": 500},
        ActionKind.ROTATE_UP: {"angle": -15, "axis": "x", "duration": 500},
        ActionKind.ROTATE_DOWN: {"angle": 15, "axis": "x", "duration": 500},
        ActionKind.RESET_VIEW: {"duration": 1000, "easing": "easeInOut"},
        ActionKind.PAUSE_ANIMATION: {"toggle": True},
        ActionKind.HIGHLIGHT_AORTA: {"hotspot": "aorta", "duration": 2000},
        ActionKind.HIGHLIGHT_VENTRICLES: {"hotspot": "leftVentricle", "duration": 2000},
        ActionKind.SPEED_UP_TIME: {"multiplier": 2.0},
        ActionKind.SLOW_DOWN_TIME: {"multiplier": 0.5},
        ActionKind.FOCUS_EARTH: {"hotspot": "earth", "zoom": 2.0},
        ActionKind.SHOW_ORBITS: {"toggle": True, "opacity": 0.5},
    }
)

_missing = set(ActionKind) - set(ACTION_CONFIGS)
if _missing:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"ACTION_CONFIGS lacks entries for: {sorted(a.value for a in _missing)}")


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


@dataclass(frozen=True, slots=True)
class GestureConfiguration:
    gesture_map: Mapping[str, str]
    animations: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    hotspots: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    model_name: str | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> GestureConfiguration:
        """Validate a parsed configuration document.

        Expected shape::

            {"gestureMap": {"pinch": "zoomIn"},
             "animations": {"spin": {...}},
             "hotspots": [{"name": "aorta", ...}]}

        ``hotspots`` may also be a mapping keyed by name.
        """
        if not isinstance(payload, Mapping):
            raise GestureConfigError("Gesture configuration must be a mapping.")

        raw_map = payload.get("gestureMap")
        if raw_map is None:
            raise GestureConfigError("Gesture configuration is missing 'gestureMap'.")
        if not isinstance(raw_map, Mapping):
            raise GestureConfigError("'gestureMap' must map gesture names to action names.")
        if not raw_map:
            raise GestureConfigError("'gestureMap' must define at least one gesture.")
        gesture_map: dict[str, str] = {}
        for gesture, action in raw_map.items():
            if not _is_name(gesture):
                raise GestureConfigError(f"Invalid gesture name in 'gestureMap': {gesture!r}")
            if not _is_name(action):
                raise GestureConfigError(
                    f"Gesture {gesture!r} must map to a non-empty action name, got {action!r}"
                )
            gesture_map[gesture] = action

        raw_animations = payload.get("animations") or {}
        if not isinstance(raw_animations, Mapping):
            raise GestureConfigError("'animations' must be a mapping of name to settings.")
        animations: dict[str, Mapping[str, Any]] = {}
        for name, animation in raw_animations.items():
            if not _is_name(name) or not isinstance(animation, Mapping):
                raise GestureConfigError(f"Invalid animation entry: {name!r}")
            animations[name] = MappingProxyType(dict(animation))

        hotspots = _parse_hotspots(payload.get("hotspots") or [])

        model_name = payload.get("modelName")
        if model_name is not None and not isinstance(model_name, str):
            raise GestureConfigError("'modelName' must be a string.")

        return cls(
            gesture_map=MappingProxyType(gesture_map),
            animations=MappingProxyType(animations),
            hotspots=MappingProxyType(hotspots),
            model_name=model_name,
        )


def _parse_hotspots(raw: Any) -> dict[str, Mapping[str, Any]]:
    hotspots: dict[str, Mapping[str, Any]] = {}
    if isinstance(raw, Mapping):
        for name, spot in raw.items():
            if not _is_name(name) or not isinstance(spot, Mapping):
                raise GestureConfigError(f"Invalid hotspot entry: {name!r}")
            hotspots[name] = MappingProxyType({"name": name, **spot})
        return hotspots
    if not isinstance(raw, list):
        raise GestureConfigError("'hotspots' must be a list of objects or a mapping.")
    for spot in raw:
        if not isinstance(spot, Mapping) or not _is_name(spot.get("name")):
            raise GestureConfigError(f"Hotspot entries need a non-empty 'name': {spot!r}")
        # First entry wins for duplicate names.
        hotspots.setdefault(spot["name"], MappingProxyType(dict(spot)))
    return hotspots


class GestureMapper:
    """Maps gesture names to parameterized viewer actions for one session."""

    def __init__(
        self,
        config: GestureConfiguration | Mapping[str, Any],
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not isinstance(config, GestureConfiguration):
            config = GestureConfiguration.from_dict(config)
        self.config = config
        self._clock = clock
        logger.info(
            "Gesture mapper loaded %d gestures for %s",
            len(config.gesture_map),
            config.model_name or "unnamed model",
        )

    @property
    def model_name(self) -> str | None:
        return self.config.model_name

    def map_gesture(self, gesture: str) -> str | None:
        return self.config.gesture_map.get(gesture)

    def get_available_gestures(self) -> list[str]:
        return list(self.config.gesture_map)

    def get_animation(self, name: str) -> Mapping[str, Any] | None:
        return self.config.animations.get(name)

    def get_hotspot(self, name: str) -> Mapping[str, Any] | None:
        return self.config.hotspots.get(name)

    def get_action_config(self, action: str) -> dict[str, Any]:
        """Parameters for an action; unknown actions get an empty dict."""
        try:
            kind = ActionKind(action)
        except ValueError:
            logger.debug("No parameters for unknown action %r", action)
            return {}
        return dict(ACTION_CONFIGS[kind])

    def process_gesture(self, gesture: str, confidence: float = 1.0) -> ActionDescriptor | None:
        action = self.map_gesture(gesture)
        if action is None:
            return None
        return ActionDescriptor(
            gesture=gesture,
            action=action,
            confidence=confidence,
            timestamp=int(self._clock() * 1000),
            config=self.get_action_config(action),
        )

from __future__ import annotations

import logging
import time
from collections import deque

from lesson_gestures.tracking.actions import ViewerActionExecutor
from lesson_gestures.tracking.detector import LandmarkGestureDetector
from lesson_gestures.tracking.mapper import GestureMapper
from lesson_gestures.tracking.recording import GestureRecorder
from lesson_gestures.tracking.telemetry import TelemetryLogger
from lesson_gestures.tracking.types import ActionDescriptor, GestureEvent

logger = logging.getLogger(__name__)

# Detector event -> gesture name used in lesson configurations.
GESTURE_FOR_EVENT: dict[str, str] = {
    "pinch_start": "pinch",
    "point_up": "point_up",
    "v_sign": "v_sign",
    "swipe_left": "swipe_left",
    "swipe_right": "swipe_right",
    "swipe_up": "swipe_up",
    "swipe_down": "swipe_down",
    "open_palm": "open_palm",
    "fist": "fist",
    "thumbs_up": "thumbs_up",
    "point_down": "point_down",
    "pinch_out": "pinch_out",
}

GESTURE_DISPLAY_S = 1.5
ACTION_HISTORY = 10


class GestureSession:
    """Connects detector events to the mapper and the viewer executor."""

    def __init__(
        self,
        detector: LandmarkGestureDetector,
        mapper: GestureMapper,
        executor: ViewerActionExecutor,
        telemetry: TelemetryLogger | None = None,
        recorder: GestureRecorder | None = None,
    ) -> None:
        self.detector = detector
        self.mapper = mapper
        self.executor = executor
        self.telemetry = telemetry
        self.recorder = recorder
        self.current_gesture: str | None = None
        self.current_since = 0.0
        self.last_action = "none"
        self.actions: deque[ActionDescriptor] = deque(maxlen=ACTION_HISTORY)
        for name in GESTURE_FOR_EVENT:
            detector.on(name, self._on_gesture)
        detector.on("pinch_drag", self._on_drag)

    def _on_gesture(self, event: GestureEvent) -> None:
        gesture = GESTURE_FOR_EVENT[event.name]
        confidence = float(event.payload.get("confidence", 1.0))
        descriptor = self.mapper.process_gesture(gesture, confidence)
        self.current_gesture = gesture
        self.current_since = time.perf_counter()
        if descriptor is None:
            return
        self.actions.append(descriptor)
        executed = self.executor.execute(descriptor)
        self.last_action = f"{descriptor.action} ({'ok' if executed else 'skipped'})"
        logger.info("Gesture %s (%s) -> %s", gesture, event.handedness, descriptor.action)
        if self.telemetry is not None:
            self.telemetry.log_action(descriptor, executed)

    def _on_drag(self, event: GestureEvent) -> None:
        self.executor.apply_drag(event.payload["dx"], event.payload["dy"])

    def display_gesture(self, now: float) -> str:
        if self.current_gesture is None or now - self.current_since > GESTURE_DISPLAY_S:
            return "-"
        return self.current_gesture

    def record(self, events: list[GestureEvent]) -> None:
        for event in events:
            if self.telemetry is not None:
                self.telemetry.log_event(event)
            if self.recorder is not None:
                self.recorder.add_event(event)

    def clear(self) -> None:
        self.actions.clear()
        self.current_gesture = None
        self.last_action = "none"

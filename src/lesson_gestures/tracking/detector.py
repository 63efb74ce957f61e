from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from lesson_gestures.tracking.config import DetectorSettings
from lesson_gestures.tracking.emitter import EventEmitter, Listener
from lesson_gestures.tracking.geometry import INDEX_TIP, pinch_distance, point_xy
from lesson_gestures.tracking.poses import classify_pose, is_pinching, is_point_up, is_v_sign
from lesson_gestures.tracking.types import GestureEvent, HandFrame, HandState, Landmark

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    def close(self) -> None: ...


@dataclass(slots=True)
class DetectorMetrics:
    frames_seen: int = 0
    hands_seen: int = 0
    hands_skipped: int = 0
    event_count: int = 0


class LandmarkGestureDetector:
    """Turns per-frame hand landmarks into edge-triggered gesture events.

    State is kept per hand key (the handedness label, or ``unknown_<index>``
    when the label is missing). A hand that is absent for
    ``settings.release_after_frames`` consecutive frames is released: every
    gesture still active for it ends with ``{"reason": "hand_lost"}`` and its
    state is dropped.
    """

    def __init__(self, settings: DetectorSettings | None = None) -> None:
        self.settings = settings if settings is not None else DetectorSettings()
        self._emitter: EventEmitter[GestureEvent] = EventEmitter()
        self._hands: dict[str, HandState] = {}
        self._source: FrameSource | None = None
        self._disposed = False
        self.metrics = DetectorMetrics()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def tracked_hands(self) -> tuple[str, ...]:
        return tuple(self._hands)

    def state(self, handedness: str) -> HandState | None:
        return self._hands.get(handedness)

    def on(self, event_name: str, callback: Listener[GestureEvent]) -> None:
        self._emitter.on(event_name, callback)

    def off(self, event_name: str, callback: Listener[GestureEvent]) -> None:
        self._emitter.off(event_name, callback)

    def attach_source(self, source: FrameSource) -> None:
        if self._disposed:
            raise RuntimeError("Detector was disposed.")
        if self._source is not None and self._source is not source:
            self._close_source()
        self._source = source

    def reset(self, handedness: str | None = None) -> None:
        if handedness is None:
            self._hands.clear()
        else:
            self._hands.pop(handedness, None)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._close_source()
        self._emitter.clear()
        self._hands.clear()
        self._disposed = True
        logger.info("Gesture detector disposed after %d frames", self.metrics.frames_seen)

    def process_frame(self, hands: Sequence[HandFrame] | None) -> list[GestureEvent]:
        if self._disposed:
            logger.debug("process_frame called on a disposed detector")
            return []
        self.metrics.frames_seen += 1

        events: list[GestureEvent] = []
        present: set[str] = set()
        processed = 0
        for index, hand in enumerate(hands or ()):
            if processed >= self.settings.max_hands:
                break
            key = hand.handedness or f"unknown_{index}"
            if key in present:
                logger.debug("Duplicate hand %r in frame, skipping", key)
                continue
            present.add(key)
            if not hand.is_complete:
                known = self._hands.get(key)
                if known is not None:
                    known.missing_frames = 0
                self.metrics.hands_skipped += 1
                logger.debug(
                    "Skipping hand %r with %d landmarks", key, len(hand.landmarks)
                )
                continue
            processed += 1
            self.metrics.hands_seen += 1
            state = self._hands.setdefault(key, HandState())
            state.missing_frames = 0
            self._update_hand(key, hand.landmarks, state, events)

        self._release_missing(present, events)

        for event in events:
            self._emitter.emit(event.name, event)
        self.metrics.event_count += len(events)
        return events

    def _update_hand(
        self,
        key: str,
        landmarks: Sequence[Landmark],
        state: HandState,
        events: list[GestureEvent],
    ) -> None:
        s = self.settings
        index_xy = point_xy(landmarks, INDEX_TIP)

        pinching = is_pinching(landmarks, s)
        if pinching and not state.pinch_active:
            events.append(
                GestureEvent("pinch_start", key, {"x": index_xy[0], "y": index_xy[1]})
            )
        elif state.pinch_active and not pinching:
            events.append(GestureEvent("pinch_end", key, {}))
        state.pinch_active = pinching

        if pinching:
            if state.pinch_position is not None:
                dx = index_xy[0] - state.pinch_position[0]
                dy = index_xy[1] - state.pinch_position[1]
                if abs(dx) > s.drag_min_delta or abs(dy) > s.drag_min_delta:
                    events.append(GestureEvent("pinch_drag", key, {"dx": dx, "dy": dy}))
            state.pinch_position = index_xy

            if s.pinch_zoom_enabled:
                dist = pinch_distance(landmarks, s.use_depth)
                if state.pinch_distance is not None:
                    delta = dist - state.pinch_distance
                    if abs(delta) > s.pinch_zoom_min_delta:
                        events.append(
                            GestureEvent("pinch_zoom", key, {"delta": delta, "distance": dist})
                        )
                state.pinch_distance = dist
        else:
            state.pinch_position = None
            state.pinch_distance = None

        state.point_up_active = self._edge(
            events, key, "point_up", is_point_up(landmarks, s), state.point_up_active
        )
        state.v_sign_active = self._edge(
            events, key, "v_sign", is_v_sign(landmarks, s), state.v_sign_active
        )

        if s.extended_poses:
            # A hand shape maps to one gesture: pinch and the finger signs win
            # over static poses.
            if pinching or state.point_up_active or state.v_sign_active:
                label = None
                confidence = 0.0
            else:
                prediction = classify_pose(landmarks, s)
                label = None if prediction.label == "unknown" else prediction.label
                confidence = prediction.confidence
            if label != state.pose_label:
                if state.pose_label is not None:
                    events.append(GestureEvent(f"{state.pose_label}_end", key, {}))
                if label is not None:
                    events.append(
                        GestureEvent(label, key, {"confidence": confidence})
                    )
                state.pose_label = label

        if s.swipe_enabled:
            self._detect_swipe(key, index_xy, pinching, state, events)
        state.last_position = index_xy

    def _detect_swipe(
        self,
        key: str,
        index_xy: tuple[float, float],
        pinching: bool,
        state: HandState,
        events: list[GestureEvent],
    ) -> None:
        if state.swipe_cooldown > 0:
            state.swipe_cooldown -= 1
            return
        # Motion while pinching is reported as pinch_drag instead.
        if state.last_position is None or pinching:
            return
        dx = index_xy[0] - state.last_position[0]
        dy = index_xy[1] - state.last_position[1]
        if max(abs(dx), abs(dy)) <= self.settings.swipe_threshold:
            return
        if abs(dx) >= abs(dy):
            name = "swipe_right" if dx > 0 else "swipe_left"
            delta = abs(dx)
        else:
            name = "swipe_down" if dy > 0 else "swipe_up"
            delta = abs(dy)
        events.append(GestureEvent(name, key, {"delta": delta}))
        state.swipe_cooldown = self.settings.swipe_cooldown_frames

    @staticmethod
    def _edge(
        events: list[GestureEvent],
        key: str,
        name: str,
        active: bool,
        was_active: bool,
    ) -> bool:
        if active and not was_active:
            events.append(GestureEvent(name, key, {}))
        elif was_active and not active:
            events.append(GestureEvent(f"{name}_end", key, {}))
        return active

    def _release_missing(self, present: set[str], events: list[GestureEvent]) -> None:
        for key in list(self._hands):
            if key in present:
                continue
            state = self._hands[key]
            state.missing_frames += 1
            if state.missing_frames < self.settings.release_after_frames:
                continue
            payload: dict[str, Any] = {"reason": "hand_lost"}
            for gesture in state.active_gestures():
                name = "pinch_end" if gesture == "pinch" else f"{gesture}_end"
                events.append(GestureEvent(name, key, dict(payload)))
            del self._hands[key]
            logger.debug("Released hand %r after %d missing frames", key, state.missing_frames)

    def _close_source(self) -> None:
        source, self._source = self._source, None
        if source is None:
            return
        try:
            source.close()
        except Exception:
            logger.exception("Closing frame source failed")

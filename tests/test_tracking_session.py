from __future__ import annotations

import json
from pathlib import Path

from _hands import fist_hand, make_hand, names, pinch_hand, v_sign_hand
from lesson_gestures.tracking.actions import ViewerActionExecutor
from lesson_gestures.tracking.config import load_gesture_config, load_tracking_config
from lesson_gestures.tracking.detector import LandmarkGestureDetector
from lesson_gestures.tracking.mapper import GestureMapper
from lesson_gestures.tracking.session import ACTION_HISTORY, GESTURE_DISPLAY_S, GestureSession
from lesson_gestures.tracking.telemetry import TelemetryLogger

CONFIG = {"gestureMap": {"pinch": "zoomIn", "v_sign": "customWave"}}
ROOT = Path(__file__).resolve().parents[1]


def _session(telemetry=None) -> GestureSession:
    mapper = GestureMapper(CONFIG, clock=lambda: 1.0)
    return GestureSession(LandmarkGestureDetector(), mapper, ViewerActionExecutor(), telemetry)


def test_pinch_start_triggers_mapped_action() -> None:
    session = _session()
    session.detector.process_frame([make_hand()])
    session.detector.process_frame([pinch_hand(0.5, 0.5)])
    session.detector.process_frame([pinch_hand(0.5, 0.5)])

    assert [d.action for d in session.actions] == ["zoomIn"]
    assert session.current_gesture == "pinch"
    assert session.last_action == "zoomIn (ok)"
    assert abs(session.executor.state.camera_distance - 5.0 / 1.2) < 1e-9


def test_drag_rotates_view() -> None:
    session = _session()
    session.detector.process_frame([pinch_hand(0.5, 0.5)])
    session.detector.process_frame([pinch_hand(0.6, 0.5)])
    assert session.executor.state.rotation[1] > 0.0


def test_unimplemented_action_is_reported_as_skipped() -> None:
    session = _session()
    session.detector.process_frame([v_sign_hand()])
    assert session.actions[0].action == "customWave"
    assert session.last_action == "customWave (skipped)"


def test_unmapped_gesture_updates_display_only() -> None:
    session = _session()
    session.detector.process_frame([make_hand(thumb=False, middle=False, ring=False, pinky=False)])
    assert list(session.actions) == []
    assert session.current_gesture == "point_up"
    now = session.current_since
    assert session.display_gesture(now) == "point_up"
    assert session.display_gesture(now + GESTURE_DISPLAY_S + 0.1) == "-"


def test_session_writes_telemetry(tmp_path) -> None:
    telemetry = TelemetryLogger(tmp_path)
    session = _session(telemetry)
    events = session.detector.process_frame([pinch_hand(0.5, 0.5)])
    session.record(events)

    rows = [json.loads(line) for line in telemetry.events_path.read_text().splitlines()]
    assert [r["kind"] for r in rows] == ["action", "event"]
    assert rows[0]["action"] == "zoomIn" and rows[0]["executed"] is True
    assert rows[1]["name"] == "pinch_start"


def test_clear() -> None:
    session = _session()
    session.detector.process_frame([pinch_hand(0.5, 0.5)])
    session.clear()
    assert list(session.actions) == []
    assert session.display_gesture(0.0) == "-"
    assert session.last_action == "none"


def test_action_history_is_bounded() -> None:
    session = _session()
    for _ in range(ACTION_HISTORY + 2):
        session.detector.process_frame([pinch_hand(0.5, 0.5)])
        session.detector.process_frame([make_hand()])
    assert len(session.actions) == ACTION_HISTORY
    assert all(d.action == "zoomIn" for d in session.actions)


def test_shipped_heart_lesson_runs_one_action_per_gesture() -> None:
    cfg = load_tracking_config(ROOT / "configs" / "tracking.default.yaml")
    mapper = GestureMapper(load_gesture_config(ROOT / "configs" / "gestures" / "heart.json"))
    session = GestureSession(LandmarkGestureDetector(cfg.detector), mapper, ViewerActionExecutor())
    detector = session.detector

    assert names(detector.process_frame([fist_hand()])) == ["fist"]
    # Index tip stays at (0.43, 0.45) from here on, so no swipe fires.
    assert names(detector.process_frame([pinch_hand(0.43, 0.45)])) == ["pinch_start", "fist_end"]
    assert abs(session.executor.state.camera_distance - 5.0 / 1.2) < 1e-9

    assert names(detector.process_frame([v_sign_hand()])) == ["pinch_end", "v_sign"]
    assert abs(session.executor.state.camera_distance - 5.0 / 1.2 / 0.8) < 1e-9

    assert names(detector.process_frame([make_hand()])) == ["v_sign_end", "open_palm"]
    assert [d.action for d in session.actions] == [
        "pauseAnimation",
        "zoomIn",
        "zoomOut",
        "resetView",
    ]

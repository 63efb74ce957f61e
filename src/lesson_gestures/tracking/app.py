from __future__ import annotations

import logging
import time
from pathlib import Path

import cv2

from lesson_gestures.tracking.actions import ViewerActionExecutor
from lesson_gestures.tracking.capture import CameraLandmarkSource
from lesson_gestures.tracking.config import (
    DEFAULT_GESTURE_CONFIG,
    load_gesture_config,
    load_tracking_config,
)
from lesson_gestures.tracking.detector import LandmarkGestureDetector
from lesson_gestures.tracking.mapper import GestureMapper
from lesson_gestures.tracking.recording import GestureRecorder
from lesson_gestures.tracking.session import GestureSession
from lesson_gestures.tracking.telemetry import TelemetryLogger
from lesson_gestures.tracking.types import HandFrame

logger = logging.getLogger(__name__)


def _draw_hud(frame, *, fps: float, gesture: str, last_action: str, session: GestureSession,
              recording: bool) -> None:
    h, w = frame.shape[:2]
    overlay = frame.copy()
    cv2.rectangle(overlay, (24, 24), (w - 24, 160), (18, 18, 18), -1)
    cv2.addWeighted(overlay, 0.58, frame, 0.42, 0, frame)
    cv2.rectangle(frame, (24, 24), (w - 24, 160), (240, 240, 240), 2)

    view = session.executor.state
    cv2.putText(frame, f"Gesture: {gesture:>12}  |  FPS: {fps:0.1f}", (45, 64),
                cv2.FONT_HERSHEY_SIMPLEX, 0.8, (245, 245, 245), 2, cv2.LINE_AA)
    cv2.putText(frame, f"Last action: {last_action}", (45, 100),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (230, 230, 230), 2, cv2.LINE_AA)
    rot = ", ".join(f"{v:+.2f}" for v in view.rotation)
    cv2.putText(frame, f"Camera dist {view.camera_distance:0.2f}  rot ({rot})", (45, 134),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, (200, 200, 200), 1, cv2.LINE_AA)
    rec_color = (50, 60, 255) if recording else (170, 170, 170)
    cv2.putText(frame, f"REC {'ON' if recording else 'OFF'}", (w - 160, 64),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, rec_color, 2, cv2.LINE_AA)
    cv2.putText(frame, "Keys: Q quit | R record", (30, h - 20),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (220, 220, 220), 1, cv2.LINE_AA)


def _draw_landmarks(frame, hands: list[HandFrame]) -> None:
    h, w = frame.shape[:2]
    for hand in hands:
        for i, lm in enumerate(hand.landmarks):
            px, py = int(lm.x * w), int(lm.y * h)
            cv2.circle(frame, (px, py), 3, (0, 255, 0), -1)
            if i in (4, 8):
                cv2.circle(frame, (px, py), 6, (0, 0, 255), 2)


def run_tracking_app(config_path: str | None = None, gesture_config_path: str | None = None) -> None:
    cfg = load_tracking_config(config_path)
    gesture_path = gesture_config_path or cfg.gesture_config_path
    gesture_config = load_gesture_config(gesture_path) if gesture_path else DEFAULT_GESTURE_CONFIG

    mapper = GestureMapper(gesture_config)
    detector = LandmarkGestureDetector(cfg.detector)
    telemetry = TelemetryLogger(cfg.output_dir)
    recorder = GestureRecorder(Path(cfg.output_dir) / "recordings")
    session = GestureSession(detector, mapper, ViewerActionExecutor(), telemetry, recorder)

    source = CameraLandmarkSource(
        model_path=cfg.model_path,
        camera_id=cfg.camera_id,
        frame_width=cfg.frame_width,
        frame_height=cfg.frame_height,
        num_hands=cfg.detector.max_hands,
        flip=cfg.flip,
    )
    detector.attach_source(source)

    prev_t = time.perf_counter()
    fps_ema = 0.0
    fps_alpha = 0.1
    try:
        while True:
            frame_start = time.perf_counter()
            frame, hands = source.read()
            if frame is None:
                logger.warning("Camera stopped delivering frames")
                break
            recorder.add_frame(hands)
            events = detector.process_frame(hands)
            session.record(events)
            telemetry.log_frame((time.perf_counter() - frame_start) * 1000.0, len(hands))

            now = time.perf_counter()
            dt = now - prev_t
            prev_t = now
            inst_fps = 1.0 / dt if dt > 0 else 0.0
            fps_ema = inst_fps if fps_ema == 0.0 else (1 - fps_alpha) * fps_ema + fps_alpha * inst_fps

            if cfg.show_debug:
                _draw_landmarks(frame, hands)
            _draw_hud(
                frame,
                fps=fps_ema,
                gesture=session.display_gesture(now),
                last_action=session.last_action,
                session=session,
                recording=recorder.is_recording,
            )
            cv2.imshow("Lesson Gesture Viewer", frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            if key == ord("r"):
                if recorder.is_recording:
                    recorder.stop()
                else:
                    path = recorder.start()
                    logger.info("Recording to %s", path)
    finally:
        detector.dispose()
        recorder.stop()
        summary = telemetry.finalize()
        cv2.destroyAllWindows()
    print(
        "Gesture session summary: "
        f"frames={summary.frames}, events={summary.events}, actions={summary.actions}, "
        f"fps_avg={summary.fps_avg:.1f}, latency_p95_ms={summary.latency_p95_ms:.1f}"
    )

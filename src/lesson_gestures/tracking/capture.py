from __future__ import annotations

import logging
import os
import time
from typing import Optional

import cv2
import mediapipe as mp

from lesson_gestures.tracking.frames import hands_from_results
from lesson_gestures.tracking.types import HandFrame

logger = logging.getLogger(__name__)

BaseOptions = mp.tasks.BaseOptions
HandLandmarker = mp.tasks.vision.HandLandmarker
HandLandmarkerOptions = mp.tasks.vision.HandLandmarkerOptions
VisionRunningMode = mp.tasks.vision.RunningMode


class CameraLandmarkSource:
    """Webcam plus MediaPipe Tasks hand landmarker, delivering HandFrames."""

    def __init__(
        self,
        model_path: str,
        camera_id: int = 0,
        frame_width: int = 1280,
        frame_height: int = 720,
        num_hands: int = 2,
        min_hand_detection_confidence: float = 0.7,
        min_hand_presence_confidence: float = 0.5,
        min_tracking_confidence: float = 0.7,
        flip: bool = True,
    ) -> None:
        if not os.path.exists(model_path):
            raise FileNotFoundError(f"Model file not found: {model_path}")
        self.flip = flip
        self._last_timestamp_ms = 0

        opts = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=model_path),
            running_mode=VisionRunningMode.VIDEO,
            num_hands=num_hands,
            min_hand_detection_confidence=min_hand_detection_confidence,
            min_hand_presence_confidence=min_hand_presence_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._landmarker: Optional[HandLandmarker] = HandLandmarker.create_from_options(opts)

        cap = cv2.VideoCapture(camera_id)
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, frame_width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, frame_height)
        if not cap.isOpened():
            self._landmarker.close()
            self._landmarker = None
            raise RuntimeError(f"Could not open webcam {camera_id}.")
        self._cap: Optional[cv2.VideoCapture] = cap
        logger.info("Camera %d opened with %d hand(s) max", camera_id, num_hands)

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def close(self) -> None:
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera released")

    def __enter__(self) -> "CameraLandmarkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ts_ms(self) -> int:
        now = int(time.perf_counter() * 1000)
        if now <= self._last_timestamp_ms:
            now = self._last_timestamp_ms + 1
        self._last_timestamp_ms = now
        return now

    def read(self):
        """Grab one frame; returns ``(frame_bgr, hands)`` or ``(None, [])`` at end of stream."""
        if self._cap is None or self._landmarker is None:
            raise RuntimeError("Source was closed.")

        ok, frame = self._cap.read()
        if not ok:
            return None, []
        out = cv2.flip(frame, 1) if self.flip else frame
        frame_rgb = cv2.cvtColor(out, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect_for_video(mp_image, self._ts_ms())
        hands: list[HandFrame] = hands_from_results(result.hand_landmarks, result.handedness)
        return out, hands

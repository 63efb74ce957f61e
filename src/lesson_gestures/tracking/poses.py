from __future__ import annotations

from collections.abc import Sequence

from lesson_gestures.tracking.config import DetectorSettings
from lesson_gestures.tracking.geometry import (
    INDEX_PIP,
    INDEX_TIP,
    THUMB_MCP,
    THUMB_TIP,
    WRIST,
    finger_ratio,
    pinch_distance,
)
from lesson_gestures.tracking.types import Landmark, PoseLabel, PosePrediction


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def is_pinching(landmarks: Sequence[Landmark], settings: DetectorSettings) -> bool:
    # Strict comparison: a distance equal to the threshold is not a pinch.
    return pinch_distance(landmarks, settings.use_depth) < settings.pinch_threshold


def finger_extended(
    landmarks: Sequence[Landmark],
    finger: str,
    settings: DetectorSettings,
) -> bool:
    return finger_ratio(landmarks, finger, settings.use_depth) > settings.extension_ratio


def finger_folded(
    landmarks: Sequence[Landmark],
    finger: str,
    settings: DetectorSettings,
) -> bool:
    return finger_ratio(landmarks, finger, settings.use_depth) * settings.fold_ratio < 1.0


def is_point_up(landmarks: Sequence[Landmark], settings: DetectorSettings) -> bool:
    """Index raised above the wrist with the middle finger not extended.

    Image y grows downward, so "above" means a smaller y.
    """
    if not finger_extended(landmarks, "index", settings):
        return False
    if finger_extended(landmarks, "middle", settings):
        return False
    return landmarks[INDEX_TIP].y < landmarks[WRIST].y - settings.point_up_margin


def is_v_sign(landmarks: Sequence[Landmark], settings: DetectorSettings) -> bool:
    return (
        finger_extended(landmarks, "index", settings)
        and finger_extended(landmarks, "middle", settings)
        and finger_folded(landmarks, "ring", settings)
        and finger_folded(landmarks, "pinky", settings)
    )


def _ratio_conf_above(value: float, threshold: float, span: float = 0.2) -> float:
    return _clamp((value - threshold) / max(1e-6, span), 0.0, 1.0)


def _ratio_conf_below(value: float, threshold: float, span: float = 0.2) -> float:
    return _clamp((threshold - value) / max(1e-6, span), 0.0, 1.0)


def pose_confidences(
    landmarks: Sequence[Landmark],
    settings: DetectorSettings,
) -> dict[PoseLabel, float]:
    """Per-pose confidence in [0, 1] for the extended pose set."""
    ext: dict[str, float] = {}
    fold: dict[str, float] = {}
    fold_limit = 1.0 / settings.fold_ratio
    for finger in ("index", "middle", "ring", "pinky"):
        ratio = finger_ratio(landmarks, finger, settings.use_depth)
        ext[finger] = _ratio_conf_above(ratio, settings.extension_ratio, 0.25)
        fold[finger] = _ratio_conf_below(ratio, fold_limit, 0.2)

    thumb_ratio = finger_ratio(landmarks, "thumb", settings.use_depth)
    thumb_open_conf = _ratio_conf_above(thumb_ratio, 1.0, 0.15)
    thumb_up_conf = _ratio_conf_above(
        landmarks[THUMB_MCP].y - landmarks[THUMB_TIP].y,
        0.0,
        0.08,
    )
    # Image y grows downward: a positive value means the tip hangs below the PIP.
    index_down_conf = _ratio_conf_above(
        landmarks[INDEX_TIP].y - landmarks[INDEX_PIP].y,
        0.0,
        0.05,
    )
    spread = pinch_distance(landmarks, settings.use_depth)
    spread_conf = min(
        _ratio_conf_above(spread, settings.pinch_out_min, 0.02),
        _ratio_conf_below(spread, settings.pinch_out_max, 0.02),
    )
    fold_all = min(fold.values())
    fold_rest = min(fold["middle"], fold["ring"], fold["pinky"])
    ext_mean = sum(ext.values()) / 4.0

    return {
        "open_palm": 0.85 * ext_mean + 0.15 * thumb_open_conf,
        "fist": 0.70 * fold_all + 0.30 * (1.0 - thumb_up_conf),
        "thumbs_up": 0.60 * fold_all + 0.40 * thumb_up_conf,
        "point_down": 0.60 * min(ext["index"], index_down_conf) + 0.40 * fold_rest,
        "pinch_out": 0.60 * spread_conf + 0.40 * fold_rest,
    }


def classify_pose(landmarks: Sequence[Landmark], settings: DetectorSettings) -> PosePrediction:
    """Pick the most confident static pose, or "unknown" below the threshold.

    Ties resolve to the first pose in ``pose_confidences`` order.
    """
    scores = pose_confidences(landmarks, settings)
    label, confidence = max(scores.items(), key=lambda item: item[1])
    if confidence >= settings.pose_confidence_min:
        return PosePrediction(label, confidence)
    return PosePrediction("unknown", confidence)

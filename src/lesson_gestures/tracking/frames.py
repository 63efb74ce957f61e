from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from lesson_gestures.tracking.types import HandFrame, Landmark

logger = logging.getLogger(__name__)


def to_landmark(raw: Any) -> Landmark:
    """Accepts objects with x/y/z attributes, mappings, or (x, y[, z]) sequences."""
    if isinstance(raw, Landmark):
        return raw
    if isinstance(raw, Mapping):
        return Landmark(float(raw["x"]), float(raw["y"]), float(raw.get("z") or 0.0))
    if hasattr(raw, "x") and hasattr(raw, "y"):
        return Landmark(float(raw.x), float(raw.y), float(getattr(raw, "z", 0.0) or 0.0))
    if isinstance(raw, Sequence) and len(raw) >= 2:
        z = raw[2] if len(raw) > 2 else 0.0
        return Landmark(float(raw[0]), float(raw[1]), float(z or 0.0))
    raise ValueError(f"Unsupported landmark value: {raw!r}")


def handedness_label(raw: Any) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, Mapping):
        label = raw.get("label") or raw.get("category_name")
        return str(label) if label else None
    # MediaPipe Tasks reports a list of Category objects per hand.
    if isinstance(raw, Sequence):
        return handedness_label(raw[0]) if raw else None
    label = getattr(raw, "label", None) or getattr(raw, "category_name", None)
    if label is None and hasattr(raw, "classification"):
        return handedness_label(list(raw.classification))
    return str(label) if label else None


def hands_from_results(
    multi_hand_landmarks: Sequence[Any] | None,
    multi_handedness: Sequence[Any] | None = None,
) -> list[HandFrame]:
    """Build hand frames from index-aligned landmark and handedness arrays.

    The handedness array may be shorter than the landmark array or absent;
    unmatched hands get ``None`` handedness. Hands whose landmarks cannot be
    parsed are dropped.
    """
    hands: list[HandFrame] = []
    labels = list(multi_handedness or ())
    for index, raw_hand in enumerate(multi_hand_landmarks or ()):
        points = getattr(raw_hand, "landmark", raw_hand)
        try:
            landmarks = tuple(to_landmark(p) for p in points)
            label = handedness_label(labels[index]) if index < len(labels) else None
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Dropping unreadable hand %d: %s", index, exc)
            continue
        hands.append(HandFrame(landmarks=landmarks, handedness=label))
    return hands

from __future__ import annotations

import math
from collections.abc import Sequence

from lesson_gestures.tracking.types import Landmark

WRIST = 0
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_PIP = 6
INDEX_TIP = 8
MIDDLE_PIP = 10
MIDDLE_TIP = 12
RING_PIP = 14
RING_TIP = 16
PINKY_PIP = 18
PINKY_TIP = 20

# (tip, mid-joint) pairs used by the extension tests.
FINGER_JOINTS: dict[str, tuple[int, int]] = {
    "thumb": (THUMB_TIP, THUMB_IP),
    "index": (INDEX_TIP, INDEX_PIP),
    "middle": (MIDDLE_TIP, MIDDLE_PIP),
    "ring": (RING_TIP, RING_PIP),
    "pinky": (PINKY_TIP, PINKY_PIP),
}


def distance(a: Landmark, b: Landmark, use_depth: bool = False) -> float:
    """Euclidean distance in normalized image space, 2D unless use_depth is set."""
    if use_depth:
        return math.sqrt((b.x - a.x) ** 2 + (b.y - a.y) ** 2 + (b.z - a.z) ** 2)
    return math.hypot(b.x - a.x, b.y - a.y)


def pinch_distance(landmarks: Sequence[Landmark], use_depth: bool = False) -> float:
    return distance(landmarks[THUMB_TIP], landmarks[INDEX_TIP], use_depth)


def wrist_ratio(
    landmarks: Sequence[Landmark],
    tip_idx: int,
    joint_idx: int,
    use_depth: bool = False,
) -> float:
    """Tip-to-wrist distance over joint-to-wrist distance. Scale invariant."""
    wrist = landmarks[WRIST]
    tip = distance(landmarks[tip_idx], wrist, use_depth)
    joint = distance(landmarks[joint_idx], wrist, use_depth)
    return tip / max(1e-6, joint)


def finger_ratio(landmarks: Sequence[Landmark], finger: str, use_depth: bool = False) -> float:
    tip_idx, joint_idx = FINGER_JOINTS[finger]
    return wrist_ratio(landmarks, tip_idx, joint_idx, use_depth)


def point_xy(landmarks: Sequence[Landmark], idx: int) -> tuple[float, float]:
    lm = landmarks[idx]
    return lm.x, lm.y

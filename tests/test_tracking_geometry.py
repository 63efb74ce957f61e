from __future__ import annotations

from _hands import make_hand
from lesson_gestures.tracking.geometry import distance, finger_ratio, pinch_distance, wrist_ratio
from lesson_gestures.tracking.types import HandFrame, Landmark


def _scaled(hand: HandFrame, k: float) -> tuple[Landmark, ...]:
    return tuple(Landmark(lm.x * k, lm.y * k, lm.z * k) for lm in hand.landmarks)


def test_distance_ignores_depth_by_default() -> None:
    a = Landmark(0.0, 0.0, 0.0)
    b = Landmark(0.3, 0.4, 1.2)
    assert abs(distance(a, b) - 0.5) < 1e-9
    assert abs(distance(a, b, use_depth=True) - 1.3) < 1e-9


def test_pinch_distance_uses_thumb_and_index_tips() -> None:
    hand = make_hand(index_tip=(0.5, 0.5), thumb_tip=(0.53, 0.54))
    assert abs(pinch_distance(hand.landmarks) - 0.05) < 1e-9


def test_wrist_ratio_is_scale_invariant() -> None:
    hand = make_hand()
    for finger in ("thumb", "index", "middle", "ring", "pinky"):
        r1 = finger_ratio(hand.landmarks, finger)
        r2 = finger_ratio(_scaled(hand, 2.0), finger)
        assert abs(r1 - r2) < 1e-9


def test_extended_and_folded_ratios_are_separated() -> None:
    open_hand = make_hand()
    closed = make_hand(thumb=False, index=False, middle=False, ring=False, pinky=False)
    for finger in ("index", "middle", "ring", "pinky"):
        assert finger_ratio(open_hand.landmarks, finger) > 1.2
        assert finger_ratio(closed.landmarks, finger) < 1 / 1.1


def test_wrist_ratio_survives_degenerate_joint() -> None:
    points = [Landmark(0.5, 0.5)] * 21
    assert wrist_ratio(points, 8, 6) == 0.0

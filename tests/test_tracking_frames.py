from __future__ import annotations

from types import SimpleNamespace

import pytest

from lesson_gestures.tracking.frames import handedness_label, hands_from_results, to_landmark
from lesson_gestures.tracking.types import Landmark


def _points(n: int = 21) -> list[SimpleNamespace]:
    return [SimpleNamespace(x=i / 100, y=0.5, z=-0.01) for i in range(n)]


def test_to_landmark_accepts_common_shapes() -> None:
    assert to_landmark({"x": 0.1, "y": 0.2}) == Landmark(0.1, 0.2, 0.0)
    assert to_landmark(SimpleNamespace(x=0.1, y=0.2, z=0.3)) == Landmark(0.1, 0.2, 0.3)
    assert to_landmark((0.1, 0.2)) == Landmark(0.1, 0.2, 0.0)
    assert to_landmark([0.1, 0.2, None]) == Landmark(0.1, 0.2, 0.0)
    lm = Landmark(0.4, 0.5)
    assert to_landmark(lm) is lm
    with pytest.raises(ValueError):
        to_landmark(0.5)


def test_handedness_label_shapes() -> None:
    assert handedness_label(None) is None
    assert handedness_label("") is None
    assert handedness_label("Left") == "Left"
    assert handedness_label({"category_name": "Right", "score": 0.9}) == "Right"
    assert handedness_label([SimpleNamespace(category_name="Left", score=0.98)]) == "Left"
    assert handedness_label([]) is None
    legacy = SimpleNamespace(classification=[SimpleNamespace(label="Right", score=0.9)])
    assert handedness_label(legacy) == "Right"


def test_hands_from_results_aligns_handedness_by_index() -> None:
    hands = hands_from_results(
        [_points(), _points()],
        [[SimpleNamespace(category_name="Left")]],
    )
    assert [h.handedness for h in hands] == ["Left", None]
    assert all(h.is_complete for h in hands)
    assert hands[0].landmarks[3] == Landmark(0.03, 0.5, -0.01)


def test_hands_from_results_unwraps_landmark_lists() -> None:
    wrapped = SimpleNamespace(landmark=_points())
    hands = hands_from_results([wrapped])
    assert len(hands) == 1
    assert hands[0].handedness is None


def test_unreadable_hands_are_dropped() -> None:
    bad = [{"x": 0.1}] * 21
    hands = hands_from_results([bad, _points(5)], ["Left", "Right"])
    assert len(hands) == 1
    assert hands[0].handedness == "Right"
    assert hands[0].is_complete is False


def test_empty_results() -> None:
    assert hands_from_results(None) == []
    assert hands_from_results([], None) == []

from __future__ import annotations

import json

from lesson_gestures.tracking.telemetry import TelemetryLogger, _percentile
from lesson_gestures.tracking.types import ActionDescriptor, GestureEvent


def test_percentile_interpolates() -> None:
    assert _percentile([], 0.5) == 0.0
    assert _percentile([4.0], 0.95) == 4.0
    assert abs(_percentile([1.0, 2.0, 3.0, 4.0], 0.5) - 2.5) < 1e-9
    assert _percentile([3.0, 1.0, 2.0], 1.0) == 3.0


def test_session_summary(tmp_path) -> None:
    telemetry = TelemetryLogger(tmp_path)
    for ms in (10.0, 20.0, 30.0):
        telemetry.log_frame(ms, hands=1)
    telemetry.log_event(GestureEvent("pinch_start", "Right", {"x": 0.5, "y": 0.5}))
    telemetry.log_event(GestureEvent("pinch_end", "Right"))
    telemetry.log_event(GestureEvent("pinch_start", "Left", {"x": 0.2, "y": 0.3}))
    descriptor = ActionDescriptor("pinch", "zoomIn", 1.0, 1000, {"factor": 1.2, "duration": 300})
    telemetry.log_action(descriptor, executed=True)

    summary = telemetry.finalize()
    assert summary.frames == 3
    assert summary.events == 3
    assert summary.actions == 1
    assert summary.events_by_name == {"pinch_start": 2, "pinch_end": 1}
    assert abs(summary.latency_p50_ms - 20.0) < 1e-9

    saved = json.loads(telemetry.summary_path.read_text(encoding="utf-8"))
    assert saved["frames"] == 3

    rows = [json.loads(line) for line in telemetry.events_path.read_text(encoding="utf-8").splitlines()]
    assert [r["kind"] for r in rows] == ["frame"] * 3 + ["event"] * 3 + ["action"]
    assert rows[-1]["config"] == {"factor": 1.2, "duration": 300}

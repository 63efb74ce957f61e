from __future__ import annotations

import json
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path

import numpy as np

from lesson_gestures.tracking.types import ActionDescriptor, GestureEvent


@dataclass(slots=True)
class SessionSummary:
    frames: int
    events: int
    actions: int
    runtime_s: float
    fps_avg: float
    latency_p50_ms: float
    latency_p95_ms: float
    events_by_name: dict[str, int] = field(default_factory=dict)


class TelemetryLogger:
    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        session_id = time.strftime("%Y%m%d_%H%M%S")
        self.session_id = session_id
        self.events_path = self.output_dir / f"session_{session_id}.jsonl"
        self.summary_path = self.output_dir / f"summary_{session_id}.json"
        self._start = time.perf_counter()
        self._frames = 0
        self._actions = 0
        self._event_names: Counter[str] = Counter()
        self._latencies_ms: list[float] = []

    def log_frame(self, processing_ms: float, hands: int) -> None:
        self._frames += 1
        self._latencies_ms.append(float(processing_ms))
        self._append(
            {
                "kind": "frame",
                "hands": hands,
                "latency_ms": round(processing_ms, 3),
                "timestamp_ms": int(time.perf_counter() * 1000),
            }
        )

    def log_event(self, event: GestureEvent) -> None:
        self._event_names[event.name] += 1
        self._append(
            {
                "kind": "event",
                **asdict(event),
                "timestamp_ms": int(time.perf_counter() * 1000),
            }
        )

    def log_action(self, descriptor: ActionDescriptor, executed: bool) -> None:
        self._actions += 1
        self._append({"kind": "action", **asdict(descriptor), "executed": bool(executed)})

    def finalize(self) -> SessionSummary:
        runtime_s = max(1e-6, time.perf_counter() - self._start)
        summary = SessionSummary(
            frames=self._frames,
            events=sum(self._event_names.values()),
            actions=self._actions,
            runtime_s=runtime_s,
            fps_avg=self._frames / runtime_s,
            latency_p50_ms=_percentile(self._latencies_ms, 0.5),
            latency_p95_ms=_percentile(self._latencies_ms, 0.95),
            events_by_name=dict(self._event_names),
        )
        with self.summary_path.open("w", encoding="utf-8") as f:
            json.dump(asdict(summary), f, indent=2)
        return summary

    def _append(self, payload: dict) -> None:
        with self.events_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload))
            f.write("\n")


def _percentile(values: list[float], q: float) -> float:
    if not values:
        return 0.0
    return float(np.percentile(np.asarray(values, dtype=float), q * 100.0))

from __future__ import annotations

import json
import time
from collections.abc import Iterator, Sequence
from pathlib import Path

from lesson_gestures.tracking.frames import hands_from_results
from lesson_gestures.tracking.types import GestureEvent, HandFrame


class GestureRecorder:
    """Writes landmark frames and emitted events to a JSONL file."""

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._fh = None
        self._path: Path | None = None
        self.label = ""

    @property
    def is_recording(self) -> bool:
        return self._fh is not None

    @property
    def path(self) -> Path | None:
        return self._path

    def start(self, label: str = "") -> Path:
        if self._fh is not None:
            return self._path  # type: ignore[return-value]
        self.label = label
        stamp = time.strftime("%Y%m%d_%H%M%S")
        self._path = self.output_dir / f"recording_{stamp}.jsonl"
        self._fh = self._path.open("a", encoding="utf-8")
        return self._path

    def add_frame(self, hands: Sequence[HandFrame]) -> None:
        if self._fh is None:
            return
        payload = {
            "kind": "frame",
            "timestamp_ms": int(time.perf_counter() * 1000),
            "label": self.label,
            "hands": [
                {
                    "handedness": hand.handedness,
                    "landmarks": [[lm.x, lm.y, lm.z] for lm in hand.landmarks],
                }
                for hand in hands
            ],
        }
        self._fh.write(json.dumps(payload))
        self._fh.write("\n")

    def add_event(self, event: GestureEvent) -> None:
        if self._fh is None:
            return
        payload = {
            "kind": "event",
            "timestamp_ms": int(time.perf_counter() * 1000),
            "label": self.label,
            "name": event.name,
            "handedness": event.handedness,
            "payload": event.payload,
        }
        self._fh.write(json.dumps(payload))
        self._fh.write("\n")

    def stop(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


def load_recording(path: str | Path) -> Iterator[list[HandFrame]]:
    """Yield the hands of each recorded frame, in order. Event rows are skipped."""
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            if row.get("kind") != "frame":
                continue
            hands = row.get("hands", [])
            yield hands_from_results(
                [h.get("landmarks", []) for h in hands],
                [h.get("handedness") for h in hands],
            )

from __future__ import annotations

import argparse
import json
import logging
from collections import Counter, defaultdict
from pathlib import Path

from lesson_gestures.tracking.config import DetectorSettings, load_tracking_config
from lesson_gestures.tracking.detector import LandmarkGestureDetector
from lesson_gestures.tracking.recording import load_recording

logger = logging.getLogger(__name__)


def replay_recordings(
    paths: list[str | Path],
    settings: DetectorSettings | None = None,
) -> dict:
    """Run recorded landmark frames through a fresh detector per file."""
    by_name: Counter[str] = Counter()
    by_hand: dict[str, Counter[str]] = defaultdict(Counter)
    frames = 0
    files = 0

    for path in paths:
        p = Path(path)
        if not p.exists():
            logger.warning("Recording %s not found, skipping", p)
            continue
        files += 1
        detector = LandmarkGestureDetector(settings)
        for hands in load_recording(p):
            frames += 1
            for event in detector.process_frame(hands):
                by_name[event.name] += 1
                by_hand[event.handedness][event.name] += 1
        # Flush gestures still active at the end of the clip.
        for _ in range(detector.settings.release_after_frames):
            for event in detector.process_frame([]):
                by_name[event.name] += 1
                by_hand[event.handedness][event.name] += 1
        detector.dispose()

    return {
        "files": files,
        "frames": frames,
        "events": dict(sorted(by_name.items())),
        "hands": {hand: dict(sorted(c.items())) for hand, c in sorted(by_hand.items())},
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay recorded landmark clips (.jsonl).")
    parser.add_argument("recordings", nargs="+", help="Paths to recording jsonl files.")
    parser.add_argument("--config", default=None, help="Path to tracking yaml config.")
    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)
    cfg = load_tracking_config(args.config)
    report = replay_recordings(args.recordings, cfg.detector)
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()

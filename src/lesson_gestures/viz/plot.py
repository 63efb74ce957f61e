from __future__ import annotations

from collections import defaultdict
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from lesson_gestures.tracking.geometry import INDEX_TIP
from lesson_gestures.tracking.recording import load_recording


def index_trajectories(recording: str | Path) -> dict[str, np.ndarray]:
    """Index fingertip (x, y) per hand over a recording, as (N, 2) arrays."""
    points: dict[str, list[tuple[float, float]]] = defaultdict(list)
    for hands in load_recording(recording):
        for i, hand in enumerate(hands):
            if not hand.is_complete:
                continue
            tip = hand.landmarks[INDEX_TIP]
            points[hand.handedness or f"unknown_{i}"].append((tip.x, tip.y))
    return {hand: np.asarray(pts, dtype=float) for hand, pts in points.items()}


def save_trajectory(recording: str | Path, path: str | Path, title: str = "index fingertip") -> Path:
    """Plot fingertip paths in image coordinates (y down) and save to disk."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(figsize=(6, 4.5))
    for hand, pts in sorted(index_trajectories(recording).items()):
        ax.plot(pts[:, 0], pts[:, 1], marker=".", linewidth=1, label=hand)
    ax.set_xlim(0.0, 1.0)
    ax.set_ylim(1.0, 0.0)
    ax.set_title(title)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    if ax.get_legend_handles_labels()[0]:
        ax.legend()
    fig.savefig(path, dpi=100)
    plt.close(fig)
    return path

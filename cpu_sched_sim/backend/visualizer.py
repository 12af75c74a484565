from __future__ import annotations

from typing import List, Optional, Dict
import os
import random
import matplotlib.pyplot as plt

from .core import PCB
from .utils import EventLogger


def ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def pid_color(pid: int) -> str:
    # Stable color from pid
    rng = random.Random(pid)
    r = rng.randint(50, 220)
    g = rng.randint(50, 220)
    b = rng.randint(50, 220)
    return f"#{r:02x}{g:02x}{b:02x}"


def plot_gantt(processes: List[PCB], logger: EventLogger, out_path: Optional[str] = None) -> None:
    fig, ax = plt.subplots(figsize=(12, 3 + 0.2 * max(1, len(processes))))

    pids_order = sorted({seg["pid"] for seg in logger.timeline if seg.get("pid") is not None})
    y_positions: Dict[int, int] = {pid: i for i, pid in enumerate(pids_order)}

    # Draw execution bars
    for seg in logger.timeline:
        pid = seg.get("pid")
        if pid is None:
            # idle gaps stay blank
            continue
        start = seg["start"]
        end = seg["end"]
        ax.barh(y_positions[pid], end - start, left=start, color=pid_color(pid), edgecolor="black", alpha=0.9)
        if seg.get("level") is not None:
            ax.text(start + (end - start) / 2, y_positions[pid], f"L{seg['level']}",
                    va="center", ha="center", fontsize=7)

    # Mark level changes
    for ev in logger.process_events:
        if ev["event"] not in ("promote", "demote") or ev["pid"] not in y_positions:
            continue
        marker = "^" if ev["event"] == "promote" else "v"
        ax.plot(ev["time"], y_positions[ev["pid"]] + 0.4, marker=marker, color="#444444")

    ax.set_yticks([y_positions[pid] for pid in pids_order])
    ax.set_yticklabels([f"P{pid}" for pid in pids_order])
    ax.set_xlabel("Time")
    policy = logger.timeline[0]["policy"] if logger.timeline else ""
    ax.set_title(f"Gantt Chart ({policy})")
    ax.grid(True, axis="x", linestyle=":", alpha=0.5)
    fig.tight_layout()

    if out_path:
        ensure_dir(out_path)
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()

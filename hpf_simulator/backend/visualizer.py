from __future__ import annotations

from typing import List, Optional, Dict, Any, Hashable
import os
import matplotlib.pyplot as plt

from .core import Process
from .utils import EventLogger


PRIORITY_COLORS = {1: "#d62728", 2: "#ff7f0e", 3: "#1f77b4", 4: "#7f7f7f"}


def ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _row_key(seg: Dict[str, Any]) -> Hashable:
    return seg["pid"] if seg.get("pid") is not None else seg["name"]


def _row_label(seg: Dict[str, Any]) -> str:
    if seg.get("pid") is None:
        return str(seg["name"])
    return f"{seg['name']}#{seg['pid']}"


def plot_gantt(processes: List[Process], logger: EventLogger, out_path: Optional[str] = None,
               horizon: Optional[float] = None, title: str = "HPF Gantt Chart"):
    """Draw executed slices per process, coloured by priority.

    Slices that ended in a preemption get an ``x`` marker at their end.
    """
    run_slices = [seg for seg in logger.timeline if seg.get("name") is not None]
    ran = {_row_key(seg) for seg in run_slices}
    rows: Dict[Hashable, int] = {}
    labels: List[str] = []
    # population order first, so rows read top-down by arrival
    for p in processes:
        key = p.pid if p.pid is not None else p.name
        if key in ran and key not in rows:
            rows[key] = len(rows)
            labels.append(_row_label({"pid": p.pid, "name": p.name}))
    for seg in run_slices:
        key = _row_key(seg)
        if key not in rows:
            rows[key] = len(rows)
            labels.append(_row_label(seg))

    fig, ax = plt.subplots(figsize=(12, 3 + 0.2 * max(1, len(rows))))

    for seg in run_slices:
        y = rows[_row_key(seg)]
        ax.barh(y, seg["end"] - seg["start"], left=seg["start"],
                color=PRIORITY_COLORS.get(seg["priority"], "#777777"), edgecolor="black", alpha=0.9)
        if seg.get("reason") == "preempted":
            ax.plot(seg["end"], y, marker="x", color="black", markersize=6)

    for seg in logger.timeline:
        if seg.get("name") is None:
            ax.axvspan(seg["start"], seg["end"], color="#dddddd", alpha=0.5, lw=0)

    if horizon is not None:
        ax.axvline(horizon, color="#444444", linestyle="--", alpha=0.7)

    ax.set_yticks(list(range(len(labels))))
    ax.set_yticklabels(labels)
    ax.invert_yaxis()
    ax.set_xlabel("Time (quanta)")
    ax.set_title(title)
    ax.grid(True, axis="x", linestyle=":", alpha=0.5)
    fig.tight_layout()

    if out_path:
        ensure_dir(out_path)
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
    return fig

from __future__ import annotations

from typing import List, Dict, Optional, Any, Iterable
from pathlib import Path
import json
import csv

from .core import PCB


class InputError(ValueError):
    """Raised for malformed process descriptions."""


class EventLogger:
    def __init__(self) -> None:
        self.process_events: List[Dict[str, Any]] = []
        self.timeline: List[Dict[str, Any]] = []

    def log_process_event(self, time_s: int, pid: int, event: str, detail: Optional[str] = None) -> None:
        self.process_events.append({
            "time": time_s,
            "pid": pid,
            "event": event,
            "detail": detail,
        })

    def log_timeline_slice(self, start: int, end: int, pid: Optional[int], policy: str,
                           level: Optional[int] = None, reason: Optional[str] = None) -> None:
        self.timeline.append({
            "start": start,
            "end": end,
            "pid": pid,
            "policy": policy,
            "level": level,
            "reason": reason,
        })

    def events_for(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.process_events if e["event"] == event]

    def export_json(self, path: str) -> None:
        data = {
            "process_events": self.process_events,
            "timeline": self.timeline,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def export_csv(self, base_path_no_ext: str) -> None:
        with open(f"{base_path_no_ext}_events.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["time", "pid", "event", "detail"])
            writer.writeheader()
            for row in self.process_events:
                writer.writerow(row)
        with open(f"{base_path_no_ext}_timeline.csv", "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["start", "end", "pid", "policy", "level", "reason"])
            writer.writeheader()
            for row in self.timeline:
                writer.writerow(row)


def format_trace(logger: EventLogger) -> List[str]:
    """Render the timeline as one line per decision."""
    lines: List[str] = []
    for seg in logger.timeline:
        duration = seg["end"] - seg["start"]
        if seg["pid"] is None:
            lines.append(f"[t={seg['start']:>5}] idle for {duration}")
            continue
        line = f"[t={seg['start']:>5}] process {seg['pid']} ran {duration}"
        if seg.get("level") is not None:
            line += f" (level {seg['level']})"
        if seg.get("reason"):
            line += f" {seg['reason']}"
        lines.append(line)
    return lines


def parse_process_line(line: str, lineno: int = 0) -> Optional[PCB]:
    """Parse ``pid arrival burst [priority]``; return None for blank/comment lines."""
    text = line.split("#", 1)[0].strip()
    if not text:
        return None
    parts = text.split()
    if len(parts) not in (3, 4):
        raise InputError(f"line {lineno}: expected 3 or 4 fields, got {len(parts)}: {line.strip()!r}")
    try:
        values = [int(p) for p in parts]
    except ValueError:
        raise InputError(f"line {lineno}: non-integer field in {line.strip()!r}") from None
    pid, arrival, burst = values[:3]
    priority = values[3] if len(values) == 4 else 0
    return PCB(pid=pid, arrival_time=arrival, burst_time=burst, priority=priority)


def validate_processes(processes: Iterable[PCB]) -> None:
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise InputError(f"duplicate pid {p.pid}")
        seen.add(p.pid)
        if p.arrival_time < 0:
            raise InputError(f"process {p.pid}: negative arrival time {p.arrival_time}")
        if p.burst_time <= 0:
            raise InputError(f"process {p.pid}: burst time must be positive, got {p.burst_time}")
        if p.priority < 0:
            raise InputError(f"process {p.pid}: negative priority {p.priority}")


def load_processes(path: str | Path) -> List[PCB]:
    procs: List[PCB] = []
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            pcb = parse_process_line(line, lineno)
            if pcb is not None:
                procs.append(pcb)
    validate_processes(procs)
    return procs


def compute_waiting_times(processes: List[PCB]) -> Dict[int, int]:
    waiting: Dict[int, int] = {}
    for p in processes:
        if p.finish_time is None:
            continue
        turnaround = p.finish_time - p.arrival_time
        waiting[p.pid] = max(0, turnaround - p.burst_time)
    return waiting


def compute_turnaround_times(processes: List[PCB]) -> Dict[int, int]:
    tat: Dict[int, int] = {}
    for p in processes:
        if p.finish_time is None:
            continue
        tat[p.pid] = max(0, p.finish_time - p.arrival_time)
    return tat


def compute_avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_throughput(processes: List[PCB], total_time: int) -> float:
    if total_time <= 0:
        return 0.0
    completed = len([p for p in processes if p.finish_time is not None])
    return completed / total_time

"""
Core data structures for the CPU scheduling simulator.
Includes the simulated clock, PCB, and FIFO queue implementations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Dict, Iterator, Sequence


class SchedulerError(RuntimeError):
    """Base class for simulator errors."""


class InvariantViolation(SchedulerError):
    """Raised when the simulation reaches a state that must never occur."""


class ProcessState(Enum):
    """Process states in the system."""
    WAITING = "WAITING"    # not yet arrived
    READY = "READY"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"


class SimClock:
    """Simulated integer clock shared by the driver and the active policy.

    Only moves forward. The driver owns it and hands it to each selection
    call so every policy sees the same time base.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise InvariantViolation(f"clock cannot start at negative time {start}")
        self._now = start

    @property
    def now(self) -> int:
        return self._now

    def advance(self, dt: int) -> int:
        """Move the clock forward by ``dt`` units and return the new time."""
        if dt < 0:
            raise InvariantViolation(f"clock cannot move backwards (dt={dt})")
        self._now += dt
        return self._now

    def set_now(self, t: int) -> None:
        if t < self._now:
            raise InvariantViolation(f"clock cannot be rewound from {self._now} to {t}")
        self._now = t

    def elapsed_since(self, start: int) -> int:
        return self._now - start


@dataclass
class ProcessStats:
    """Statistics tracked for each process."""
    first_run_time: Optional[int] = None
    response_time: Optional[int] = None
    dispatches: int = 0
    promotions: int = 0
    demotions: int = 0


@dataclass
class PCB:
    """Process Control Block - maintains all process information."""
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0
    remaining_time: int = None
    state: ProcessState = ProcessState.WAITING
    level: int = 0
    time_added: Optional[int] = None
    run_time_at_level: int = 0
    finish_time: Optional[int] = None
    stats: ProcessStats = None

    def __post_init__(self):
        """Initialize derived attributes."""
        self.remaining_time = self.burst_time if self.remaining_time is None else self.remaining_time
        self.stats = ProcessStats() if self.stats is None else self.stats

    @property
    def is_finished(self) -> bool:
        return self.state == ProcessState.FINISHED

    def run(self, duration: int, now: int) -> bool:
        """Debit ``duration`` units of CPU time; return True if the process finished.

        ``now`` is the clock value after the dispatch ended.
        """
        if self.state != ProcessState.RUNNING:
            raise InvariantViolation(f"process {self.pid} ran while {self.state.value}")
        if duration <= 0 or duration > self.remaining_time:
            raise InvariantViolation(
                f"process {self.pid} cannot run {duration} with {self.remaining_time} remaining")
        self.remaining_time -= duration
        self.run_time_at_level += duration
        self.stats.dispatches += 1
        if self.remaining_time == 0:
            self.state = ProcessState.FINISHED
            self.finish_time = now
            return True
        return False

    def reset(self) -> None:
        """Return the record to its pre-simulation state."""
        self.remaining_time = self.burst_time
        self.state = ProcessState.WAITING
        self.level = 0
        self.time_added = None
        self.run_time_at_level = 0
        self.finish_time = None
        self.stats = ProcessStats()


class ReadyQueue:
    """FIFO ready queue: append at the tail, remove from the head."""
    def __init__(self):
        # Simple list-backed queue. We keep a map for quick membership checks.
        self._items: List[PCB] = []
        self._pid_map: Dict[int, PCB] = {}

    def push(self, pcb: PCB, now: int) -> None:
        """Append a process at the tail and stamp its residency time."""
        if pcb.is_finished:
            raise InvariantViolation(f"finished process {pcb.pid} cannot be queued")
        if pcb.pid in self._pid_map:
            raise InvariantViolation(f"process {pcb.pid} is already queued")

        pcb.state = ProcessState.READY
        pcb.time_added = now
        self._items.append(pcb)
        self._pid_map[pcb.pid] = pcb

    def pop(self) -> Optional[PCB]:
        """Remove and return the head of the queue."""
        if not self._items:
            return None
        pcb = self._items.pop(0)
        del self._pid_map[pcb.pid]
        return pcb

    def peek(self) -> Optional[PCB]:
        return self._items[0] if self._items else None

    def remove(self, pid: int) -> Optional[PCB]:
        """Remove a specific process by PID."""
        if pid not in self._pid_map:
            return None
        pcb = self._pid_map.pop(pid)
        self._items = [p for p in self._items if p.pid != pid]
        return pcb

    def __contains__(self, pid: int) -> bool:
        return pid in self._pid_map

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PCB]:
        return iter(list(self._items))

    def get_all_processes(self) -> List[PCB]:
        return list(self._items)


class LevelQueues:
    """One ReadyQueue per priority level (0 = highest)."""

    def __init__(self, quanta: Sequence[Optional[int]]):
        # None marks a run-to-completion level
        self.quanta = tuple(quanta)
        self._queues = [ReadyQueue() for _ in self.quanta]

    def __len__(self) -> int:
        return len(self._queues)

    def __getitem__(self, level: int) -> ReadyQueue:
        return self._queues[level]

    @property
    def lowest(self) -> int:
        return len(self._queues) - 1

    def clamp(self, level: int) -> int:
        return max(0, min(self.lowest, level))

    def quantum(self, level: int) -> Optional[int]:
        return self.quanta[level]

    def push(self, pcb: PCB, level: int, now: int) -> None:
        """Queue ``pcb`` at the tail of ``level``."""
        self._queues[level].push(pcb, now)
        pcb.level = level

    def relocate(self, pcb: PCB, dest: int, now: int) -> None:
        """Move a process to the tail of another level in one step.

        A queued process leaves its current queue; a running process is
        simply handed over. Its residency timer and per-level run
        accumulator are reset, and it joins ``dest``.
        """
        if pcb.state != ProcessState.RUNNING and self._queues[pcb.level].remove(pcb.pid) is None:
            raise InvariantViolation(f"process {pcb.pid} is not queued at level {pcb.level}")
        pcb.run_time_at_level = 0
        self.push(pcb, dest, now)

    def first_non_empty(self) -> Optional[int]:
        for level, queue in enumerate(self._queues):
            if not queue.is_empty():
                return level
        return None

    def is_empty(self) -> bool:
        return all(q.is_empty() for q in self._queues)

    def total(self) -> int:
        return sum(len(q) for q in self._queues)

    def get_all_processes(self) -> List[PCB]:
        procs: List[PCB] = []
        for queue in self._queues:
            procs.extend(queue.get_all_processes())
        return procs

"""
Base scheduler plus the FCFS, Round Robin and Multi-Level Round Robin policies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .core import (
    PCB, ProcessState, ReadyQueue, LevelQueues, SimClock,
    SchedulerError, InvariantViolation,
)
from .utils import EventLogger

RR_QUANTUM = 4
# Multi-level round robin: quantum per level, highest level first.
MLRR_QUANTA = (8, 4, 2, 1)


@dataclass(frozen=True)
class Dispatch:
    """One scheduling decision: which process ran, when, and for how long."""
    start: int
    pid: int
    duration: int
    level: Optional[int] = None
    finished: bool = False

    @property
    def end(self) -> int:
        return self.start + self.duration


class BaseScheduler(ABC):
    """Abstract base class for all schedulers.

    One decision is ``dispatch`` (select, run, advance the clock) followed
    by ``release`` (retire or re-queue the process that ran). The driver
    admits new arrivals between the two so that they reach the queue before
    the process returning from the dispatch.
    """

    name = "base"

    def __init__(self, logger: Optional[EventLogger] = None):
        self.logger = logger if logger is not None else EventLogger()
        self.current_process: Optional[PCB] = None
        self.finished: List[PCB] = []

    @abstractmethod
    def add_process(self, pcb: PCB, now: int) -> None:
        """Admit a newly arrived process."""

    @abstractmethod
    def has_process(self) -> bool:
        """True if at least one process is waiting in a queue."""

    @abstractmethod
    def queued_processes(self) -> List[PCB]:
        pass

    @abstractmethod
    def _select(self, now: int) -> Tuple[PCB, Optional[int], Optional[int]]:
        """Dequeue the next process; return (process, level, quantum)."""

    @abstractmethod
    def _requeue(self, pcb: PCB, now: int) -> None:
        pass

    def _admit(self, pcb: PCB, now: int) -> None:
        if pcb.state != ProcessState.WAITING:
            raise InvariantViolation(f"process {pcb.pid} admitted twice")
        self.logger.log_process_event(now, pcb.pid, "arrive")

    def dispatch(self, clock: SimClock) -> Dispatch:
        """Select the next process, run it and advance the clock."""
        if self.current_process is not None:
            raise InvariantViolation(f"process {self.current_process.pid} was never released")
        if not self.has_process():
            raise SchedulerError("dispatch requested with no ready process")

        pcb, level, quantum = self._select(clock.now)
        if pcb.is_finished:
            raise InvariantViolation(f"finished process {pcb.pid} was selected")

        start = clock.now
        duration = pcb.remaining_time if quantum is None else min(quantum, pcb.remaining_time)
        pcb.state = ProcessState.RUNNING
        if pcb.stats.first_run_time is None:
            pcb.stats.first_run_time = start
            pcb.stats.response_time = start - pcb.arrival_time
            self.logger.log_process_event(start, pcb.pid, "start")
        self.current_process = pcb

        clock.advance(duration)
        finished = pcb.run(duration, clock.now)
        self.logger.log_timeline_slice(start, clock.now, pcb.pid, self.name, level=level)
        return Dispatch(start=start, pid=pcb.pid, duration=duration, level=level, finished=finished)

    def release(self, now: int) -> None:
        """Retire the process that just ran, or return it to a queue."""
        pcb = self.current_process
        if pcb is None:
            raise InvariantViolation("release called with no running process")
        self.current_process = None
        if pcb.is_finished:
            self.finished.append(pcb)
            self.logger.log_process_event(now, pcb.pid, "finish")
        else:
            self._requeue(pcb, now)

    def step(self, clock: SimClock, admit: Optional[Callable[[int], None]] = None) -> Dispatch:
        """Make one complete scheduling decision."""
        dispatch = self.dispatch(clock)
        if admit is not None:
            admit(clock.now)
        self.release(clock.now)
        return dispatch


class SimpleScheduler(BaseScheduler):
    """First Come First Serve: run the head of the queue to completion."""

    name = "simple"

    def __init__(self, logger: Optional[EventLogger] = None):
        super().__init__(logger)
        self.ready_queue = ReadyQueue()

    def add_process(self, pcb: PCB, now: int) -> None:
        self._admit(pcb, now)
        pcb.level = 0
        self.ready_queue.push(pcb, now)

    def has_process(self) -> bool:
        return not self.ready_queue.is_empty()

    def queued_processes(self) -> List[PCB]:
        return self.ready_queue.get_all_processes()

    def _select(self, now: int) -> Tuple[PCB, Optional[int], Optional[int]]:
        return self.ready_queue.pop(), None, None

    def _requeue(self, pcb: PCB, now: int) -> None:
        raise InvariantViolation(f"FCFS process {pcb.pid} returned unfinished")


class SimpleRRScheduler(SimpleScheduler):
    """Round Robin over a single FIFO queue."""

    name = "simplerr"

    def __init__(self, logger: Optional[EventLogger] = None, time_quantum: int = RR_QUANTUM):
        super().__init__(logger)
        self.time_quantum = time_quantum

    def _select(self, now: int) -> Tuple[PCB, Optional[int], Optional[int]]:
        return self.ready_queue.pop(), None, self.time_quantum

    def _requeue(self, pcb: PCB, now: int) -> None:
        self.ready_queue.push(pcb, now)


class MLRRScheduler(BaseScheduler):
    """Multi-Level Round Robin.

    Every level is its own round robin queue. A cursor remembers the last
    level serviced so the scan for the next decision starts just after it,
    giving round robin across levels as well as within them. Processes stay
    at the level they were admitted to.
    """

    name = "mlrr"

    def __init__(self, logger: Optional[EventLogger] = None, quanta=MLRR_QUANTA):
        super().__init__(logger)
        self.queues = LevelQueues(quanta)
        # Start on the last level so the first scan begins at level 0
        self.cursor = self.queues.lowest

    def add_process(self, pcb: PCB, now: int) -> None:
        self._admit(pcb, now)
        self.queues.push(pcb, self.queues.clamp(pcb.priority), now)

    def has_process(self) -> bool:
        return not self.queues.is_empty()

    def queued_processes(self) -> List[PCB]:
        return self.queues.get_all_processes()

    def next_level(self) -> Optional[int]:
        """Level the next decision will service, or None if all are empty."""
        n = len(self.queues)
        for offset in range(1, n + 1):
            level = (self.cursor + offset) % n
            if not self.queues[level].is_empty():
                return level
        return None

    def _select(self, now: int) -> Tuple[PCB, Optional[int], Optional[int]]:
        level = self.next_level()
        self.cursor = level
        return self.queues[level].pop(), level, self.queues.quantum(level)

    def _requeue(self, pcb: PCB, now: int) -> None:
        self.queues.push(pcb, pcb.level, now)

from __future__ import annotations

from typing import List, Optional, Dict, Callable
from dataclasses import dataclass

from .core import PCB, ProcessState, SimClock, InvariantViolation
from .schedulers import BaseScheduler, Dispatch, SimpleScheduler, SimpleRRScheduler, MLRRScheduler
from .feedback_scheduler import SimpleMLFScheduler, MLFScheduler
from .utils import EventLogger, validate_processes, compute_waiting_times, compute_turnaround_times, compute_avg, compute_throughput


@dataclass
class SimulationResult:
    processes: List[PCB]
    dispatches: List[Dispatch]
    total_time: int
    waiting_times: Dict[int, int]
    turnaround_times: Dict[int, int]
    avg_waiting_time: float
    avg_turnaround_time: float
    throughput: float
    logger: EventLogger


class Scheduler:
    SIMPLE = "simple"          # FCFS, run to completion
    SIMPLE_RR = "simplerr"     # single queue round robin
    MLRR = "mlrr"              # multi-level round robin
    SIMPLE_MLF = "simplemlf"   # feedback queue, promotion only
    MLF = "mlf"                # feedback queue, promotion and demotion

    ALL = (SIMPLE, SIMPLE_RR, MLRR, SIMPLE_MLF, MLF)


_POLICIES: Dict[str, Callable[..., BaseScheduler]] = {
    Scheduler.SIMPLE: SimpleScheduler,
    Scheduler.SIMPLE_RR: SimpleRRScheduler,
    Scheduler.MLRR: MLRRScheduler,
    Scheduler.SIMPLE_MLF: SimpleMLFScheduler,
    Scheduler.MLF: MLFScheduler,
}


def make_scheduler(policy: str, logger: Optional[EventLogger] = None) -> BaseScheduler:
    try:
        factory = _POLICIES[policy]
    except KeyError:
        raise ValueError(f"unknown scheduler '{policy}' (choose from {', '.join(Scheduler.ALL)})") from None
    return factory(logger=logger)


def check_conservation(processes: List[PCB], scheduler: BaseScheduler) -> None:
    """Every process must be in exactly one of Waiting, queued, Running or Finished."""
    waiting = sum(1 for p in processes if p.state == ProcessState.WAITING)
    queued = len(scheduler.queued_processes())
    running = 1 if scheduler.current_process is not None else 0
    finished = len(scheduler.finished)
    if waiting + queued + running + finished != len(processes):
        raise InvariantViolation(
            f"process count mismatch: waiting={waiting} queued={queued} "
            f"running={running} finished={finished} total={len(processes)}")


def simulate(
    processes: List[PCB],
    policy: str = Scheduler.SIMPLE,
    logger: Optional[EventLogger] = None,
    on_dispatch: Optional[Callable[[Dispatch, BaseScheduler], None]] = None,
) -> SimulationResult:
    """Run ``processes`` under ``policy`` until every one has finished.

    Records are reset first, so the same list can be simulated under
    several policies in turn.
    """
    validate_processes(processes)
    for p in processes:
        p.reset()

    logger = logger if logger is not None else EventLogger()
    scheduler = make_scheduler(policy, logger=logger)
    clock = SimClock()
    # stable sort keeps input order among equal arrival times
    pending = sorted(processes, key=lambda p: p.arrival_time)
    dispatches: List[Dispatch] = []

    def arrive_new(now: int) -> None:
        nonlocal pending
        while pending and pending[0].arrival_time <= now:
            scheduler.add_process(pending.pop(0), now)

    while len(scheduler.finished) < len(processes):
        arrive_new(clock.now)
        if not scheduler.has_process():
            # Nothing ready: jump to the next arrival
            if not pending:
                raise InvariantViolation("unfinished processes but nothing queued or pending")
            idle_start = clock.now
            clock.set_now(pending[0].arrival_time)
            logger.log_timeline_slice(idle_start, clock.now, None, policy, reason="idle")
            continue

        dispatch = scheduler.step(clock, admit=arrive_new)
        dispatches.append(dispatch)
        check_conservation(processes, scheduler)
        if on_dispatch is not None:
            on_dispatch(dispatch, scheduler)

    total_time = clock.now
    waiting_times = compute_waiting_times(processes)
    turnaround_times = compute_turnaround_times(processes)
    avg_wait = compute_avg(list(waiting_times.values()))
    avg_tat = compute_avg(list(turnaround_times.values()))
    throughput = compute_throughput(processes, total_time)

    return SimulationResult(
        processes=processes,
        dispatches=dispatches,
        total_time=total_time,
        waiting_times=waiting_times,
        turnaround_times=turnaround_times,
        avg_waiting_time=avg_wait,
        avg_turnaround_time=avg_tat,
        throughput=throughput,
        logger=logger,
    )

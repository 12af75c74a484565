"""
Simulation backend: process model, queues, scheduling policies and driver.
"""

from .core import PCB, ProcessState, ReadyQueue, LevelQueues, SimClock, SchedulerError, InvariantViolation
from .schedulers import BaseScheduler, Dispatch, SimpleScheduler, SimpleRRScheduler, MLRRScheduler
from .feedback_scheduler import SimpleMLFScheduler, MLFScheduler
from .simulator import simulate, make_scheduler, Scheduler, SimulationResult

__all__ = [
    'PCB',
    'ProcessState',
    'ReadyQueue',
    'LevelQueues',
    'SimClock',
    'SchedulerError',
    'InvariantViolation',
    'BaseScheduler',
    'Dispatch',
    'SimpleScheduler',
    'SimpleRRScheduler',
    'MLRRScheduler',
    'SimpleMLFScheduler',
    'MLFScheduler',
    'simulate',
    'make_scheduler',
    'Scheduler',
    'SimulationResult',
]

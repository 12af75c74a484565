"""
Multi-level feedback schedulers with starvation promotion and over-run demotion.
"""

from typing import List, Optional, Tuple

from .core import PCB, LevelQueues
from .schedulers import BaseScheduler
from .utils import EventLogger

# Level 0 runs to completion; levels 1 and 2 are round robin.
MLF_QUANTA = (None, 4, 1)
STARVATION_THRESHOLD = 1000
OVERRUN_THRESHOLD = 1000


class SimpleMLFScheduler(BaseScheduler):
    """
    Three-level feedback queue that only ever promotes:
    1. The highest non-empty level is always serviced first
    2. Level 0 is FCFS, levels 1 and 2 are round robin at their own quantum
    3. A process left waiting in level 1 or 2 for STARVATION_THRESHOLD
       units moves up one level
    """

    name = "simplemlf"

    def __init__(self, logger: Optional[EventLogger] = None):
        super().__init__(logger)
        self.queues = LevelQueues(MLF_QUANTA)
        self.starvation_threshold = STARVATION_THRESHOLD

    def add_process(self, pcb: PCB, now: int) -> None:
        """New processes enter at level 0 unless they ask for a lower level."""
        self._admit(pcb, now)
        self.queues.push(pcb, self.queues.clamp(pcb.priority), now)

    def has_process(self) -> bool:
        return not self.queues.is_empty()

    def queued_processes(self) -> List[PCB]:
        return self.queues.get_all_processes()

    def apply_starvation_promotions(self, now: int) -> List[PCB]:
        """Promote every starved process one level; return them in promotion order.

        Candidates are collected before any move so that a process promoted
        in this pass is not considered again at its new level. Oldest first,
        then higher level, then queue order.
        """
        candidates = []
        for level in range(1, len(self.queues)):
            for position, pcb in enumerate(self.queues[level]):
                age = now - pcb.time_added
                if age >= self.starvation_threshold:
                    candidates.append((-age, level, position, pcb))
        candidates.sort(key=lambda c: c[:3])

        promoted: List[PCB] = []
        for _, level, _, pcb in candidates:
            self.queues.relocate(pcb, level - 1, now)
            pcb.stats.promotions += 1
            self.logger.log_process_event(now, pcb.pid, "promote", f"{level}->{level - 1}")
            promoted.append(pcb)
        return promoted

    def _select(self, now: int) -> Tuple[PCB, Optional[int], Optional[int]]:
        self.apply_starvation_promotions(now)
        level = self.queues.first_non_empty()
        return self.queues[level].pop(), level, self.queues.quantum(level)

    def _requeue(self, pcb: PCB, now: int) -> None:
        self.queues.push(pcb, pcb.level, now)


class MLFScheduler(SimpleMLFScheduler):
    """Multi-level feedback queue that also demotes processes hogging a level.

    A process that has received more than OVERRUN_THRESHOLD units of CPU
    since it last entered its level drops one level when its dispatch ends.
    Level 0 is exempt because its processes never come back unfinished.
    """

    name = "mlf"

    def __init__(self, logger: Optional[EventLogger] = None):
        super().__init__(logger)
        self.overrun_threshold = OVERRUN_THRESHOLD

    def should_demote(self, pcb: PCB) -> bool:
        return (0 < pcb.level < self.queues.lowest
                and pcb.run_time_at_level > self.overrun_threshold)

    def _requeue(self, pcb: PCB, now: int) -> None:
        if not self.should_demote(pcb):
            super()._requeue(pcb, now)
            return
        level = pcb.level
        self.queues.relocate(pcb, level + 1, now)
        pcb.stats.demotions += 1
        self.logger.log_process_event(now, pcb.pid, "demote", f"{level}->{level + 1}")

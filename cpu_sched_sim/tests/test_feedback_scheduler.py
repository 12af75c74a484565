"""
Tests for the multi-level feedback schedulers: starvation promotion and
over-run demotion.
"""

import pytest

from cpu_sched_sim.backend.core import PCB, SimClock, ProcessState
from cpu_sched_sim.backend.feedback_scheduler import (
    SimpleMLFScheduler, MLFScheduler, MLF_QUANTA, STARVATION_THRESHOLD, OVERRUN_THRESHOLD,
)
from cpu_sched_sim.backend.simulator import simulate, Scheduler


@pytest.fixture(params=[Scheduler.SIMPLE_MLF, Scheduler.MLF])
def feedback_policy(request):
    return request.param


class TestLevels:

    def test_quanta(self):
        assert MLF_QUANTA == (None, 4, 1)
        assert STARVATION_THRESHOLD == 1000
        assert OVERRUN_THRESHOLD == 1000

    def test_new_processes_enter_level_zero(self):
        scheduler = SimpleMLFScheduler()
        pcb = PCB(pid=1, arrival_time=0, burst_time=5)
        scheduler.add_process(pcb, 0)
        assert pcb.level == 0
        assert [p.pid for p in scheduler.queues[0]] == [1]

    def test_level_zero_runs_to_completion(self, feedback_policy):
        procs = [PCB(pid=1, arrival_time=0, burst_time=5000), PCB(pid=2, arrival_time=1, burst_time=3)]
        result = simulate(procs, policy=feedback_policy)
        assert [(d.start, d.pid, d.duration, d.level) for d in result.dispatches] == [
            (0, 1, 5000, 0), (5000, 2, 3, 0),
        ]

    def test_higher_level_always_first(self, feedback_policy):
        procs = [
            PCB(pid=1, arrival_time=0, burst_time=6, priority=2),
            PCB(pid=2, arrival_time=0, burst_time=6, priority=1),
            PCB(pid=3, arrival_time=0, burst_time=2, priority=0),
        ]
        result = simulate(procs, policy=feedback_policy)
        assert [(d.pid, d.level, d.duration) for d in result.dispatches] == [
            (3, 0, 2), (2, 1, 4), (2, 1, 2),
            (1, 2, 1), (1, 2, 1), (1, 2, 1), (1, 2, 1), (1, 2, 1), (1, 2, 1),
        ]


class TestStarvationPromotion:

    def test_not_promoted_before_threshold(self, feedback_policy):
        procs = [
            PCB(pid=1, arrival_time=0, burst_time=999, priority=0),
            PCB(pid=2, arrival_time=0, burst_time=5, priority=2),
        ]
        result = simulate(procs, policy=feedback_policy)
        second = result.dispatches[1]
        assert (second.start, second.pid, second.level, second.duration) == (999, 2, 2, 1)
        assert procs[1].stats.promotions == 0
        assert not result.logger.events_for("promote")

    def test_promoted_at_threshold(self, feedback_policy):
        procs = [
            PCB(pid=1, arrival_time=0, burst_time=1000, priority=0),
            PCB(pid=2, arrival_time=0, burst_time=5, priority=2),
        ]
        result = simulate(procs, policy=feedback_policy)
        second = result.dispatches[1]
        assert (second.start, second.pid, second.level, second.duration) == (1000, 2, 1, 4)
        assert procs[1].stats.promotions == 1
        events = result.logger.events_for("promote")
        assert [(e["time"], e["pid"], e["detail"]) for e in events] == [(1000, 2, "2->1")]

    def test_promotion_resets_time_added(self):
        scheduler = SimpleMLFScheduler()
        pcb = PCB(pid=1, arrival_time=0, burst_time=5, priority=2)
        scheduler.add_process(pcb, 0)

        assert scheduler.apply_starvation_promotions(999) == []
        assert pcb.level == 2

        assert scheduler.apply_starvation_promotions(1000) == [pcb]
        assert pcb.level == 1
        assert pcb.time_added == 1000
        assert pcb.pid in scheduler.queues[1]
        assert pcb.pid not in scheduler.queues[2]

        # The residency timer restarted, so no second promotion yet
        assert scheduler.apply_starvation_promotions(1999) == []
        assert scheduler.apply_starvation_promotions(2000) == [pcb]
        assert pcb.level == 0

    def test_promotion_order_oldest_first(self):
        scheduler = SimpleMLFScheduler()
        a = PCB(pid=1, arrival_time=0, burst_time=5, priority=2)
        b = PCB(pid=2, arrival_time=0, burst_time=5, priority=1)
        c = PCB(pid=3, arrival_time=100, burst_time=5, priority=2)
        scheduler.add_process(a, 0)
        scheduler.add_process(b, 0)
        scheduler.add_process(c, 100)

        promoted = scheduler.apply_starvation_promotions(1100)

        assert [p.pid for p in promoted] == [2, 1, 3]
        assert [p.pid for p in scheduler.queues[0]] == [2]
        assert [p.pid for p in scheduler.queues[1]] == [1, 3]
        assert scheduler.queues[2].is_empty()

    def test_only_starved_processes_move(self):
        scheduler = SimpleMLFScheduler()
        old = PCB(pid=1, arrival_time=0, burst_time=5, priority=2)
        young = PCB(pid=2, arrival_time=500, burst_time=5, priority=2)
        scheduler.add_process(old, 0)
        scheduler.add_process(young, 500)

        assert scheduler.apply_starvation_promotions(1200) == [old]
        assert young.level == 2
        assert young.time_added == 500


class TestDemotion:

    def test_overrun_level_one_process_is_demoted(self):
        clock = SimClock()
        scheduler = MLFScheduler()
        pcb = PCB(pid=1, arrival_time=0, burst_time=2000, priority=1)
        scheduler.add_process(pcb, 0)

        for _ in range(250):
            scheduler.step(clock)
        assert pcb.level == 1
        assert pcb.run_time_at_level == OVERRUN_THRESHOLD

        scheduler.step(clock)
        assert clock.now == 1004
        assert pcb.level == 2
        assert pcb.time_added == 1004
        assert pcb.run_time_at_level == 0
        assert pcb.stats.demotions == 1
        assert pcb.state == ProcessState.READY

        d = scheduler.step(clock)
        assert (d.level, d.duration) == (2, 1)

    def test_demotion_in_full_run(self):
        procs = [PCB(pid=1, arrival_time=0, burst_time=2000, priority=1)]
        result = simulate(procs, policy=Scheduler.MLF)
        levels = [d.level for d in result.dispatches]
        assert levels[:251] == [1] * 251
        assert levels[251:] == [2] * (2000 - 1004)
        events = result.logger.events_for("demote")
        assert [(e["time"], e["detail"]) for e in events] == [(1004, "1->2")]
        assert procs[0].finish_time == 2000

    def test_simple_mlf_never_demotes(self):
        procs = [PCB(pid=1, arrival_time=0, burst_time=2000, priority=1)]
        result = simulate(procs, policy=Scheduler.SIMPLE_MLF)
        assert {d.level for d in result.dispatches} == {1}
        assert len(result.dispatches) == 500
        assert not result.logger.events_for("demote")

    def test_level_zero_exempt(self):
        procs = [PCB(pid=1, arrival_time=0, burst_time=5000, priority=0)]
        result = simulate(procs, policy=Scheduler.MLF)
        assert len(result.dispatches) == 1
        assert result.dispatches[0].level == 0
        assert procs[0].stats.demotions == 0

    def test_lowest_level_is_not_demoted_further(self):
        procs = [PCB(pid=1, arrival_time=0, burst_time=1500, priority=2)]
        result = simulate(procs, policy=Scheduler.MLF)
        assert {d.level for d in result.dispatches} == {2}
        assert not result.logger.events_for("demote")

    def test_promotion_resets_overrun_accumulator(self):
        clock = SimClock()
        scheduler = MLFScheduler()
        pcb = PCB(pid=1, arrival_time=0, burst_time=50, priority=2)
        scheduler.add_process(pcb, 0)
        scheduler.step(clock)
        assert pcb.run_time_at_level == 1

        scheduler.apply_starvation_promotions(clock.now + STARVATION_THRESHOLD)
        assert pcb.level == 1
        assert pcb.run_time_at_level == 0

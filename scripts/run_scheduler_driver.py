from __future__ import annotations
import os, sys
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cpu_sched_sim.backend.simulator import simulate, Scheduler
from cpu_sched_sim.backend.core import PCB


def make_pcbs():
    # pid, arrival, burst, requested level
    return [
        PCB(pid=1, arrival_time=0, burst_time=12, priority=0),
        PCB(pid=2, arrival_time=1, burst_time=7, priority=1),
        PCB(pid=3, arrival_time=2, burst_time=3, priority=2),
        PCB(pid=4, arrival_time=3, burst_time=1500, priority=1),
        PCB(pid=5, arrival_time=6, burst_time=5, priority=2),
        PCB(pid=6, arrival_time=40, burst_time=9, priority=3),
        PCB(pid=7, arrival_time=41, burst_time=2, priority=0),
    ]


def run():
    procs = make_pcbs()
    for policy in Scheduler.ALL:
        result = simulate(procs, policy=policy)
        promotions = len(result.logger.events_for("promote"))
        demotions = len(result.logger.events_for("demote"))
        print(f"== {policy} ==")
        print(f'decisions: {len(result.dispatches)}, total time: {result.total_time}, promotions: {promotions}, demotions: {demotions}')
        for pid, pcb in sorted((p.pid, p) for p in result.processes):
            print(f'PID {pid}: waiting={result.waiting_times[pid]}, turnaround={result.turnaround_times[pid]}, completion={pcb.finish_time}')
        print('avg waiting:', result.avg_waiting_time)
        print('avg turnaround:', result.avg_turnaround_time)

if __name__ == '__main__':
    run()

from __future__ import annotations

from typing import List, Optional
from dataclasses import dataclass

from .core import PCB
from .simulator import simulate, Scheduler, SimulationResult
from .visualizer import plot_gantt


@dataclass
class KernelConfig:
    policy: str = Scheduler.SIMPLE
    json_path: Optional[str] = None
    csv_base: Optional[str] = None
    gantt_path: Optional[str] = None


class OSKernel:
    """Lightweight wrapper that runs one simulation and writes its artifacts.

    The trace logs and Gantt chart are only produced when the config asks
    for them.
    """

    def __init__(self, config: KernelConfig | None = None):
        self.config = config or KernelConfig()

    def run(self, processes: List[PCB]) -> SimulationResult:
        result = simulate(processes, policy=self.config.policy)
        if self.config.json_path:
            result.logger.export_json(self.config.json_path)
        if self.config.csv_base:
            result.logger.export_csv(self.config.csv_base)
        if self.config.gantt_path:
            plot_gantt(result.processes, result.logger, self.config.gantt_path)
        return result

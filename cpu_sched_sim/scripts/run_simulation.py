from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

from cpu_sched_sim.backend.simulator import Scheduler
from cpu_sched_sim.backend.os_kernel import OSKernel, KernelConfig
from cpu_sched_sim.backend.utils import InputError, load_processes, format_trace


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CPU Scheduling Simulator")
    p.add_argument("-s", "--scheduler", choices=Scheduler.ALL, required=True)
    p.add_argument("-i", "--input-file", required=True, help="Lines of 'pid arrival burst [priority]'")
    p.add_argument("--json", type=str, default=None, help="Write the event log as JSON")
    p.add_argument("--csv", type=str, default=None, help="Base path (no extension) for CSV logs")
    p.add_argument("--out", type=str, default=None, help="Save a Gantt chart to this path")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    colorama_init(autoreset=True)
    args = parse_args(argv)
    try:
        procs = load_processes(args.input_file)
    except (OSError, InputError) as e:
        print(Fore.RED + f"Error: {e}", file=sys.stderr)
        return 1

    kernel = OSKernel(KernelConfig(policy=args.scheduler, json_path=args.json, csv_base=args.csv, gantt_path=args.out))
    result = kernel.run(procs)

    for line in format_trace(result.logger):
        print(line)
    for p in sorted(result.processes, key=lambda p: p.pid):
        print(f"Process {p.pid}: arrival={p.arrival_time}, burst={p.burst_time}, finish={p.finish_time}, waiting={result.waiting_times[p.pid]}")
    print(Style.BRIGHT + f"Total time: {result.total_time}, Avg waiting: {result.avg_waiting_time:.3f}, Avg turnaround: {result.avg_turnaround_time:.3f}, Throughput: {result.throughput:.3f}")
    if args.out:
        print(Fore.CYAN + f"Saved plot to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

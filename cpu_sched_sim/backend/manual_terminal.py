from __future__ import annotations

import shlex
from typing import List, Optional
from colorama import Fore, Style, init as colorama_init

from .core import PCB
from .simulator import simulate, Scheduler
from .utils import InputError, validate_processes, format_trace
from .visualizer import plot_gantt


class ManualTerminal:
    def __init__(self) -> None:
        colorama_init(autoreset=True)
        self.processes: List[PCB] = []
        self.last_result = None

    def prompt(self) -> None:
        print(Fore.CYAN + "Scheduler Terminal. Type 'help' for commands.")
        while True:
            try:
                raw = input(Fore.GREEN + "> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not raw.strip():
                continue
            self.handle_command(raw)

    def handle_command(self, raw: str) -> None:
        try:
            parts = shlex.split(raw)
        except ValueError as e:
            print(Fore.RED + f"Parse error: {e}")
            return
        if not parts:
            return
        cmd, *args = parts
        cmd = cmd.lower()
        if cmd == "help":
            self._help()
        elif cmd == "add":
            self._add(args)
        elif cmd == "list":
            self._list()
        elif cmd == "run":
            self._run(args)
        elif cmd == "stats":
            self._stats()
        elif cmd == "exit" or cmd == "quit":
            raise SystemExit(0)
        else:
            print(Fore.YELLOW + "Unknown command. Type 'help'.")

    def _help(self) -> None:
        print("Commands:")
        print("  add <pid> <arrival> <burst> [priority=0]")
        print("  list")
        print(f"  run [--policy {'|'.join(Scheduler.ALL)}] [--out path]")
        print("  stats")
        print("  exit")

    def _add(self, args: List[str]) -> None:
        if len(args) < 3:
            print(Fore.RED + "Usage: add <pid> <arrival> <burst> [priority]")
            return
        try:
            pid = int(args[0])
            arrival = int(args[1])
            burst = int(args[2])
            priority = int(args[3]) if len(args) >= 4 else 0
        except ValueError:
            print(Fore.RED + "Invalid numeric values")
            return
        pcb = PCB(pid=pid, arrival_time=arrival, burst_time=burst, priority=priority)
        try:
            validate_processes(self.processes + [pcb])
        except InputError as e:
            print(Fore.RED + str(e))
            return
        self.processes.append(pcb)
        print(Fore.CYAN + f"Process {pid} added: arrival={arrival}, burst={burst}, priority={priority}")

    def _list(self) -> None:
        if not self.processes:
            print("No processes yet")
            return
        for p in self.processes:
            print(f"{p.pid}: arrival={p.arrival_time}, burst={p.burst_time}, priority={p.priority}")

    def _run(self, args: List[str]) -> None:
        policy = Scheduler.SIMPLE
        out_path: Optional[str] = None
        # Parse simple flags
        it = iter(args)
        for token in it:
            if token == "--policy":
                policy = next(it, policy)
            elif token == "--out":
                out_path = next(it, None)

        if policy not in Scheduler.ALL:
            print(Fore.RED + f"Unknown policy '{policy}'")
            return
        if not self.processes:
            print(Fore.YELLOW + "No processes to run")
            return

        procs = [PCB(pid=p.pid, arrival_time=p.arrival_time, burst_time=p.burst_time, priority=p.priority) for p in self.processes]
        result = simulate(procs, policy=policy)

        self.last_result = result
        for line in format_trace(result.logger):
            print(line)
        print(Style.BRIGHT + f"Simulation finished at t={result.total_time}. Avg waiting: {result.avg_waiting_time:.2f}, Avg turnaround: {result.avg_turnaround_time:.2f}, Throughput: {result.throughput:.3f}")
        if out_path:
            plot_gantt(procs, result.logger, out_path)
            print(Fore.CYAN + f"Saved plot to {out_path}")

    def _stats(self) -> None:
        if not self.last_result:
            print("No simulation yet")
            return
        r = self.last_result
        print(f"Total time: {r.total_time}")
        print(f"Decisions: {len(r.dispatches)}")
        print(f"Avg waiting time: {r.avg_waiting_time:.3f}")
        print(f"Avg turnaround time: {r.avg_turnaround_time:.3f}")
        print(f"Throughput: {r.throughput:.3f} jobs/unit")


def main() -> None:
    ManualTerminal().prompt()


if __name__ == "__main__":
    main()

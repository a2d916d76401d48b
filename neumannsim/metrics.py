"""Per-process timing and system-wide scheduling metrics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence, Tuple, Union


@dataclass(frozen=True)
class ProcessTimes:
    """Clock values recorded for one finished process."""

    pid: int
    arrival_time: int = 0
    finish_time: int = 0
    cpu_time: int = 0
    io_cycles: int = 0

    def turnaround(self) -> int:
        """Time from arrival to completion."""
        return self.finish_time - self.arrival_time

    def waiting_time(self) -> int:
        """Turnaround minus CPU and I/O time, never below zero."""
        return max(0, self.turnaround() - self.cpu_time - self.io_cycles)


@dataclass(frozen=True)
class SystemMetrics:
    """Aggregated results of one simulation run."""

    processes: Tuple[ProcessTimes, ...]
    core_count: int
    total_time: int
    total_waiting: int
    total_turnaround: int
    total_cpu_time: int
    total_core_busy: int
    avg_waiting: float
    avg_turnaround: float
    cpu_utilization: float
    throughput: float
    efficiency: float


def compute_system_metrics(
    processes: Iterable[ProcessTimes],
    core_clocks: Sequence[int],
    core_busy: Sequence[int],
) -> SystemMetrics:
    """Aggregate process times and per-core clocks into system metrics.

    The simulated duration is the latest finish time; when no process
    recorded one, the highest core clock is used instead.
    """
    procs = tuple(processes)
    if not procs:
        raise ValueError("at least one process is required")
    if len(core_clocks) != len(core_busy):
        raise ValueError("core_clocks and core_busy must have the same length")
    cores = len(core_clocks)
    if cores == 0:
        raise ValueError("at least one core is required")

    total_waiting = sum(p.waiting_time() for p in procs)
    total_turnaround = sum(p.turnaround() for p in procs)
    total_cpu = sum(p.cpu_time for p in procs)
    total_time = max(p.finish_time for p in procs)
    if total_time <= 0:
        total_time = max(0, max(core_clocks))
    total_busy = sum(core_busy)

    count = len(procs)
    if total_time > 0:
        utilization = total_busy / (total_time * cores)
        throughput = count / total_time
        efficiency = (total_cpu / cores) / total_time
    else:
        utilization = throughput = efficiency = 0.0

    return SystemMetrics(
        processes=procs,
        core_count=cores,
        total_time=total_time,
        total_waiting=total_waiting,
        total_turnaround=total_turnaround,
        total_cpu_time=total_cpu,
        total_core_busy=total_busy,
        avg_waiting=total_waiting / count,
        avg_turnaround=total_turnaround / count,
        cpu_utilization=utilization,
        throughput=throughput,
        efficiency=efficiency,
    )


def _num(value: float) -> str:
    """Format a float the way a default-precision output stream does."""
    return f"{value:.6g}"


def format_system_report(metrics: SystemMetrics, policy_name: str) -> str:
    """Render the per-process and summary report printed after a run."""
    lines = ["", "", f"===== MÉTRICAS FINAIS DO SISTEMA ({policy_name}) ====="]
    for p in metrics.processes:
        lines += [
            "",
            f"--- Processo PID {p.pid} ---",
            f"Tempo de espera: {p.waiting_time()} (Corrigido)",
            f"Turnaround:      {p.turnaround()}",
            f"CPU Time:        {p.cpu_time}",
            f"IO Time:         {p.io_cycles}",
            f"Fim:             {p.finish_time}",
        ]
    lines += [
        "",
        "======================================",
        "========= RESUMO DO SISTEMA ==========",
        "======================================",
        f"Tempo total simulação:    {metrics.total_time}",
        f"Tempo médio de espera:    {_num(metrics.avg_waiting)}",
        f"Turnaround médio:         {_num(metrics.avg_turnaround)}",
        f"Utilização média da CPU:  {_num(metrics.cpu_utilization * 100)}%",
        f"Throughput global:        {_num(metrics.throughput)}",
        f"Eficiência:               {_num(metrics.efficiency * 100)}%",
        "======================================",
        "",
    ]
    return "\n".join(lines) + "\n"


def write_metrics_file(
    metrics: SystemMetrics, policy_name: str, directory: Union[str, Path]
) -> Path:
    """Write ``metricas_<policy>.dat`` into ``directory`` and return its path."""
    folder = Path(directory)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / f"metricas_{policy_name}.dat"

    lines = [
        f"==== MÉTRICAS DA POLÍTICA {policy_name} ====",
        "",
        f"Tempo total simulação:    {metrics.total_time}",
        f"Utilização média da CPU:  {_num(metrics.cpu_utilization * 100)}%",
        f"Throughput global:        {_num(metrics.throughput)}",
        "",
        "---- Métricas por processo ----",
    ]
    lines += [
        f"PID {p.pid} | Wait={p.waiting_time()} | Turnaround={p.turnaround()} | CPU={p.cpu_time}"
        for p in metrics.processes
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
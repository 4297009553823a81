"""Round-robin scheduling of processes under four memory models."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from sysprojects.memory import MIN_RUNNING_FRAMES, ContiguousMemory, PageFrames
from sysprojects.process import Process, ProcessState

SCALE_SIZE = 100


def scale_average_time(value: float) -> float:
    """Round ``value`` to two decimals, halves away from zero."""
    if not math.isfinite(value):
        return value
    scaled = abs(value * SCALE_SIZE)
    whole = math.floor(scaled)
    if scaled - whole >= 0.5:
        whole += 1
    return math.copysign(whole, value) / SCALE_SIZE


@dataclass
class Statistics:
    """Turnaround and overhead figures gathered as processes finish."""

    turnaround_total: int = 0
    count: int = 0
    overhead_total: float = 0.0
    overhead_max: float = 0.0

    def record(self, process: Process, time: int) -> None:
        """Account for ``process`` finishing at ``time``."""
        turnaround = time - process.arrival
        self.turnaround_total += turnaround
        if process.service_time:
            overhead = turnaround / process.service_time
        else:
            overhead = math.inf
        self.overhead_total += overhead
        self.overhead_max = max(self.overhead_max, overhead)
        self.count += 1

    def summary_lines(self, makespan: int) -> list[str]:
        """The three closing lines of a simulation report."""
        if self.count:
            turnaround = float(math.ceil(self.turnaround_total / self.count))
            overhead = scale_average_time(self.overhead_total / self.count)
        else:
            turnaround = overhead = math.nan
        return [
            f"Turnaround time {turnaround:.0f}",
            f"Time overhead {self.overhead_max:.2f} {overhead:.2f}",
            f"Makespan {makespan}",
        ]


@dataclass
class _Simulation:
    pending: list[Process]
    quantum: int
    ready: deque[Process] = field(default_factory=deque)
    time: int = 0
    active: int = 0
    stats: Statistics = field(default_factory=Statistics)
    lines: list[str] = field(default_factory=list)

    def busy(self) -> bool:
        return bool(self.ready or self.pending)

    def admit(self) -> None:
        arrived = [p for p in self.pending if p.arrival <= self.time]
        if arrived:
            self.pending = [p for p in self.pending if p.arrival > self.time]
            self.ready.extend(arrived)
            self.active += len(arrived)

    def idle(self) -> None:
        self.time += self.quantum

    @staticmethod
    def start(process: Process) -> bool:
        if process.state is ProcessState.READY:
            process.state = ProcessState.RUNNING
            return True
        return False

    def tick(self, process: Process) -> None:
        self.time += self.quantum
        process.remaining -= self.quantum

    def complete(self, process: Process) -> None:
        process.remaining = 0
        process.state = ProcessState.FINISHED
        self.active -= 1
        self.stats.record(process, self.time)

    def finished_line(self, process: Process) -> None:
        self.lines.append(
            f"{self.time},FINISHED,process-name={process.name},proc-remaining={self.active}"
        )

    def requeue(self, process: Process, admit: bool = True) -> None:
        if admit:
            self.admit()
        if self.active != 1:
            process.state = ProcessState.READY
        self.ready.append(process)

    def report(self) -> list[str]:
        return self.lines + self.stats.summary_lines(self.time)


def _prepare(processes: Iterable[Process], quantum: int) -> _Simulation:
    if quantum < 1:
        raise ValueError(f"quantum must be positive, got {quantum}")
    fresh = [Process(p.name, p.arrival, p.remaining, p.memory) for p in processes]
    return _Simulation(fresh, quantum)


def _frames_text(frames: Iterable[int]) -> str:
    return "[" + ",".join(map(str, frames)) + "]"


def run_infinite(processes: Iterable[Process], quantum: int) -> list[str]:
    """Round-robin with unlimited memory; returns the report lines."""
    sim = _prepare(processes, quantum)
    while sim.busy():
        sim.admit()
        if not sim.ready:
            sim.idle()
            continue
        process = sim.ready.popleft()
        if sim.start(process):
            sim.lines.append(
                f"{sim.time},RUNNING,process-name={process.name},"
                f"remaining-time={process.remaining}"
            )
        sim.tick(process)
        if process.remaining <= 0:
            sim.complete(process)
            sim.finished_line(process)
        else:
            sim.requeue(process)
    return sim.report()


def run_first_fit(processes: Iterable[Process], quantum: int) -> list[str]:
    """Round-robin with contiguous first-fit memory; returns the report lines."""
    sim = _prepare(processes, quantum)
    memory = ContiguousMemory()
    while sim.busy():
        sim.admit()
        if not sim.ready:
            sim.idle()
            continue
        process = sim.ready.popleft()
        if process.address is None:
            start = memory.find_start(process.memory)
            if start is None:
                if not any(other.address is not None for other in sim.ready):
                    raise ValueError(
                        f"process {process.name} needs {process.memory} units "
                        f"but memory holds {memory.size}"
                    )
                sim.ready.append(process)
                continue
            memory.allocate(process, start)
        if sim.start(process):
            sim.lines.append(
                f"{sim.time},RUNNING,process-name={process.name},"
                f"remaining-time={process.remaining},"
                f"mem-usage={memory.usage_percent():.0f}%,"
                f"allocated-at={process.address}"
            )
        sim.tick(process)
        if process.remaining <= 0:
            memory.deallocate(process)
            sim.complete(process)
            sim.admit()
            sim.finished_line(process)
        else:
            sim.requeue(process)
    return sim.report()


def _paged_running_line(sim: _Simulation, process: Process, frames: PageFrames) -> str:
    return (
        f"{sim.time},RUNNING,process-name={process.name},"
        f"remaining-time={process.remaining},"
        f"mem-usage={frames.usage_percent()}%,"
        f"mem-frames={_frames_text(process.frames)}"
    )


def _release_line(sim: _Simulation, process: Process, frames: PageFrames) -> str:
    released = frames.release(process)
    return f"{sim.time},EVICTED,evicted-frames={_frames_text(released)}"


def run_paged(processes: Iterable[Process], quantum: int) -> list[str]:
    """Round-robin with whole-process paging; returns the report lines."""
    sim = _prepare(processes, quantum)
    frames = PageFrames()
    while sim.busy():
        sim.admit()
        if not sim.ready:
            sim.idle()
            continue
        process = sim.ready.popleft()
        if not process.frames:
            needed = process.frames_needed()
            if needed > frames.free_count():
                victims = frames.evict_for_paged(sim.ready, needed)
                # Each victim's frames are comma-separated, but victims are run together.
                joined = "".join(",".join(map(str, group)) for group in victims)
                sim.lines.append(f"{sim.time},EVICTED,evicted-frames=[{joined}]")
            frames.allocate(process, needed)
        if sim.start(process):
            sim.lines.append(_paged_running_line(sim, process, frames))
        sim.tick(process)
        if process.remaining <= 0:
            sim.complete(process)
            sim.lines.append(_release_line(sim, process, frames))
            sim.finished_line(process)
        else:
            sim.requeue(process, admit=False)
    return sim.report()


def _allocate_virtual(sim: _Simulation, process: Process, frames: PageFrames) -> None:
    to_fill = process.frames_needed() - len(process.frames)
    if len(process.frames) + frames.free_count() < MIN_RUNNING_FRAMES:
        evicted = frames.evict_for_virtual(sim.ready, process)
        text = ",".join(map(str, evicted))
        if evicted and len(process.frames) + frames.free_count() < MIN_RUNNING_FRAMES:
            text += ","
        sim.lines.append(f"{sim.time},EVICTED,evicted-frames=[{text}]")
    frames.allocate(process, to_fill)


def run_virtual(processes: Iterable[Process], quantum: int) -> list[str]:
    """Round-robin with virtual memory needing four resident frames to run."""
    sim = _prepare(processes, quantum)
    frames = PageFrames()
    while sim.busy():
        sim.admit()
        if not sim.ready:
            sim.idle()
            continue
        process = sim.ready.popleft()
        held = len(process.frames)
        if held == 0 or (held < MIN_RUNNING_FRAMES and held != process.frames_needed()):
            _allocate_virtual(sim, process, frames)
        if sim.start(process):
            sim.lines.append(_paged_running_line(sim, process, frames))
        sim.tick(process)
        if process.remaining <= 0:
            sim.complete(process)
            sim.lines.append(_release_line(sim, process, frames))
            sim.admit()
            sim.finished_line(process)
        else:
            sim.requeue(process)
    return sim.report()


_METHODS: dict[str, Callable[[Iterable[Process], int], list[str]]] = {
    "infinite": run_infinite,
    "first-fit": run_first_fit,
    "paged": run_paged,
    "virtual": run_virtual,
}


def simulate(processes: Iterable[Process], method: str, quantum: int) -> list[str]:
    """Run the simulation for the named memory ``method``."""
    try:
        runner = _METHODS[method]
    except KeyError:
        raise ValueError(f"unknown memory method: {method}") from None
    return runner(processes, quantum)
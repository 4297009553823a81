"""Processes taken in by the scheduler and the reading of their input files."""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

MAX_NAME_LENGTH = 8
TOTAL_MEMORY = 2048
PAGE_FRAME_SIZE = 4
FRAME_COUNT = TOTAL_MEMORY // PAGE_FRAME_SIZE


class ProcessState(enum.Enum):
    """Life-cycle state of a simulated process."""

    READY = 0
    RUNNING = 1
    FINISHED = 2


@dataclass(eq=False)
class Process:
    """A process with its timing, memory needs and current allocation."""

    name: str
    arrival: int
    remaining: int
    memory: int
    state: ProcessState = ProcessState.READY
    address: int | None = None
    frames: list[int] = field(default_factory=list)
    service_time: int = field(init=False)

    def __post_init__(self) -> None:
        self.service_time = self.remaining

    def frames_needed(self) -> int:
        """Number of page frames that hold the whole of this process."""
        return math.ceil(self.memory / PAGE_FRAME_SIZE)


def _tokens(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        yield from line.split()


def parse_processes(lines: Iterable[str]) -> list[Process]:
    """Parse records of "arrival name time memory", stopping at the first bad one."""
    tokens = list(_tokens(lines))
    processes = []
    for start in range(0, len(tokens) - 3, 4):
        arrival, name, remaining, memory = tokens[start:start + 4]
        try:
            record = Process(name, int(arrival), int(remaining), int(memory))
        except ValueError:
            break
        processes.append(record)
    return processes


def read_processes(path: str | Path) -> list[Process]:
    """Read the processes listed in the file at ``path``."""
    with open(path, encoding="utf-8") as handle:
        return parse_processes(handle)
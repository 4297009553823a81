"""Contiguous and paged memory models used by the scheduler."""

from __future__ import annotations

import math
from collections.abc import Iterable
from itertools import islice

from sysprojects.process import FRAME_COUNT, TOTAL_MEMORY, Process

MIN_RUNNING_FRAMES = 4


class ContiguousMemory:
    """Byte-addressed memory handed out in contiguous first-fit blocks."""

    def __init__(self, size: int = TOTAL_MEMORY) -> None:
        self.size = size
        self.used = 0
        self._cells = [False] * size

    def find_start(self, size: int) -> int | None:
        """Return the first address with ``size`` free cells in a row, or None."""
        if self.used + size > self.size:
            return None
        run = 0
        for index, taken in enumerate(self._cells):
            run = 0 if taken else run + 1
            if run >= size:
                return index - run + 1
        return None

    def allocate(self, process: Process, start: int) -> None:
        """Give ``process`` the block that begins at ``start``."""
        end = start + process.memory
        if start < 0 or end > self.size:
            raise ValueError(f"block {start}..{end} lies outside memory")
        self._cells[start:end] = [True] * process.memory
        process.address = start
        self.used += process.memory

    def deallocate(self, process: Process) -> None:
        """Free the block held by ``process``."""
        if process.address is None:
            raise ValueError(f"process {process.name} holds no memory")
        # The cell just past the block is cleared as well, as the scheduler always has.
        end = min(process.address + process.memory + 1, self.size)
        self._cells[process.address:end] = [False] * (end - process.address)
        self.used -= process.memory
        process.address = None

    def usage_percent(self) -> float:
        """Share of memory in use, in percent."""
        return self.used / self.size * 100


class PageFrames:
    """A fixed set of page frames, each either free or held by one process."""

    def __init__(self, count: int = FRAME_COUNT) -> None:
        self.count = count
        self._taken = [False] * count
        self._free = count

    def free_count(self) -> int:
        """Number of frames not held by any process."""
        return self._free

    def usage_percent(self) -> int:
        """Share of frames in use, in percent, rounded up."""
        return math.ceil((self.count - self._free) / self.count * 100)

    def allocate(self, process: Process, limit: int) -> list[int]:
        """Append up to ``limit`` of the lowest free frames to ``process``."""
        free = (index for index, taken in enumerate(self._taken) if not taken)
        granted = list(islice(free, max(limit, 0)))
        for frame in granted:
            self._taken[frame] = True
        self._free -= len(granted)
        process.frames.extend(granted)
        return granted

    def _free_frames(self, frames: Iterable[int]) -> None:
        for frame in frames:
            self._taken[frame] = False
            self._free += 1

    def release(self, process: Process) -> list[int]:
        """Free every frame of ``process`` and return them."""
        frames = process.frames
        self._free_frames(frames)
        process.frames = []
        return frames

    def evict_for_paged(self, queue: Iterable[Process], needed: int) -> list[list[int]]:
        """Evict whole processes in queue order until ``needed`` frames are free.

        Returns the frames taken from each victim, one list per victim.
        """
        evicted = []
        for victim in queue:
            if needed <= self._free:
                break
            if victim.frames:
                evicted.append(self.release(victim))
        return evicted

    def evict_for_virtual(self, queue: Iterable[Process], process: Process) -> list[int]:
        """Evict frames in queue order until ``process`` can hold the running minimum.

        Frames are taken from the front of each victim's list; the evicted
        frames are returned in the order they were taken.
        """
        evicted: list[int] = []

        def satisfied() -> bool:
            return len(process.frames) + self._free >= MIN_RUNNING_FRAMES

        for victim in queue:
            if satisfied():
                break
            taken = 0
            for frame in victim.frames:
                if satisfied():
                    break
                self._free_frames([frame])
                evicted.append(frame)
                taken += 1
            del victim.frames[:taken]
        return evicted
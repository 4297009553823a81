"""Command line entry point for the scheduling simulator."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from sysprojects.process import read_processes
from sysprojects.scheduler import simulate

_FLAGS = {"-f": "filename", "-m": "method", "-q": "quantum"}


def parse_arguments(argv: Sequence[str]) -> tuple[str, str, int]:
    """Return (filename, method, quantum) from ``-f``, ``-m`` and ``-q`` in any order."""
    args = list(argv)
    if len(args) != 2 * len(_FLAGS):
        raise ValueError("Wrong Input")
    found: dict[str, str] = {}
    for flag, value in zip(args, args[1:]):
        if flag in _FLAGS:
            found[_FLAGS[flag]] = value
    missing = [name for name in _FLAGS.values() if name not in found]
    if missing:
        raise ValueError(f"missing argument: {', '.join(missing)}")
    try:
        quantum = int(found["quantum"])
    except ValueError:
        raise ValueError(f"quantum is not a number: {found['quantum']}") from None
    return found["filename"], found["method"], quantum


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator and print its report."""
    args = sys.argv[1:] if argv is None else argv
    try:
        filename, method, quantum = parse_arguments(args)
    except ValueError:
        print("Wrong Input")
        return 0
    try:
        processes = read_processes(filename)
    except OSError:
        print("NO INPUT THERE")
        return 1
    try:
        lines = simulate(processes, method, quantum)
    except ValueError as error:
        print(error, file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
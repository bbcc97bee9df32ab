"""Top-N process ranking by CPU usage."""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

from hostdash.provider import ProcessInfo


class RankedRow(NamedTuple):
    """A process-table row, already formatted for display."""

    pid: str
    name: str
    cpu: str
    memory: str


def format_row(proc: ProcessInfo) -> RankedRow:
    return RankedRow(
        pid=str(proc.pid),
        name=proc.name,
        cpu=f"{proc.cpu_percent:.1f}%",
        memory=f"{proc.memory_kb / 1024:.1f} MB",
    )


def _truncated_cpu(proc: ProcessInfo) -> int:
    # Legacy ordering: compare whole percent only, truncated toward zero
    return int(proc.cpu_percent)


def _full_cpu(proc: ProcessInfo) -> float:
    return proc.cpu_percent


def rank_processes(
    processes: Mapping[int, ProcessInfo],
    limit: int,
    *,
    truncate: bool = False,
) -> list[RankedRow]:
    """Return at most *limit* rows ordered by CPU usage, highest first.

    The sort is stable, so processes with equal usage keep the provider's
    enumeration order. With ``truncate=True`` usage is compared as a whole
    number, reproducing the ordering of the original dashboard.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    key = _truncated_cpu if truncate else _full_cpu
    # sorted(reverse=True) keeps equal keys in their original order
    ordered = sorted(processes.values(), key=key, reverse=True)
    return [format_row(p) for p in ordered[:limit]]

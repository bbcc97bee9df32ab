"""Vertical band layout for the dashboard panels."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple


class Rect(NamedTuple):
    x: int
    y: int
    width: int
    height: int


def _spread(extra: int, indices: list[int], heights: list[int]) -> None:
    """Share *extra* rows evenly over *indices*; the last one takes the remainder."""
    share, rest = divmod(extra, len(indices))
    for i in indices:
        heights[i] += share
    heights[indices[-1]] += rest


def split_heights(total: int, sizes: Sequence[tuple[str, int]]) -> list[int]:
    """Divide *total* rows between bands according to their size policies.

    ``("length", n)`` gets exactly n rows, ``("min", n)`` at least n and
    ``("fill", 0)`` whatever is left over. Fixed and minimum heights are
    granted in order and clipped once the rows run out, so a short terminal
    squeezes the later bands down to zero. The result always sums to *total*.
    """
    if not sizes:
        return []
    total = max(0, total)
    heights = [0] * len(sizes)
    left = total
    for i, (policy, amount) in enumerate(sizes):
        if policy not in ("length", "min", "fill"):
            raise ValueError(f"unknown size policy: {policy!r}")
        if policy == "fill":
            continue
        granted = min(max(0, amount), left)
        heights[i] = granted
        left -= granted

    if left > 0:
        fill = [i for i, (policy, _) in enumerate(sizes) if policy == "fill"]
        grow = [i for i, (policy, _) in enumerate(sizes) if policy == "min"]
        _spread(left, fill or grow or [len(sizes) - 1], heights)
    return heights


def compute_layout(
    width: int,
    height: int,
    panels: Sequence[dict[str, Any]],
    margin: int = 1,
) -> list[Rect]:
    """Compute one rectangle per panel, stacked top to bottom inside the margin."""
    inner_w = max(0, width - 2 * margin)
    inner_h = max(0, height - 2 * margin)
    heights = split_heights(inner_h, [p["size"] for p in panels])

    rects: list[Rect] = []
    y = margin
    for h in heights:
        rects.append(Rect(margin, y, inner_w, h))
        y += h
    return rects

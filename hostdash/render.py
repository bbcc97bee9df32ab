"""Panel rendering.

Building the text for each panel is pure (``build_panels``); painting it onto
a curses window is a separate step (``paint``) so a frame can be checked
without a terminal. Curses errors while painting are not caught: a failed
draw ends the dashboard.
"""

from __future__ import annotations

import curses
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from hostdash.layout import Rect
from hostdash.provider import UNKNOWN, HostInfo, Snapshot
from hostdash.ranking import RankedRow

# Curses colour-pair IDs
C_CPU = 1
C_MEMORY = 2
C_HEADER = 3
C_TITLE = 4
C_INFO = 5
C_DEFAULT = 0

# Process-table columns and their fixed widths
COLUMN_WIDTHS = (8, 25, 10, 12)
COLUMN_TITLES = ("PID", "Name", "CPU", "Memory")

INFO_LABELS: tuple[tuple[str, str], ...] = (
    ("architecture", "Architecture"),
    ("uptime", "Uptime"),
    ("kernel_version", "Kernel Version"),
    ("os_version", "OS Version"),
    ("hostname", "Hostname"),
    ("open_files_limit", "Open Files Limit"),
    ("product_name", "Product Name"),
    ("vendor_name", "Vendor Name"),
)

PANEL_TITLES = {
    "cpu": "CPU",
    "memory": "Memory",
    "processes": "Processes",
    "info": "System Info",
}


def init_colors() -> None:
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(C_CPU, curses.COLOR_YELLOW, -1)
    curses.init_pair(C_MEMORY, curses.COLOR_CYAN, -1)
    curses.init_pair(C_HEADER, curses.COLOR_GREEN, -1)
    curses.init_pair(C_TITLE, curses.COLOR_WHITE, -1)
    curses.init_pair(C_INFO, curses.COLOR_MAGENTA, -1)


@dataclass(slots=True, frozen=True)
class PanelFrame:
    """Everything needed to paint one panel."""

    kind: str
    title: str
    rect: Rect
    lines: tuple[str, ...]
    color: int = C_DEFAULT
    header: str | None = None


# ── Panel text ─────────────────────────────────────────────────────────────


def cpu_lines(snapshot: Snapshot) -> tuple[str, ...]:
    usage = sum(snapshot.cores)
    capacity = len(snapshot.cores) * 100
    return (
        f"CPU Usage: {usage:.1f}% / {capacity}%, "
        f"Number of cores: {len(snapshot.cores)}, Brand: {snapshot.cpu_brand}",
    )


def memory_lines(snapshot: Snapshot) -> tuple[str, ...]:
    return (
        f"Memory: {snapshot.memory_used_mb} MB / {snapshot.memory_total_mb} MB, "
        f"Swap: {snapshot.swap_used_mb} MB / {snapshot.swap_total_mb} MB",
    )


def _table_line(cells: Sequence[str]) -> str:
    return " ".join(
        f"{cell[:width]:<{width}}" for cell, width in zip(cells, COLUMN_WIDTHS)
    )


def process_header() -> str:
    return _table_line(COLUMN_TITLES)


def process_lines(ranked: Sequence[RankedRow]) -> tuple[str, ...]:
    return tuple(_table_line(row) for row in ranked)


def info_lines(host: HostInfo) -> tuple[str, ...]:
    """Label/value rows for every host fact, ``Unknown`` when absent."""
    width = max(len(label) for _, label in INFO_LABELS) + 2
    lines = []
    for attr, label in INFO_LABELS:
        value = getattr(host, attr)
        lines.append(f"{label:<{width}}{value if value is not None else UNKNOWN}")
    return tuple(lines)


def build_panels(
    snapshot: Snapshot,
    ranked: Sequence[RankedRow],
    layout: Sequence[Rect],
    panels: Sequence[dict[str, Any]],
) -> list[PanelFrame]:
    """Pair each configured panel with its rectangle and text."""
    if len(layout) != len(panels):
        raise ValueError(
            f"layout has {len(layout)} rects for {len(panels)} panels"
        )
    frames: list[PanelFrame] = []
    for panel, rect in zip(panels, layout):
        kind = panel["kind"]
        title = PANEL_TITLES[kind]
        if kind == "cpu":
            frame = PanelFrame(kind, title, rect, cpu_lines(snapshot), C_CPU)
        elif kind == "memory":
            frame = PanelFrame(kind, title, rect, memory_lines(snapshot), C_MEMORY)
        elif kind == "processes":
            frame = PanelFrame(
                kind, title, rect, process_lines(ranked), header=process_header()
            )
        elif kind == "info":
            frame = PanelFrame(kind, title, rect, info_lines(snapshot.host_info), C_INFO)
        else:
            raise ValueError(f"unknown panel kind: {kind!r}")
        frames.append(frame)
    return frames


# ── Curses painting ────────────────────────────────────────────────────────


def _draw_box(win: curses.window, rect: Rect, title: str = "") -> curses.window | None:
    """Draw a bordered box and return it, or None when there is no room inside."""
    if rect.height < 3 or rect.width < 4:
        return None
    sub = win.subwin(rect.height, rect.width, rect.y, rect.x)
    sub.box()
    if title and len(title) + 4 < rect.width:
        sub.addstr(0, 2, f" {title} ", curses.color_pair(C_TITLE) | curses.A_BOLD)
    return sub


def paint(win: curses.window, frames: Sequence[PanelFrame]) -> None:
    """Erase *win*, draw every frame and push the result to the terminal."""
    win.erase()
    for frame in frames:
        box = _draw_box(win, frame.rect, frame.title)
        if box is None:
            continue
        inner_w = frame.rect.width - 2
        rows: list[tuple[str, int]] = []
        if frame.header is not None:
            rows.append((frame.header, curses.color_pair(C_HEADER) | curses.A_BOLD))
        rows.extend((line, curses.color_pair(frame.color)) for line in frame.lines)
        for i, (text, attr) in enumerate(rows[: frame.rect.height - 2]):
            box.addnstr(1 + i, 1, text, inner_w, attr)
    win.refresh()


class Renderer:
    """Turns a snapshot, ranked view and layout into a painted frame."""

    def __init__(self, panels: Sequence[dict[str, Any]]) -> None:
        self._panels = list(panels)

    def render(
        self,
        win: curses.window,
        snapshot: Snapshot,
        ranked: Sequence[RankedRow],
        layout: Sequence[Rect],
    ) -> None:
        paint(win, build_panels(snapshot, ranked, layout, self._panels))

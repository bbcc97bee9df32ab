"""Tests for panel text building and curses painting."""

from __future__ import annotations

import curses
from types import MappingProxyType
from unittest.mock import MagicMock, call, patch

import pytest

from hostdash.config import PROFILES
from hostdash.layout import Rect, compute_layout
from hostdash.provider import HostInfo, ProcessInfo, Snapshot
from hostdash.ranking import RankedRow, rank_processes
from hostdash.render import (
    COLUMN_WIDTHS,
    PanelFrame,
    Renderer,
    build_panels,
    cpu_lines,
    info_lines,
    memory_lines,
    paint,
    process_header,
    process_lines,
)


def _snapshot(**overrides: object) -> Snapshot:
    values: dict[str, object] = {
        "cores": (10.0, 20.0, 30.0, 40.0),
        "cpu_brand": "Test CPU",
        "memory_total_mb": 16000,
        "memory_used_mb": 4000,
        "swap_total_mb": 2048,
        "swap_used_mb": 0,
        "processes": MappingProxyType(
            {
                1: ProcessInfo(1, "init", 0.5, 4096),
                2: ProcessInfo(2, "python", 80.25, 102400),
            }
        ),
        "host_info": HostInfo(architecture="x86_64", hostname="box"),
    }
    values.update(overrides)
    return Snapshot(**values)  # type: ignore[arg-type]


# ── Panel text ─────────────────────────────────────────────────────────────


def test_cpu_line() -> None:
    (line,) = cpu_lines(_snapshot())
    assert line.startswith("CPU Usage: 100.0% / 400%")
    assert "Number of cores: 4" in line
    assert line.endswith("Brand: Test CPU")


def test_cpu_line_no_cores() -> None:
    (line,) = cpu_lines(_snapshot(cores=(), cpu_brand="Unknown"))
    assert line == "CPU Usage: 0.0% / 0%, Number of cores: 0, Brand: Unknown"


def test_memory_line() -> None:
    (line,) = memory_lines(_snapshot())
    assert line == "Memory: 4000 MB / 16000 MB, Swap: 0 MB / 2048 MB"


def test_process_header_and_rows() -> None:
    header = process_header()
    assert header.split() == ["PID", "Name", "CPU", "Memory"]
    assert len(header) == sum(COLUMN_WIDTHS) + len(COLUMN_WIDTHS) - 1

    (line,) = process_lines([RankedRow("2", "python", "80.2%", "100.0 MB")])
    assert line[:8] == "2       "
    assert line[9:34].rstrip() == "python"
    assert line[35:45].rstrip() == "80.2%"
    assert line[46:].rstrip() == "100.0 MB"


def test_process_line_truncates_long_name() -> None:
    (line,) = process_lines([RankedRow("1", "x" * 40, "0.0%", "0.0 MB")])
    assert line[9:34] == "x" * 25
    assert len(line) == len(process_header())


def test_info_lines_all_unknown() -> None:
    lines = info_lines(HostInfo())
    assert len(lines) == 8
    assert all(line.split()[-1] == "Unknown" for line in lines)


def test_info_lines_mixed() -> None:
    lines = info_lines(HostInfo(architecture="aarch64", kernel_version="6.1.0"))
    assert lines[0].startswith("Architecture")
    assert lines[0].endswith("aarch64")
    assert lines[1].endswith("Unknown")
    assert lines[2].endswith("6.1.0")


# ── build_panels ───────────────────────────────────────────────────────────


def test_build_panels_full_profile() -> None:
    panels = PROFILES["full"]["panels"]
    snap = _snapshot()
    ranked = rank_processes(snap.processes, 5)
    layout = compute_layout(80, 30, panels)
    frames = build_panels(snap, ranked, layout, panels)

    assert [f.kind for f in frames] == ["cpu", "memory", "processes", "info"]
    assert [f.title for f in frames] == ["CPU", "Memory", "Processes", "System Info"]
    assert [f.rect for f in frames] == layout
    procs = frames[2]
    assert procs.header == process_header()
    assert procs.lines[0].startswith("2 ")
    assert frames[3].lines[4].endswith("box")


def test_build_panels_is_deterministic() -> None:
    panels = PROFILES["compact"]["panels"]
    snap = _snapshot()
    ranked = rank_processes(snap.processes, 20)
    layout = compute_layout(100, 40, panels)
    assert build_panels(snap, ranked, layout, panels) == build_panels(
        snap, ranked, layout, panels
    )


def test_build_panels_layout_mismatch() -> None:
    with pytest.raises(ValueError):
        build_panels(_snapshot(), [], [Rect(1, 1, 10, 3)], PROFILES["full"]["panels"])


# ── paint ──────────────────────────────────────────────────────────────────


@patch("hostdash.render.curses.color_pair", side_effect=lambda n: n << 8)
def test_paint_draws_boxes_and_lines(mock_pair: MagicMock) -> None:
    win = MagicMock()
    box = MagicMock()
    win.subwin.return_value = box
    frame = PanelFrame("memory", "Memory", Rect(1, 4, 30, 3), ("Memory: 1 MB / 2 MB",), 2)

    paint(win, [frame])

    win.erase.assert_called_once()
    win.subwin.assert_called_once_with(3, 30, 4, 1)
    box.box.assert_called_once()
    box.addnstr.assert_called_once_with(1, 1, "Memory: 1 MB / 2 MB", 28, 2 << 8)
    win.refresh.assert_called_once()


@patch("hostdash.render.curses.color_pair", side_effect=lambda n: n << 8)
def test_paint_clips_rows_to_box(mock_pair: MagicMock) -> None:
    win = MagicMock()
    box = MagicMock()
    win.subwin.return_value = box
    lines = tuple(f"row {i}" for i in range(10))
    frame = PanelFrame("processes", "Processes", Rect(1, 7, 40, 5), lines, header="HDR")

    paint(win, [frame])

    texts = [c.args[2] for c in box.addnstr.call_args_list]
    assert texts == ["HDR", "row 0", "row 1"]


@patch("hostdash.render.curses.color_pair", side_effect=lambda n: n << 8)
def test_paint_skips_collapsed_panels(mock_pair: MagicMock) -> None:
    win = MagicMock()
    frame = PanelFrame("info", "System Info", Rect(1, 20, 40, 0), ("x",))
    paint(win, [frame])
    win.subwin.assert_not_called()
    win.refresh.assert_called_once()


@patch("hostdash.render.curses.color_pair", side_effect=lambda n: n << 8)
def test_paint_propagates_curses_errors(mock_pair: MagicMock) -> None:
    win = MagicMock()
    win.refresh.side_effect = curses.error("refresh failed")
    with pytest.raises(curses.error):
        paint(win, [])


@patch("hostdash.render.paint")
def test_renderer_builds_then_paints(mock_paint: MagicMock) -> None:
    panels = PROFILES["compact"]["panels"]
    renderer = Renderer(panels)
    snap = _snapshot()
    layout = compute_layout(80, 24, panels)
    win = MagicMock()

    renderer.render(win, snap, [], layout)

    assert mock_paint.call_args == call(win, build_panels(snap, [], layout, panels))

"""Interactive terminal dashboard: hostdash's live view of the local host.

Samples CPU, memory, process and host facts once per second and paints them
into stacked curses panels. Press ``q`` to quit.

Usage:
    hostdash            # CPU, memory, top 5 processes, system info
    hostdash-compact    # CPU, memory, top 20 processes
"""

from __future__ import annotations

import curses
import sys
import time
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

import psutil

from hostdash.config import load_config
from hostdash.layout import compute_layout
from hostdash.provider import PsutilProvider, Snapshot
from hostdash.ranking import rank_processes
from hostdash.render import Renderer, init_colors

NO_KEY = -1


class SnapshotProvider(Protocol):
    def refresh(self) -> Snapshot: ...


class InputSource(Protocol):
    def wait(self, timeout: float) -> int:
        """Block up to *timeout* seconds for a key; return it or NO_KEY."""
        ...


class LoopState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


def remaining_timeout(tick_interval: float, elapsed: float) -> float:
    """Time left in the current tick, never negative."""
    return max(0.0, tick_interval - elapsed)


class CursesInput:
    """Timed key wait on a curses window; also paces the refresh cadence."""

    def __init__(self, win: curses.window) -> None:
        self._win = win

    def wait(self, timeout: float) -> int:
        self._win.timeout(int(round(timeout * 1000)))
        return self._win.getch()


# ── Main loop ──────────────────────────────────────────────────────────────


class TickLoop:
    """Sample, rank, lay out, render, then wait for input until the tick ends.

    Runs until the quit key is pressed. Errors from the provider, the
    renderer or the input source propagate to the caller.
    """

    def __init__(
        self,
        win: curses.window,
        provider: SnapshotProvider,
        config: dict[str, Any],
        input_source: InputSource | None = None,
        renderer: Renderer | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._win = win
        self._provider = provider
        self._config = config
        self._input = input_source if input_source is not None else CursesInput(win)
        self._renderer = (
            renderer if renderer is not None else Renderer(config["panels"])
        )
        self._clock = clock
        self._quit_key = ord(config["quit_key"])
        self.state = LoopState.RUNNING
        self.cycles = 0

    def draw_cycle(self) -> None:
        """Run one sample → rank → layout → render pass."""
        snapshot = self._provider.refresh()
        ranked = rank_processes(
            snapshot.processes,
            self._config["display_count"],
            truncate=self._config["truncate_ranking"],
        )
        max_y, max_x = self._win.getmaxyx()
        layout = compute_layout(
            max_x, max_y, self._config["panels"], self._config["margin"]
        )
        self._renderer.render(self._win, snapshot, ranked, layout)
        self.cycles += 1

    def _wait_for_tick(self, last_tick: float) -> float | None:
        """Poll for input until the tick has elapsed.

        Returns the new tick anchor, or None once the quit key arrives.
        Other keys are ignored without sampling early.
        """
        interval = self._config["tick_interval"]
        while True:
            timeout = remaining_timeout(interval, self._clock() - last_tick)
            key = self._input.wait(timeout)
            if key == self._quit_key:
                return None
            now = self._clock()
            if now - last_tick >= interval:
                return now

    def run(self) -> int:
        """Run until quit; return the number of frames rendered."""
        last_tick = self._clock()
        while self.state is LoopState.RUNNING:
            self.draw_cycle()
            anchor = self._wait_for_tick(last_tick)
            if anchor is None:
                self.state = LoopState.STOPPED
            else:
                last_tick = anchor
        return self.cycles


def _dashboard_loop(stdscr: curses.window, config: dict[str, Any]) -> int:
    init_colors()
    curses.curs_set(0)
    provider = PsutilProvider()
    return TickLoop(stdscr, provider, config).run()


# ── CLI entry points ───────────────────────────────────────────────────────


def run(profile: str) -> int:
    """Run the dashboard with *profile*; return the process exit status."""
    config = load_config(profile)
    try:
        curses.wrapper(_dashboard_loop, config)
    except KeyboardInterrupt:
        pass
    except (curses.error, OSError, psutil.Error) as e:
        # curses.wrapper has already restored the terminal
        print(f"hostdash: {e}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    sys.exit(run("full"))


def main_compact() -> None:
    sys.exit(run("compact"))


if __name__ == "__main__":
    main()

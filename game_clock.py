# -*- coding: utf-8 -*-
########################
# game_clock.py
########################
# Purpose:
# - Fixed rate clock source. Emits one tick callback every tick_rate_ms on an EventLoop.
#
# Design notes:
# - Independent of game content. The tick counter is informational only; the reducer just advances.
# - Each firing schedules the next one from its own due time, so ticks never drift.
# - stop() cancels the pending tick. A stopped clock cannot be restarted; build a new one.
#
########################
# Interfaces:
# Public dataclasses:
# - ClockSnapshot(elapsed_ticks: int, tick_rate_ms: float, is_running: bool)
#
# Public classes:
# - class ClockSource
#   - __init__(loop: EventLoop, on_tick: Callable[[int], None], tick_rate_ms: float = TICK_RATE_MS)
#   - start() -> None
#   - stop() -> None
#   - elapsed_ticks() -> int
#   - is_running() -> bool
#   - snapshot() -> ClockSnapshot
#
# Inputs:
# - EventLoop time.
#
# Outputs:
# - on_tick(elapsed_ticks) once per period.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import event_loop
import gameplay_models


@dataclass(frozen=True)
class ClockSnapshot:
    elapsed_ticks: int
    tick_rate_ms: float
    is_running: bool


class ClockSource:
    def __init__(
        self,
        loop: event_loop.EventLoop,
        on_tick: Callable[[int], None],
        tick_rate_ms: float = gameplay_models.TICK_RATE_MS,
    ) -> None:
        if float(tick_rate_ms) <= 0.0:
            raise ValueError("tick_rate_ms must be positive")
        self._loop = loop
        self._on_tick = on_tick
        self._tick_rate_ms = float(tick_rate_ms)
        self._elapsed_ticks = 0
        self._pending: Optional[event_loop.TimerHandle] = None
        self._started = False
        self._stopped = False

    def start(self) -> None:
        if self._started:
            raise RuntimeError("clock source already started")
        self._started = True
        self._schedule_next()

    def stop(self) -> None:
        self._stopped = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def elapsed_ticks(self) -> int:
        return int(self._elapsed_ticks)

    def is_running(self) -> bool:
        return self._started and not self._stopped

    def snapshot(self) -> ClockSnapshot:
        return ClockSnapshot(
            elapsed_ticks=self.elapsed_ticks(),
            tick_rate_ms=float(self._tick_rate_ms),
            is_running=self.is_running(),
        )

    def _schedule_next(self) -> None:
        self._pending = self._loop.call_later(self._tick_rate_ms, self._fire)

    def _fire(self) -> None:
        self._pending = None
        if self._stopped:
            return
        elapsed = self._elapsed_ticks
        self._elapsed_ticks += 1
        # Reschedule first so a callback that stops the clock cancels the next tick.
        self._schedule_next()
        self._on_tick(elapsed)


def _run_unit_tests() -> None:
    loop = event_loop.EventLoop()
    seen = []
    clock = ClockSource(loop, seen.append, tick_rate_ms=10)
    clock.start()

    loop.advance_to(35)
    assert seen == [0, 1, 2]
    assert clock.snapshot() == ClockSnapshot(elapsed_ticks=3, tick_rate_ms=10.0, is_running=True)

    clock.stop()
    loop.advance_to(100)
    assert seen == [0, 1, 2]
    assert loop.pending_count() == 0


if __name__ == "__main__":
    _run_unit_tests()
    print("game_clock.py: ok")

# -*- coding: utf-8 -*-
########################
# event_loop.py
########################
# Purpose:
# - Single threaded timer queue shared by the clock source and the chart scheduler.
# - Time is a millisecond counter advanced by the owner (Qt timer in the harness, a loop in tests).
#
# Design notes:
# - No Qt usage. Pure and deterministic, so whole game sessions can be replayed in tests.
# - Timers fire in (due time, scheduling order). Equal due times keep FIFO order.
# - While a callback runs, now_ms() equals the timer's due time. Delays scheduled from a callback
#   are therefore relative to that firing, which keeps chained delays exact.
# - Callbacks never run re-entrantly. advance_to() called from inside a callback raises RuntimeError.
#
########################
# Interfaces:
# Public classes:
# - class TimerHandle
#   - due_ms: float
#   - cancelled: bool
#   - cancel() -> None
# - class EventLoop
#   - now_ms() -> float
#   - call_later(delay_ms: float, callback: Callable[[], None]) -> TimerHandle
#   - advance_to(time_ms: float) -> int
#   - advance_by(delta_ms: float) -> int
#   - next_due_ms() -> Optional[float]
#   - pending_count() -> int
#   - close() -> None
#   - is_closed() -> bool
#
########################

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TimerHandle:
    def __init__(self, due_ms: float, callback: Callable[[], None]) -> None:
        self.due_ms = float(due_ms)
        self._callback: Optional[Callable[[], None]] = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
        self._callback = None

    def _fire(self) -> None:
        callback = self._callback
        self._callback = None
        if callback is not None:
            callback()


class EventLoop:
    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()
        self._running = False
        self._closed = False

    def now_ms(self) -> float:
        return self._now_ms

    def is_closed(self) -> bool:
        return self._closed

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if self._closed:
            raise RuntimeError("event loop is closed")
        # Negative delays fire on the next advance, like an overdue timer.
        due_ms = self._now_ms + max(0.0, float(delay_ms))
        handle = TimerHandle(due_ms, callback)
        heapq.heappush(self._queue, (due_ms, next(self._sequence), handle))
        return handle

    def next_due_ms(self) -> Optional[float]:
        self._discard_cancelled_head()
        if not self._queue:
            return None
        return self._queue[0][0]

    def pending_count(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance_to(self, time_ms: float) -> int:
        if self._running:
            raise RuntimeError("advance_to() called from inside a timer callback")

        target_ms = float(time_ms)
        fired = 0
        self._running = True
        try:
            while not self._closed:
                self._discard_cancelled_head()
                if not self._queue or self._queue[0][0] > target_ms:
                    break
                due_ms, _, handle = heapq.heappop(self._queue)
                self._now_ms = max(self._now_ms, due_ms)
                handle._fire()
                fired += 1
        finally:
            self._running = False

        if target_ms > self._now_ms:
            self._now_ms = target_ms
        return fired

    def advance_by(self, delta_ms: float) -> int:
        return self.advance_to(self._now_ms + max(0.0, float(delta_ms)))

    def close(self) -> None:
        """Cancel every pending timer. The loop accepts no new timers afterwards."""
        cancelled = 0
        for _, _, handle in self._queue:
            if not handle.cancelled:
                handle.cancel()
                cancelled += 1
        self._queue.clear()
        self._closed = True
        logger.debug("event loop closed (%d pending timers cancelled)", cancelled)

    def _discard_cancelled_head(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)


def _run_unit_tests() -> None:
    loop = EventLoop()
    fired: List[str] = []

    loop.call_later(20, lambda: fired.append("b"))
    loop.call_later(10, lambda: fired.append("a"))
    loop.call_later(20, lambda: fired.append("c"))
    cancelled = loop.call_later(15, lambda: fired.append("x"))
    cancelled.cancel()

    assert loop.advance_to(15) == 1
    assert fired == ["a"]
    assert loop.advance_by(5) == 2
    assert fired == ["a", "b", "c"]
    assert loop.now_ms() == 20.0

    # Chained delays compose from the firing time.
    chained: List[float] = []

    def chain() -> None:
        chained.append(loop.now_ms())
        if len(chained) < 3:
            loop.call_later(7, chain)

    loop.call_later(7, chain)
    loop.advance_to(100)
    assert chained == [27.0, 34.0, 41.0]

    loop.call_later(5, lambda: fired.append("late"))
    loop.close()
    assert loop.pending_count() == 0
    loop.advance_to(1000)
    assert "late" not in fired


if __name__ == "__main__":
    _run_unit_tests()
    print("event_loop.py: ok")

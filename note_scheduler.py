# -*- coding: utf-8 -*-
########################
# note_scheduler.py
########################
# Purpose:
# - Turn parsed chart rows into Notes and release them as time spaced groups.
# - Notes sharing a start timestamp arrive together in one group.
# - A terminal empty group follows the last group and marks the end of the chart.
#
# Design notes:
# - No Qt usage. Pure gameplay logic plus EventLoop timers.
# - Ingestion happens in __init__ and is all-or-nothing; scheduling never starts on a bad chart.
# - Group order is first-seen order of each start timestamp.
# - Each group is held back by its delay relative to the previous emission, not to chart start.
# - The group sequence is single use. A restart builds a new ChartScheduler from the rows.
#
########################
# Interfaces:
# Public dataclasses:
# - NoteGroup(delay_ms: float, notes: tuple[Note, ...])
#   - is_terminal -> bool
#
# Public functions:
# - build_notes(rows: Sequence[ChartRow], *, tick_rate_ms: float = TICK_RATE_MS) -> tuple[Note, ...]
# - group_by_start(notes: Iterable[Note]) -> list[tuple[Note, ...]]
#
# Public classes:
# - class ChartScheduler
#   - __init__(rows: Sequence[ChartRow], *, end_delay_ms: float = END_OF_CHART_DELAY_MS)
#   - notes() -> tuple[Note, ...]
#   - groups() -> Iterator[NoteGroup]          # lazy, single use
#   - start(loop: EventLoop, emit: Callable[[tuple[Note, ...]], None]) -> None
#   - cancel() -> None
#   - is_finished() -> bool
#
# Inputs:
# - ChartRow values from chart_parser.
#
# Outputs:
# - emit(notes) callbacks from EventLoop timers; an empty tuple signals end of chart.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import event_loop
import gameplay_models

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteGroup:
    delay_ms: float
    notes: Tuple[gameplay_models.Note, ...]

    @property
    def is_terminal(self) -> bool:
        return not self.notes


def build_notes(
    rows: Sequence[gameplay_models.ChartRow],
    *,
    tick_rate_ms: float = gameplay_models.TICK_RATE_MS,
) -> Tuple[gameplay_models.Note, ...]:
    notes: List[gameplay_models.Note] = []
    for note_id, row in enumerate(rows, start=1):
        duration_seconds = float(row.end) - float(row.start)
        tail = gameplay_models.Tail(
            has_tail=duration_seconds > gameplay_models.TAIL_BOUND_SECONDS,
            tail_start=0,
            tail_length=int(math.floor(1000.0 * duration_seconds / float(tick_rate_ms))),
            tail_completed=False,
        )
        notes.append(
            gameplay_models.Note(
                id=note_id,
                user_played=bool(row.user_played),
                instrument_name=str(row.instrument_name),
                velocity=float(row.velocity_raw) / 127.0,
                pitch=int(row.pitch),
                start=float(row.start),
                end=float(row.end),
                tail=tail,
            )
        )
    return tuple(notes)


def group_by_start(notes: Iterable[gameplay_models.Note]) -> List[Tuple[gameplay_models.Note, ...]]:
    groups: Dict[float, List[gameplay_models.Note]] = {}
    for note in notes:
        groups.setdefault(float(note.start), []).append(note)
    # dict preserves first-seen key order
    return [tuple(group) for group in groups.values()]


class ChartScheduler:
    def __init__(
        self,
        rows: Sequence[gameplay_models.ChartRow],
        *,
        end_delay_ms: float = gameplay_models.END_OF_CHART_DELAY_MS,
        tick_rate_ms: float = gameplay_models.TICK_RATE_MS,
    ) -> None:
        self._notes = build_notes(rows, tick_rate_ms=tick_rate_ms)
        self._end_delay_ms = float(end_delay_ms)
        self._groups: Iterator[NoteGroup] = self._iter_groups()
        self._consumed = False
        self._loop: Optional[event_loop.EventLoop] = None
        self._emit: Optional[Callable[[Tuple[gameplay_models.Note, ...]], None]] = None
        self._pending: Optional[event_loop.TimerHandle] = None
        self._finished = False
        self._cancelled = False

    def notes(self) -> Tuple[gameplay_models.Note, ...]:
        return self._notes

    def groups(self) -> Iterator[NoteGroup]:
        if self._consumed:
            raise RuntimeError("chart schedule already consumed; build a new ChartScheduler")
        self._consumed = True
        return self._groups

    def _iter_groups(self) -> Iterator[NoteGroup]:
        previous_start: Optional[float] = None
        for group in group_by_start(self._notes):
            group_start = float(group[0].start)
            if previous_start is None:
                delay_ms = 0.0
            else:
                delay_ms = max(0.0, (group_start - previous_start) * 1000.0)
            previous_start = group_start
            yield NoteGroup(delay_ms=delay_ms, notes=group)
        yield NoteGroup(delay_ms=self._end_delay_ms, notes=())

    def start(
        self,
        loop: event_loop.EventLoop,
        emit: Callable[[Tuple[gameplay_models.Note, ...]], None],
    ) -> None:
        groups = self.groups()
        self._loop = loop
        self._emit = emit
        logger.debug("chart scheduler started (%d notes)", len(self._notes))
        self._schedule_next(groups)

    def cancel(self) -> None:
        self._cancelled = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def is_finished(self) -> bool:
        return self._finished

    def _schedule_next(self, groups: Iterator[NoteGroup]) -> None:
        if self._cancelled or self._loop is None:
            return
        next_group = next(groups, None)
        if next_group is None:
            self._finished = True
            self._pending = None
            return

        def fire() -> None:
            self._pending = None
            if self._cancelled or self._emit is None:
                return
            if next_group.is_terminal:
                logger.info("end of chart reached")
            self._emit(next_group.notes)
            self._schedule_next(groups)

        self._pending = self._loop.call_later(next_group.delay_ms, fire)


def _run_unit_tests() -> None:
    rows = [
        gameplay_models.ChartRow(True, "piano", 100, 60, 0.0, 0.2),
        gameplay_models.ChartRow(True, "piano", 90, 64, 0.0, 0.6),
        gameplay_models.ChartRow(False, "violin", 90, 67, 0.5, 2.0),
    ]
    scheduler = ChartScheduler(rows)
    groups = list(scheduler.groups())
    assert [group.delay_ms for group in groups] == [0.0, 500.0, 5000.0]
    assert [note.id for note in groups[0].notes] == [1, 2]
    assert groups[1].notes[0].tail.has_tail
    assert groups[0].notes[0].tail.tail_length == 20
    assert groups[-1].is_terminal

    loop = event_loop.EventLoop()
    emitted = []
    timed = ChartScheduler(rows)
    timed.start(loop, lambda notes: emitted.append((loop.now_ms(), [note.id for note in notes])))
    loop.advance_to(10_000)
    assert emitted == [(0.0, [1, 2]), (500.0, [3]), (5500.0, [])]
    assert timed.is_finished()


if __name__ == "__main__":
    _run_unit_tests()
    print("note_scheduler.py: ok")

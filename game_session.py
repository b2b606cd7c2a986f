# -*- coding: utf-8 -*-
########################
# game_session.py
########################
# Purpose:
# - Owns one play-through: EventLoop, ClockSource, ChartScheduler, the action queue and the current GameState.
# - Serializes clock ticks, chart note groups and lane input into a single ordered action queue.
# - Folds each action through judge.reduce_state and publishes every resulting state to subscribers.
#
# Design notes:
# - No Qt usage. The owner drives time by calling advance_to()/advance_by() (QTimer in the harness).
# - Exactly one action is reduced at a time. Actions dispatched from a subscriber are queued and
#   reduced after the current one, never re-entrantly.
# - stop() closes the EventLoop, which cancels the pending clock tick and any in-flight chart delay.
# - restart() never reuses this session. It builds a fresh one from the same chart rows.
# - The high score survives restarts through a shared HighScoreBoard.
#
########################
# Interfaces:
# Public exceptions:
# - class SessionStateError(RuntimeError)
#
# Public dataclasses:
# - HighScoreBoard(best_score: int = 0)
#   - submit(score: int) -> bool
# - SessionStats(reduced_actions: int, stray_presses: int, stray_releases: int)
#
# Public classes:
# - class GameSession
#   - __init__(rows: Sequence[ChartRow], *, seed: int = 1, tick_rate_ms: float = TICK_RATE_MS,
#              end_delay_ms: float = END_OF_CHART_DELAY_MS, high_scores: Optional[HighScoreBoard] = None)
#   - state -> GameState
#   - loop -> EventLoop
#   - high_scores -> HighScoreBoard
#   - stats -> SessionStats
#   - subscribe(callback: Callable[[GameState], None]) -> Callable[[], None]
#   - start() -> None
#   - stop() -> None
#   - is_running() -> bool
#   - dispatch(action: Action) -> None
#   - press_lane(lane: Lane) -> None
#   - release_lane(lane: Lane) -> None
#   - advance_to(time_ms: float) -> None
#   - advance_by(delta_ms: float) -> None
#   - restart() -> GameSession
#
########################

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Callable, Deque, List, Optional, Sequence, Tuple

import event_loop
import game_actions
import game_clock
import gameplay_models
import judge
import note_scheduler

logger = logging.getLogger(__name__)

StateCallback = Callable[[gameplay_models.GameState], None]


class SessionStateError(RuntimeError):
    """Raised when a session is used outside its started/stopped lifecycle."""


@dataclass
class HighScoreBoard:
    best_score: int = 0

    def submit(self, score: int) -> bool:
        if int(score) > self.best_score:
            self.best_score = int(score)
            return True
        return False


@dataclass
class SessionStats:
    reduced_actions: int = 0
    stray_presses: int = 0
    stray_releases: int = 0


class GameSession:
    def __init__(
        self,
        rows: Sequence[gameplay_models.ChartRow],
        *,
        seed: int = 1,
        tick_rate_ms: float = gameplay_models.TICK_RATE_MS,
        end_delay_ms: float = gameplay_models.END_OF_CHART_DELAY_MS,
        high_scores: Optional[HighScoreBoard] = None,
    ) -> None:
        self._rows: Tuple[gameplay_models.ChartRow, ...] = tuple(rows)
        self._seed = int(seed)
        self._tick_rate_ms = float(tick_rate_ms)
        self._end_delay_ms = float(end_delay_ms)
        self._high_scores = high_scores if high_scores is not None else HighScoreBoard()

        # Ingestion happens here so a bad chart fails before any timer exists.
        self._scheduler = note_scheduler.ChartScheduler(
            self._rows,
            end_delay_ms=self._end_delay_ms,
            tick_rate_ms=self._tick_rate_ms,
        )
        self._loop = event_loop.EventLoop()
        self._clock = game_clock.ClockSource(
            self._loop,
            lambda elapsed: self.dispatch(game_actions.Tick(elapsed)),
            tick_rate_ms=self._tick_rate_ms,
        )

        self._state = gameplay_models.initial_state(self._seed)
        self._queue: Deque[game_actions.Action] = deque()
        self._draining = False
        self._subscribers: List[StateCallback] = []
        self._stats = SessionStats()
        self._started = False
        self._stopped = False
        self._game_end_reported = False

    @property
    def state(self) -> gameplay_models.GameState:
        return self._state

    @property
    def loop(self) -> event_loop.EventLoop:
        return self._loop

    @property
    def high_scores(self) -> HighScoreBoard:
        return self._high_scores

    @property
    def stats(self) -> SessionStats:
        return self._stats

    @property
    def rows(self) -> Tuple[gameplay_models.ChartRow, ...]:
        return self._rows

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def start(self) -> None:
        if self._started or self._stopped:
            raise SessionStateError("session already started or stopped")
        self._started = True
        logger.info(
            "session started (%d chart notes, seed=%d, tick=%.1fms)",
            len(self._scheduler.notes()),
            self._seed,
            self._tick_rate_ms,
        )
        self._clock.start()
        self._scheduler.start(self._loop, self._on_note_group)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._clock.stop()
        self._scheduler.cancel()
        self._loop.close()
        self._queue.clear()
        logger.info("session stopped (score=%d, ticks=%d)", self._state.score, self._clock.elapsed_ticks())

    def is_running(self) -> bool:
        return self._started and not self._stopped

    def restart(self) -> "GameSession":
        """Stop this session and return a fresh one over the same chart, seed and high scores."""
        self.stop()
        fresh = GameSession(
            self._rows,
            seed=self._seed,
            tick_rate_ms=self._tick_rate_ms,
            end_delay_ms=self._end_delay_ms,
            high_scores=self._high_scores,
        )
        for callback in self._subscribers:
            fresh.subscribe(callback)
        self._subscribers.clear()
        logger.info("session restarted")
        fresh.start()
        return fresh

    def advance_to(self, time_ms: float) -> None:
        if not self.is_running():
            return
        self._loop.advance_to(time_ms)

    def advance_by(self, delta_ms: float) -> None:
        if not self.is_running():
            return
        self._loop.advance_by(delta_ms)

    def press_lane(self, lane: gameplay_models.Lane) -> None:
        self.dispatch(game_actions.ButtonDown(lane))

    def release_lane(self, lane: gameplay_models.Lane) -> None:
        self.dispatch(game_actions.ButtonUp(lane))

    def dispatch(self, action: game_actions.Action) -> None:
        if not self.is_running():
            raise SessionStateError("dispatch() requires a started, running session")
        self._queue.append(action)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._reduce_one(self._queue.popleft())
        finally:
            self._draining = False

    def _on_note_group(self, notes: Tuple[gameplay_models.Note, ...]) -> None:
        if self.is_running():
            self.dispatch(game_actions.EmitNotes(tuple(notes)))

    def _reduce_one(self, action: game_actions.Action) -> None:
        previous = self._state
        self._note_input_desync(previous, action)
        self._state = judge.reduce_state(previous, action)
        self._stats.reduced_actions += 1

        if self._state.game_end:
            # Tails still in flight can score after the chart ends.
            if self._high_scores.submit(self._state.score):
                logger.info("new high score: %d", self._state.score)
            if not self._game_end_reported:
                self._game_end_reported = True
                logger.info("game over (score=%d)", self._state.score)

        for callback in list(self._subscribers):
            callback(self._state)

    def _note_input_desync(self, state: gameplay_models.GameState, action: game_actions.Action) -> None:
        if isinstance(action, game_actions.ButtonDown) and not judge.press_candidates(state, action.lane):
            self._stats.stray_presses += 1
            logger.debug("input desync: press on %s matched no note", action.lane.value)
        elif isinstance(action, game_actions.ButtonUp) and not judge.release_candidates(state, action.lane):
            self._stats.stray_releases += 1
            logger.debug("input desync: release on %s matched no held tail", action.lane.value)


def _run_unit_tests() -> None:
    rows = [
        gameplay_models.ChartRow(True, "piano", 100, 60, 0.0, 0.2),
        gameplay_models.ChartRow(True, "piano", 90, 64, 0.0, 0.6),
    ]
    session = GameSession(rows, seed=3)
    states: List[gameplay_models.GameState] = []
    session.subscribe(states.append)
    session.start()

    session.advance_to(100)
    assert len(session.state.curr_notes) == 2
    assert not session.state.game_end

    session.advance_to(6000)
    assert session.state.game_end
    assert session.high_scores.best_score == session.state.score

    session.stop()
    count = len(states)
    session.advance_to(10_000)
    assert len(states) == count

    fresh = session.restart()
    assert fresh is not session
    assert fresh.state.curr_notes == ()
    fresh.stop()


if __name__ == "__main__":
    _run_unit_tests()
    print("game_session.py: ok")

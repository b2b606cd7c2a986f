# -*- coding: utf-8 -*-
########################
# gameplay_models.py
########################
# Purpose:
# - Core gameplay data models for the runtime gameplay pipeline.
# - Defines notes, tails, per-note travel state and the root GameState.
# - Holds the fixed gameplay constants shared by the reducer, scheduler and renderer.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - No Qt usage. These are plain frozen dataclasses.
# - Nothing mutates a model in place. Updates go through dataclasses.replace.
#
########################
# Interfaces:
# Public constants:
# - TICK_RATE_MS, ARRIVAL_THRESHOLD, HIT_WINDOW_START, RADIUS, TAIL_BOUND_SECONDS, END_OF_CHART_DELAY_MS
#
# Public enums:
# - class Lane(enum.Enum): GREEN | RED | BLUE | YELLOW
#
# Public dataclasses:
# - ChartRow(user_played, instrument_name, velocity_raw, pitch, start, end)
# - Tail(has_tail, tail_start, tail_length, tail_completed)
# - Note(id, user_played, instrument_name, velocity, pitch, start, end, clicked, missed, tail)
# - NoteState(note, position)
# - GameState(game_end, curr_notes, score, combo, multiplier, seed, next_filler_id)
#
# Public functions:
# - lane_for_pitch(pitch: int) -> Lane
# - column_x_fraction(lane: Lane) -> float
# - multiplier_for_combo(combo: int) -> fractions.Fraction
# - initial_state(seed: int) -> GameState
#
# Inputs/Outputs:
# - These types are exchanged between chart_parser, note_scheduler, judge, game_session,
#   audio_cues, overlay_renderer and the harness.
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
import enum
from fractions import Fraction
from typing import Tuple


TICK_RATE_MS = 10
ARRIVAL_THRESHOLD = 350
HIT_WINDOW_START = 320
RADIUS = 14
TAIL_BOUND_SECONDS = 1.0
END_OF_CHART_DELAY_MS = 5000

MULTIPLIER_STEP = Fraction(1, 5)
COMBO_PER_MULTIPLIER_STEP = 10
BASE_HIT_SCORE = 100


class Lane(enum.Enum):
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"


_LANES_BY_SELECTOR: Tuple[Lane, ...] = (Lane.GREEN, Lane.RED, Lane.BLUE, Lane.YELLOW)
_COLUMN_X_FRACTIONS = {
    Lane.GREEN: 0.2,
    Lane.RED: 0.4,
    Lane.BLUE: 0.6,
    Lane.YELLOW: 0.8,
}


def lane_for_pitch(pitch: int) -> Lane:
    return _LANES_BY_SELECTOR[int(pitch) % 4]


def column_x_fraction(lane: Lane) -> float:
    """Horizontal position of a lane as a fraction of the playfield width."""
    return _COLUMN_X_FRACTIONS[lane]


def multiplier_for_combo(combo: int) -> Fraction:
    return 1 + (int(combo) // COMBO_PER_MULTIPLIER_STEP) * MULTIPLIER_STEP


@dataclass(frozen=True)
class ChartRow:
    user_played: bool
    instrument_name: str
    velocity_raw: int
    pitch: int
    start: float
    end: float


@dataclass(frozen=True)
class Tail:
    has_tail: bool
    tail_start: int = 0
    tail_length: int = 0
    tail_completed: bool = False


@dataclass(frozen=True)
class Note:
    id: int
    user_played: bool
    instrument_name: str
    velocity: float
    pitch: int
    start: float
    end: float
    tail: Tail
    clicked: bool = False
    missed: bool = False

    @property
    def lane(self) -> Lane:
        return lane_for_pitch(self.pitch)

    @property
    def duration_seconds(self) -> float:
        return float(self.end) - float(self.start)


@dataclass(frozen=True)
class NoteState:
    note: Note
    position: int = 0


@dataclass(frozen=True)
class GameState:
    game_end: bool = False
    curr_notes: Tuple[NoteState, ...] = ()
    score: int = 0
    combo: int = 0
    multiplier: Fraction = field(default_factory=lambda: Fraction(1))
    seed: int = 1
    # Filler notes count down from -1 so they never collide with chart ids.
    next_filler_id: int = -1


def initial_state(seed: int = 1) -> GameState:
    return GameState(seed=int(seed))


def _run_unit_tests() -> None:
    assert lane_for_pitch(60) is Lane.GREEN
    assert lane_for_pitch(61) is Lane.RED
    assert lane_for_pitch(66) is Lane.BLUE
    assert lane_for_pitch(63) is Lane.YELLOW

    assert multiplier_for_combo(0) == 1
    assert multiplier_for_combo(9) == 1
    assert multiplier_for_combo(10) == Fraction(6, 5)
    assert multiplier_for_combo(25) == Fraction(7, 5)

    state = initial_state(42)
    assert state.seed == 42
    assert state.curr_notes == ()
    assert state.multiplier == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("gameplay_models.py: ok")

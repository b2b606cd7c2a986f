from __future__ import annotations

from typing import Optional

import pytest

import gameplay_models
from gameplay_models import GameState, Note, NoteState, Tail


def make_note(
    note_id: int = 1,
    *,
    pitch: int = 60,
    user_played: bool = True,
    has_tail: bool = False,
    tail_start: int = 0,
    tail_length: int = 20,
    tail_completed: bool = False,
    clicked: bool = False,
    missed: bool = False,
    start: float = 0.0,
    end: Optional[float] = None,
) -> Note:
    if end is None:
        end = start + (2.0 if has_tail else 0.2)
    return Note(
        id=note_id,
        user_played=user_played,
        instrument_name="piano",
        velocity=0.5,
        pitch=pitch,
        start=start,
        end=end,
        tail=Tail(
            has_tail=has_tail,
            tail_start=tail_start,
            tail_length=tail_length,
            tail_completed=tail_completed,
        ),
        clicked=clicked,
        missed=missed,
    )


def state_with(*note_states: NoteState, **fields) -> GameState:
    return GameState(curr_notes=tuple(note_states), **fields)


@pytest.fixture
def chart_rows():
    return [
        gameplay_models.ChartRow(True, "piano", 100, 60, 0.0, 0.2),
        gameplay_models.ChartRow(True, "piano", 90, 64, 0.0, 0.6),
    ]

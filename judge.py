# -*- coding: utf-8 -*-
########################
# judge.py
########################
# Purpose:
# - The game's transition function: reduce_state(state, action) -> new GameState.
# - Hit, miss and tail release judgement, scoring, combo and multiplier, filler note spawning.
#
# Design notes:
# - No Qt usage. Pure gameplay logic with no side effects and no clock reads.
# - Never mutates its input. Every changed note, tail and state is a new frozen value.
# - Positions are measured in ticks since spawn. A note reaches the judgement line at ARRIVAL_THRESHOLD.
# - Tail notes score on release, not on press. Pressing only marks them clicked.
# - Multiplier always equals multiplier_for_combo(combo) after a press or release.
# - Every press advances the filler seed. Filler notes carry no tail and are never completed or removed.
#
########################
# Interfaces:
# Public functions:
# - reduce_state(state: GameState, action: Action) -> GameState
# - tick(state: GameState) -> GameState
# - emit_notes(state: GameState, notes: Sequence[Note]) -> GameState
# - button_down(state: GameState, lane: Lane) -> GameState
# - button_up(state: GameState, lane: Lane) -> GameState
# - press_candidates(state: GameState, lane: Lane) -> list[NoteState]
# - release_candidates(state: GameState, lane: Lane) -> list[NoteState]
# - make_filler_note(seed: int, note_id: int) -> Note
#
# Inputs:
# - GameState and one Action from game_actions.
#
# Outputs:
# - The next GameState.
#
########################

from __future__ import annotations

import math
from dataclasses import replace
from fractions import Fraction
from typing import List, Sequence

import game_actions
import gameplay_models
import rng
from gameplay_models import (
    ARRIVAL_THRESHOLD,
    BASE_HIT_SCORE,
    HIT_WINDOW_START,
    RADIUS,
    GameState,
    Lane,
    Note,
    NoteState,
    Tail,
)

FILLER_INSTRUMENT = "piano"


def _multiplier_bonus(multiplier: Fraction) -> int:
    return int(BASE_HIT_SCORE * multiplier - BASE_HIT_SCORE)


def _is_removable(note: Note) -> bool:
    return note.tail.has_tail and note.tail.tail_completed and note.tail.tail_length <= -RADIUS


def _advance_note(note_state: NoteState) -> NoteState:
    note = note_state.note
    tail = note.tail

    missed = note.missed or (
        note.user_played and note_state.position > ARRIVAL_THRESHOLD and not note.clicked
    )

    if tail.tail_start > ARRIVAL_THRESHOLD:
        tail_start = tail.tail_start
        tail_length = tail.tail_length - 1
    else:
        tail_start = tail.tail_start + 1
        tail_length = tail.tail_length
    tail_completed = tail.tail_completed or (tail.has_tail and tail.tail_length < -RADIUS)

    next_tail = Tail(
        has_tail=tail.has_tail,
        tail_start=tail_start,
        tail_length=tail_length,
        tail_completed=tail_completed,
    )
    next_note = replace(note, missed=missed, tail=next_tail)
    return NoteState(note=next_note, position=note_state.position + 1)


def tick(state: GameState) -> GameState:
    newly_missed = 0
    next_notes: List[NoteState] = []

    for note_state in state.curr_notes:
        advanced = _advance_note(note_state)
        if advanced.note.missed and not note_state.note.missed:
            newly_missed += 1
        if _is_removable(advanced.note):
            continue
        next_notes.append(advanced)

    if newly_missed:
        return replace(state, curr_notes=tuple(next_notes), combo=0, multiplier=Fraction(1))
    return replace(state, curr_notes=tuple(next_notes))


def emit_notes(state: GameState, notes: Sequence[Note]) -> GameState:
    spawned = tuple(NoteState(note=note, position=0) for note in notes)
    with_notes = replace(
        state,
        game_end=state.game_end or not spawned,
        curr_notes=state.curr_notes + spawned,
    )
    return tick(with_notes)


def _in_press_window(note_state: NoteState, lane: Lane) -> bool:
    note = note_state.note
    return note_state.position > HIT_WINDOW_START and note.user_played and note.lane is lane


def press_candidates(state: GameState, lane: Lane) -> List[NoteState]:
    return [
        note_state
        for note_state in state.curr_notes
        if _in_press_window(note_state, lane) and not note_state.note.clicked and not note_state.note.missed
    ]


def make_filler_note(seed: int, note_id: int) -> Note:
    value = rng.scale(seed)
    pitch = int(math.floor(value * 80 + 10))
    velocity_raw = int(math.floor(value * 30 + 10))
    return Note(
        id=int(note_id),
        user_played=False,
        instrument_name=FILLER_INSTRUMENT,
        velocity=velocity_raw / 127.0,
        pitch=pitch,
        start=0.0,
        end=value * 0.5,
        tail=Tail(has_tail=False),
    )


def button_down(state: GameState, lane: Lane) -> GameState:
    candidates = press_candidates(state, lane)
    tail_candidates = sum(1 for note_state in candidates if note_state.note.tail.has_tail)
    hit_tap_note = len(candidates) > tail_candidates

    if hit_tap_note:
        base_score = BASE_HIT_SCORE
        combo = state.combo + 1
    elif tail_candidates:
        base_score = 0
        combo = state.combo
    else:
        base_score = 0
        combo = 0

    multiplier = gameplay_models.multiplier_for_combo(combo)
    score = state.score + base_score + _multiplier_bonus(multiplier)

    next_notes = tuple(
        replace(note_state, note=replace(note_state.note, clicked=True))
        if _in_press_window(note_state, lane) and not note_state.note.clicked
        else note_state
        for note_state in state.curr_notes
    )

    next_filler_id = state.next_filler_id
    if not candidates:
        filler = make_filler_note(state.seed, next_filler_id)
        next_notes = next_notes + (NoteState(note=filler, position=ARRIVAL_THRESHOLD),)
        next_filler_id -= 1
    # Every press advances the seed, hit or not.
    seed = rng.hash_seed(state.seed)

    return replace(
        state,
        curr_notes=next_notes,
        score=score,
        combo=combo,
        multiplier=multiplier,
        seed=seed,
        next_filler_id=next_filler_id,
    )


def release_candidates(state: GameState, lane: Lane) -> List[NoteState]:
    return [
        note_state
        for note_state in state.curr_notes
        if note_state.note.tail.has_tail
        and note_state.note.lane is lane
        and note_state.note.user_played
        and note_state.note.clicked
        and not note_state.note.missed
        and not note_state.note.tail.tail_completed
    ]


def button_up(state: GameState, lane: Lane) -> GameState:
    candidates = release_candidates(state, lane)
    if not candidates:
        return state

    correct = [
        note_state for note_state in candidates if -RADIUS < note_state.note.tail.tail_length < RADIUS
    ]

    # Bonus uses the multiplier for the new combo so multiplier_for_combo(combo) holds after every release.
    if correct:
        combo = state.combo + 1
        multiplier = gameplay_models.multiplier_for_combo(combo)
        score = state.score + BASE_HIT_SCORE + _multiplier_bonus(multiplier)
    else:
        combo = 0
        multiplier = Fraction(1)
        score = state.score

    closing_ids = {note_state.note.id for note_state in candidates}
    next_notes = tuple(
        replace(
            note_state,
            note=replace(note_state.note, tail=replace(note_state.note.tail, tail_completed=True)),
        )
        if note_state.note.id in closing_ids
        else note_state
        for note_state in state.curr_notes
    )

    return replace(state, curr_notes=next_notes, score=score, combo=combo, multiplier=multiplier)


def reduce_state(state: GameState, action: game_actions.Action) -> GameState:
    if isinstance(action, game_actions.Tick):
        return tick(state)
    if isinstance(action, game_actions.EmitNotes):
        return emit_notes(state, action.notes)
    if isinstance(action, game_actions.ButtonDown):
        return button_down(state, action.lane)
    if isinstance(action, game_actions.ButtonUp):
        return button_up(state, action.lane)
    raise TypeError(f"Unknown action type: {type(action).__name__}")


def _run_unit_tests() -> None:
    tap = Note(
        id=1,
        user_played=True,
        instrument_name="piano",
        velocity=0.5,
        pitch=60,
        start=0.0,
        end=0.2,
        tail=Tail(has_tail=False, tail_length=20),
    )
    state = emit_notes(gameplay_models.initial_state(7), [tap])
    assert state.curr_notes[0].position == 1

    while state.curr_notes[0].position <= HIT_WINDOW_START:
        state = tick(state)

    hit = button_down(state, Lane.GREEN)
    assert hit.score == 100
    assert hit.combo == 1
    assert hit.curr_notes[0].note.clicked
    assert hit.seed == rng.hash_seed(state.seed)

    stray = button_down(hit, Lane.RED)
    assert stray.combo == 0
    assert stray.score == hit.score
    assert len(stray.curr_notes) == len(hit.curr_notes) + 1
    assert stray.curr_notes[-1].note.user_played is False
    assert stray.seed == rng.hash_seed(hit.seed)

    try:
        reduce_state(state, object())  # type: ignore[arg-type]
    except TypeError:
        pass
    else:
        raise AssertionError("Expected TypeError for unknown action")


if __name__ == "__main__":
    _run_unit_tests()
    print("judge.py: ok")

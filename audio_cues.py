# -*- coding: utf-8 -*-
########################
# audio_cues.py
########################
# Purpose:
# - Derive audio triggers from two consecutive GameState values.
# - The reducer never touches audio; subscribers diff states and forward cues to an AudioSink.
#
# Key Logic:
# - PLAY: attack then release after the note's duration.
#   - a background (not user played) note reaches the judgement line
#   - a user played tap note becomes clicked
# - ATTACK: a user played tail note becomes clicked (the sustain starts).
# - RELEASE: a clicked tail note becomes tail completed (the sustain stops).
#
# Design notes:
# - No Qt usage. Pure comparison keyed by note id.
# - A note absent from the previous state counts as unclicked and not yet at the line.
#
########################
# Interfaces:
# Public enums:
# - class CueKind(enum.Enum): PLAY | ATTACK | RELEASE
#
# Public dataclasses:
# - NoteCue(kind: CueKind, note: Note)
#   - duration_seconds -> float
#
# Public protocols:
# - AudioSink.on_cue(cue: NoteCue) -> None
#
# Public classes:
# - class LoggingAudioSink     # logs cues at debug level
# - class CueDispatcher        # GameState subscriber that feeds an AudioSink
#
# Public functions:
# - derive_cues(previous: Optional[GameState], current: GameState) -> list[NoteCue]
#
########################

from __future__ import annotations

from dataclasses import dataclass, replace
import enum
import logging
from typing import Dict, List, Optional, Protocol, runtime_checkable

import gameplay_models

logger = logging.getLogger(__name__)


class CueKind(enum.Enum):
    PLAY = "play"
    ATTACK = "attack"
    RELEASE = "release"


@dataclass(frozen=True)
class NoteCue:
    kind: CueKind
    note: gameplay_models.Note

    @property
    def duration_seconds(self) -> float:
        return self.note.duration_seconds


@runtime_checkable
class AudioSink(Protocol):
    def on_cue(self, cue: NoteCue) -> None:
        ...


def derive_cues(
    previous: Optional[gameplay_models.GameState],
    current: gameplay_models.GameState,
) -> List[NoteCue]:
    previous_by_id: Dict[int, gameplay_models.NoteState] = {}
    if previous is not None:
        previous_by_id = {note_state.note.id: note_state for note_state in previous.curr_notes}

    cues: List[NoteCue] = []
    for note_state in current.curr_notes:
        note = note_state.note
        before = previous_by_id.get(note.id)

        if not note.user_played:
            reached_line = note_state.position == gameplay_models.ARRIVAL_THRESHOLD
            was_at_line = before is not None and before.position == gameplay_models.ARRIVAL_THRESHOLD
            if reached_line and not was_at_line:
                cues.append(NoteCue(CueKind.PLAY, note))
            continue

        newly_clicked = note.clicked and (before is None or not before.note.clicked)
        if newly_clicked:
            cues.append(NoteCue(CueKind.ATTACK if note.tail.has_tail else CueKind.PLAY, note))
            continue

        newly_completed = (
            note.clicked
            and note.tail.has_tail
            and note.tail.tail_completed
            and before is not None
            and not before.note.tail.tail_completed
        )
        if newly_completed:
            cues.append(NoteCue(CueKind.RELEASE, note))

    return cues


class LoggingAudioSink:
    def __init__(self) -> None:
        self.cue_count = 0

    def on_cue(self, cue: NoteCue) -> None:
        self.cue_count += 1
        logger.debug(
            "audio cue %s: note=%d instrument=%s pitch=%d velocity=%.2f duration=%.3fs",
            cue.kind.value,
            cue.note.id,
            cue.note.instrument_name,
            cue.note.pitch,
            cue.note.velocity,
            cue.duration_seconds,
        )


class CueDispatcher:
    """GameState subscriber that remembers the previous state and forwards cues."""

    def __init__(self, sink: AudioSink) -> None:
        self._sink = sink
        self._previous: Optional[gameplay_models.GameState] = None

    def reset(self) -> None:
        self._previous = None

    def __call__(self, state: gameplay_models.GameState) -> None:
        for cue in derive_cues(self._previous, state):
            self._sink.on_cue(cue)
        self._previous = state


def _run_unit_tests() -> None:
    tail_note = gameplay_models.Note(
        id=3,
        user_played=True,
        instrument_name="violin",
        velocity=0.7,
        pitch=62,
        start=1.0,
        end=3.0,
        tail=gameplay_models.Tail(has_tail=True, tail_length=200),
    )
    before = gameplay_models.GameState(curr_notes=(gameplay_models.NoteState(tail_note, 330),))
    clicked = gameplay_models.GameState(
        curr_notes=(gameplay_models.NoteState(replace(tail_note, clicked=True), 330),)
    )
    cues = derive_cues(before, clicked)
    assert [cue.kind for cue in cues] == [CueKind.ATTACK]
    assert derive_cues(clicked, clicked) == []


if __name__ == "__main__":
    _run_unit_tests()
    print("audio_cues.py: ok")

# -*- coding: utf-8 -*-
########################
# game_actions.py
########################
# Purpose:
# - The closed set of actions folded into GameState by judge.reduce_state.
#
# Design notes:
# - No Qt usage. Plain frozen dataclasses.
# - Action is a Union. Adding a variant means adding a branch to judge.reduce_state.
#
########################
# Interfaces:
# Public dataclasses:
# - Tick(elapsed: int)
# - EmitNotes(notes: tuple[Note, ...])
# - ButtonDown(lane: Lane)
# - ButtonUp(lane: Lane)
#
# Public types:
# - Action = Union[Tick, EmitNotes, ButtonDown, ButtonUp]
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import gameplay_models


@dataclass(frozen=True)
class Tick:
    elapsed: int = 0


@dataclass(frozen=True)
class EmitNotes:
    notes: Tuple[gameplay_models.Note, ...] = ()

    @property
    def is_end_of_chart(self) -> bool:
        return not self.notes


@dataclass(frozen=True)
class ButtonDown:
    lane: gameplay_models.Lane


@dataclass(frozen=True)
class ButtonUp:
    lane: gameplay_models.Lane


Action = Union[Tick, EmitNotes, ButtonDown, ButtonUp]

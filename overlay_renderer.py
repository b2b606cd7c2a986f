# -*- coding: utf-8 -*-
########################
# overlay_renderer.py
########################
# Purpose:
# - Gameplay playfield Qt widget.
# - Paints the latest GameState: falling notes, sustain tails, judgement line, score text, game over banner.
#
########################
# Key Logic:
# - Four columns at 20/40/60/80 percent of the width, colored green, red, blue, yellow (pitch % 4).
# - A note's y coordinate is its position in ticks, scaled from the 400 unit logical playfield.
# - User played notes are drawn as circles while they are above the judgement line and not clicked.
# - Tails are bars of height tail_length ending at tail_start, drawn while tail_length > 0.
# - Background notes are never drawn; they only sound.
# - Strict boundaries:
#   - The widget only reads GameState values handed to set_state(). It never reduces or mutates them.
#
########################
# Interfaces:
# Public dataclasses:
# - OverlayConfig(logical_height: float, tail_width: float, judgement_line_color: str, ...)
#
# Public classes:
# - class GameplayOverlayWidget(PyQt6.QtWidgets.QWidget)
#   - set_state(state: GameState) -> None
#   - set_high_score(high_score: int) -> None
#   - flash_lane(lane: Lane) -> None
#   - clear_lane_flash(lane: Lane) -> None
#
# Inputs:
# - GameState snapshots published by GameSession.
# - Lane press/release signals from InputRouter (key highlight only).
#
# Outputs:
# - Painted playfield on the widget surface.
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Set

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget

import gameplay_models


@dataclass(frozen=True)
class OverlayConfig:
    logical_height: float = 400.0
    tail_width: float = 10.0
    background_color: str = "#101014"
    judgement_line_color: str = "#d0d0d0"
    text_color: str = "#f0f0f0"


_LANE_COLORS: Dict[gameplay_models.Lane, str] = {
    gameplay_models.Lane.GREEN: "green",
    gameplay_models.Lane.RED: "red",
    gameplay_models.Lane.BLUE: "blue",
    gameplay_models.Lane.YELLOW: "yellow",
}


class GameplayOverlayWidget(QWidget):
    def __init__(
        self,
        *,
        config: Optional[OverlayConfig] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or OverlayConfig()
        self._state: gameplay_models.GameState = gameplay_models.initial_state()
        self._high_score = 0
        self._held_lanes: Set[gameplay_models.Lane] = set()

    def set_state(self, state: gameplay_models.GameState) -> None:
        self._state = state
        self.update()

    def set_high_score(self, high_score: int) -> None:
        self._high_score = int(high_score)
        self.update()

    def flash_lane(self, lane: gameplay_models.Lane) -> None:
        self._held_lanes.add(lane)
        self.update()

    def clear_lane_flash(self, lane: gameplay_models.Lane) -> None:
        self._held_lanes.discard(lane)
        self.update()

    def _scale_y(self) -> float:
        return float(self.height()) / float(self._config.logical_height)

    def _lane_x(self, lane: gameplay_models.Lane) -> float:
        return float(self.width()) * gameplay_models.column_x_fraction(lane)

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), QBrush(QColor(self._config.background_color)))

        scale_y = self._scale_y()
        line_y = gameplay_models.ARRIVAL_THRESHOLD * scale_y
        radius = float(gameplay_models.RADIUS)

        # Judgement line and lane receptors.
        painter.setPen(QPen(QColor(self._config.judgement_line_color), 2.0))
        painter.drawLine(QPointF(0.0, line_y), QPointF(float(self.width()), line_y))
        for lane, color_name in _LANE_COLORS.items():
            receptor_color = QColor(color_name)
            if lane not in self._held_lanes:
                receptor_color.setAlpha(90)
            painter.setBrush(QBrush(receptor_color))
            painter.setPen(QPen(QColor(self._config.judgement_line_color), 1.0))
            painter.drawEllipse(QPointF(self._lane_x(lane), line_y), radius, radius)

        for note_state in self._state.curr_notes:
            note = note_state.note
            if not note.user_played:
                continue
            self._paint_tail(painter, note, scale_y)
            if not note.clicked and note_state.position < gameplay_models.ARRIVAL_THRESHOLD:
                painter.setBrush(QBrush(QColor(_LANE_COLORS[note.lane])))
                painter.setPen(Qt.PenStyle.NoPen)
                painter.drawEllipse(
                    QPointF(self._lane_x(note.lane), float(note_state.position) * scale_y),
                    radius,
                    radius,
                )

        self._paint_text(painter)
        painter.end()

    def _paint_tail(self, painter: QPainter, note: gameplay_models.Note, scale_y: float) -> None:
        tail = note.tail
        if not tail.has_tail or tail.tail_length <= 0 or tail.tail_completed:
            return
        tail_width = float(self._config.tail_width)
        top = float(tail.tail_start - tail.tail_length) * scale_y
        height = float(tail.tail_length) * scale_y
        color = QColor(_LANE_COLORS[note.lane])
        painter.setBrush(QBrush(color))
        painter.setPen(QPen(QColor("lightgrey"), 2.0))
        painter.drawRect(QRectF(self._lane_x(note.lane) - tail_width / 2.0, top, tail_width, height))

    def _paint_text(self, painter: QPainter) -> None:
        state = self._state
        painter.setPen(QPen(QColor(self._config.text_color)))
        painter.setFont(QFont("Sans", 9))
        multiplier_text = f"{float(state.multiplier):g}"
        painter.drawText(QPointF(6.0, 14.0), f"Score {state.score}")
        painter.drawText(QPointF(6.0, 28.0), f"Combo {state.combo}x")
        painter.drawText(QPointF(6.0, 42.0), f"Multiplier {multiplier_text}")
        painter.drawText(QPointF(6.0, 56.0), f"High {self._high_score}")

        if state.game_end:
            painter.setFont(QFont("Sans", 16, QFont.Weight.Bold))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Game Over")

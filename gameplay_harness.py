# -*- coding: utf-8 -*-
########################
# gameplay_harness.py
########################
# Purpose:
# - Playable Qt window for notefall.
# - Integrates InputRouter + GameSession + GameplayOverlayWidget + audio cue dispatch.
#
# Design notes:
# - GameSession is the single source of truth for game state. The window only drives time and forwards keys.
# - A QTimer pumps GameSession.advance_to() with the monotonic elapsed time of a QElapsedTimer.
#   All clock ticks and chart arrivals that became due since the last frame fire in order.
# - Restart stops the current session (cancelling its timers) and swaps in the fresh one it returns.
# - Focus loss releases held keys so tails are closed instead of staying pressed.
#
########################
# Interfaces:
# Public classes:
# - class GameplayHarnessWindow(PyQt6.QtWidgets.QMainWindow)
#   - __init__(rows: Sequence[ChartRow], *, app_config: AppConfig, audio_sink: Optional[AudioSink] = None)
#   - session -> Optional[GameSession]
#   - start_game() -> None
#   - restart_game() -> None
#
# Public functions:
# - run_gui(rows: Sequence[ChartRow], app_config: AppConfig) -> int
#
# Inputs:
# - Keyboard lane input (InputRouter handles QKeyEvent).
#
# Outputs:
# - Visible playfield, score labels and audio cues.
#
########################

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from PyQt6.QtCore import QElapsedTimer, QEvent, QObject, QTimer
from PyQt6.QtGui import QKeyEvent
from PyQt6.QtWidgets import QApplication, QHBoxLayout, QLabel, QMainWindow, QPushButton, QVBoxLayout, QWidget

import audio_cues
import config as config_module
import game_session
import gameplay_models
import input_router
import overlay_renderer

logger = logging.getLogger(__name__)


class GameplayHarnessWindow(QMainWindow):
    def __init__(
        self,
        rows: Sequence[gameplay_models.ChartRow],
        *,
        app_config: config_module.AppConfig,
        audio_sink: Optional[audio_cues.AudioSink] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("notefall")

        self._rows = tuple(rows)
        self._app_config = app_config
        self._high_scores = game_session.HighScoreBoard()
        self._session: Optional[game_session.GameSession] = None
        self._cue_dispatcher = audio_cues.CueDispatcher(audio_sink or audio_cues.LoggingAudioSink())

        self._router = input_router.InputRouter(
            parent=self,
            key_to_lane_map=input_router.build_key_to_lane_map(app_config.input.lane_keys),
        )
        self._router.lanePressed.connect(self._on_lane_pressed)
        self._router.laneReleased.connect(self._on_lane_released)

        root_widget = QWidget(self)
        root_layout = QVBoxLayout(root_widget)

        controls = QWidget(root_widget)
        controls_layout = QHBoxLayout(controls)
        self._start_button = QPushButton("Start", controls)
        self._restart_button = QPushButton("Restart", controls)
        self._restart_button.setEnabled(False)
        controls_layout.addWidget(self._start_button)
        controls_layout.addWidget(self._restart_button)

        self._overlay = overlay_renderer.GameplayOverlayWidget(parent=root_widget)
        self._overlay.setFixedSize(int(app_config.window.width), int(app_config.window.height))

        keys_text = "  ".join(
            f"{lane}: {key}" for lane, key in app_config.input.lane_keys.items()
        )
        self._status_label = QLabel("Press Start", root_widget)
        self._keys_label = QLabel(keys_text, root_widget)

        root_layout.addWidget(controls)
        root_layout.addWidget(self._overlay)
        root_layout.addWidget(self._status_label)
        root_layout.addWidget(self._keys_label)
        self.setCentralWidget(root_widget)

        self._start_button.clicked.connect(self.start_game)
        self._restart_button.clicked.connect(self.restart_game)

        self._elapsed = QElapsedTimer()
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(int(app_config.window.frame_interval_ms))
        self._frame_timer.timeout.connect(self._on_frame)

        self.installEventFilter(self)

    @property
    def session(self) -> Optional[game_session.GameSession]:
        return self._session

    # -----------------
    # Session lifecycle
    # -----------------

    def start_game(self) -> None:
        if self._session is not None:
            return
        session = game_session.GameSession(
            self._rows,
            seed=int(self._app_config.chart.seed),
            high_scores=self._high_scores,
        )
        session.subscribe(self._on_state)
        session.subscribe(self._cue_dispatcher)
        self._begin(session, already_started=False)
        self._start_button.setEnabled(False)

    def restart_game(self) -> None:
        if self._session is None:
            return
        self._router.clear_pressed_keys()
        self._cue_dispatcher.reset()
        self._begin(self._session.restart(), already_started=True)

    def _begin(self, session: game_session.GameSession, *, already_started: bool) -> None:
        self._session = session
        self._restart_button.setEnabled(False)
        self._overlay.set_state(session.state)
        self._overlay.set_high_score(self._high_scores.best_score)
        self._status_label.setText("Playing")
        if not already_started:
            session.start()
        self._elapsed.start()
        self._frame_timer.start()

    # -----------------
    # Frame pump and state sink
    # -----------------

    def _on_frame(self) -> None:
        if self._session is None:
            return
        self._session.advance_to(float(self._elapsed.elapsed()))

    def _on_state(self, state: gameplay_models.GameState) -> None:
        self._overlay.set_state(state)
        if not state.game_end:
            return
        self._overlay.set_high_score(self._high_scores.best_score)
        self._status_label.setText(f"Game over. Score {state.score}")
        self._restart_button.setEnabled(True)

    # -----------------
    # Input path
    # -----------------

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
        if event.type() == QEvent.Type.KeyPress and isinstance(event, QKeyEvent):
            if self._router.handle_key_press(event):
                return True
        if event.type() == QEvent.Type.KeyRelease and isinstance(event, QKeyEvent):
            if self._router.handle_key_release(event):
                return True
        if event.type() in (QEvent.Type.WindowDeactivate, QEvent.Type.FocusOut):
            self._router.clear_pressed_keys()
        return super().eventFilter(watched, event)

    def _on_lane_pressed(self, lane: gameplay_models.Lane) -> None:
        self._overlay.flash_lane(lane)
        if self._session is not None and self._session.is_running():
            self._session.press_lane(lane)

    def _on_lane_released(self, lane: gameplay_models.Lane) -> None:
        self._overlay.clear_lane_flash(lane)
        if self._session is not None and self._session.is_running():
            self._session.release_lane(lane)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._frame_timer.stop()
        if self._session is not None:
            self._session.stop()
        super().closeEvent(event)


def run_gui(rows: Sequence[gameplay_models.ChartRow], app_config: config_module.AppConfig) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    window = GameplayHarnessWindow(rows, app_config=app_config)
    window.show()
    logger.info("harness window shown (%d chart rows)", len(rows))
    return int(app.exec())

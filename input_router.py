# -*- coding: utf-8 -*-
########################
# input_router.py
########################
# Purpose:
# - Single keyboard listener for gameplay lane input.
# - Translates QKeyEvent presses and releases into lane signals.
#
# Design notes:
# - This must be the only lane input source. No duplicate key mapping elsewhere.
# - Debounce rules:
#   - Ignore auto repeat.
#   - Track pressed keys to avoid duplicate presses.
#   - A release is only reported for a key whose press was reported.
# - The key map comes from config (Qt key names such as "H"), resolved through Qt.Key.
#
########################
# Interfaces:
# Public functions:
# - build_key_to_lane_map(lane_keys: Mapping[str, str]) -> dict[int, Lane]
#
# Public classes:
# - class InputRouter(PyQt6.QtCore.QObject)
#   - Signals:
#     - lanePressed(gameplay_models.Lane)
#     - laneReleased(gameplay_models.Lane)
#   - Methods:
#     - handle_key_press(event: QKeyEvent) -> bool
#     - handle_key_release(event: QKeyEvent) -> bool
#     - press_key_code(key_code: int, is_auto_repeat: bool = False) -> Optional[Lane]
#     - release_key_code(key_code: int, is_auto_repeat: bool = False) -> Optional[Lane]
#     - clear_pressed_keys() -> list[Lane]
#     - reset_stats() -> None
#
# Inputs:
# - Raw QKeyEvent from the Qt event loop.
#
# Outputs:
# - Lane signals consumed by GameSession.press_lane / release_lane via the harness.
#
########################

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Set

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

import gameplay_models

DEFAULT_LANE_KEYS: Dict[str, str] = {
    gameplay_models.Lane.GREEN.value: "H",
    gameplay_models.Lane.RED.value: "J",
    gameplay_models.Lane.BLUE.value: "K",
    gameplay_models.Lane.YELLOW.value: "L",
}


def _qt_key_code(key_name: str) -> int:
    attribute_name = "Key_" + str(key_name).strip()
    key_constant = getattr(Qt.Key, attribute_name, None)
    if key_constant is None:
        raise ValueError(f"Unknown Qt key name: {key_name!r}")
    return int(key_constant.value)


def build_key_to_lane_map(lane_keys: Mapping[str, str]) -> Dict[int, gameplay_models.Lane]:
    """
    Resolve a lane name -> Qt key name mapping into key code -> Lane.

    Lane names are the Lane values: green, red, blue, yellow.
    Key names are Qt.Key suffixes: "H" for Qt.Key.Key_H, "Left" for Qt.Key.Key_Left.
    """
    key_to_lane: Dict[int, gameplay_models.Lane] = {}
    for lane_name, key_name in lane_keys.items():
        lane = gameplay_models.Lane(str(lane_name).strip().lower())
        key_to_lane[_qt_key_code(key_name)] = lane
    return key_to_lane


class InputRouter(QObject):
    """
    Central keyboard router for gameplay lane input.

    This object never judges timing. Its only job is to:
      - map keys to lanes
      - drop auto repeat and duplicate presses
      - emit one lanePressed per physical press and one laneReleased per matching release
    """

    lanePressed = pyqtSignal(object)
    laneReleased = pyqtSignal(object)

    def __init__(
        self,
        parent: Optional[QObject] = None,
        key_to_lane_map: Optional[Mapping[int, gameplay_models.Lane]] = None,
    ) -> None:
        super().__init__(parent)

        self._key_to_lane: Dict[int, gameplay_models.Lane] = (
            dict(key_to_lane_map) if key_to_lane_map is not None else build_key_to_lane_map(DEFAULT_LANE_KEYS)
        )

        # Press tracking for debounce and focus loss handling.
        self._pressed_keys: Set[int] = set()

        self._total_presses: int = 0
        self._ignored_presses: int = 0

    # ------------------------------------------------------------------
    # Public API used by gameplay_harness
    # ------------------------------------------------------------------

    def handle_key_press(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key press.

        Returns True if this router consumed the event, False otherwise.
        """
        key_code = int(event.key())
        self.press_key_code(key_code, is_auto_repeat=event.isAutoRepeat())
        return key_code in self._key_to_lane

    def handle_key_release(self, event: QKeyEvent) -> bool:
        """
        Handle a Qt key release.

        Returns True if this router consumed the event, False otherwise.
        """
        key_code = int(event.key())
        self.release_key_code(key_code, is_auto_repeat=event.isAutoRepeat())
        return key_code in self._key_to_lane

    def press_key_code(self, key_code: int, is_auto_repeat: bool = False) -> Optional[gameplay_models.Lane]:
        lane = self._key_to_lane.get(int(key_code))
        if lane is None:
            return None

        # Ignore auto repeat and a second press while still held.
        if is_auto_repeat or int(key_code) in self._pressed_keys:
            self._ignored_presses += 1
            return None

        self._pressed_keys.add(int(key_code))
        self._total_presses += 1
        self.lanePressed.emit(lane)
        return lane

    def release_key_code(self, key_code: int, is_auto_repeat: bool = False) -> Optional[gameplay_models.Lane]:
        lane = self._key_to_lane.get(int(key_code))
        if lane is None or is_auto_repeat:
            return None
        if int(key_code) not in self._pressed_keys:
            return None

        self._pressed_keys.discard(int(key_code))
        self.laneReleased.emit(lane)
        return lane

    def clear_pressed_keys(self) -> List[gameplay_models.Lane]:
        """
        Release every held key.

        Called by the harness on focus loss, so a held tail is closed instead of staying pressed forever.
        """
        released: List[gameplay_models.Lane] = []
        for key_code in sorted(self._pressed_keys):
            lane = self.release_key_code(key_code)
            if lane is not None:
                released.append(lane)
        return released

    def reset_stats(self) -> None:
        """
        Reset debugging counters. Does not change pressed key state.
        """
        self._total_presses = 0
        self._ignored_presses = 0

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------

    @property
    def key_to_lane_map(self) -> Dict[int, gameplay_models.Lane]:
        return dict(self._key_to_lane)

    @property
    def total_presses(self) -> int:
        return self._total_presses

    @property
    def ignored_presses(self) -> int:
        return self._ignored_presses


def _run_unit_tests() -> None:
    router = InputRouter()
    pressed: List[gameplay_models.Lane] = []
    released: List[gameplay_models.Lane] = []
    router.lanePressed.connect(pressed.append)
    router.laneReleased.connect(released.append)

    key_h = _qt_key_code("H")
    assert router.key_to_lane_map[key_h] is gameplay_models.Lane.GREEN

    assert router.press_key_code(key_h) is gameplay_models.Lane.GREEN
    assert router.press_key_code(key_h, is_auto_repeat=True) is None
    assert router.press_key_code(key_h) is None
    assert router.release_key_code(key_h) is gameplay_models.Lane.GREEN
    assert router.release_key_code(key_h) is None

    assert pressed == [gameplay_models.Lane.GREEN]
    assert released == [gameplay_models.Lane.GREEN]
    assert router.ignored_presses == 2


if __name__ == "__main__":
    _run_unit_tests()
    print("input_router.py: ok")

# -*- coding: utf-8 -*-
########################
# chart_parser.py
########################
# Purpose:
# - Parse comma separated chart files into gameplay_models.ChartRow values.
#
# Design notes:
# - No Qt usage. Pure parsing.
# - All-or-nothing: a single malformed row fails the whole chart. Nothing is returned partially.
# - The first non-empty line is a header and is skipped.
#
########################
# Interfaces:
# Public exceptions:
# - class ChartParseError(ValueError)
#   - line_number: Optional[int]
#   - line_text: str
#
# Public functions:
# - parse_chart_text(text: str) -> list[ChartRow]
# - load_chart_file(chart_path: pathlib.Path) -> list[ChartRow]
#
# Row layout:
# - user_played, instrument_name, velocity (0-127), pitch, start seconds, end seconds
# - user_played is true only for the literal text "True".
#
########################

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence

import gameplay_models

logger = logging.getLogger(__name__)

_FIELD_COUNT = 6
_VELOCITY_MAX = 127


class ChartParseError(ValueError):
    """Raised when a chart row is missing fields or holds a malformed value."""

    def __init__(self, message: str, *, line_number: Optional[int] = None, line_text: str = "") -> None:
        location = f"line {line_number}: " if line_number is not None else ""
        super().__init__(location + message)
        self.line_number = line_number
        self.line_text = line_text


def _parse_int(value_text: str, *, field_name: str, line_number: int, line_text: str) -> int:
    text = value_text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        raise ChartParseError(
            f"{field_name} must be an integer, got {value_text!r}",
            line_number=line_number,
            line_text=line_text,
        ) from None
    if not math.isfinite(value) or not value.is_integer():
        raise ChartParseError(
            f"{field_name} must be an integer, got {value_text!r}",
            line_number=line_number,
            line_text=line_text,
        )
    return int(value)


def _parse_seconds(value_text: str, *, field_name: str, line_number: int, line_text: str) -> float:
    try:
        value = float(value_text.strip())
    except ValueError:
        raise ChartParseError(
            f"{field_name} must be a number of seconds, got {value_text!r}",
            line_number=line_number,
            line_text=line_text,
        ) from None
    if not math.isfinite(value):
        raise ChartParseError(f"{field_name} must be finite", line_number=line_number, line_text=line_text)
    return value


def _parse_row(fields: Sequence[str], *, line_number: int, line_text: str) -> gameplay_models.ChartRow:
    if len(fields) != _FIELD_COUNT:
        raise ChartParseError(
            f"expected {_FIELD_COUNT} fields, got {len(fields)}",
            line_number=line_number,
            line_text=line_text,
        )

    user_played_text, instrument_text, velocity_text, pitch_text, start_text, end_text = fields

    velocity_raw = _parse_int(velocity_text, field_name="velocity", line_number=line_number, line_text=line_text)
    if not 0 <= velocity_raw <= _VELOCITY_MAX:
        raise ChartParseError(
            f"velocity must be within 0..{_VELOCITY_MAX}, got {velocity_raw}",
            line_number=line_number,
            line_text=line_text,
        )

    pitch = _parse_int(pitch_text, field_name="pitch", line_number=line_number, line_text=line_text)
    start = _parse_seconds(start_text, field_name="start", line_number=line_number, line_text=line_text)
    end = _parse_seconds(end_text, field_name="end", line_number=line_number, line_text=line_text)
    if end < start:
        raise ChartParseError(
            f"end ({end}) is before start ({start})",
            line_number=line_number,
            line_text=line_text,
        )

    return gameplay_models.ChartRow(
        user_played=user_played_text.strip() == "True",
        instrument_name=instrument_text.strip(),
        velocity_raw=velocity_raw,
        pitch=pitch,
        start=start,
        end=end,
    )


def parse_chart_text(text: str) -> List[gameplay_models.ChartRow]:
    rows: List[gameplay_models.ChartRow] = []
    header_seen = False

    for line_index, raw_line in enumerate(text.splitlines()):
        line_number = line_index + 1
        if not raw_line.strip():
            continue
        if not header_seen:
            header_seen = True
            continue
        fields = next(csv.reader([raw_line]))
        rows.append(_parse_row(fields, line_number=line_number, line_text=raw_line))

    return rows


def load_chart_file(chart_path: Path) -> List[gameplay_models.ChartRow]:
    resolved_path = Path(chart_path)
    try:
        raw_text = resolved_path.read_text(encoding="utf-8")
    except OSError as exception:
        raise ChartParseError(f"failed to read chart file {resolved_path}: {exception}") from exception

    rows = parse_chart_text(raw_text)
    logger.info("loaded chart %s (%d rows)", resolved_path, len(rows))
    return rows


def _run_unit_tests() -> None:
    text = (
        "user_played,instrument_name,velocity,pitch,start,end\n"
        "True,piano,100,60,0.0,0.2\n"
        "False,violin,90,64,0.5,2.0\n"
    )
    rows = parse_chart_text(text)
    assert len(rows) == 2
    assert rows[0].user_played is True
    assert rows[1].user_played is False
    assert rows[1].instrument_name == "violin"
    assert rows[1].end == 2.0

    try:
        parse_chart_text("header\nTrue,piano,loud,60,0.0,0.2\n")
    except ChartParseError as exception:
        assert exception.line_number == 2
    else:
        raise AssertionError("Expected ChartParseError for non-numeric velocity")

    assert parse_chart_text("header only\n") == []


if __name__ == "__main__":
    _run_unit_tests()
    print("chart_parser.py: ok")

# -*- coding: utf-8 -*-
########################
# paths.py
########################
# Purpose:
# - Where chart CSV files are looked up when a chart is given by relative name.
#
# Design notes:
# - Search order: as given (absolute or relative to the working directory),
#   then <project root>/Charts, then <user data dir>/Charts.
# - Directories are never created here. A name that resolves nowhere is returned
#   under the project Charts directory so the loader reports a readable path.
#
########################
# Interfaces:
# Public functions:
# - app_root_dir() -> pathlib.Path
# - charts_dir() -> pathlib.Path
# - user_charts_dir() -> pathlib.Path
# - chart_search_dirs() -> list[pathlib.Path]
# - resolve_chart_path(path_text: str) -> pathlib.Path
#
########################

from __future__ import annotations

from pathlib import Path
from typing import List

from platformdirs import user_data_dir

_CHARTS_FOLDER = "Charts"


def app_root_dir() -> Path:
    """Directory holding the notefall modules."""
    return Path(__file__).resolve().parent


def charts_dir() -> Path:
    return app_root_dir() / _CHARTS_FOLDER


def user_charts_dir() -> Path:
    return Path(user_data_dir("notefall", appauthor=False)) / _CHARTS_FOLDER


def chart_search_dirs() -> List[Path]:
    return [charts_dir(), user_charts_dir()]


def resolve_chart_path(path_text: str) -> Path:
    candidate = Path(str(path_text).strip()).expanduser()
    if candidate.is_absolute() or candidate.exists():
        return candidate

    for directory in chart_search_dirs():
        located = directory / candidate
        if located.exists():
            return located

    return charts_dir() / candidate

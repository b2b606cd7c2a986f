# -*- coding: utf-8 -*-
########################
# logging_setup.py
########################
# Purpose:
# - Configure python logging once for the whole app.
#
# Design notes:
# - Modules only call logging.getLogger(__name__); nothing else touches handlers.
# - Priority (highest first):
#   - env NOTEFALL_LOG_LEVEL
#   - CLI flags --quiet / --debug
#   - configured level (config.LoggingConfig.level)
#   - default: INFO
#
########################
# Interfaces:
# Public functions:
# - setup_logging(*, configured_level: Optional[str] = None, quiet: bool = False, debug: bool = False) -> int
#
########################

from __future__ import annotations

import logging
import os
from typing import Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%H:%M:%S"


def _parse_level(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    value = str(text).strip().upper()
    mapping = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
    }
    return mapping.get(value)


def setup_logging(*, configured_level: Optional[str] = None, quiet: bool = False, debug: bool = False) -> int:
    """Configure the root logger once and return the effective level."""
    level = _parse_level(configured_level) or logging.INFO
    if quiet:
        level = logging.WARNING
    if debug:
        level = logging.DEBUG
    env_level = _parse_level(os.environ.get("NOTEFALL_LOG_LEVEL"))
    if env_level is not None:
        level = env_level

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return level

    logging.basicConfig(level=level, format=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    logging.getLogger("notefall").debug(
        "logging initialized (level=%s, quiet=%s, debug=%s)",
        logging.getLevelName(level),
        quiet,
        debug,
    )
    return level

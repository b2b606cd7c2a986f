# -*- coding: utf-8 -*-
########################
# rng.py
########################
# Purpose:
# - Deterministic pseudo-random numbers for filler note generation.
#
# Design notes:
# - Linear congruential generator with the GCC constants.
# - Pure functions only. The seed lives in GameState, never in this module.
#
########################
# Interfaces:
# Public functions:
# - hash_seed(seed: int) -> int
# - scale(value: int) -> float   # [0, 1)
#
########################

from __future__ import annotations

MODULUS = 0x80000000
MULTIPLIER = 1103515245
INCREMENT = 12345


def hash_seed(seed: int) -> int:
    return (MULTIPLIER * int(seed) + INCREMENT) % MODULUS


def scale(value: int) -> float:
    return float(int(value) % MODULUS) / float(MODULUS)


def _run_unit_tests() -> None:
    assert hash_seed(1) == 1103527590
    assert hash_seed(1) == hash_seed(1)
    assert hash_seed(0) == INCREMENT
    assert 0.0 <= scale(hash_seed(1)) < 1.0
    assert scale(MODULUS - 1) < 1.0
    assert scale(0) == 0.0


if __name__ == "__main__":
    _run_unit_tests()
    print("rng.py: ok")

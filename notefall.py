"""
notefall.py

Entrypoint for the notefall rhythm game.

Integration
- Loads config and sets up logging
- Loads the chart (configured CSV file or the built-in demo chart)
- Either opens the Qt harness window, runs a headless simulation, or runs module self tests

Usage
- python notefall.py                      # play the configured chart
- python notefall.py --chart song.csv     # play a specific chart
- python notefall.py --simulate 30        # run 30 seconds without input, print a JSON summary
- python notefall.py --run-tests          # pure logic self tests (no Qt window)
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import chart_parser
import config as config_module
import game_session
import gameplay_models
import logging_setup
import paths
import test_chart

logger = logging.getLogger("notefall")


def _load_rows(chart_path_text: Optional[str]) -> List[gameplay_models.ChartRow]:
    if not chart_path_text:
        rows = test_chart.build_test_chart_rows()
        logger.info("using built-in demo chart (%d rows)", len(rows))
        return rows
    return chart_parser.load_chart_file(paths.resolve_chart_path(chart_path_text))


def simulate(rows: Sequence[gameplay_models.ChartRow], *, seed: int, seconds: float) -> dict:
    """Run a session without input for the given virtual time and summarize the final state."""
    session = game_session.GameSession(rows, seed=seed)
    session.start()
    step_ms = 100.0
    elapsed_ms = 0.0
    limit_ms = max(0.0, float(seconds)) * 1000.0
    while elapsed_ms < limit_ms and not session.state.game_end:
        elapsed_ms = min(limit_ms, elapsed_ms + step_ms)
        session.advance_to(elapsed_ms)
    final_state = session.state
    session.stop()

    missed = sum(1 for note_state in final_state.curr_notes if note_state.note.missed)
    return {
        "elapsed_seconds": elapsed_ms / 1000.0,
        "game_end": final_state.game_end,
        "score": final_state.score,
        "combo": final_state.combo,
        "multiplier": str(final_state.multiplier),
        "notes_on_field": len(final_state.curr_notes),
        "missed_notes": missed,
        "reduced_actions": session.stats.reduced_actions,
    }


def run_self_tests() -> None:
    import audio_cues
    import event_loop
    import game_clock
    import judge
    import note_scheduler
    import rng

    for module in (
        rng,
        gameplay_models,
        chart_parser,
        event_loop,
        game_clock,
        note_scheduler,
        judge,
        audio_cues,
        game_session,
    ):
        module._run_unit_tests()
        print(f"{module.__name__}.py: ok")


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notefall")
    parser.add_argument("--chart", type=str, default=None, help="CSV chart file (overrides config).")
    parser.add_argument("--seed", type=int, default=None, help="Filler note seed (overrides config).")
    parser.add_argument("--config", type=Path, default=None, help="Config JSON file.")
    parser.add_argument(
        "--simulate",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Run headless for SECONDS of game time with no input and print a JSON summary.",
    )
    parser.add_argument("--run-tests", action="store_true", help="Run pure logic tests (no Qt).")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    parser.add_argument("--debug", action="store_true", help="Log debug output, including audio cues.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)

    if args.run_tests:
        run_self_tests()
        print("Self tests passed.")
        return 0

    try:
        app_config, config_path = config_module.load_config(args.config)
    except (OSError, ValueError) as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, ensure_ascii=False, indent=2))
        return 2

    logging_setup.setup_logging(configured_level=app_config.logging.level, quiet=args.quiet, debug=args.debug)
    if config_path is not None:
        logger.info("config loaded from %s", config_path)

    chart_path_text = args.chart if args.chart is not None else app_config.chart.path
    seed = args.seed if args.seed is not None else app_config.chart.seed

    try:
        rows = _load_rows(chart_path_text)
    except chart_parser.ChartParseError as exception:
        print(json.dumps({"ok": False, "error": str(exception)}, ensure_ascii=False, indent=2))
        return 2

    if args.simulate is not None:
        summary = simulate(rows, seed=int(seed), seconds=float(args.simulate))
        print(json.dumps({"ok": True, "summary": summary}, ensure_ascii=False, indent=2))
        return 0

    import gameplay_harness

    if args.seed is not None:
        app_config = app_config.model_copy(update={"chart": app_config.chart.model_copy(update={"seed": int(seed)})})
    return gameplay_harness.run_gui(rows, app_config)


if __name__ == "__main__":
    raise SystemExit(main())

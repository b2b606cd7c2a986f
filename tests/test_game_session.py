import pytest

import game_actions
import game_session
import rng
from gameplay_models import ChartRow, Lane


def test_dispatch_before_start_raises(chart_rows):
    session = game_session.GameSession(chart_rows)
    with pytest.raises(game_session.SessionStateError):
        session.dispatch(game_actions.Tick())


def test_start_twice_raises(chart_rows):
    session = game_session.GameSession(chart_rows)
    session.start()
    with pytest.raises(game_session.SessionStateError):
        session.start()
    session.stop()


def test_notes_arrive_and_fall_one_unit_per_tick(chart_rows):
    session = game_session.GameSession(chart_rows)
    session.start()
    session.advance_to(0)
    assert [note_state.position for note_state in session.state.curr_notes] == [1, 1]
    session.advance_to(100)
    assert [note_state.position for note_state in session.state.curr_notes] == [11, 11]
    session.stop()


def test_hit_in_window_scores_once_for_chord(chart_rows):
    session = game_session.GameSession(chart_rows)
    session.start()
    session.advance_to(3300)
    assert session.state.curr_notes[0].position == 331

    session.press_lane(Lane.GREEN)
    assert session.state.score == 100
    assert session.state.combo == 1
    assert all(note_state.note.clicked for note_state in session.state.curr_notes)
    assert session.stats.stray_presses == 0
    session.stop()


def test_game_ends_after_chart_and_records_high_score(chart_rows):
    board = game_session.HighScoreBoard()
    session = game_session.GameSession(chart_rows, high_scores=board)
    session.start()
    session.advance_to(3300)
    session.press_lane(Lane.GREEN)

    session.advance_to(4990)
    assert not session.state.game_end
    session.advance_to(5000)
    assert session.state.game_end
    assert board.best_score == 100
    session.stop()


def test_unpressed_chart_notes_are_missed(chart_rows):
    session = game_session.GameSession(chart_rows)
    session.start()
    session.advance_to(3600)
    assert all(note_state.note.missed for note_state in session.state.curr_notes)
    assert session.state.combo == 0
    session.stop()


def test_held_tail_released_at_end_scores():
    session = game_session.GameSession([ChartRow(True, "piano", 100, 60, 0.0, 1.5)])
    session.start()
    session.advance_to(3390)
    session.press_lane(Lane.GREEN)
    assert session.state.score == 0
    assert session.state.combo == 0
    assert len(session.state.curr_notes) == 1

    session.advance_to(4990)
    assert session.state.curr_notes[0].note.tail.tail_length == 1
    session.release_lane(Lane.GREEN)
    assert session.state.score == 100
    assert session.state.combo == 1
    assert session.state.curr_notes[0].note.tail.tail_completed
    session.stop()


def test_stray_press_spawns_filler_and_counts_desync(chart_rows):
    session = game_session.GameSession(chart_rows, seed=5)
    session.start()
    session.advance_to(0)
    session.press_lane(Lane.BLUE)
    fillers = [note_state for note_state in session.state.curr_notes if note_state.note.id < 0]
    assert len(fillers) == 1
    assert session.state.seed == rng.hash_seed(5)
    assert session.stats.stray_presses == 1

    session.release_lane(Lane.BLUE)
    assert session.stats.stray_releases == 1
    session.stop()


def test_tail_released_after_game_end_updates_high_score():
    board = game_session.HighScoreBoard()
    session = game_session.GameSession([ChartRow(True, "piano", 100, 60, 0.0, 5.0)], high_scores=board)
    session.start()
    session.advance_to(3400)
    session.press_lane(Lane.GREEN)

    session.advance_to(8500)
    assert session.state.game_end
    assert board.best_score == 0

    session.release_lane(Lane.GREEN)
    assert session.state.score == 100
    assert board.best_score == 100
    session.stop()


def test_subscribers_see_every_state_until_unsubscribed(chart_rows):
    session = game_session.GameSession(chart_rows)
    seen = []
    unsubscribe = session.subscribe(seen.append)
    session.start()
    session.advance_to(50)
    # One EmitNotes plus five ticks.
    assert len(seen) == 6
    assert seen[-1] is session.state
    unsubscribe()
    session.advance_to(100)
    assert len(seen) == 6
    session.stop()


def test_stop_is_idempotent_and_freezes_state(chart_rows):
    session = game_session.GameSession(chart_rows)
    session.start()
    session.advance_to(100)
    frozen = session.state
    session.stop()
    session.stop()
    session.advance_to(5000)
    assert session.state is frozen
    assert not session.is_running()
    with pytest.raises(game_session.SessionStateError):
        session.press_lane(Lane.GREEN)


def test_restart_starts_fresh_and_keeps_subscribers_and_high_scores(chart_rows):
    session = game_session.GameSession(chart_rows)
    seen = []
    session.subscribe(seen.append)
    session.start()
    session.advance_to(3300)
    session.press_lane(Lane.GREEN)
    session.advance_to(6000)

    fresh = session.restart()
    assert fresh is not session
    assert not session.is_running()
    assert fresh.is_running()
    assert fresh.high_scores is session.high_scores
    assert fresh.high_scores.best_score == 100

    count = len(seen)
    fresh.advance_to(0)
    assert len(seen) == count + 1
    assert fresh.state.score == 0
    fresh.stop()


def test_same_seed_and_input_script_give_same_final_state(chart_rows):
    def play():
        session = game_session.GameSession(chart_rows, seed=9)
        session.start()
        for time_ms, lane in ((200, Lane.RED), (3300, Lane.GREEN), (3400, Lane.YELLOW)):
            session.advance_to(time_ms)
            session.press_lane(lane)
            session.release_lane(lane)
        session.advance_to(6000)
        final = session.state
        session.stop()
        return final

    assert play() == play()


def test_high_score_board_only_keeps_best():
    board = game_session.HighScoreBoard()
    assert board.submit(100)
    assert not board.submit(50)
    assert board.best_score == 100

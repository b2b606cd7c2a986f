import pytest

import event_loop
import gameplay_models
import note_scheduler
from gameplay_models import ChartRow


def _rows():
    return [
        ChartRow(True, "piano", 100, 60, 0.0, 0.2),
        ChartRow(True, "piano", 90, 64, 0.0, 0.6),
        ChartRow(False, "violin", 127, 67, 0.5, 2.0),
        ChartRow(True, "piano", 80, 62, 1.25, 1.5),
    ]


def test_build_notes_assigns_ids_velocity_and_tails():
    notes = note_scheduler.build_notes(_rows())
    assert [note.id for note in notes] == [1, 2, 3, 4]
    assert notes[2].velocity == 1.0
    assert notes[0].tail.has_tail is False
    assert notes[0].tail.tail_length == 20
    assert notes[2].tail.has_tail is True
    assert notes[2].tail.tail_length == 150
    assert all(note.tail.tail_start == 0 for note in notes)
    assert not any(note.clicked or note.missed for note in notes)


def test_exactly_one_second_is_not_a_tail():
    notes = note_scheduler.build_notes([ChartRow(True, "piano", 100, 60, 0.0, 1.0)])
    assert notes[0].tail.has_tail is False


def test_groups_are_delayed_by_start_difference_and_end_with_terminal():
    scheduler = note_scheduler.ChartScheduler(_rows())
    groups = list(scheduler.groups())
    assert [group.delay_ms for group in groups] == [0.0, 500.0, 750.0, 5000.0]
    assert [note.id for note in groups[0].notes] == [1, 2]
    assert groups[-1].is_terminal
    assert not any(group.is_terminal for group in groups[:-1])


def test_empty_chart_has_only_terminal_group():
    groups = list(note_scheduler.ChartScheduler([]).groups())
    assert len(groups) == 1
    assert groups[0].is_terminal
    assert groups[0].delay_ms == gameplay_models.END_OF_CHART_DELAY_MS


def test_groups_can_only_be_consumed_once():
    scheduler = note_scheduler.ChartScheduler(_rows())
    scheduler.groups()
    with pytest.raises(RuntimeError):
        scheduler.groups()


def test_out_of_order_start_clamps_delay_to_zero():
    rows = [ChartRow(True, "piano", 100, 60, 1.0, 1.2), ChartRow(True, "piano", 100, 61, 0.5, 0.7)]
    groups = list(note_scheduler.ChartScheduler(rows).groups())
    assert groups[1].delay_ms == 0.0


def test_start_emits_groups_at_cumulative_times():
    loop = event_loop.EventLoop()
    emitted = []
    scheduler = note_scheduler.ChartScheduler(_rows())
    scheduler.start(loop, lambda notes: emitted.append((loop.now_ms(), [note.id for note in notes])))
    loop.advance_to(10000)
    assert emitted == [(0.0, [1, 2]), (500.0, [3]), (1250.0, [4]), (6250.0, [])]
    assert scheduler.is_finished()


def test_cancel_stops_further_groups():
    loop = event_loop.EventLoop()
    emitted = []
    scheduler = note_scheduler.ChartScheduler(_rows())
    scheduler.start(loop, emitted.append)
    loop.advance_to(600)
    scheduler.cancel()
    loop.advance_to(10000)
    assert len(emitted) == 2
    assert not scheduler.is_finished()

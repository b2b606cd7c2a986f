import pytest

import event_loop


def test_timers_fire_in_due_order_then_insertion_order():
    loop = event_loop.EventLoop()
    fired = []
    loop.call_later(20, lambda: fired.append("late"))
    loop.call_later(10, lambda: fired.append("first"))
    loop.call_later(10, lambda: fired.append("second"))
    assert loop.advance_to(25) == 3
    assert fired == ["first", "second", "late"]
    assert loop.now_ms() == 25


def test_now_is_due_time_inside_callback():
    loop = event_loop.EventLoop()
    seen = []
    loop.call_later(40, lambda: seen.append(loop.now_ms()))
    loop.advance_to(100)
    assert seen == [40.0]


def test_timers_scheduled_from_callbacks_fire_within_same_advance():
    loop = event_loop.EventLoop()
    fired = []

    def first():
        fired.append(loop.now_ms())
        loop.call_later(10, lambda: fired.append(loop.now_ms()))

    loop.call_later(10, first)
    loop.advance_to(30)
    assert fired == [10.0, 20.0]


def test_future_timers_stay_pending():
    loop = event_loop.EventLoop()
    loop.call_later(50, lambda: None)
    assert loop.advance_by(20) == 0
    assert loop.pending_count() == 1
    assert loop.next_due_ms() == 50.0


def test_cancelled_timer_never_fires():
    loop = event_loop.EventLoop()
    fired = []
    handle = loop.call_later(5, lambda: fired.append(1))
    handle.cancel()
    loop.advance_to(10)
    assert fired == []
    assert loop.next_due_ms() is None


def test_negative_delay_fires_on_next_advance():
    loop = event_loop.EventLoop(start_ms=100)
    fired = []
    loop.call_later(-30, lambda: fired.append(loop.now_ms()))
    loop.advance_to(100)
    assert fired == [100.0]


def test_close_cancels_everything_and_rejects_new_timers():
    loop = event_loop.EventLoop()
    fired = []
    loop.call_later(5, lambda: fired.append(1))
    loop.close()
    assert loop.is_closed()
    loop.advance_to(10)
    assert fired == []
    with pytest.raises(RuntimeError):
        loop.call_later(1, lambda: None)


def test_reentrant_advance_raises():
    loop = event_loop.EventLoop()
    errors = []

    def nested():
        try:
            loop.advance_to(50)
        except RuntimeError as exception:
            errors.append(exception)

    loop.call_later(1, nested)
    loop.advance_to(5)
    assert len(errors) == 1

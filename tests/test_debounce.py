from unittest.mock import MagicMock

import pytest

from flipdeck.debounce import Debouncer


@pytest.fixture
def callback() -> MagicMock:
    return MagicMock()


@pytest.fixture
def debouncer(callback, fake_clock) -> Debouncer:
    return Debouncer(callback, 0.3, clock=fake_clock)


def test_fires_once_after_quiet_period(debouncer, callback, fake_clock):
    debouncer.submit("c")

    fake_clock.advance(0.299)
    assert debouncer.poll() is False
    callback.assert_not_called()

    fake_clock.advance(0.001)
    assert debouncer.poll() is True
    callback.assert_called_once_with("c")
    assert debouncer.pending is False


def test_burst_collapses_to_last_value(debouncer, callback, fake_clock):
    for text in ["c", "ca", "cat"]:
        debouncer.submit(text)
        fake_clock.advance(0.1)
        debouncer.poll()

    callback.assert_not_called()
    fake_clock.advance(0.3)
    debouncer.poll()

    callback.assert_called_once_with("cat")


def test_poll_without_pending_call(debouncer, callback):
    assert debouncer.poll() is False
    callback.assert_not_called()


def test_cancel_drops_pending_call(debouncer, callback, fake_clock):
    debouncer.submit("x")
    debouncer.cancel()
    fake_clock.advance(1)

    assert debouncer.poll() is False
    callback.assert_not_called()


def test_flush_fires_immediately(debouncer, callback):
    debouncer.submit("now")

    assert debouncer.flush() is True
    assert debouncer.flush() is False
    callback.assert_called_once_with("now")


def test_zero_delay_fires_on_next_poll(callback, fake_clock):
    debouncer = Debouncer(callback, 0, clock=fake_clock)
    debouncer.submit("x")
    assert debouncer.poll() is True


def test_negative_delay_rejected(callback):
    with pytest.raises(ValueError):
        Debouncer(callback, -0.1)

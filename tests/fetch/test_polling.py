import threading

import pytest

from drillscope.fetch import PollingScheduler

pytestmark = [pytest.mark.unit, pytest.mark.fetch]


class CountingTrigger:
    def __init__(self, target=3, fail_first=False):
        self.calls = 0
        self.target = target
        self.fail_first = fail_first
        self.reached = threading.Event()

    def __call__(self):
        self.calls += 1
        if self.calls >= self.target:
            self.reached.set()
        if self.fail_first and self.calls == 1:
            raise RuntimeError("tick failed")


def test_polls_until_stopped():
    trigger = CountingTrigger(target=3)
    poller = PollingScheduler(trigger, name="test")
    poller.start(10)
    try:
        assert trigger.reached.wait(5)
        assert poller.enabled
        assert poller.interval_ms == 10
    finally:
        poller.stop()

    assert not poller.enabled
    assert poller.interval_ms is None
    calls = trigger.calls
    threading.Event().wait(0.05)
    assert trigger.calls == calls


def test_set_interval_replaces_timer():
    poller = PollingScheduler(CountingTrigger(), name="test")
    poller.set_interval(1000)
    first = poller._thread
    try:
        poller.set_interval(20)
        second = poller._thread
        assert second is not first
        assert not first.is_alive()
        assert poller.interval_ms == 20
    finally:
        poller.stop()


def test_same_interval_keeps_running_timer():
    poller = PollingScheduler(CountingTrigger(), name="test")
    poller.set_interval(1000)
    first = poller._thread
    try:
        poller.set_interval(1000)
        assert poller._thread is first
    finally:
        poller.stop()


def test_failing_tick_does_not_stop_polling():
    trigger = CountingTrigger(target=3, fail_first=True)
    poller = PollingScheduler(trigger, name="test")
    poller.start(10)
    try:
        assert trigger.reached.wait(5)
    finally:
        poller.stop()
    assert poller.tick_count >= 2


def test_interval_must_be_positive():
    poller = PollingScheduler(CountingTrigger(), name="test")
    with pytest.raises(ValueError):
        poller.set_interval(0)


def test_stop_is_idempotent():
    poller = PollingScheduler(CountingTrigger(), name="test")
    poller.stop()
    poller.start(1000)
    poller.stop()
    poller.stop()
    assert not poller.enabled

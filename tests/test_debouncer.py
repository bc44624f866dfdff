"""Tests for the debouncer and the saving indicator."""

import asyncio

import pytest

from tax_intake.autosave import Debouncer, SavingIndicator


class Counter:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


class TestDebouncer:
    """Quiet-window timer."""

    def test_burst_runs_once(self):
        """Rapid schedules collapse into a single run."""
        counter = Counter()

        async def scenario():
            debouncer = Debouncer(0.05)
            for _ in range(5):
                debouncer.schedule(counter)
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.15)
            await debouncer.wait()

        asyncio.run(scenario())
        assert counter.calls == 1

    def test_last_callback_wins(self):
        seen = []

        def make(value):
            async def callback():
                seen.append(value)
            return callback

        async def scenario():
            debouncer = Debouncer(0.02)
            debouncer.schedule(make("first"))
            debouncer.schedule(make("second"))
            await asyncio.sleep(0.1)
            await debouncer.wait()

        asyncio.run(scenario())
        assert seen == ["second"]

    def test_cancel_drops_pending(self):
        counter = Counter()

        async def scenario():
            debouncer = Debouncer(0.02)
            debouncer.schedule(counter)
            assert debouncer.cancel() is True
            assert debouncer.cancel() is False
            await asyncio.sleep(0.06)

        asyncio.run(scenario())
        assert counter.calls == 0

    def test_flush_runs_immediately(self):
        counter = Counter()

        async def scenario():
            debouncer = Debouncer(10)
            debouncer.schedule(counter)
            assert debouncer.pending
            await debouncer.flush()
            assert not debouncer.pending

        asyncio.run(scenario())
        assert counter.calls == 1

    def test_close_without_flush(self):
        counter = Counter()

        async def scenario():
            debouncer = Debouncer(10)
            debouncer.schedule(counter)
            await debouncer.close(flush=False)
            assert debouncer.closed
            with pytest.raises(RuntimeError):
                debouncer.schedule(counter)

        asyncio.run(scenario())
        assert counter.calls == 0

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            Debouncer(-1)

    def test_schedule_needs_running_loop(self):
        with pytest.raises(RuntimeError):
            Debouncer(0.1).schedule(Counter())


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestSavingIndicator:
    """Minimum visible time."""

    def test_show_notifies_once(self):
        indicator = SavingIndicator(1.0, clock=FakeClock())
        changes = []
        indicator.subscribe(changes.append)

        indicator.show()
        indicator.show()

        assert indicator.visible
        assert changes == [True]

    def test_hide_after_minimum_time(self):
        clock = FakeClock()
        indicator = SavingIndicator(1.0, clock=clock)
        indicator.show()
        clock.now = 1.5

        indicator.hide()

        assert not indicator.visible

    def test_hide_is_delayed_inside_a_loop(self):
        async def scenario():
            indicator = SavingIndicator(0.05)
            indicator.show()
            indicator.hide()
            assert indicator.visible
            assert indicator.hide_pending
            await asyncio.sleep(0.1)
            return indicator

        indicator = asyncio.run(scenario())
        assert not indicator.visible

    def test_show_cancels_delayed_hide(self):
        async def scenario():
            indicator = SavingIndicator(0.05)
            indicator.show()
            indicator.hide()
            indicator.show()
            assert not indicator.hide_pending
            await asyncio.sleep(0.1)
            return indicator

        assert asyncio.run(scenario()).visible

    def test_hide_without_loop_is_immediate(self):
        indicator = SavingIndicator(10.0, clock=FakeClock())
        indicator.show()
        indicator.hide()
        assert not indicator.visible

    def test_unsubscribe(self):
        indicator = SavingIndicator(0, clock=FakeClock())
        changes = []
        unsubscribe = indicator.subscribe(changes.append)
        unsubscribe()

        indicator.show()

        assert changes == []

    def test_close_hides(self):
        async def scenario():
            indicator = SavingIndicator(10.0)
            indicator.show()
            indicator.hide()
            indicator.close()
            assert not indicator.visible
            assert not indicator.hide_pending

        asyncio.run(scenario())

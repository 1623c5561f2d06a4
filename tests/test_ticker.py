import asyncio

import pytest

from app.services.ticker import PeriodicTask


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PeriodicTask("clock", 0, lambda: None)


def test_failing_tick_keeps_the_schedule():
    seen = []

    def callback():
        seen.append(len(seen))
        if len(seen) == 1:
            raise RuntimeError("boom")

    async def scenario():
        task = PeriodicTask("clock", 0.01, callback)
        task.start()
        await asyncio.sleep(0.1)
        await task.stop()
        return task

    task = asyncio.run(scenario())
    assert len(seen) >= 2
    assert task.ticks == len(seen)
    assert task.running is False


def test_async_callbacks_are_awaited():
    seen = []

    async def callback():
        await asyncio.sleep(0)
        seen.append("tick")

    task = PeriodicTask("clock", 60, callback)
    asyncio.run(task.tick())
    assert seen == ["tick"]
    assert task.ticks == 1


def test_stop_before_start_is_harmless():
    asyncio.run(PeriodicTask("clock", 1, lambda: None).stop())

import asyncio

from practice_test_cbt.services.timer import CountdownTimer, format_clock


class ExpireCounter:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


def test_format_clock():
    assert format_clock(0) == "00:00"
    assert format_clock(65) == "01:05"
    assert format_clock(5400) == "90:00"
    assert format_clock(-3) == "00:00"


def test_ticking_to_zero_expires_exactly_once():
    counter = ExpireCounter()
    timer = CountdownTimer(5, counter)

    async def scenario():
        for _ in range(5):
            await timer.tick()
        # 0초 이후 추가 틱은 무시
        for _ in range(3):
            await timer.tick()

    asyncio.run(scenario())
    assert counter.calls == 1
    assert timer.remaining == 0
    assert timer.expired


def test_stop_freezes_remaining_time():
    counter = ExpireCounter()
    timer = CountdownTimer(10, counter)

    async def scenario():
        await timer.tick()
        await timer.tick()
        timer.stop()
        await timer.tick()

    asyncio.run(scenario())
    assert timer.remaining == 8
    assert counter.calls == 0


def test_running_task_counts_down_and_fires_once():
    counter = ExpireCounter()

    async def scenario():
        timer = CountdownTimer(3, counter, interval=0)
        timer.start()
        assert timer.running
        await asyncio.wait_for(timer._task, timeout=2)
        return timer

    timer = asyncio.run(scenario())
    assert counter.calls == 1
    assert timer.remaining == 0
    assert not timer.running


def test_stop_cancels_background_task():
    counter = ExpireCounter()

    async def scenario():
        timer = CountdownTimer(60, counter, interval=10)
        timer.start()
        await asyncio.sleep(0)
        timer.stop()
        await asyncio.wait({timer._task}, timeout=1)
        return timer

    timer = asyncio.run(scenario())
    assert timer._task.cancelled()
    assert timer.remaining == 60
    assert counter.calls == 0


def test_stop_from_expire_callback_does_not_cancel_itself():
    holder = {}

    async def on_expire():
        holder["timer"].stop()
        await asyncio.sleep(0)
        holder["finished"] = True

    async def scenario():
        timer = CountdownTimer(1, on_expire, interval=0)
        holder["timer"] = timer
        timer.start()
        await asyncio.wait_for(timer._task, timeout=2)

    asyncio.run(scenario())
    assert holder.get("finished") is True

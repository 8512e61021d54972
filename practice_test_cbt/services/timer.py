"""
services/timer.py

응시 중 남은 시간을 1초마다 감소시키는 카운트다운 타이머.
0초가 되면 만료 콜백(자동 제출)을 정확히 한 번 호출하고 멈춘다.

start() 로 asyncio 태스크를 만들고 stop() 으로 즉시 취소한다.
응시 상태를 벗어나는 모든 경로에서 stop() 을 호출해야 한다.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config import TIMER_TICK_SECONDS

logger = logging.getLogger(__name__)


def format_clock(seconds: int) -> str:
    """남은 시간 표시 문자열 (mm:ss)."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


class CountdownTimer:

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], Awaitable[object]],
        interval: float = TIMER_TICK_SECONDS,
    ) -> None:
        self.remaining = max(0, int(seconds))
        self.interval = interval
        self._on_expire = on_expire
        self._task: Optional[asyncio.Task] = None
        self._stopped = False
        self._expired = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._stopped

    @property
    def expired(self) -> bool:
        return self._expired

    def start(self) -> None:
        """실행 중인 이벤트 루프에 틱 태스크를 등록한다."""
        if self._task is not None:
            raise RuntimeError("타이머가 이미 시작되었습니다.")
        if self.remaining <= 0:
            raise ValueError("남은 시간이 없는 타이머는 시작할 수 없습니다.")
        self._stopped = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"타이머 시작: {format_clock(self.remaining)}")

    async def _run(self) -> None:
        while not self._stopped and self.remaining > 0:
            await asyncio.sleep(self.interval)
            await self.tick()

    async def tick(self) -> None:
        """1초 감소. 멈춘 뒤나 0초 이후에는 아무것도 하지 않는다."""
        if self._stopped or self.remaining <= 0:
            return
        self.remaining -= 1
        if self.remaining == 0:
            self._stopped = True
            self._expired = True
            logger.info("시험 시간 종료 → 자동 제출")
            await self._on_expire()

    def stop(self) -> None:
        """
        즉시 정지. 남은 시간은 그 값으로 고정된다.
        만료 콜백 안에서 호출되면 자기 태스크는 취소하지 않는다 (제출 요청이 진행 중).
        """
        self._stopped = True
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

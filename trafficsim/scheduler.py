import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from trafficsim.engine import TrafficEngine
from trafficsim.models import TrafficSnapshot

logger = logging.getLogger(__name__)

Listener = Callable[[TrafficSnapshot], Awaitable[None]]


class TickScheduler:
    """일정 간격으로 engine.tick() 을 호출하는 단일 asyncio 태스크"""

    def __init__(self, engine: TrafficEngine, interval_ms: int = 2000):
        self.engine = engine
        self.interval = interval_ms / 1000
        self.listeners: List[Listener] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: Listener):
        self.listeners.append(listener)

    def start(self):
        """실행 중인 이벤트 루프 안에서 호출해야 한다"""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"📡 모니터링 시작 (간격 {self.interval:.1f}s)")

    async def stop(self):
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("🛑 모니터링 중지")

    async def _run(self):
        while True:
            # tick 은 엔진 락을 잡으므로 이벤트 루프를 막지 않도록 스레드에서 실행
            tick = asyncio.ensure_future(asyncio.to_thread(self.engine.tick))
            try:
                snapshot = await asyncio.shield(tick)
            except asyncio.CancelledError:
                # stop() 은 진행 중인 틱이 끝난 뒤에 반환된다
                await tick
                raise
            for listener in list(self.listeners):
                try:
                    await listener(snapshot)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.warning(f"⚠️ 스냅샷 리스너 오류: {e}")
            await asyncio.sleep(self.interval)

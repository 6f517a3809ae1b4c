import asyncio
from typing import Awaitable, Callable, Optional

from pest_crm.core.logging_config import get_logger

logger = get_logger(__name__)

POLL_INTERVAL = 30.0  # секунд


class OrderPoller:
    """Периодически перезапрашивает список заказов, пока не остановлен."""

    def __init__(self, refresh: Callable[[], Awaitable[None]], interval: float = POLL_INTERVAL):
        self.refresh = refresh
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.refresh()
            except Exception as e:
                # Сбой одного опроса не останавливает следующий
                logger.warning("Обновление заказов не удалось: %s", e)

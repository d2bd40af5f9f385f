"""
Mock Change Feed

테스트용 Mock 변경 알림 피드.
IChangeFeed Protocol 준수.
"""

import asyncio
from typing import Any

from core.domain.events import ChangeNotification
from core.types import ChangeOperation, WatchedTables


class MockChangeFeed:
    """Mock 변경 알림 피드

    IChangeFeed Protocol 구현.
    테스트에서 알림을 직접 발행하고, 발행 기록을 검증 가능.

    사용 예시:
    ```python
    feed = MockChangeFeed()
    await feed.start(queue)

    await feed.emit_expense_update({"id": "E1", "amount": "500", "status": "approved", ...})

    assert feed.emitted_count == 1
    ```
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ChangeNotification] | None = None
        self._running = False
        self._seq = 0
        self.emitted: list[ChangeNotification] = []

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self, queue: "asyncio.Queue[ChangeNotification]") -> None:
        self._queue = queue
        self._running = True

    async def stop(self) -> None:
        self._running = False

    async def emit(
        self,
        table: str,
        operation: str,
        new_row: dict[str, Any],
    ) -> ChangeNotification:
        """알림 발행 (seq 자동 증가)

        Raises:
            RuntimeError: start() 전 또는 stop() 후 호출
        """
        if not self._running or self._queue is None:
            raise RuntimeError("MockChangeFeed is not running")

        self._seq += 1
        notification = ChangeNotification(
            table=table,
            operation=operation,
            new_row=dict(new_row),
            seq=self._seq,
        )
        self.emitted.append(notification)
        await self._queue.put(notification)
        return notification

    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------

    async def emit_expense_update(self, row: dict[str, Any]) -> ChangeNotification:
        """expenses UPDATE 알림 발행"""
        return await self.emit(WatchedTables.EXPENSES.value, ChangeOperation.UPDATE.value, row)

    async def emit_fund_insert(self, row: dict[str, Any]) -> ChangeNotification:
        """fund_sources INSERT 알림 발행"""
        return await self.emit(WatchedTables.FUND_SOURCES.value, ChangeOperation.INSERT.value, row)

    def clear(self) -> None:
        """발행 기록 초기화"""
        self.emitted.clear()

    @property
    def emitted_count(self) -> int:
        """전체 발행 수"""
        return len(self.emitted)

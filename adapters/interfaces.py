"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

import asyncio
from typing import Protocol, runtime_checkable

from core.domain.events import ChangeNotification


@runtime_checkable
class IChangeFeed(Protocol):
    """행 단위 변경 알림 피드 인터페이스

    감시 대상 테이블(expenses, fund_sources)의 변경을 새 행 이미지와 함께
    큐로 전달. 같은 피드 안에서는 커밋 순서를 유지.

    전달 보장: at-least-once (재전달 가능), 드물게 누락 가능.
    """

    @property
    def is_running(self) -> bool:
        """폴링/구독 진행 여부"""
        ...

    async def start(self, queue: "asyncio.Queue[ChangeNotification]") -> None:
        """구독 시작

        Args:
            queue: 알림을 넣을 큐 (가득 차면 대기하여 backpressure)
        """
        ...

    async def stop(self) -> None:
        """구독 종료 (이미 큐에 들어간 알림은 유지)"""
        ...

"""
Change-Event Dispatcher

변경 알림 큐를 소비하여 구독 조건에 맞는 알림을 BusinessEvent로 바꾸고
이벤트마다 독립 task로 Synchronizer에 전달.
비즈니스 로직 없음.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.domain.events import BusinessEvent, ChangeNotification
from core.domain.state_machines import EventProcessingState
from core.errors import InvalidEvent
from syncer.dispatcher.subscriptions import DEFAULT_SUBSCRIPTIONS, Subscription, decode_record

if TYPE_CHECKING:
    from syncer.synchronizer.synchronizer import LedgerSynchronizer

logger = logging.getLogger(__name__)


class ChangeEventDispatcher:
    """변경 알림 → 이벤트 task 분배기

    큐 크기(queue_size)와 동시 처리 한도(max_in_flight)가 backpressure 지점.
    한도에 도달하면 다음 알림을 꺼내지 않고 기다림.

    Args:
        synchronizer: 이벤트를 처리할 LedgerSynchronizer
        queue_size: 알림 큐 최대 크기
        max_in_flight: 동시에 실행되는 이벤트 task 최대 수
        subscriptions: 구독 목록 (기본: 지출 승인/지급, 기금 등록)

    사용 예시:
    ```python
    dispatcher = ChangeEventDispatcher(synchronizer)
    await feed.start(dispatcher.queue)
    await dispatcher.start()
    ...
    await feed.stop()
    await dispatcher.stop()
    ```
    """

    def __init__(
        self,
        synchronizer: LedgerSynchronizer,
        queue_size: int = Defaults.FEED_QUEUE_SIZE,
        max_in_flight: int = Defaults.SYNC_MAX_IN_FLIGHT,
        subscriptions: tuple[Subscription, ...] = DEFAULT_SUBSCRIPTIONS,
    ):
        self.synchronizer = synchronizer
        self.subscriptions = subscriptions
        self.max_in_flight = max_in_flight

        self.queue: asyncio.Queue[ChangeNotification] = asyncio.Queue(maxsize=queue_size)
        self._semaphore = asyncio.Semaphore(max_in_flight)
        self._in_flight: set[asyncio.Task[str]] = set()
        self._task: asyncio.Task[None] | None = None
        self._running = False

        # 통계
        self._received_count = 0
        self._dispatched_count = 0
        self._ignored_count = 0
        self._dropped_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight_count(self) -> int:
        """실행 중인 이벤트 task 수"""
        return len(self._in_flight)

    async def start(self) -> None:
        """큐 소비 task 시작"""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._consume_loop(), name="change-dispatcher")
        logger.info(
            "Dispatcher started",
            extra={"max_in_flight": self.max_in_flight, "subscriptions": len(self.subscriptions)},
        )

    async def stop(self, drain_timeout: float | None = 30.0) -> None:
        """종료

        큐에 남은 알림과 실행 중인 task를 drain_timeout까지 기다린 뒤 소비 task 종료.
        시간 초과 시 남은 task는 취소.
        """
        if self._task is not None:
            try:
                await asyncio.wait_for(self.wait_idle(), timeout=drain_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Dispatcher drain timed out, cancelling {len(self._in_flight)} in-flight events"
                )

            self._running = False
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._running = False

        pending = list(self._in_flight)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        logger.info("Dispatcher stopped", extra=self.get_stats())

    async def wait_idle(self) -> None:
        """큐가 비고 모든 이벤트 task가 끝날 때까지 대기"""
        await self.queue.join()
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def _consume_loop(self) -> None:
        while self._running:
            notification = await self.queue.get()
            try:
                await self.dispatch(notification)
            except Exception as e:
                # 알림 1건 실패가 구독 전체를 멈추지 않도록 격리
                logger.exception(
                    f"Dispatch failed: {e}",
                    extra={"table": notification.table, "seq": notification.seq},
                )
            finally:
                self.queue.task_done()

    async def dispatch(self, notification: ChangeNotification) -> list[asyncio.Task[str]]:
        """알림 1건 분배

        구독 조건에 맞으면 레코드를 디코딩하여 이벤트 task 생성.
        디코딩 실패는 InvalidEvent로 로그 후 폐기.

        Returns:
            생성된 이벤트 task 목록 (맞는 구독이 없으면 빈 목록)
        """
        self._received_count += 1
        tasks: list[asyncio.Task[str]] = []
        matched = False

        for subscription in self.subscriptions:
            if not subscription.matches(notification):
                continue
            matched = True

            try:
                record = decode_record(subscription.kind, notification.new_row)
            except InvalidEvent as e:
                self._dropped_count += 1
                logger.warning(
                    f"Invalid event dropped: {e}",
                    extra={
                        "event_kind": subscription.kind.value,
                        "notification_seq": notification.seq,
                        "row": notification.new_row,
                        **e.context,
                    },
                )
                continue

            event = BusinessEvent(
                kind=subscription.kind,
                record=record,
                notification_seq=notification.seq,
                raw_row=dict(notification.new_row),
            )

            # 동시 처리 한도 (backpressure)
            await self._semaphore.acquire()
            task = asyncio.create_task(
                self._run_event(event),
                name=f"sync-{event.kind.value}-{event.source_id}",
            )
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            tasks.append(task)
            self._dispatched_count += 1

        if not matched:
            self._ignored_count += 1
            logger.debug(
                f"No subscription for notification: {notification.table} {notification.operation}",
                extra={"seq": notification.seq},
            )

        return tasks

    async def _run_event(self, event: BusinessEvent) -> str:
        try:
            return await self.synchronizer.handle(event)
        except Exception as e:
            logger.exception(f"Unhandled synchronizer error: {e}", extra=event.log_context())
            return EventProcessingState.ERRORED.value
        finally:
            self._semaphore.release()

    def get_stats(self) -> dict[str, Any]:
        """통계 반환"""
        return {
            "received_count": self._received_count,
            "dispatched_count": self._dispatched_count,
            "ignored_count": self._ignored_count,
            "dropped_count": self._dropped_count,
            "in_flight": len(self._in_flight),
        }

"""
Ledger Synchronizer

이벤트 1건을 분개로 기록하고, 지급 이벤트면 기금 잔액까지 반영.
이벤트마다 상태 머신 (received → entries_built → persisted / errored).

실패는 해당 이벤트에만 영향: 로그와 통계로 남기고 다음 이벤트 계속 처리.
"""

import logging
from collections import Counter
from typing import Any

from core.domain.events import BusinessEvent
from core.domain.state_machines import EventProcessingState, EventProcessingStateMachine
from core.errors import InvalidEvent, LedgerSyncError, LookupFailure
from core.ledger.entry_builder import JournalEntryBuilder
from core.ledger.store import LedgerStore
from core.storage.record_store import RecordStore
from syncer.balance.updater import FundBalanceUpdater
from syncer.synchronizer.handlers.base import SyncHandler
from syncer.synchronizer.handlers.expense_approved import ExpenseApprovedHandler
from syncer.synchronizer.handlers.expense_paid import ExpensePaidHandler
from syncer.synchronizer.handlers.fund_received import FundReceivedHandler

logger = logging.getLogger(__name__)


class LedgerSynchronizer:
    """Ledger Synchronizer

    저장소 의존성은 모두 생성자로 주입.

    Args:
        ledger_store: 분개 저장소
        records: 지출/기금/카테고리 저장소
        balance_updater: 기금 잔액 업데이터
        builder: 분개 생성기 (None이면 기본 생성)

    사용 예시:
    ```python
    synchronizer = LedgerSynchronizer(ledger_store, records, balance_updater)
    state = await synchronizer.handle(event)   # "persisted" 또는 "errored"
    print(synchronizer.get_stats())
    ```
    """

    def __init__(
        self,
        ledger_store: LedgerStore,
        records: RecordStore,
        balance_updater: FundBalanceUpdater,
        builder: JournalEntryBuilder | None = None,
    ):
        self.ledger_store = ledger_store
        self.records = records
        self.balance_updater = balance_updater
        self.builder = builder or JournalEntryBuilder()

        # 핸들러 레지스트리
        self._handlers: dict[str, SyncHandler] = {}
        self._register_default_handlers()

        # 통계
        self._state_counts: Counter[str] = Counter()
        self._error_counts: Counter[str] = Counter()
        self._kind_counts: Counter[str] = Counter()
        self._duplicate_count = 0

    def _register_default_handlers(self) -> None:
        """기본 핸들러 등록"""
        self.register_handler(ExpenseApprovedHandler(self.records, self.builder))
        self.register_handler(
            ExpensePaidHandler(self.records, self.builder, self.balance_updater)
        )
        self.register_handler(FundReceivedHandler(self.records, self.builder))

    def register_handler(self, handler: SyncHandler) -> None:
        """핸들러 등록 (같은 종류는 교체)"""
        self._handlers[handler.handled_kind] = handler
        logger.debug(f"Sync handler registered: {handler.handled_kind}")

    async def handle(self, event: BusinessEvent) -> str:
        """이벤트 1건 처리

        예외를 밖으로 던지지 않음.

        Returns:
            종료 상태 ("persisted" 또는 "errored")
        """
        machine = EventProcessingStateMachine(
            name=f"Event[{event.kind.value}:{event.source_id}]"
        )
        self._kind_counts[event.kind.value] += 1

        try:
            handler = self._handlers.get(event.kind.value)
            if handler is None:
                raise InvalidEvent(
                    f"No handler for event kind: {event.kind.value}",
                    event.log_context(),
                )

            category_name = await handler.prepare(event)
            transaction = handler.build(event, category_name)
            machine.transition(EventProcessingState.ENTRIES_BUILT)

            saved = await self.ledger_store.save_transaction(transaction)
            if saved:
                await handler.after_persist(event, transaction)
            else:
                # dedupe 설정에서 이미 기록된 transaction_id: 잔액도 다시 반영하지 않음
                self._duplicate_count += 1

            machine.transition(EventProcessingState.PERSISTED)
            logger.info(
                f"Ledger synced: {transaction.transaction_id}",
                extra={**event.log_context(), "duplicate": not saved},
            )

        except Exception as e:
            # LedgerSyncError와 예상하지 못한 오류 모두 이벤트 단위로 격리
            machine.fail()
            self._record_error(event, e, machine)

        self._state_counts[machine.state] += 1
        return machine.state

    def _record_error(
        self,
        event: BusinessEvent,
        error: Exception,
        machine: EventProcessingStateMachine,
    ) -> None:
        error_type = type(error).__name__
        self._error_counts[error_type] += 1

        failed_after = machine.history[-1][0] if machine.history else EventProcessingState.RECEIVED.value
        context: dict[str, Any] = {
            **event.log_context(),
            "error_type": error_type,
            "failed_after": failed_after,
        }
        if isinstance(error, LedgerSyncError):
            context.update(error.context)

        if isinstance(error, (InvalidEvent, LookupFailure)):
            logger.warning(f"Event dropped: {error}", extra=context)
        elif isinstance(error, LedgerSyncError):
            logger.error(f"Event failed: {error}", extra=context)
        else:
            logger.exception(f"Unexpected error while syncing event: {error}", extra=context)

    def get_stats(self) -> dict[str, Any]:
        """통계 반환

        Returns:
            종료 상태별, 오류 유형별, 이벤트 종류별 건수
        """
        return {
            "persisted_count": self._state_counts[EventProcessingState.PERSISTED.value],
            "errored_count": self._state_counts[EventProcessingState.ERRORED.value],
            "duplicate_count": self._duplicate_count,
            "errors_by_type": dict(self._error_counts),
            "events_by_kind": dict(self._kind_counts),
            "handled_kinds": list(self._handlers.keys()),
        }

    def reset_stats(self) -> None:
        """통계 초기화"""
        self._state_counts.clear()
        self._error_counts.clear()
        self._kind_counts.clear()
        self._duplicate_count = 0

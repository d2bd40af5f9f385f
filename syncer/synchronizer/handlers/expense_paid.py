"""
지출 지급 핸들러

분개 저장 후 연결된 기금의 잔액을 지급액만큼 차감.
"""

import logging

from core.domain.events import BusinessEvent
from core.domain.models import Expense
from core.ledger.entry_builder import JournalEntryBuilder, JournalTransaction
from core.storage.record_store import RecordStore
from core.types import EventKind
from syncer.balance.updater import FundBalanceUpdater
from syncer.synchronizer.handlers.base import SyncHandler

logger = logging.getLogger(__name__)


class ExpensePaidHandler(SyncHandler):
    """EXPENSE_PAID: 미지급금 차변 / 현금 대변 + 기금 잔액 차감

    Args:
        records: 지출/기금/카테고리 저장소
        builder: 분개 생성기
        balance_updater: 기금 잔액 업데이터
    """

    def __init__(
        self,
        records: RecordStore,
        builder: JournalEntryBuilder,
        balance_updater: FundBalanceUpdater,
    ):
        super().__init__(records, builder)
        self.balance_updater = balance_updater

    @property
    def handled_kind(self) -> str:
        return EventKind.EXPENSE_PAID.value

    async def after_persist(self, event: BusinessEvent, transaction: JournalTransaction) -> None:
        """fund_source_id가 있으면 delta = -지급액 반영 (FundNotFound 전파)"""
        expense = event.record
        if not isinstance(expense, Expense) or not expense.fund_source_id:
            logger.debug(f"Paid expense without fund source: {event.source_id}")
            return

        # build 단계를 통과했으므로 amount는 양수
        amount = transaction.total_debit
        await self.balance_updater.apply_delta(expense.fund_source_id, -amount)

"""
지출 승인 핸들러

카테고리 이름을 조회하여 비용 계정을 결정.
조회 실패 시 "General"로 진행 (LookupFailure는 로그만).
"""

import logging
import sqlite3

from core.constants import Defaults
from core.domain.events import BusinessEvent
from core.domain.models import Expense
from core.errors import LookupFailure
from core.types import EventKind
from syncer.synchronizer.handlers.base import SyncHandler

logger = logging.getLogger(__name__)


class ExpenseApprovedHandler(SyncHandler):
    """EXPENSE_APPROVED: 비용 차변 / 미지급금 대변"""

    @property
    def handled_kind(self) -> str:
        return EventKind.EXPENSE_APPROVED.value

    async def prepare(self, event: BusinessEvent) -> str | None:
        expense = event.record
        if not isinstance(expense, Expense):
            return None

        try:
            return await self._lookup_category_name(expense)
        except LookupFailure as e:
            logger.warning(
                f"{e} (using '{Defaults.FALLBACK_CATEGORY_NAME}')",
                extra={**event.log_context(), **e.context},
            )
            return None

    async def _lookup_category_name(self, expense: Expense) -> str:
        """카테고리 이름 조회

        Raises:
            LookupFailure: category_id 없음, 카테고리 없음, 조회 오류
        """
        if not expense.category_id:
            raise LookupFailure(
                f"Expense {expense.id} has no category",
                {"category_id": None},
            )

        try:
            category = await self.records.get_budget_category(expense.category_id)
        except sqlite3.Error as e:
            raise LookupFailure(
                f"Budget category lookup failed: {expense.category_id}",
                {"category_id": expense.category_id, "error": str(e)},
            ) from e

        if category is None or not category.name:
            raise LookupFailure(
                f"Budget category not found: {expense.category_id}",
                {"category_id": expense.category_id},
            )

        return category.name

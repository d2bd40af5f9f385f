"""
변경 알림 구독 정의

테이블 + 작업 + 상태 컬럼 동등 조건으로 알림을 걸러 이벤트 종류를 결정.
"""

from dataclasses import dataclass
from typing import Any

from core.domain.events import ChangeNotification
from core.domain.models import Expense, FundSource
from core.errors import InvalidEvent
from core.types import ChangeOperation, EventKind, ExpenseStatus, WatchedTables


@dataclass(frozen=True)
class Subscription:
    """구독 1건

    column/equals가 None이면 테이블과 작업만 비교.
    """

    table: str
    operation: str
    kind: EventKind
    column: str | None = None
    equals: str | None = None

    def matches(self, notification: ChangeNotification) -> bool:
        """알림이 이 구독 조건에 맞는지"""
        if notification.table != self.table:
            return False
        if notification.operation != self.operation:
            return False
        if self.column is None:
            return True
        return notification.new_row.get(self.column) == self.equals


DEFAULT_SUBSCRIPTIONS: tuple[Subscription, ...] = (
    Subscription(
        table=WatchedTables.EXPENSES.value,
        operation=ChangeOperation.UPDATE.value,
        kind=EventKind.EXPENSE_APPROVED,
        column="status",
        equals=ExpenseStatus.APPROVED.value,
    ),
    Subscription(
        table=WatchedTables.EXPENSES.value,
        operation=ChangeOperation.UPDATE.value,
        kind=EventKind.EXPENSE_PAID,
        column="status",
        equals=ExpenseStatus.PAID.value,
    ),
    Subscription(
        table=WatchedTables.FUND_SOURCES.value,
        operation=ChangeOperation.INSERT.value,
        kind=EventKind.FUND_RECEIVED,
    ),
)


def decode_record(kind: EventKind, row: dict[str, Any]) -> Expense | FundSource:
    """새 행 이미지를 이벤트 종류에 맞는 레코드로 디코딩

    Raises:
        InvalidEvent: 디코딩 불가 (숫자/날짜 형식 오류 등)
    """
    if kind == EventKind.FUND_RECEIVED:
        return FundSource.from_row(row)
    if kind in (EventKind.EXPENSE_APPROVED, EventKind.EXPENSE_PAID):
        return Expense.from_row(row)
    raise InvalidEvent(f"Unsupported event kind: {kind}", {"row": row})

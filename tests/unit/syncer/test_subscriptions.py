"""구독 조건 테스트"""

from decimal import Decimal

import pytest

from core.domain.events import ChangeNotification
from core.domain.models import Expense, FundSource
from core.errors import InvalidEvent
from core.types import EventKind
from syncer.dispatcher.subscriptions import DEFAULT_SUBSCRIPTIONS, Subscription, decode_record


def _matching_kinds(notification: ChangeNotification) -> list[EventKind]:
    return [s.kind for s in DEFAULT_SUBSCRIPTIONS if s.matches(notification)]


class TestDefaultSubscriptions:

    def test_expense_approved(self) -> None:
        n = ChangeNotification("expenses", "UPDATE", {"id": "E1", "status": "approved"})
        assert _matching_kinds(n) == [EventKind.EXPENSE_APPROVED]

    def test_expense_paid(self) -> None:
        n = ChangeNotification("expenses", "UPDATE", {"id": "E1", "status": "paid"})
        assert _matching_kinds(n) == [EventKind.EXPENSE_PAID]

    @pytest.mark.parametrize("status", ["draft", "pending", "rejected", None])
    def test_other_expense_status_ignored(self, status: str | None) -> None:
        n = ChangeNotification("expenses", "UPDATE", {"id": "E1", "status": status})
        assert _matching_kinds(n) == []

    def test_fund_insert(self) -> None:
        n = ChangeNotification("fund_sources", "INSERT", {"id": "F1"})
        assert _matching_kinds(n) == [EventKind.FUND_RECEIVED]

    def test_fund_update_ignored(self) -> None:
        n = ChangeNotification("fund_sources", "UPDATE", {"id": "F1"})
        assert _matching_kinds(n) == []

    def test_expense_insert_ignored(self) -> None:
        n = ChangeNotification("expenses", "INSERT", {"id": "E1", "status": "approved"})
        assert _matching_kinds(n) == []


class TestSubscription:
    def test_column_condition(self) -> None:
        sub = Subscription("t", "UPDATE", EventKind.EXPENSE_PAID, column="c", equals="x")

        assert sub.matches(ChangeNotification("t", "UPDATE", {"c": "x"}))
        assert not sub.matches(ChangeNotification("t", "UPDATE", {"c": "y"}))
        assert not sub.matches(ChangeNotification("t", "UPDATE", {}))


class TestDecodeRecord:
    def test_expense(self) -> None:
        record = decode_record(EventKind.EXPENSE_PAID, {"id": "E1", "amount": "5"})

        assert isinstance(record, Expense)
        assert record.amount == Decimal("5")

    def test_fund(self) -> None:
        record = decode_record(EventKind.FUND_RECEIVED, {"id": "F1", "amount": "5"})
        assert isinstance(record, FundSource)

    def test_bad_amount(self) -> None:
        with pytest.raises(InvalidEvent):
            decode_record(EventKind.EXPENSE_APPROVED, {"id": "E1", "amount": "lots"})

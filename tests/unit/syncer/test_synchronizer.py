"""LedgerSynchronizer 테스트

저장소는 MagicMock/AsyncMock으로 대체하여 단계별 동작과 예외 격리만 검증.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.domain.events import BusinessEvent
from core.domain.models import BudgetCategory, Expense, FundSource
from core.errors import FundNotFound, PersistenceFailure
from core.ledger.entry_builder import JournalEntryBuilder, JournalTransaction
from core.types import EventKind
from syncer.synchronizer.handlers.base import SyncHandler
from syncer.synchronizer.synchronizer import LedgerSynchronizer


def _expense(**overrides) -> Expense:
    values = dict(
        id="E1",
        title="Workshop venue",
        amount=Decimal("500"),
        category_id="C1",
        fund_source_id="F1",
        expense_date=date(2024, 3, 1),
        status="approved",
    )
    values.update(overrides)
    return Expense(**values)


@pytest.fixture
def ledger_store() -> MagicMock:
    store = MagicMock()
    store.save_transaction = AsyncMock(return_value=True)
    return store


@pytest.fixture
def records() -> MagicMock:
    store = MagicMock()
    store.get_budget_category = AsyncMock(return_value=BudgetCategory(id="C1", name="Travel"))
    return store


@pytest.fixture
def balance_updater() -> MagicMock:
    updater = MagicMock()
    updater.apply_delta = AsyncMock()
    return updater


@pytest.fixture
def synchronizer(
    ledger_store: MagicMock,
    records: MagicMock,
    balance_updater: MagicMock,
    fixed_today: date,
) -> LedgerSynchronizer:
    return LedgerSynchronizer(
        ledger_store=ledger_store,
        records=records,
        balance_updater=balance_updater,
        builder=JournalEntryBuilder(today=lambda: fixed_today),
    )


def _saved(ledger_store: MagicMock) -> JournalTransaction:
    return ledger_store.save_transaction.await_args.args[0]


class TestExpenseApproved:

    @pytest.mark.asyncio
    async def test_persisted_with_category_account(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock, balance_updater: MagicMock
    ) -> None:
        state = await synchronizer.handle(BusinessEvent(EventKind.EXPENSE_APPROVED, _expense()))

        assert state == "persisted"
        txn = _saved(ledger_store)
        assert txn.transaction_id == "EXP-E1"
        assert txn.entries[0].account_code == "5400"
        balance_updater.apply_delta.assert_not_called()

    @pytest.mark.asyncio
    async def test_category_not_found_falls_back_to_general(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock, records: MagicMock
    ) -> None:
        records.get_budget_category = AsyncMock(return_value=None)

        state = await synchronizer.handle(BusinessEvent(EventKind.EXPENSE_APPROVED, _expense()))

        assert state == "persisted"
        txn = _saved(ledger_store)
        assert txn.entries[0].account_code == "5000"
        assert txn.entries[0].account_name == "General Expenses"

    @pytest.mark.asyncio
    async def test_no_category_id_skips_lookup(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock, records: MagicMock
    ) -> None:
        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_APPROVED, _expense(category_id=None))
        )

        assert state == "persisted"
        records.get_budget_category.assert_not_called()
        assert _saved(ledger_store).entries[0].account_name == "General Expenses"


class TestExpensePaid:

    @pytest.mark.asyncio
    async def test_persists_then_decrements_fund(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock, balance_updater: MagicMock
    ) -> None:
        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_PAID, _expense(status="paid"))
        )

        assert state == "persisted"
        assert _saved(ledger_store).transaction_id == "PAY-E1"
        balance_updater.apply_delta.assert_awaited_once_with("F1", Decimal("-500"))

    @pytest.mark.asyncio
    async def test_without_fund_source(
        self, synchronizer: LedgerSynchronizer, balance_updater: MagicMock
    ) -> None:
        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_PAID, _expense(status="paid", fund_source_id=None))
        )

        assert state == "persisted"
        balance_updater.apply_delta.assert_not_called()

    @pytest.mark.asyncio
    async def test_fund_not_found_errors_event(
        self, synchronizer: LedgerSynchronizer, balance_updater: MagicMock
    ) -> None:
        balance_updater.apply_delta = AsyncMock(side_effect=FundNotFound("F1"))

        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_PAID, _expense(status="paid"))
        )

        assert state == "errored"
        assert synchronizer.get_stats()["errors_by_type"] == {"FundNotFound": 1}

    @pytest.mark.asyncio
    async def test_duplicate_skips_balance_update(
        self,
        synchronizer: LedgerSynchronizer,
        ledger_store: MagicMock,
        balance_updater: MagicMock,
    ) -> None:
        ledger_store.save_transaction = AsyncMock(return_value=False)

        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_PAID, _expense(status="paid"))
        )

        assert state == "persisted"
        balance_updater.apply_delta.assert_not_called()
        assert synchronizer.get_stats()["duplicate_count"] == 1


class TestFundReceived:

    @pytest.mark.asyncio
    async def test_restricted_fund(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock
    ) -> None:
        fund = FundSource(
            id="F2",
            name="Water Grant",
            amount=Decimal("10000"),
            is_restricted=True,
            received_date=date(2024, 2, 1),
            status="received",
        )

        state = await synchronizer.handle(BusinessEvent(EventKind.FUND_RECEIVED, fund))

        assert state == "persisted"
        assert [e.account_code for e in _saved(ledger_store).entries] == ["1010", "4100"]


class TestFailureIsolation:
    """실패는 해당 이벤트에만 영향"""

    @pytest.mark.asyncio
    async def test_invalid_amount_not_persisted(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock
    ) -> None:
        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_APPROVED, _expense(amount=Decimal("0")))
        )

        assert state == "errored"
        ledger_store.save_transaction.assert_not_called()
        assert synchronizer.get_stats()["errors_by_type"] == {"InvalidEvent": 1}

    @pytest.mark.asyncio
    async def test_persistence_failure_skips_balance(
        self,
        synchronizer: LedgerSynchronizer,
        ledger_store: MagicMock,
        balance_updater: MagicMock,
    ) -> None:
        ledger_store.save_transaction = AsyncMock(side_effect=PersistenceFailure("disk full"))

        state = await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_PAID, _expense(status="paid"))
        )

        assert state == "errored"
        balance_updater.apply_delta.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_exception_contained(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock
    ) -> None:
        ledger_store.save_transaction = AsyncMock(side_effect=KeyError("surprise"))

        state = await synchronizer.handle(
            BusinessEvent(EventKind.FUND_RECEIVED, FundSource(
                id="F1", name="G", amount=Decimal("1"), is_restricted=False,
                received_date=None, status=None,
            ))
        )

        assert state == "errored"

    @pytest.mark.asyncio
    async def test_next_event_still_processed(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock
    ) -> None:
        await synchronizer.handle(
            BusinessEvent(EventKind.EXPENSE_APPROVED, _expense(id="E0", amount=Decimal("-1")))
        )
        state = await synchronizer.handle(BusinessEvent(EventKind.EXPENSE_APPROVED, _expense()))

        assert state == "persisted"
        stats = synchronizer.get_stats()
        assert stats["persisted_count"] == 1
        assert stats["errored_count"] == 1
        assert stats["events_by_kind"] == {"expense_approved": 2}


class TestHandlerRegistry:

    def test_default_handlers(self, synchronizer: LedgerSynchronizer) -> None:
        assert set(synchronizer.get_stats()["handled_kinds"]) == {
            "expense_approved",
            "expense_paid",
            "fund_received",
        }

    @pytest.mark.asyncio
    async def test_register_replaces_handler(
        self, synchronizer: LedgerSynchronizer, ledger_store: MagicMock, records: MagicMock
    ) -> None:
        after_persist = AsyncMock()

        class AuditingPaidHandler(SyncHandler):
            @property
            def handled_kind(self) -> str:
                return EventKind.EXPENSE_PAID.value

            async def after_persist(self, event, transaction) -> None:
                await after_persist(event.source_id)

        synchronizer.register_handler(AuditingPaidHandler(records, synchronizer.builder))

        await synchronizer.handle(BusinessEvent(EventKind.EXPENSE_PAID, _expense(status="paid")))

        after_persist.assert_awaited_once_with("E1")

    @pytest.mark.asyncio
    async def test_reset_stats(self, synchronizer: LedgerSynchronizer) -> None:
        await synchronizer.handle(BusinessEvent(EventKind.EXPENSE_APPROVED, _expense()))

        synchronizer.reset_stats()

        stats = synchronizer.get_stats()
        assert stats["persisted_count"] == 0
        assert stats["events_by_kind"] == {}

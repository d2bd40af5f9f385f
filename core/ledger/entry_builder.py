"""
분개 생성기

비즈니스 이벤트를 복식부기 분개로 변환.
외부 상태를 변경하지 않는 순수 변환 (시계만 주입).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from core.constants import AccountCodes, Defaults, TransactionPrefixes
from core.domain.events import BusinessEvent
from core.domain.models import Expense, FundSource
from core.errors import InvalidEvent, LookupFailure
from core.ledger.accounts import (
    get_account,
    resolve_cash_account_code,
    resolve_expense_account_code,
    resolve_fund_receipt_accounts,
)
from core.ledger.types import AccountCode
from core.types import EventKind, SourceType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class JournalEntry:
    """분개 행

    debit_amount, credit_amount 중 정확히 하나만 0이 아님.
    한 번 저장되면 변경/삭제하지 않음.
    """

    transaction_id: str
    account_code: str
    account_name: str
    debit_amount: Decimal
    credit_amount: Decimal
    description: str
    transaction_date: date
    source_type: str
    source_id: str | None
    reference_number: str | None
    id: str | None = None  # 저장소가 할당

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (직렬화용, 금액은 문자열)"""
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "account_code": self.account_code,
            "account_name": self.account_name,
            "debit_amount": str(self.debit_amount),
            "credit_amount": str(self.credit_amount),
            "description": self.description,
            "transaction_date": self.transaction_date.isoformat(),
            "source_type": self.source_type,
            "source_id": self.source_id,
            "reference_number": self.reference_number,
        }


@dataclass
class JournalTransaction:
    """분개 묶음

    하나의 비즈니스 이벤트에서 나온 분개 행들.
    차변 합계 = 대변 합계 (균형)
    """

    transaction_id: str
    entries: list[JournalEntry] = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return sum((e.debit_amount for e in self.entries), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((e.credit_amount for e in self.entries), ZERO)

    def is_balanced(self) -> bool:
        """균형 검증 (Decimal 정확 비교, 오차 허용 없음)

        모든 행이 같은 transaction_id이고 행마다 차변/대변 중 하나만 양수여야 함.
        """
        if not self.entries:
            return False

        for entry in self.entries:
            if entry.transaction_id != self.transaction_id:
                return False
            if entry.debit_amount < ZERO or entry.credit_amount < ZERO:
                return False
            if (entry.debit_amount > ZERO) == (entry.credit_amount > ZERO):
                return False

        return self.total_debit == self.total_credit


def make_transaction_id(prefix: str, source_id: str) -> str:
    """transaction_id 생성

    Example:
        >>> make_transaction_id("EXP", "E1")
        'EXP-E1'
    """
    return f"{prefix}-{source_id}"


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class JournalEntryBuilder:
    """이벤트를 분개로 변환

    이벤트 종류별 핸들러가 정확히 2행(차변 1, 대변 1)을 생성.
    금액 0 이하 또는 ID 누락 시 InvalidEvent.

    Args:
        today: 오늘 날짜 함수 (지급일, 기본 날짜에 사용. 테스트에서 고정)
    """

    def __init__(self, today: Callable[[], date] | None = None):
        self._today = today or _utc_today

    def build(
        self,
        event: BusinessEvent,
        category_name: str | None = None,
    ) -> JournalTransaction:
        """이벤트에서 분개 묶음 생성

        Args:
            event: 비즈니스 이벤트
            category_name: 지출 카테고리 이름 (EXPENSE_APPROVED에서 사용)

        Returns:
            균형이 맞는 JournalTransaction

        Raises:
            InvalidEvent: 금액/ID 오류 또는 알 수 없는 이벤트 종류
        """
        handlers: dict[EventKind, Callable[[BusinessEvent, str | None], JournalTransaction]] = {
            EventKind.EXPENSE_APPROVED: self._from_expense_approved,
            EventKind.EXPENSE_PAID: self._from_expense_paid,
            EventKind.FUND_RECEIVED: self._from_fund_received,
        }

        handler = handlers.get(event.kind)
        if handler is None:
            raise InvalidEvent(f"Unsupported event kind: {event.kind}", event.log_context())

        transaction = handler(event, category_name)

        # 생성 방식상 항상 균형이지만 저장 전 마지막 확인
        if not transaction.is_balanced():
            raise InvalidEvent(
                f"Unbalanced transaction: {transaction.transaction_id}",
                event.log_context(),
            )

        logger.debug(f"Built journal transaction: {transaction.transaction_id}")
        return transaction

    def _from_expense_approved(
        self,
        event: BusinessEvent,
        category_name: str | None,
    ) -> JournalTransaction:
        """지출 승인 → 비용 차변 / 미지급금 대변"""
        expense = self._require_expense(event)
        expense_id, amount = self._validate(event, expense.id, expense.amount)

        category = category_name or Defaults.FALLBACK_CATEGORY_NAME
        expense_account = resolve_expense_account_code(category)
        payable = self._account(AccountCodes.ACCOUNTS_PAYABLE)

        transaction_id = make_transaction_id(TransactionPrefixes.EXPENSE, expense_id)
        txn_date = expense.expense_date or self._today()

        return self._pair(
            transaction_id=transaction_id,
            amount=amount,
            debit_code=expense_account.code,
            debit_name=f"{category} Expenses",
            debit_description=f"Expense: {expense.title}",
            credit_code=payable.code,
            credit_name=payable.name,
            credit_description=f"Expense payable: {expense.title}",
            transaction_date=txn_date,
            source_type=SourceType.EXPENSE,
            source_id=expense_id,
        )

    def _from_expense_paid(
        self,
        event: BusinessEvent,
        category_name: str | None,
    ) -> JournalTransaction:
        """지출 지급 → 미지급금 차변 / 현금 대변 (지급일 기준)"""
        expense = self._require_expense(event)
        expense_id, amount = self._validate(event, expense.id, expense.amount)

        payable = self._account(AccountCodes.ACCOUNTS_PAYABLE)
        cash = resolve_cash_account_code(expense.fund_source_id)

        return self._pair(
            transaction_id=make_transaction_id(TransactionPrefixes.PAYMENT, expense_id),
            amount=amount,
            debit_code=payable.code,
            debit_name=payable.name,
            debit_description=f"Payment for: {expense.title}",
            credit_code=cash.code,
            credit_name=cash.name,
            credit_description=f"Cash payment for: {expense.title}",
            transaction_date=self._today(),
            source_type=SourceType.PAYMENT,
            source_id=expense_id,
        )

    def _from_fund_received(
        self,
        event: BusinessEvent,
        category_name: str | None,
    ) -> JournalTransaction:
        """기금 수령 → 현금 차변 / 기부금 수익 대변"""
        fund = event.record
        if not isinstance(fund, FundSource):
            raise InvalidEvent("fund_received event without fund source record", event.log_context())

        fund_id, amount = self._validate(event, fund.id, fund.amount)
        cash, revenue = resolve_fund_receipt_accounts(fund.is_restricted)

        return self._pair(
            transaction_id=make_transaction_id(TransactionPrefixes.FUND_RECEIPT, fund_id),
            amount=amount,
            debit_code=cash.code,
            debit_name=cash.name,
            debit_description=f"Fund received: {fund.name}",
            credit_code=revenue.code,
            credit_name=revenue.name,
            credit_description=f"Revenue from: {fund.name}",
            transaction_date=fund.received_date or self._today(),
            source_type=SourceType.FUND_RECEIPT,
            source_id=fund_id,
        )

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_expense(event: BusinessEvent) -> Expense:
        if not isinstance(event.record, Expense):
            raise InvalidEvent(f"{event.kind.value} event without expense record", event.log_context())
        return event.record

    @staticmethod
    def _validate(
        event: BusinessEvent,
        record_id: str | None,
        amount: Decimal | None,
    ) -> tuple[str, Decimal]:
        """필수 ID와 양수 금액 확인"""
        if not record_id:
            raise InvalidEvent("Missing record id", event.log_context())
        if amount is None:
            raise InvalidEvent(f"Missing amount: {record_id}", event.log_context())
        if amount <= ZERO:
            raise InvalidEvent(f"Non-positive amount {amount}: {record_id}", event.log_context())
        return record_id, amount

    @staticmethod
    def _account(code: str) -> AccountCode:
        account = get_account(code)
        if account is None:
            raise LookupFailure(f"Account {code} missing from chart of accounts", {"account_code": code})
        return account

    @staticmethod
    def _pair(
        transaction_id: str,
        amount: Decimal,
        debit_code: str,
        debit_name: str,
        debit_description: str,
        credit_code: str,
        credit_name: str,
        credit_description: str,
        transaction_date: date,
        source_type: SourceType,
        source_id: str,
    ) -> JournalTransaction:
        """차변 1행 + 대변 1행 (같은 금액)"""
        debit = JournalEntry(
            transaction_id=transaction_id,
            account_code=debit_code,
            account_name=debit_name,
            debit_amount=amount,
            credit_amount=ZERO,
            description=debit_description,
            transaction_date=transaction_date,
            source_type=source_type.value,
            source_id=source_id,
            reference_number=transaction_id,
        )
        credit = JournalEntry(
            transaction_id=transaction_id,
            account_code=credit_code,
            account_name=credit_name,
            debit_amount=ZERO,
            credit_amount=amount,
            description=credit_description,
            transaction_date=transaction_date,
            source_type=source_type.value,
            source_id=source_id,
            reference_number=transaction_id,
        )
        return JournalTransaction(transaction_id=transaction_id, entries=[debit, credit])

"""
도메인 레코드 모델

변경 알림의 행 이미지(dict)를 타입이 있는 레코드로 디코딩.
Ledger 코어는 이 레코드를 읽기만 함 (생성/소유는 외부 서브시스템).
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from core.errors import InvalidEvent
from core.types import FundStatus


def parse_decimal(value: Any, field_name: str) -> Decimal | None:
    """금액 필드를 Decimal로 변환

    float은 str을 거쳐 변환하여 이진 오차 전파 방지.

    Raises:
        InvalidEvent: 숫자로 해석할 수 없는 값
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidEvent(f"{field_name} must be numeric", {field_name: value})

    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidEvent(f"{field_name} is not a number: {value!r}", {field_name: value}) from e

    if not result.is_finite():
        raise InvalidEvent(f"{field_name} is not finite: {value!r}", {field_name: value})
    return result


def parse_date(value: Any, field_name: str) -> date | None:
    """날짜 필드 변환 ("2024-03-01" 또는 ISO datetime)"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value)
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError as e:
        raise InvalidEvent(f"{field_name} is not a date: {value!r}", {field_name: value}) from e


_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n", ""})


def parse_bool(value: Any, field_name: str) -> bool:
    """플래그 필드 변환 (0/1, bool, "true"/"false" 등 문자열)

    Raises:
        InvalidEvent: 해석할 수 없는 값
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise InvalidEvent(f"{field_name} is not a boolean: {value!r}", {field_name: value})


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class Expense:
    """지출"""

    id: str | None
    title: str
    amount: Decimal | None
    category_id: str | None
    fund_source_id: str | None
    expense_date: date | None
    status: str | None

    @staticmethod
    def from_row(row: dict[str, Any]) -> "Expense":
        """행 이미지에서 생성

        필수값 누락은 여기서 거부하지 않음 (Builder가 InvalidEvent 발생).
        """
        return Expense(
            id=_optional_str(row.get("id")),
            title=str(row.get("title") or ""),
            amount=parse_decimal(row.get("amount"), "amount"),
            category_id=_optional_str(row.get("category_id")),
            fund_source_id=_optional_str(row.get("fund_source_id")),
            expense_date=parse_date(row.get("expense_date"), "expense_date"),
            status=_optional_str(row.get("status")),
        )


@dataclass(frozen=True)
class FundSource:
    """기금 (기부금, 보조금)

    amount는 잔액. original_amount는 수령 당시 금액 (없을 수 있음).
    """

    id: str | None
    name: str
    amount: Decimal | None
    is_restricted: bool
    received_date: date | None
    status: str | None
    original_amount: Decimal | None = None

    @staticmethod
    def from_row(row: dict[str, Any]) -> "FundSource":
        """행 이미지에서 생성"""
        return FundSource(
            id=_optional_str(row.get("id")),
            name=str(row.get("name") or ""),
            amount=parse_decimal(row.get("amount"), "amount"),
            is_restricted=parse_bool(row.get("is_restricted"), "is_restricted"),
            received_date=parse_date(row.get("received_date"), "received_date"),
            status=_optional_str(row.get("status")) or FundStatus.RECEIVED.value,
            original_amount=parse_decimal(row.get("original_amount"), "original_amount"),
        )


@dataclass(frozen=True)
class BudgetCategory:
    """예산 카테고리 (읽기 전용)"""

    id: str
    name: str

"""도메인 레코드 디코딩 테스트"""

from datetime import date
from decimal import Decimal

import pytest

from core.domain.models import Expense, FundSource, parse_bool, parse_date, parse_decimal
from core.errors import InvalidEvent


class TestParseDecimal:
    def test_string(self) -> None:
        assert parse_decimal("500.25", "amount") == Decimal("500.25")

    def test_int(self) -> None:
        assert parse_decimal(500, "amount") == Decimal("500")

    def test_float_goes_through_str(self) -> None:
        """0.1 → Decimal('0.1') (이진 오차 없음)"""
        assert parse_decimal(0.1, "amount") == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_none(self, value: object) -> None:
        assert parse_decimal(value, "amount") is None

    @pytest.mark.parametrize("value", ["abc", True, "NaN", "Infinity"])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(InvalidEvent):
            parse_decimal(value, "amount")


class TestParseDate:
    def test_iso_date(self) -> None:
        assert parse_date("2024-03-01", "d") == date(2024, 3, 1)

    def test_iso_datetime(self) -> None:
        assert parse_date("2024-03-01T12:30:00Z", "d") == date(2024, 3, 1)

    def test_none(self) -> None:
        assert parse_date(None, "d") is None

    def test_invalid(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_date("03/01/2024", "d")


class TestExpenseFromRow:
    def test_full_row(self) -> None:
        expense = Expense.from_row({
            "id": "E1",
            "title": "Workshop venue",
            "amount": "500",
            "category_id": "C1",
            "fund_source_id": "F1",
            "expense_date": "2024-03-01",
            "status": "approved",
        })

        assert expense.id == "E1"
        assert expense.amount == Decimal("500")
        assert expense.expense_date == date(2024, 3, 1)
        assert expense.status == "approved"

    def test_blank_optional_fields(self) -> None:
        expense = Expense.from_row({"id": "E1", "amount": "5", "fund_source_id": "  "})

        assert expense.fund_source_id is None
        assert expense.category_id is None
        assert expense.title == ""

    def test_bad_amount_raises(self) -> None:
        with pytest.raises(InvalidEvent):
            Expense.from_row({"id": "E1", "amount": "five"})


class TestFundSourceFromRow:
    def test_sqlite_integer_flag(self) -> None:
        fund = FundSource.from_row({
            "id": "F1",
            "name": "Grant",
            "amount": "1000",
            "original_amount": "1000",
            "is_restricted": 1,
            "received_date": "2024-01-15",
        })

        assert fund.is_restricted is True
        assert fund.original_amount == Decimal("1000")
        assert fund.status == "received"

    def test_unrestricted_default(self) -> None:
        fund = FundSource.from_row({"id": "F1", "name": "Appeal", "amount": "10"})

        assert fund.is_restricted is False
        assert fund.original_amount is None

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("false", False),
            ("0", False),
            ("No", False),
            ("", False),
            ("true", True),
            (" TRUE ", True),
            ("1", True),
            (0, False),
            (True, True),
            (None, False),
        ],
    )
    def test_text_flag(self, value: object, expected: bool) -> None:
        fund = FundSource.from_row({"id": "F1", "name": "Grant", "amount": "10", "is_restricted": value})

        assert fund.is_restricted is expected

    def test_unknown_flag_rejected(self) -> None:
        with pytest.raises(InvalidEvent, match="is_restricted"):
            FundSource.from_row({"id": "F1", "name": "Grant", "amount": "10", "is_restricted": "maybe"})


class TestParseBool:
    def test_float_rejected(self) -> None:
        with pytest.raises(InvalidEvent):
            parse_bool(0.5, "flag")

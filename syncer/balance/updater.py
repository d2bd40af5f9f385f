"""
기금 잔액 업데이터

지급 이벤트의 금액만큼 기금 잔액을 줄이고 상태를 다시 계산.
잔액과 상태는 하나의 UPDATE ... RETURNING 문장으로 함께 저장되어,
같은 기금에 대한 동시 지급이 서로의 결과를 덮어쓰지 않음.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from core.errors import FundNotFound, PersistenceFailure
from core.types import FundStatus

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# 연결에 등록하는 SQL 함수 이름
CLAMP_ADD_FUNCTION = "ledger_clamp_add"
FUND_STATUS_FUNCTION = "ledger_fund_status"


def clamp_add(current: Decimal, delta: Decimal) -> Decimal:
    """잔액 + delta, 0 미만이면 0

    Example:
        >>> clamp_add(Decimal("200"), Decimal("-500"))
        Decimal('0')
    """
    return max(ZERO, current + delta)


def derive_fund_status(amount: Decimal, original_amount: Decimal | None) -> FundStatus:
    """잔액에서 기금 상태 도출

    - amount ≤ 0 → FULLY_USED
    - amount < original_amount → PARTIALLY_USED
    - 그 외 (원금 이상 또는 원금 정보 없음) → RECEIVED

    모든 (amount, original_amount) 조합에 대해 정의됨.
    """
    if amount <= ZERO:
        return FundStatus.FULLY_USED
    if original_amount is not None and amount < original_amount:
        return FundStatus.PARTIALLY_USED
    return FundStatus.RECEIVED


def _to_decimal(value: object) -> Decimal:
    # SQLite는 TEXT/INTEGER/REAL 어느 것이든 넘길 수 있음
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)  # type: ignore[arg-type]


def _sql_clamp_add(current: object, delta: object) -> str:
    return str(clamp_add(_to_decimal(current), _to_decimal(delta)))


def _sql_fund_status(amount: object, original_amount: object) -> str:
    original = None if original_amount is None else _to_decimal(original_amount)
    return derive_fund_status(_to_decimal(amount), original).value


@dataclass(frozen=True)
class UpdatedFundSource:
    """잔액 반영 결과"""

    id: str
    amount: Decimal
    status: FundStatus


class FundBalanceUpdater:
    """기금 잔액 업데이터

    new_amount = max(0, current + delta), status = derive_fund_status(new_amount, 기준금액)
    기준금액은 original_amount, 없으면 UPDATE 직전 잔액.

    Args:
        db: SQLite 어댑터 (쓰기 가능 연결)

    사용 예시:
    ```python
    updater = FundBalanceUpdater(db)
    result = await updater.apply_delta("F1", Decimal("-500"))
    print(result.amount, result.status)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self._functions_registered = False

    async def initialize(self) -> None:
        """SQL 함수 등록 (연결 단위, 최초 1회)"""
        if self._functions_registered:
            return

        await self.db.create_function(CLAMP_ADD_FUNCTION, 2, _sql_clamp_add)
        await self.db.create_function(FUND_STATUS_FUNCTION, 2, _sql_fund_status)
        self._functions_registered = True
        logger.debug("Fund balance SQL functions registered")

    async def apply_delta(self, fund_source_id: str, delta: Decimal) -> UpdatedFundSource:
        """기금 잔액에 delta 반영

        Args:
            fund_source_id: 기금 ID
            delta: 변화량 (지급은 음수)

        Returns:
            UpdatedFundSource (반영 후 잔액/상태)

        Raises:
            FundNotFound: 기금이 없음 (삭제와 경합)
            PersistenceFailure: UPDATE 실패
        """
        await self.initialize()

        now = datetime.now(timezone.utc).isoformat()

        try:
            rows = await self.db.execute_returning(
                f"""
                UPDATE fund_sources
                SET amount = {CLAMP_ADD_FUNCTION}(amount, ?),
                    status = {FUND_STATUS_FUNCTION}(
                        {CLAMP_ADD_FUNCTION}(amount, ?),
                        COALESCE(original_amount, amount)
                    ),
                    updated_at = ?
                WHERE id = ?
                RETURNING id, amount, status
                """,
                (str(delta), str(delta), now, fund_source_id),
            )
        except sqlite3.Error as e:
            raise PersistenceFailure(
                f"Failed to update fund balance {fund_source_id}: {e}",
                {"fund_source_id": fund_source_id, "delta": str(delta)},
            ) from e

        if not rows:
            raise FundNotFound(fund_source_id)

        row = rows[0]
        try:
            result = UpdatedFundSource(
                id=row[0],
                amount=_to_decimal(row[1]),
                status=FundStatus(row[2]),
            )
        except (InvalidOperation, ValueError) as e:
            raise PersistenceFailure(
                f"Unexpected fund row after update {fund_source_id}: {row!r}",
                {"fund_source_id": fund_source_id},
            ) from e

        logger.info(
            f"Fund balance updated: {fund_source_id} → {result.amount} ({result.status.value})",
            extra={"fund_source_id": fund_source_id, "delta": str(delta)},
        )
        return result

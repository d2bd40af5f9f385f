"""
RecordStore - 지출/기금/카테고리 저장소

expenses, fund_sources, budget_categories는 외부 서브시스템(지출 승인 UI,
기금 등록 화면)이 소유. 동기화기는 읽기만 하며, 쓰기 메서드는
스크립트/테스트에서 외부 서브시스템 역할을 대신할 때 사용.

기금 잔액 변경은 이 저장소가 아니라 FundBalanceUpdater 담당.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import BudgetCategory, Expense, FundSource
from core.types import ExpenseStatus, FundStatus

logger = logging.getLogger(__name__)

_EXPENSE_COLUMNS = "id, title, amount, category_id, fund_source_id, expense_date, status"
_FUND_COLUMNS = "id, name, amount, is_restricted, received_date, status, original_amount"


def _expense_from_db(row: tuple[Any, ...]) -> Expense:
    return Expense.from_row({
        "id": row[0],
        "title": row[1],
        "amount": row[2],
        "category_id": row[3],
        "fund_source_id": row[4],
        "expense_date": row[5],
        "status": row[6],
    })


def _fund_from_db(row: tuple[Any, ...]) -> FundSource:
    return FundSource.from_row({
        "id": row[0],
        "name": row[1],
        "amount": row[2],
        "is_restricted": row[3],
        "received_date": row[4],
        "status": row[5],
        "original_amount": row[6],
    })


class RecordStore:
    """비즈니스 레코드 저장소

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    store = RecordStore(db)
    category = await store.get_budget_category("C1")
    fund = await store.get_fund_source("F1")
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # =========================================================================
    # 조회
    # =========================================================================

    async def get_budget_category(self, category_id: str) -> BudgetCategory | None:
        """예산 카테고리 조회 (없으면 None)"""
        row = await self.db.fetchone(
            "SELECT id, name FROM budget_categories WHERE id = ?",
            (category_id,),
        )
        if not row:
            return None
        return BudgetCategory(id=row[0], name=row[1])

    async def get_expense(self, expense_id: str) -> Expense | None:
        """지출 조회 (없으면 None)"""
        row = await self.db.fetchone(
            f"SELECT {_EXPENSE_COLUMNS} FROM expenses WHERE id = ?",
            (expense_id,),
        )
        return _expense_from_db(row) if row else None

    async def get_fund_source(self, fund_source_id: str) -> FundSource | None:
        """기금 조회 (없으면 None)"""
        row = await self.db.fetchone(
            f"SELECT {_FUND_COLUMNS} FROM fund_sources WHERE id = ?",
            (fund_source_id,),
        )
        return _fund_from_db(row) if row else None

    async def list_fund_sources(self, status: str | None = None) -> list[FundSource]:
        """기금 목록 조회

        Args:
            status: 필터링할 기금 상태 (선택)
        """
        sql = f"SELECT {_FUND_COLUMNS} FROM fund_sources"
        params: tuple[Any, ...] = ()

        if status:
            sql += " WHERE status = ?"
            params = (status,)

        sql += " ORDER BY received_date, created_at"

        rows = await self.db.fetchall(sql, params)
        return [_fund_from_db(row) for row in rows]

    # =========================================================================
    # 쓰기 (외부 서브시스템 역할)
    # =========================================================================

    async def insert_budget_category(
        self,
        name: str,
        category_id: str | None = None,
        description: str | None = None,
    ) -> str:
        """예산 카테고리 생성

        Returns:
            생성된 category_id
        """
        rows = await self.db.execute_returning(
            """
            INSERT INTO budget_categories (id, name, description)
            VALUES (COALESCE(?, lower(hex(randomblob(16)))), ?, ?)
            RETURNING id
            """,
            (category_id, name, description),
        )
        return rows[0][0]

    async def insert_expense(
        self,
        title: str,
        amount: Decimal | str,
        expense_date: date,
        category_id: str | None = None,
        fund_source_id: str | None = None,
        status: ExpenseStatus = ExpenseStatus.DRAFT,
        expense_id: str | None = None,
    ) -> str:
        """지출 생성 (INSERT는 변경 알림 대상 아님)

        Returns:
            생성된 expense_id
        """
        rows = await self.db.execute_returning(
            """
            INSERT INTO expenses (id, title, amount, category_id, fund_source_id, expense_date, status)
            VALUES (COALESCE(?, lower(hex(randomblob(16)))), ?, ?, ?, ?, ?, ?)
            RETURNING id
            """,
            (
                expense_id,
                title,
                str(amount),
                category_id,
                fund_source_id,
                expense_date.isoformat(),
                ExpenseStatus(status).value,
            ),
        )
        return rows[0][0]

    async def update_expense_status(self, expense_id: str, status: ExpenseStatus) -> bool:
        """지출 상태 변경 (값이 바뀌면 트리거가 변경 알림 기록)

        Returns:
            True: 대상 행 존재, False: 없음
        """
        rows = await self.db.execute_returning(
            """
            UPDATE expenses
            SET status = ?, updated_at = datetime('now')
            WHERE id = ?
            RETURNING id
            """,
            (ExpenseStatus(status).value, expense_id),
        )

        if rows:
            logger.debug(f"Expense status updated: {expense_id} → {status}")
        return bool(rows)

    async def insert_fund_source(
        self,
        name: str,
        amount: Decimal | str,
        is_restricted: bool = False,
        received_date: date | None = None,
        fund_source_id: str | None = None,
    ) -> str:
        """기금 등록 (트리거가 변경 알림 기록)

        original_amount는 수령 금액으로 고정.

        Returns:
            생성된 fund_source_id
        """
        rows = await self.db.execute_returning(
            """
            INSERT INTO fund_sources (id, name, amount, original_amount, is_restricted, received_date, status)
            VALUES (COALESCE(?, lower(hex(randomblob(16)))), ?, ?, ?, ?, ?, ?)
            RETURNING id
            """,
            (
                fund_source_id,
                name,
                str(amount),
                str(amount),
                1 if is_restricted else 0,
                received_date.isoformat() if received_date else None,
                FundStatus.RECEIVED.value,
            ),
        )
        return rows[0][0]

    async def delete_fund_source(self, fund_source_id: str) -> bool:
        """기금 삭제 (관리 화면 역할. 이후 지급 이벤트는 FundNotFound)"""
        rows = await self.db.execute_returning(
            "DELETE FROM fund_sources WHERE id = ? RETURNING id",
            (fund_source_id,),
        )
        return bool(rows)

"""
Ledger 저장소

복식부기 분개 저장 및 조회.
journal_entries는 append-only: 수정/삭제 메서드 없음.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.errors import PersistenceFailure
from core.ledger.entry_builder import ZERO, JournalEntry, JournalTransaction
from core.ledger.types import CHART_OF_ACCOUNTS, JournalSide

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

_INSERT_COLUMNS = (
    "transaction_id",
    "account_code",
    "account_name",
    "debit_amount",
    "credit_amount",
    "description",
    "transaction_date",
    "source_type",
    "source_id",
    "reference_number",
)

_SELECT_COLUMNS = ("id",) + _INSERT_COLUMNS

_ROW_PLACEHOLDER = "(" + ", ".join("?" for _ in _INSERT_COLUMNS) + ")"


def _row_to_entry(row: tuple[Any, ...]) -> JournalEntry:
    return JournalEntry(
        id=row[0],
        transaction_id=row[1],
        account_code=row[2],
        account_name=row[3],
        debit_amount=Decimal(row[4]),
        credit_amount=Decimal(row[5]),
        description=row[6],
        transaction_date=date.fromisoformat(row[7]),
        source_type=row[8],
        source_id=row[9],
        reference_number=row[10],
    )


def _entry_params(entry: JournalEntry) -> tuple[Any, ...]:
    return (
        entry.transaction_id,
        entry.account_code,
        entry.account_name,
        str(entry.debit_amount),
        str(entry.credit_amount),
        entry.description,
        entry.transaction_date.isoformat(),
        entry.source_type,
        entry.source_id,
        entry.reference_number,
    )


class LedgerStore:
    """Ledger 저장소

    분개 묶음을 단일 INSERT 문장으로 저장하여 all-or-nothing 보장.
    잔액/시산표는 저장된 행에서 Decimal로 계산 (별도 잔액 테이블 없음).

    Args:
        db: SQLite 어댑터
        dedupe_transactions: True면 같은 transaction_id가 이미 있을 때 저장 생략
    """

    def __init__(self, db: SQLiteAdapter, dedupe_transactions: bool = False):
        self.db = db
        self.dedupe_transactions = dedupe_transactions

    async def save_transaction(self, transaction: JournalTransaction) -> bool:
        """분개 묶음 저장

        Args:
            transaction: 저장할 분개 묶음

        Returns:
            True: 저장됨, False: 중복으로 생략됨 (dedupe_transactions일 때만)

        Raises:
            PersistenceFailure: 불균형 분개 또는 DB 오류 (아무 행도 저장되지 않음)
        """
        if not transaction.is_balanced():
            raise PersistenceFailure(
                f"Unbalanced transaction: {transaction.transaction_id}",
                {
                    "transaction_id": transaction.transaction_id,
                    "total_debit": str(transaction.total_debit),
                    "total_credit": str(transaction.total_credit),
                },
            )

        params: list[Any] = []
        for entry in transaction.entries:
            params.extend(_entry_params(entry))

        values_sql = ", ".join(_ROW_PLACEHOLDER for _ in transaction.entries)
        columns_sql = ", ".join(_INSERT_COLUMNS)

        if self.dedupe_transactions:
            sql = f"""
                INSERT INTO journal_entries ({columns_sql})
                SELECT * FROM (VALUES {values_sql})
                WHERE NOT EXISTS (
                    SELECT 1 FROM journal_entries WHERE transaction_id = ?
                )
            """
            params.append(transaction.transaction_id)
        else:
            sql = f"INSERT INTO journal_entries ({columns_sql}) VALUES {values_sql}"

        try:
            cursor = await self.db.execute(sql, tuple(params))
            inserted = cursor.rowcount
            await cursor.close()
        except sqlite3.Error as e:
            raise PersistenceFailure(
                f"Failed to save journal transaction {transaction.transaction_id}: {e}",
                {"transaction_id": transaction.transaction_id},
            ) from e

        if inserted == 0:
            logger.info(f"Duplicate journal transaction skipped: {transaction.transaction_id}")
            return False

        logger.debug(f"Saved journal transaction: {transaction.transaction_id} ({inserted} rows)")
        return True

    async def get_transaction(self, transaction_id: str) -> JournalTransaction | None:
        """transaction_id로 분개 묶음 조회

        Args:
            transaction_id: 예) "EXP-E1"

        Returns:
            JournalTransaction (없으면 None). 중복 저장된 경우 모든 행 포함.
        """
        rows = await self.db.fetchall(
            f"""
            SELECT {", ".join(_SELECT_COLUMNS)}
            FROM journal_entries
            WHERE transaction_id = ?
            ORDER BY created_at, rowid
            """,
            (transaction_id,),
        )

        if not rows:
            return None

        return JournalTransaction(
            transaction_id=transaction_id,
            entries=[_row_to_entry(row) for row in rows],
        )

    async def list_entries(
        self,
        account_code: str | None = None,
        source_type: str | None = None,
        source_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[JournalEntry]:
        """분개 행 조회 (필터 선택)

        Args:
            account_code: 계정 코드
            source_type: expense / payment / fund_receipt
            source_id: 원천 레코드 ID
            date_from: 거래일 시작 (포함)
            date_to: 거래일 끝 (포함)
            limit: 조회 개수 제한
            offset: 시작 위치

        Returns:
            거래일 내림차순 분개 행 목록
        """
        sql = f"SELECT {', '.join(_SELECT_COLUMNS)} FROM journal_entries WHERE 1 = 1"
        params: list[Any] = []

        if account_code:
            sql += " AND account_code = ?"
            params.append(account_code)

        if source_type:
            sql += " AND source_type = ?"
            params.append(source_type)

        if source_id:
            sql += " AND source_id = ?"
            params.append(source_id)

        if date_from:
            sql += " AND transaction_date >= ?"
            params.append(date_from.isoformat())

        if date_to:
            sql += " AND transaction_date <= ?"
            params.append(date_to.isoformat())

        sql += " ORDER BY transaction_date DESC, created_at DESC, rowid DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        rows = await self.db.fetchall(sql, tuple(params))
        return [_row_to_entry(row) for row in rows]

    async def count_entries(self) -> int:
        """전체 분개 행 수"""
        row = await self.db.fetchone("SELECT COUNT(*) FROM journal_entries")
        return int(row[0]) if row else 0

    async def _sum_by_account(self) -> dict[str, tuple[Decimal, Decimal]]:
        """계정별 (차변 합계, 대변 합계)

        TEXT 금액을 SQL에서 더하면 REAL로 변환되므로 합산은 Python Decimal로 수행.
        """
        rows = await self.db.fetchall(
            "SELECT account_code, debit_amount, credit_amount FROM journal_entries"
        )

        totals: dict[str, tuple[Decimal, Decimal]] = {}
        for code, debit, credit in rows:
            total_debit, total_credit = totals.get(code, (ZERO, ZERO))
            totals[code] = (total_debit + Decimal(debit), total_credit + Decimal(credit))
        return totals

    async def get_account_balance(self, account_code: str) -> Decimal:
        """계정 잔액 조회

        정상잔액 방향 기준 (자산/비용: 차변-대변, 부채/순자산/수익: 대변-차변).
        계정과목표에 없는 코드는 차변 기준.

        Args:
            account_code: 계정 코드

        Returns:
            잔액 (분개 없으면 0)
        """
        rows = await self.db.fetchall(
            "SELECT debit_amount, credit_amount FROM journal_entries WHERE account_code = ?",
            (account_code,),
        )

        total_debit = sum((Decimal(row[0]) for row in rows), ZERO)
        total_credit = sum((Decimal(row[1]) for row in rows), ZERO)

        normal = next(
            (a.normal_balance for a in CHART_OF_ACCOUNTS if a.code == account_code),
            JournalSide.DEBIT,
        )
        if normal == JournalSide.CREDIT:
            return total_credit - total_debit
        return total_debit - total_credit

    async def get_trial_balance(self) -> dict[str, Any]:
        """시산표 조회

        Returns:
            {
                "accounts": [{code, name, account_type, total_debit, total_credit, balance}],
                "total_debit": Decimal,
                "total_credit": Decimal,
                "is_balanced": bool,
            }
            분개가 있는 계정만 포함.
        """
        totals = await self._sum_by_account()
        chart = {a.code: a for a in CHART_OF_ACCOUNTS}

        accounts: list[dict[str, Any]] = []
        for code in sorted(totals):
            total_debit, total_credit = totals[code]
            account = chart.get(code)
            if account is not None and account.normal_balance == JournalSide.CREDIT:
                balance = total_credit - total_debit
            else:
                balance = total_debit - total_credit

            accounts.append({
                "code": code,
                "name": account.name if account else code,
                "account_type": account.account_type.value if account else None,
                "total_debit": total_debit,
                "total_credit": total_credit,
                "balance": balance,
            })

        grand_debit = sum((a["total_debit"] for a in accounts), ZERO)
        grand_credit = sum((a["total_credit"] for a in accounts), ZERO)

        return {
            "accounts": accounts,
            "total_debit": grand_debit,
            "total_credit": grand_credit,
            "is_balanced": grand_debit == grand_credit,
        }

    async def find_unbalanced_transactions(self) -> list[dict[str, Any]]:
        """차변/대변 합계가 다른 transaction_id 목록 (정합성 점검용)"""
        rows = await self.db.fetchall(
            "SELECT transaction_id, debit_amount, credit_amount FROM journal_entries"
        )

        totals: dict[str, tuple[Decimal, Decimal]] = {}
        for transaction_id, debit, credit in rows:
            total_debit, total_credit = totals.get(transaction_id, (ZERO, ZERO))
            totals[transaction_id] = (total_debit + Decimal(debit), total_credit + Decimal(credit))

        return [
            {
                "transaction_id": transaction_id,
                "total_debit": total_debit,
                "total_credit": total_credit,
            }
            for transaction_id, (total_debit, total_credit) in sorted(totals.items())
            if total_debit != total_credit
        ]

    async def find_duplicate_transactions(self) -> list[dict[str, Any]]:
        """2행을 초과하는 transaction_id 목록 (재전달로 인한 중복 점검용)"""
        rows = await self.db.fetchall(
            """
            SELECT transaction_id, COUNT(*) as entry_count
            FROM journal_entries
            GROUP BY transaction_id
            HAVING COUNT(*) > 2
            ORDER BY transaction_id
            """
        )
        return [{"transaction_id": row[0], "entry_count": row[1]} for row in rows]

    async def list_accounts(self, account_type: str | None = None) -> list[dict[str, Any]]:
        """계정과목표 조회

        Args:
            account_type: 필터링할 계정 유형 (선택)
        """
        sql = "SELECT code, name, account_type, normal_balance FROM chart_of_accounts WHERE is_active = 1"
        params: list[Any] = []

        if account_type:
            sql += " AND account_type = ?"
            params.append(account_type)

        sql += " ORDER BY code"

        rows = await self.db.fetchall(sql, tuple(params))

        return [
            {
                "code": row[0],
                "name": row[1],
                "account_type": row[2],
                "normal_balance": row[3],
            }
            for row in rows
        ]

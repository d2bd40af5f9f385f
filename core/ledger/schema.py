"""
복식부기 스키마 초기화

Sync/Web 시작 시 자동으로 Ledger 테이블과 View 생성.
CREATE IF NOT EXISTS / DROP VIEW IF EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

from core.ledger.types import CHART_OF_ACCOUNTS

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화 (테이블 + View + 계정과목표)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_views(db)
    await _insert_chart_of_accounts(db)
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # 계정과목표
    await db.execute("""
        CREATE TABLE IF NOT EXISTS chart_of_accounts (
            code             TEXT PRIMARY KEY,
            name             TEXT NOT NULL,
            account_type     TEXT NOT NULL,
            normal_balance   TEXT NOT NULL,
            is_active        INTEGER NOT NULL DEFAULT 1
        )
    """)

    # 분개 행 (append-only, 금액은 Decimal 문자열)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_entries (
            id               TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
            transaction_id   TEXT NOT NULL,
            account_code     TEXT NOT NULL,
            account_name     TEXT NOT NULL,
            debit_amount     TEXT NOT NULL DEFAULT '0',
            credit_amount    TEXT NOT NULL DEFAULT '0',
            description      TEXT NOT NULL,
            transaction_date TEXT NOT NULL,
            source_type      TEXT NOT NULL,
            source_id        TEXT,
            reference_number TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # 인덱스 생성
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_entries_txn ON journal_entries(transaction_id)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_entries_account ON journal_entries(account_code)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_entries_date ON journal_entries(transaction_date)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_journal_entries_source ON journal_entries(source_type, source_id)")

    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_views(db: "SQLiteAdapter") -> None:
    """Ledger View 생성

    View는 항상 DROP 후 CREATE하여 스키마 변경 시에도 안전.
    REAL 캐스팅은 화면 표시용. 정확한 합계는 LedgerStore에서 Decimal로 계산.
    """
    # 계정별 거래 내역 View (v_account_ledger)
    await db.execute("DROP VIEW IF EXISTS v_account_ledger")
    await db.execute("""
        CREATE VIEW v_account_ledger AS
        SELECT
            je.transaction_date,
            je.transaction_id,
            je.account_code,
            coa.account_type,
            je.account_name,
            CAST(je.debit_amount AS REAL) as debit_amount,
            CAST(je.credit_amount AS REAL) as credit_amount,
            CAST(je.debit_amount AS REAL) - CAST(je.credit_amount AS REAL) as signed_amount,
            je.source_type,
            je.source_id,
            je.description
        FROM journal_entries je
        LEFT JOIN chart_of_accounts coa ON je.account_code = coa.code
        ORDER BY je.account_code, je.transaction_date, je.created_at
    """)

    logger.debug("Ledger View 생성 완료")


async def _insert_chart_of_accounts(db: "SQLiteAdapter") -> None:
    """계정과목표 삽입

    CHART_OF_ACCOUNTS의 모든 계정을 생성.
    이미 존재하는 계정은 무시 (INSERT OR IGNORE).
    """
    await db.executemany(
        """
        INSERT OR IGNORE INTO chart_of_accounts (code, name, account_type, normal_balance)
        VALUES (?, ?, ?, ?)
        """,
        [
            (
                account.code,
                account.name,
                account.account_type.value,
                account.normal_balance.value,
            )
            for account in CHART_OF_ACCOUNTS
        ],
    )
    logger.debug("계정과목표 삽입 완료")

"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Sync 프로세스와 Web이 동시에 접근 가능하도록 설정.

연결은 autocommit(isolation_level=None)으로 열림.
쓰기는 단일 문장 단위로 원자적.
하나의 연결을 여러 task가 공유하므로 명시적 트랜잭션을 열지 않음.
"""

import logging
from pathlib import Path
from typing import Any, Callable

import aiosqlite

from core.constants import Paths
from core.types import Environment

logger = logging.getLogger(__name__)


def get_db_path(environment: Environment | str) -> Path:
    """환경에 따른 DB 경로 반환

    Args:
        environment: 실행 환경 (PRODUCTION/SANDBOX)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if isinstance(environment, str):
        environment = Environment(environment.lower())

    if environment == Environment.PRODUCTION:
        return Paths.PROD_DB
    return Paths.SANDBOX_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드, autocommit)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(
            f"file:{db_path_str}?mode=ro", uri=True, isolation_level=None
        )
    else:
        conn = await aiosqlite.connect(db_path_str, isolation_level=None)
        # WAL 모드 설정 (읽기 전용 연결에서는 변경 불가)
        await conn.execute("PRAGMA journal_mode=WAL")

    # 동시 접근 설정
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기

    # 외래 키 제약 활성화
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    여러 행 쓰기는 다중 VALUES 단일 문장으로 묶음.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    await adapter.execute("INSERT INTO ... VALUES (?, ?), (?, ?)", params)
    rows = await adapter.fetchall("SELECT ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        conn = self._require_conn()

        if parameters:
            return await conn.execute(sql, parameters)
        return await conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        return await self._require_conn().executemany(sql, parameters)

    async def execute_returning(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """RETURNING 절이 있는 쓰기 실행

        결과를 모두 읽어 문장을 종료시켜야 autocommit이 완료됨.
        """
        cursor = await self.execute(sql, parameters)
        try:
            return list(await cursor.fetchall())
        finally:
            await cursor.close()

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return await cursor.fetchone()
        finally:
            await cursor.close()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        try:
            return list(await cursor.fetchall())
        finally:
            await cursor.close()

    async def create_function(
        self,
        name: str,
        num_params: int,
        func: Callable[..., Any],
        deterministic: bool = True,
    ) -> None:
        """SQL 사용자 함수 등록 (연결 단위)"""
        await self._require_conn().create_function(
            name, num_params, func, deterministic=deterministic
        )

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """도메인 스키마 초기화 (테이블 + 변경 알림 트리거)

    expenses, fund_sources, budget_categories는 외부 서브시스템 소유.
    변경 알림은 트리거가 change_log에 새 행 이미지(JSON)를 기록하여 구현.

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # budget_categories
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS budget_categories (
            id               TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
            name             TEXT NOT NULL,
            description      TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # fund_sources (amount = 잔액, original_amount = 수령 금액)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS fund_sources (
            id               TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
            name             TEXT NOT NULL,
            amount           TEXT NOT NULL,
            original_amount  TEXT,
            is_restricted    INTEGER NOT NULL DEFAULT 0,
            received_date    TEXT,
            status           TEXT NOT NULL DEFAULT 'received',

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # expenses (fund_source_id는 FK 없음: 기금 삭제와 이벤트 경합 허용)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS expenses (
            id               TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
            title            TEXT NOT NULL,
            amount           TEXT NOT NULL,
            category_id      TEXT,
            fund_source_id   TEXT,
            expense_date     TEXT NOT NULL,
            status           TEXT NOT NULL DEFAULT 'draft',

            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # change_log (행 단위 변경 알림)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS change_log (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            table_name       TEXT NOT NULL,
            operation        TEXT NOT NULL,
            row_json         TEXT NOT NULL,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # checkpoint_store
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS checkpoint_store (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            checkpoint_type  TEXT NOT NULL UNIQUE,
            last_seq         INTEGER NOT NULL DEFAULT 0,
            last_ts          TEXT,
            metadata_json    TEXT,
            updated_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # 기금 INSERT 알림
    await adapter.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_fund_sources_insert
        AFTER INSERT ON fund_sources
        BEGIN
            INSERT INTO change_log (table_name, operation, row_json)
            VALUES ('fund_sources', 'INSERT', json_object(
                'id', NEW.id,
                'name', NEW.name,
                'amount', NEW.amount,
                'original_amount', NEW.original_amount,
                'is_restricted', NEW.is_restricted,
                'received_date', NEW.received_date,
                'status', NEW.status
            ));
        END
    """)

    # 지출 상태 전이 알림 (status가 실제로 바뀐 UPDATE만)
    await adapter.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_expenses_status_update
        AFTER UPDATE OF status ON expenses
        WHEN NEW.status IS NOT OLD.status
        BEGIN
            INSERT INTO change_log (table_name, operation, row_json)
            VALUES ('expenses', 'UPDATE', json_object(
                'id', NEW.id,
                'title', NEW.title,
                'amount', NEW.amount,
                'category_id', NEW.category_id,
                'fund_source_id', NEW.fund_source_id,
                'expense_date', NEW.expense_date,
                'status', NEW.status
            ));
        END
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_expenses_status
        ON expenses(status)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_fund_sources_status
        ON fund_sources(status)
    """)

    logger.info("스키마 초기화 완료")

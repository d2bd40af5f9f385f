"""
SQLite 어댑터 테스트

SQLiteAdapter, 스키마, 변경 알림 트리거 테스트.
"""

import json
import sqlite3
from datetime import date
from pathlib import Path

import pytest

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    create_connection,
    get_db_path,
    init_schema,
)
from core.constants import Paths
from core.storage.record_store import RecordStore
from core.types import Environment, ExpenseStatus


class TestGetDbPath:
    """get_db_path 테스트"""

    def test_production(self) -> None:
        path = get_db_path(Environment.PRODUCTION)

        assert path == Paths.PROD_DB
        assert isinstance(path, Path)

    def test_sandbox(self) -> None:
        assert get_db_path(Environment.SANDBOX) == Paths.SANDBOX_DB

    def test_string(self) -> None:
        assert get_db_path("Production") == Paths.PROD_DB


class TestCreateConnection:
    """create_connection 테스트"""

    @pytest.mark.asyncio
    async def test_wal_and_autocommit(self, tmp_path: Path) -> None:
        conn = await create_connection(tmp_path / "test.db")

        cursor = await conn.execute("PRAGMA journal_mode")
        row = await cursor.fetchone()
        assert row[0].upper() == "WAL"
        assert conn.isolation_level is None

        await conn.close()

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "subdir" / "test.db"

        conn = await create_connection(db_path)

        assert db_path.parent.exists()
        await conn.close()


class TestSQLiteAdapter:
    """SQLiteAdapter 테스트"""

    @pytest.mark.asyncio
    async def test_connect_close(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "test.db")
        assert not adapter.is_connected

        await adapter.connect()
        assert adapter.is_connected

        await adapter.close()
        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_execute_without_connection(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "test.db")

        with pytest.raises(RuntimeError, match="Not connected"):
            await adapter.fetchone("SELECT 1")

    @pytest.mark.asyncio
    async def test_context_manager(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "test.db") as adapter:
            assert adapter.is_connected
            assert await adapter.fetchone("SELECT 1") == (1,)

        assert not adapter.is_connected

    @pytest.mark.asyncio
    async def test_autocommit_visible_to_other_connection(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        async with SQLiteAdapter(db_path) as writer:
            await writer.execute("CREATE TABLE t (v TEXT)")
            await writer.execute("INSERT INTO t VALUES ('x')")

            async with SQLiteAdapter(db_path, readonly=True) as reader:
                assert await reader.fetchone("SELECT v FROM t") == ("x",)

    @pytest.mark.asyncio
    async def test_readonly_rejects_writes(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        async with SQLiteAdapter(db_path) as writer:
            await writer.execute("CREATE TABLE t (v TEXT)")

            async with SQLiteAdapter(db_path, readonly=True) as reader:
                with pytest.raises(sqlite3.OperationalError, match="readonly"):
                    await reader.execute("INSERT INTO t VALUES ('x')")

    @pytest.mark.asyncio
    async def test_create_function(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "test.db") as adapter:
            await adapter.create_function("double_it", 1, lambda v: v * 2)

            assert await adapter.fetchone("SELECT double_it(21)") == (42,)


class TestInitSchema:
    """도메인 스키마 + 트리거"""

    @pytest.mark.asyncio
    async def test_tables_created(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "test.db") as adapter:
            await init_schema(adapter)

            rows = await adapter.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")
            assert {"budget_categories", "fund_sources", "expenses", "change_log", "checkpoint_store"} <= {
                r[0] for r in rows
            }

    @pytest.mark.asyncio
    async def test_idempotent(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "test.db") as adapter:
            await init_schema(adapter)
            await init_schema(adapter)

            triggers = await adapter.fetchall("SELECT name FROM sqlite_master WHERE type = 'trigger'")
            assert sorted(r[0] for r in triggers) == [
                "trg_expenses_status_update",
                "trg_fund_sources_insert",
            ]

    @pytest.mark.asyncio
    async def test_fund_insert_writes_change_log(self, db: SQLiteAdapter) -> None:
        records = RecordStore(db)
        await records.insert_fund_source("Water Grant", "10000", is_restricted=True, fund_source_id="F1")

        rows = await db.fetchall("SELECT table_name, operation, row_json FROM change_log")

        assert len(rows) == 1
        table_name, operation, row_json = rows[0]
        assert (table_name, operation) == ("fund_sources", "INSERT")
        image = json.loads(row_json)
        assert image["id"] == "F1"
        assert image["amount"] == "10000"
        assert image["is_restricted"] == 1

    @pytest.mark.asyncio
    async def test_expense_insert_not_logged(self, db: SQLiteAdapter) -> None:
        await RecordStore(db).insert_expense("Venue", "500", date(2024, 3, 1), expense_id="E1")

        assert await db.fetchall("SELECT seq FROM change_log") == []

    @pytest.mark.asyncio
    async def test_status_change_logged_once(self, db: SQLiteAdapter) -> None:
        records = RecordStore(db)
        await records.insert_expense("Venue", "500", date(2024, 3, 1), expense_id="E1")

        await records.update_expense_status("E1", ExpenseStatus.APPROVED)
        # 같은 값으로 UPDATE: 알림 없음
        await records.update_expense_status("E1", ExpenseStatus.APPROVED)

        rows = await db.fetchall("SELECT operation, row_json FROM change_log")
        assert len(rows) == 1
        assert json.loads(rows[0][1])["status"] == "approved"

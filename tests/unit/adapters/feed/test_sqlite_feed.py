"""SQLiteChangeFeed 테스트"""

import asyncio
from datetime import date

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.feed.sqlite_feed import SQLiteChangeFeed
from core.domain.events import ChangeNotification
from core.storage.record_store import RecordStore
from core.types import ExpenseStatus


async def _drain(queue: "asyncio.Queue[ChangeNotification]") -> list[ChangeNotification]:
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


class TestPollOnce:
    """poll_once 테스트"""

    @pytest.mark.asyncio
    async def test_delivers_in_commit_order(self, db: SQLiteAdapter) -> None:
        records = RecordStore(db)
        await records.insert_fund_source("Grant A", "100", fund_source_id="F1")
        await records.insert_expense("Venue", "50", date(2024, 3, 1), expense_id="E1")
        await records.update_expense_status("E1", ExpenseStatus.APPROVED)
        await records.update_expense_status("E1", ExpenseStatus.PAID)

        feed = SQLiteChangeFeed(db)
        queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()

        delivered = await feed.poll_once(queue)

        items = await _drain(queue)
        assert delivered == 3
        assert [(n.table, n.operation) for n in items] == [
            ("fund_sources", "INSERT"),
            ("expenses", "UPDATE"),
            ("expenses", "UPDATE"),
        ]
        assert [n.new_row.get("status") for n in items[1:]] == ["approved", "paid"]
        assert [n.seq for n in items] == sorted(n.seq for n in items)

    @pytest.mark.asyncio
    async def test_checkpoint_advances(self, db: SQLiteAdapter) -> None:
        records = RecordStore(db)
        await records.insert_fund_source("Grant A", "100", fund_source_id="F1")

        feed = SQLiteChangeFeed(db)
        queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()

        assert await feed.poll_once(queue) == 1
        assert await feed.poll_once(queue) == 0

        await records.insert_fund_source("Grant B", "200", fund_source_id="F2")
        assert await feed.poll_once(queue) == 1

        items = await _drain(queue)
        assert [n.new_row["id"] for n in items] == ["F1", "F2"]

    @pytest.mark.asyncio
    async def test_checkpoint_survives_new_feed_instance(self, db: SQLiteAdapter) -> None:
        await RecordStore(db).insert_fund_source("Grant A", "100", fund_source_id="F1")
        queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()

        await SQLiteChangeFeed(db).poll_once(queue)

        assert await SQLiteChangeFeed(db).poll_once(queue) == 0

    @pytest.mark.asyncio
    async def test_batch_size_limits_read(self, db: SQLiteAdapter) -> None:
        records = RecordStore(db)
        for i in range(5):
            await records.insert_fund_source(f"Grant {i}", "100", fund_source_id=f"F{i}")

        feed = SQLiteChangeFeed(db, batch_size=2)
        queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()

        assert await feed.poll_once(queue) == 2
        assert await feed.poll_once(queue) == 2
        assert await feed.poll_once(queue) == 1

    @pytest.mark.asyncio
    async def test_undecodable_row_skipped(self, db: SQLiteAdapter) -> None:
        await db.execute(
            "INSERT INTO change_log (table_name, operation, row_json) VALUES (?, ?, ?)",
            ("expenses", "UPDATE", "{broken"),
        )
        await RecordStore(db).insert_fund_source("Grant A", "100", fund_source_id="F1")

        feed = SQLiteChangeFeed(db)
        queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()

        assert await feed.poll_once(queue) == 1
        assert await feed.poll_once(queue) == 0

    @pytest.mark.asyncio
    async def test_skip_to_latest(self, db: SQLiteAdapter) -> None:
        records = RecordStore(db)
        await records.insert_fund_source("Grant A", "100", fund_source_id="F1")
        await records.insert_fund_source("Grant B", "100", fund_source_id="F2")

        feed = SQLiteChangeFeed(db)
        latest = await feed.skip_to_latest()

        assert latest == 2
        assert await feed.poll_once(asyncio.Queue()) == 0


class TestPollLoop:
    """start/stop 테스트"""

    @pytest.mark.asyncio
    async def test_start_polls_until_stopped(self, db: SQLiteAdapter) -> None:
        feed = SQLiteChangeFeed(db, poll_interval_sec=0.01)
        queue: asyncio.Queue[ChangeNotification] = asyncio.Queue()

        await feed.start(queue)
        assert feed.is_running

        await RecordStore(db).insert_fund_source("Grant A", "100", fund_source_id="F1")
        notification = await asyncio.wait_for(queue.get(), timeout=2.0)

        await feed.stop()

        assert not feed.is_running
        assert notification.new_row["id"] == "F1"
        assert feed.get_stats()["delivered_count"] == 1

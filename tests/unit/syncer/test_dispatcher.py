"""ChangeEventDispatcher 테스트"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from adapters.mock.change_feed import MockChangeFeed
from core.domain.events import BusinessEvent, ChangeNotification
from core.domain.models import Expense, FundSource
from core.types import EventKind
from syncer.dispatcher.dispatcher import ChangeEventDispatcher


def _expense_row(status: str, **overrides) -> dict:
    row = {
        "id": "E1",
        "title": "Venue",
        "amount": "500",
        "category_id": "C1",
        "fund_source_id": "F1",
        "expense_date": "2024-03-01",
        "status": status,
    }
    row.update(overrides)
    return row


@pytest.fixture
def synchronizer() -> MagicMock:
    mock = MagicMock()
    mock.handle = AsyncMock(return_value="persisted")
    return mock


class TestDispatch:
    """dispatch (알림 1건) 테스트"""

    @pytest.mark.asyncio
    async def test_approved_creates_event(self, synchronizer: MagicMock) -> None:
        dispatcher = ChangeEventDispatcher(synchronizer)
        notification = ChangeNotification("expenses", "UPDATE", _expense_row("approved"), seq=9)

        tasks = await dispatcher.dispatch(notification)
        await asyncio.gather(*tasks)

        synchronizer.handle.assert_awaited_once()
        event: BusinessEvent = synchronizer.handle.await_args.args[0]
        assert event.kind == EventKind.EXPENSE_APPROVED
        assert isinstance(event.record, Expense)
        assert event.notification_seq == 9
        assert event.raw_row["id"] == "E1"

    @pytest.mark.asyncio
    async def test_fund_insert_creates_event(self, synchronizer: MagicMock) -> None:
        dispatcher = ChangeEventDispatcher(synchronizer)
        notification = ChangeNotification(
            "fund_sources", "INSERT", {"id": "F1", "name": "Grant", "amount": "100", "is_restricted": 0}
        )

        await asyncio.gather(*await dispatcher.dispatch(notification))

        event: BusinessEvent = synchronizer.handle.await_args.args[0]
        assert event.kind == EventKind.FUND_RECEIVED
        assert isinstance(event.record, FundSource)

    @pytest.mark.asyncio
    async def test_unsubscribed_ignored(self, synchronizer: MagicMock) -> None:
        dispatcher = ChangeEventDispatcher(synchronizer)

        tasks = await dispatcher.dispatch(
            ChangeNotification("expenses", "UPDATE", _expense_row("rejected"))
        )

        assert tasks == []
        synchronizer.handle.assert_not_called()
        assert dispatcher.get_stats()["ignored_count"] == 1

    @pytest.mark.asyncio
    async def test_undecodable_dropped(self, synchronizer: MagicMock) -> None:
        dispatcher = ChangeEventDispatcher(synchronizer)

        tasks = await dispatcher.dispatch(
            ChangeNotification("expenses", "UPDATE", _expense_row("paid", amount="n/a"))
        )

        assert tasks == []
        synchronizer.handle.assert_not_called()
        assert dispatcher.get_stats()["dropped_count"] == 1

    @pytest.mark.asyncio
    async def test_synchronizer_exception_contained(self, synchronizer: MagicMock) -> None:
        synchronizer.handle = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = ChangeEventDispatcher(synchronizer)

        tasks = await dispatcher.dispatch(
            ChangeNotification("expenses", "UPDATE", _expense_row("paid"))
        )
        results = await asyncio.gather(*tasks)

        assert results == ["errored"]
        assert dispatcher.in_flight_count == 0


class TestConsumeLoop:
    """큐 소비 / backpressure / 종료"""

    @pytest.mark.asyncio
    async def test_consumes_from_feed(self, synchronizer: MagicMock) -> None:
        dispatcher = ChangeEventDispatcher(synchronizer)
        feed = MockChangeFeed()
        await feed.start(dispatcher.queue)
        await dispatcher.start()

        await feed.emit_expense_update(_expense_row("approved"))
        await feed.emit_expense_update(_expense_row("paid"))
        await feed.emit_fund_insert({"id": "F9", "name": "Grant", "amount": "10"})
        await dispatcher.wait_idle()

        kinds = [call.args[0].kind for call in synchronizer.handle.await_args_list]
        assert sorted(k.value for k in kinds) == ["expense_approved", "expense_paid", "fund_received"]

        await dispatcher.stop()
        assert not dispatcher.is_running
        assert dispatcher.get_stats()["received_count"] == 3

    @pytest.mark.asyncio
    async def test_max_in_flight_limits_concurrency(self) -> None:
        release = asyncio.Event()
        running = 0
        peak = 0

        async def slow_handle(event: BusinessEvent) -> str:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await release.wait()
            running -= 1
            return "persisted"

        synchronizer = MagicMock()
        synchronizer.handle = slow_handle

        dispatcher = ChangeEventDispatcher(synchronizer, max_in_flight=2)
        await dispatcher.start()
        for i in range(5):
            await dispatcher.queue.put(
                ChangeNotification("expenses", "UPDATE", _expense_row("paid", id=f"E{i}"), seq=i)
            )

        await asyncio.sleep(0.05)
        assert dispatcher.in_flight_count == 2
        assert peak == 2

        release.set()
        await dispatcher.wait_idle()
        await dispatcher.stop()

        assert peak == 2
        assert dispatcher.get_stats()["dispatched_count"] == 5

    @pytest.mark.asyncio
    async def test_stop_drains_in_flight(self) -> None:
        finished: list[str] = []

        async def handle(event: BusinessEvent) -> str:
            await asyncio.sleep(0.02)
            finished.append(event.source_id)
            return "persisted"

        synchronizer = MagicMock()
        synchronizer.handle = handle

        dispatcher = ChangeEventDispatcher(synchronizer)
        await dispatcher.start()
        await dispatcher.queue.put(ChangeNotification("expenses", "UPDATE", _expense_row("paid")))

        await dispatcher.stop(drain_timeout=2.0)

        assert finished == ["E1"]

    @pytest.mark.asyncio
    async def test_stop_timeout_cancels(self) -> None:
        async def never(event: BusinessEvent) -> str:
            await asyncio.Event().wait()
            return "persisted"

        synchronizer = MagicMock()
        synchronizer.handle = never

        dispatcher = ChangeEventDispatcher(synchronizer)
        await dispatcher.start()
        await dispatcher.queue.put(ChangeNotification("expenses", "UPDATE", _expense_row("paid")))
        await asyncio.sleep(0.01)

        await dispatcher.stop(drain_timeout=0.05)

        assert dispatcher.in_flight_count == 0

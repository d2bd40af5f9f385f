"""
어댑터 인터페이스 테스트

구현체가 IChangeFeed Protocol을 준수하는지 확인.
"""

from pathlib import Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.feed.sqlite_feed import SQLiteChangeFeed
from adapters.interfaces import IChangeFeed
from adapters.mock.change_feed import MockChangeFeed


class TestIChangeFeed:
    def test_mock_feed_conforms(self) -> None:
        assert isinstance(MockChangeFeed(), IChangeFeed)

    def test_sqlite_feed_conforms(self, tmp_path: Path) -> None:
        feed = SQLiteChangeFeed(SQLiteAdapter(tmp_path / "test.db"))
        assert isinstance(feed, IChangeFeed)

    def test_plain_object_does_not_conform(self) -> None:
        assert not isinstance(object(), IChangeFeed)

"""
Change Feed 어댑터

저장소의 행 단위 변경 알림을 asyncio.Queue로 전달.
"""

from adapters.feed.sqlite_feed import SQLiteChangeFeed

__all__ = [
    "SQLiteChangeFeed",
]

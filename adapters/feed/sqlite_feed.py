"""
SQLite Change Feed

트리거가 change_log에 기록한 행 이미지를 폴링하여 큐로 전달.
checkpoint_store로 마지막 전달 위치 기억.
"""

import asyncio
import logging
import sqlite3
from datetime import datetime, timezone

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.domain.events import ChangeNotification

logger = logging.getLogger(__name__)


class SQLiteChangeFeed:
    """change_log 폴링 피드

    IChangeFeed Protocol 구현.
    체크포인트는 큐에 넣은 뒤 갱신하므로, 큐에 들어간 알림을 처리하기 전에
    프로세스가 죽으면 그 알림은 누락됨 (at-most-once 구간, 허용).

    Args:
        adapter: SQLite 어댑터
        poll_interval_sec: 새 알림이 없을 때 대기 간격
        batch_size: 한 번에 읽는 최대 알림 수
        checkpoint_name: 체크포인트 이름 (기본: change_feed)

    사용 예시:
    ```python
    queue: asyncio.Queue[ChangeNotification] = asyncio.Queue(maxsize=1000)
    feed = SQLiteChangeFeed(adapter)
    await feed.start(queue)
    ...
    await feed.stop()
    ```
    """

    CHECKPOINT_NAME = "change_feed"

    def __init__(
        self,
        adapter: SQLiteAdapter,
        poll_interval_sec: float = Defaults.FEED_POLL_INTERVAL_SEC,
        batch_size: int = Defaults.FEED_BATCH_SIZE,
        checkpoint_name: str = CHECKPOINT_NAME,
    ):
        self.adapter = adapter
        self.poll_interval_sec = poll_interval_sec
        self.batch_size = batch_size
        self.checkpoint_name = checkpoint_name

        self._task: asyncio.Task[None] | None = None
        self._running = False

        # 통계
        self._delivered_count = 0
        self._poll_error_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self, queue: "asyncio.Queue[ChangeNotification]") -> None:
        """폴링 task 시작"""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._poll_loop(queue), name="change-feed")
        logger.info(
            "Change feed started",
            extra={"checkpoint": self.checkpoint_name, "poll_interval_sec": self.poll_interval_sec},
        )

    async def stop(self) -> None:
        """폴링 task 종료"""
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Change feed stopped")

    async def poll_once(self, queue: "asyncio.Queue[ChangeNotification]") -> int:
        """체크포인트 이후 알림을 한 배치 읽어 큐에 넣음

        Returns:
            큐에 넣은 알림 수
        """
        last_seq = await self._get_checkpoint()

        rows = await self.adapter.fetchall(
            """
            SELECT seq, table_name, operation, row_json, created_at
            FROM change_log
            WHERE seq > ?
            ORDER BY seq
            LIMIT ?
            """,
            (last_seq, self.batch_size),
        )

        if not rows:
            return 0

        delivered = 0
        last_delivered_seq = last_seq

        for row in rows:
            try:
                notification = ChangeNotification.from_log_row(row)
            except ValueError as e:
                # 깨진 행은 건너뛰고 체크포인트는 진행
                logger.error(
                    f"Undecodable change_log row skipped: {e}",
                    extra={"seq": row[0], "table_name": row[1]},
                )
                last_delivered_seq = row[0]
                continue

            await queue.put(notification)
            delivered += 1
            last_delivered_seq = row[0]

        if last_delivered_seq > last_seq:
            await self._set_checkpoint(last_delivered_seq)

        self._delivered_count += delivered
        logger.debug(f"Change feed delivered {delivered} notifications, last_seq: {last_delivered_seq}")

        return delivered

    async def skip_to_latest(self) -> int:
        """기존 알림을 건너뛰고 체크포인트를 최신 seq로 이동

        Returns:
            새 체크포인트 seq
        """
        row = await self.adapter.fetchone("SELECT COALESCE(MAX(seq), 0) FROM change_log")
        latest = int(row[0]) if row else 0
        await self._set_checkpoint(latest)
        logger.info(f"Change feed checkpoint moved to latest: {latest}")
        return latest

    async def _poll_loop(self, queue: "asyncio.Queue[ChangeNotification]") -> None:
        while self._running:
            try:
                delivered = await self.poll_once(queue)
            except sqlite3.Error as e:
                self._poll_error_count += 1
                logger.error(f"Change feed poll failed: {e}")
                delivered = 0

            # 배치가 가득 찼으면 바로 다음 배치
            if delivered < self.batch_size:
                await asyncio.sleep(self.poll_interval_sec)

    async def _get_checkpoint(self) -> int:
        """체크포인트 조회"""
        sql = """
            SELECT last_seq
            FROM checkpoint_store
            WHERE checkpoint_type = ?
        """

        row = await self.adapter.fetchone(sql, (self.checkpoint_name,))
        return row[0] if row else 0

    async def _set_checkpoint(self, seq: int) -> None:
        """체크포인트 설정"""
        sql = """
            INSERT INTO checkpoint_store (checkpoint_type, last_seq, last_ts, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(checkpoint_type)
            DO UPDATE SET
                last_seq = excluded.last_seq,
                last_ts = excluded.last_ts,
                updated_at = excluded.updated_at
        """

        now = datetime.now(timezone.utc).isoformat()
        await self.adapter.execute(sql, (self.checkpoint_name, seq, now, now))

    def get_stats(self) -> dict[str, int]:
        """통계 반환"""
        return {
            "delivered_count": self._delivered_count,
            "poll_error_count": self._poll_error_count,
        }

"""
Sync Bootstrap

설정 로드, 의존성 주입, 메인 루프 관리.

구성:
- Change Feed (change_log 폴링)
- Dispatcher (알림 → 이벤트 task)
- Ledger Synchronizer (분개 저장 + 기금 잔액 반영)
"""

import asyncio
import logging
import signal
import sys
from datetime import datetime, timezone
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.feed.sqlite_feed import SQLiteChangeFeed
from adapters.interfaces import IChangeFeed
from core.config.loader import Settings, get_settings
from core.domain.state_machines import SyncEngineState, SyncEngineStateMachine
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.logging import setup_logging
from core.storage.record_store import RecordStore
from syncer.balance.updater import FundBalanceUpdater
from syncer.dispatcher.dispatcher import ChangeEventDispatcher
from syncer.synchronizer.synchronizer import LedgerSynchronizer

logger = logging.getLogger("syncer")

HEARTBEAT_INTERVAL_SEC = 60.0


class SyncEngine:
    """Sync 엔진

    모든 컴포넌트를 초기화하고 메인 루프 실행.

    Args:
        settings: 설정 객체
        db: SQLite 어댑터 (쓰기 가능 연결)
        feed: 변경 알림 피드 (None이면 SQLiteChangeFeed 생성)
    """

    def __init__(
        self,
        settings: Settings,
        db: SQLiteAdapter,
        feed: IChangeFeed | None = None,
    ):
        self.settings = settings
        self.db = db

        # 상태 머신
        self.state_machine = SyncEngineStateMachine(SyncEngineState.BOOTING)

        # 스토리지
        self.records = RecordStore(db)
        self.ledger_store = LedgerStore(
            db,
            dedupe_transactions=settings.ledger.dedupe_transactions,
        )

        # 컴포넌트
        self.balance_updater = FundBalanceUpdater(db)
        self.synchronizer = LedgerSynchronizer(
            ledger_store=self.ledger_store,
            records=self.records,
            balance_updater=self.balance_updater,
        )
        self.dispatcher = ChangeEventDispatcher(
            self.synchronizer,
            queue_size=settings.feed.queue_size,
            max_in_flight=settings.sync.max_in_flight,
        )
        self.feed: IChangeFeed = feed or SQLiteChangeFeed(
            db,
            poll_interval_sec=settings.feed.poll_interval_sec,
            batch_size=settings.feed.batch_size,
        )

        self._started_at: str | None = None

    async def initialize(self) -> None:
        """스키마 및 컴포넌트 초기화"""
        logger.info("Sync 컴포넌트 초기화 시작...")

        await init_schema(self.db)
        await init_ledger_schema(self.db)
        logger.info("  - 스키마 확인 완료")

        await self.balance_updater.initialize()
        logger.info("  - FundBalanceUpdater 초기화 완료")

        logger.info(
            "  - Ledger 설정",
            extra={"dedupe_transactions": self.ledger_store.dedupe_transactions},
        )

    async def start(self) -> None:
        """엔진 시작"""
        self._started_at = datetime.now(timezone.utc).isoformat()

        await self.dispatcher.start()
        await self.feed.start(self.dispatcher.queue)

        self.state_machine.transition(SyncEngineState.RUNNING)
        logger.info("Sync Engine RUNNING")

    async def stop(self) -> None:
        """엔진 종료

        피드를 먼저 멈춘 뒤 큐와 실행 중인 이벤트를 drain.
        """
        if self.state_machine.is_running:
            self.state_machine.transition(SyncEngineState.STOPPING)

        logger.info("Sync Engine 종료 중...")

        await self.feed.stop()
        await self.dispatcher.stop()

        if self.state_machine.can_transition(SyncEngineState.STOPPED):
            self.state_machine.transition(SyncEngineState.STOPPED)

        logger.info(f"Sync Engine STOPPED: {self.get_stats()}")

    async def run_main_loop(self, shutdown_event: asyncio.Event) -> None:
        """메인 루프

        이벤트 처리는 Dispatcher task가 담당.
        메인 루프는 종료 신호를 기다리며 주기적으로 heartbeat 로그만 남김.
        """
        logger.info("메인 루프 시작")

        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=HEARTBEAT_INTERVAL_SEC)
            except asyncio.TimeoutError:
                self._log_heartbeat()

    def _log_heartbeat(self) -> None:
        logger.info(f"Heartbeat: {self.get_stats()}")

    def get_stats(self) -> dict[str, Any]:
        """엔진 통계"""
        return {
            "engine_state": self.state_machine.state,
            "started_at": self._started_at,
            "dispatcher": self.dispatcher.get_stats(),
            "synchronizer": self.synchronizer.get_stats(),
        }


def _install_signal_handlers(shutdown_event: asyncio.Event) -> None:
    """SIGINT/SIGTERM → shutdown_event 설정 (Windows는 KeyboardInterrupt로 처리)"""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"Signal handler not supported: {sig}")


async def main() -> None:
    """Sync 메인 함수"""
    # 1. 설정 로드
    try:
        settings = get_settings()
    except Exception as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"설정 로드 실패: {e}")
        sys.exit(1)

    setup_logging("sync", settings.log_level)

    logger.info("=" * 60)
    logger.info("fundledger Sync 시작")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"DB: {settings.db_path}")

    # 2. DB 연결
    async with SQLiteAdapter(settings.db_path) as db:
        # 3. 엔진 생성 및 초기화
        engine = SyncEngine(settings, db)
        await engine.initialize()

        # 4. 종료 이벤트 설정
        shutdown_event = asyncio.Event()
        _install_signal_handlers(shutdown_event)

        logger.info("Sync 메인 루프 시작 (종료: Ctrl+C)")

        try:
            # 5. 엔진 시작
            await engine.start()

            # 6. 메인 루프 실행
            await engine.run_main_loop(shutdown_event)

        except asyncio.CancelledError:
            logger.info("메인 루프 취소됨")
        except KeyboardInterrupt:
            logger.info("Ctrl+C 감지")
        finally:
            # 7. 엔진 종료 (in-flight 이벤트 drain 후 연결 종료)
            await engine.stop()

    logger.info("=" * 60)
    logger.info("fundledger Sync 정상 종료")
    logger.info("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())

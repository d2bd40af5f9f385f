"""
Sync Handler 기본 클래스

이벤트 종류별 처리 단계 정의:
prepare (조회) → build (분개 생성) → 저장 (Synchronizer) → after_persist (후속 반영)
"""

import logging
from abc import ABC, abstractmethod

from core.domain.events import BusinessEvent
from core.ledger.entry_builder import JournalEntryBuilder, JournalTransaction
from core.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


class SyncHandler(ABC):
    """Sync Handler 추상 클래스

    이벤트 종류별로 이 클래스를 상속하여 처리 단계 구현.

    Args:
        records: 지출/기금/카테고리 저장소
        builder: 분개 생성기
    """

    def __init__(self, records: RecordStore, builder: JournalEntryBuilder):
        self.records = records
        self.builder = builder

    @property
    @abstractmethod
    def handled_kind(self) -> str:
        """처리하는 이벤트 종류 (EventKind 값)"""
        pass

    async def prepare(self, event: BusinessEvent) -> str | None:
        """분개 생성에 필요한 조회

        Returns:
            카테고리 이름 (사용하지 않는 이벤트는 None)
        """
        return None

    def build(self, event: BusinessEvent, category_name: str | None) -> JournalTransaction:
        """분개 묶음 생성 (InvalidEvent 전파)"""
        return self.builder.build(event, category_name)

    async def after_persist(self, event: BusinessEvent, transaction: JournalTransaction) -> None:
        """분개 저장 후 후속 반영

        하위 클래스에서 필요 시 오버라이드.
        예외는 Synchronizer가 이벤트 단위로 처리.
        """
        pass

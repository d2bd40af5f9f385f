"""
변경 알림 / 비즈니스 이벤트 모델

ChangeNotification: 저장소가 보내는 행 단위 변경 알림 (새 행 이미지 포함)
BusinessEvent: Dispatcher가 디코딩하여 Synchronizer에 전달하는 이벤트
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from core.domain.models import Expense, FundSource
from core.types import ChangeOperation, EventKind


@dataclass(frozen=True)
class ChangeNotification:
    """행 단위 변경 알림

    같은 feed 안에서는 seq(커밋 순서) 순으로 전달됨.
    feed 간 전역 순서는 보장하지 않음.
    """

    table: str
    operation: str
    new_row: dict[str, Any]
    seq: int | None = None
    committed_at: str | None = None

    @staticmethod
    def from_log_row(row: tuple[Any, ...]) -> "ChangeNotification":
        """change_log 행에서 생성

        Args:
            row: (seq, table_name, operation, row_json, created_at)
        """
        seq, table_name, operation, row_json, created_at = row
        return ChangeNotification(
            table=table_name,
            operation=ChangeOperation(operation).value,
            new_row=json.loads(row_json) if row_json else {},
            seq=seq,
            committed_at=created_at,
        )


@dataclass(frozen=True)
class BusinessEvent:
    """Ledger 동기화 대상 이벤트

    record는 EXPENSE_* 이벤트면 Expense, FUND_RECEIVED면 FundSource.
    """

    kind: EventKind
    record: Expense | FundSource
    notification_seq: int | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    raw_row: dict[str, Any] = field(default_factory=dict)

    @property
    def source_id(self) -> str | None:
        """이벤트를 발생시킨 레코드 ID"""
        return self.record.id

    def log_context(self) -> dict[str, Any]:
        """로그 extra (이벤트 재현용)"""
        return {
            "event_kind": self.kind.value,
            "source_id": self.source_id,
            "notification_seq": self.notification_seq,
            "row": self.raw_row,
        }

"""
Ledger 동기화 예외 분류

모든 예외는 해당 이벤트 하나에만 영향을 줌.
Synchronizer가 잡아서 로그로 남기고 다음 이벤트를 계속 처리.
"""

from typing import Any


class LedgerSyncError(Exception):
    """Ledger 동기화 예외 기본 클래스

    Args:
        message: 오류 메시지
        context: 이벤트 재현에 필요한 정보 (로그 extra로 사용)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


class InvalidEvent(LedgerSyncError):
    """잘못된 이벤트 (금액 0 이하, ID 누락 등)

    재시도하지 않고 사유를 로그로 남긴 뒤 폐기.
    """

    pass


class LookupFailure(LedgerSyncError):
    """참조 레코드 조회 실패 (카테고리, 기금)"""

    pass


class FundNotFound(LookupFailure):
    """기금이 존재하지 않음 (삭제와 이벤트 경합)

    무한 재시도를 막기 위해 이벤트를 폐기.
    """

    def __init__(self, fund_source_id: str):
        super().__init__(
            f"Fund source not found: {fund_source_id}",
            {"fund_source_id": fund_source_id},
        )
        self.fund_source_id = fund_source_id


class PersistenceFailure(LedgerSyncError):
    """저장소가 분개 INSERT 또는 잔액 UPDATE를 거부

    자동 재시도 없음 (재시도 정책은 전송 계층 책임).
    """

    pass

"""
기금 수령 핸들러
"""

from core.types import EventKind
from syncer.synchronizer.handlers.base import SyncHandler


class FundReceivedHandler(SyncHandler):
    """FUND_RECEIVED: 현금 차변 / 기부금 수익 대변 (제한 여부에 따라 계정 선택)"""

    @property
    def handled_kind(self) -> str:
        return EventKind.FUND_RECEIVED.value

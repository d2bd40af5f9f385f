"""
기금 현황 API 라우트

기금별 잔액, 상태, 사용률 조회 (읽기 전용)
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import FundSource
from core.storage.record_store import RecordStore
from core.types import FundStatus
from web.dependencies import get_db
from web.models.responses import FundSourceResponse

router = APIRouter(prefix="/api/funds", tags=["Funds"])


def _utilization_pct(fund: FundSource) -> str | None:
    """(수령 금액 - 잔액) / 수령 금액 × 100, 소수 둘째 자리"""
    if fund.original_amount is None or fund.original_amount <= 0 or fund.amount is None:
        return None
    used = fund.original_amount - fund.amount
    return str((used / fund.original_amount * 100).quantize(Decimal("0.01")))


@router.get("", response_model=list[FundSourceResponse])
async def list_funds(
    status: FundStatus | None = Query(default=None),
    db: SQLiteAdapter = Depends(get_db),
):
    """기금 목록"""
    store = RecordStore(db)
    funds = await store.list_fund_sources(status.value if status else None)

    return [
        FundSourceResponse(
            id=fund.id or "",
            name=fund.name,
            amount=str(fund.amount if fund.amount is not None else Decimal("0")),
            original_amount=str(fund.original_amount) if fund.original_amount is not None else None,
            is_restricted=fund.is_restricted,
            received_date=fund.received_date.isoformat() if fund.received_date else None,
            status=fund.status or FundStatus.RECEIVED.value,
            utilization_pct=_utilization_pct(fund),
        )
        for fund in funds
    ]

"""
복식부기 API 라우트

분개 조회, 시산표, 계정 잔액, CSV 내보내기 (읽기 전용)
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.accounts import get_account
from core.ledger.export import entries_to_csv
from core.ledger.store import LedgerStore
from core.types import SourceType
from web.dependencies import get_db
from web.models.responses import (
    AccountBalanceResponse,
    AccountResponse,
    JournalEntryResponse,
    JournalTransactionResponse,
    TrialBalanceResponse,
)

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("/entries", response_model=list[JournalEntryResponse])
async def list_entries(
    account_code: str | None = Query(default=None),
    source_type: SourceType | None = Query(default=None),
    source_id: str | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: SQLiteAdapter = Depends(get_db),
):
    """분개 행 조회 (거래일 내림차순)"""
    store = LedgerStore(db)
    entries = await store.list_entries(
        account_code=account_code,
        source_type=source_type.value if source_type else None,
        source_id=source_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return [JournalEntryResponse.from_entry(e) for e in entries]


@router.get("/transactions/{transaction_id}", response_model=JournalTransactionResponse)
async def get_transaction(
    transaction_id: str,
    db: SQLiteAdapter = Depends(get_db),
):
    """거래 ID로 분개 묶음 조회"""
    store = LedgerStore(db)
    transaction = await store.get_transaction(transaction_id)

    if transaction is None:
        raise HTTPException(status_code=404, detail=f"Transaction not found: {transaction_id}")

    return JournalTransactionResponse.from_transaction(transaction)


@router.get("/trial-balance", response_model=TrialBalanceResponse)
async def get_trial_balance(
    db: SQLiteAdapter = Depends(get_db),
):
    """시산표 (분개가 있는 계정만)"""
    store = LedgerStore(db)
    return TrialBalanceResponse.from_store(await store.get_trial_balance())


@router.get("/accounts", response_model=list[AccountResponse])
async def list_accounts(
    account_type: str | None = Query(default=None),
    db: SQLiteAdapter = Depends(get_db),
):
    """계정과목표"""
    store = LedgerStore(db)
    return await store.list_accounts(account_type)


@router.get("/accounts/{code}/balance", response_model=AccountBalanceResponse)
async def get_account_balance(
    code: str,
    db: SQLiteAdapter = Depends(get_db),
):
    """계정 잔액"""
    account = get_account(code)
    if account is None:
        raise HTTPException(status_code=404, detail=f"Unknown account code: {code}")

    store = LedgerStore(db)
    balance = await store.get_account_balance(code)

    return AccountBalanceResponse(code=account.code, name=account.name, balance=str(balance))


@router.get("/export.csv")
async def export_csv(
    account_code: str | None = Query(default=None),
    source_type: SourceType | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    limit: int = Query(default=10000, ge=1, le=100000),
    db: SQLiteAdapter = Depends(get_db),
):
    """분개 CSV 내보내기"""
    store = LedgerStore(db)
    entries = await store.list_entries(
        account_code=account_code,
        source_type=source_type.value if source_type else None,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
    )

    filename = f"general-ledger-{date.today().isoformat()}.csv"
    return Response(
        content=entries_to_csv(entries),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

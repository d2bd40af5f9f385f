#!/usr/bin/env python3
"""
Ledger 정합성 점검 스크립트

점검 항목:
1. 차변/대변 합계가 다른 거래
2. 2행을 초과하는 거래 (재전달로 인한 중복 기록)
3. 잔액과 맞지 않는 기금 상태
4. 시산표 전체 균형

1, 3, 4 중 하나라도 발견되면 종료 코드 1.
중복(2)은 at-least-once 전달에서 예상되는 결과이므로 경고만.

사용법:
    python scripts/verify_ledger.py --env production
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.ledger.store import LedgerStore
from core.storage.record_store import RecordStore
from core.types import Environment, FundStatus
from syncer.balance.updater import derive_fund_status

logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def expected_fund_statuses(amount: Decimal, original_amount: Decimal | None) -> set[str]:
    """잔액에서 허용되는 기금 상태

    original_amount가 없으면 잔액 업데이트 시점의 잔액이 기준이 되므로
    잔액만으로는 received와 partially_used를 구분할 수 없음.
    """
    if original_amount is None and amount > 0:
        return {FundStatus.RECEIVED.value, FundStatus.PARTIALLY_USED.value}
    return {derive_fund_status(amount, original_amount).value}


async def verify(db: SQLiteAdapter) -> int:
    """정합성 점검

    Returns:
        발견된 문제 수 (중복 제외)
    """
    ledger = LedgerStore(db)
    records = RecordStore(db)
    problems = 0

    # 1. 불균형 거래
    unbalanced = await ledger.find_unbalanced_transactions()
    for item in unbalanced:
        logger.error(
            f"불균형 거래: {item['transaction_id']} "
            f"(차변 {item['total_debit']}, 대변 {item['total_credit']})"
        )
    problems += len(unbalanced)

    # 2. 중복 기록
    duplicates = await ledger.find_duplicate_transactions()
    for item in duplicates:
        logger.warning(f"중복 기록: {item['transaction_id']} ({item['entry_count']}행)")

    # 3. 기금 상태
    for fund in await records.list_fund_sources():
        if fund.amount is None:
            continue
        if fund.amount < 0:
            logger.error(f"음수 잔액 기금: {fund.id} ({fund.amount})")
            problems += 1
            continue
        expected = expected_fund_statuses(fund.amount, fund.original_amount)
        if fund.status not in expected:
            logger.error(
                f"기금 상태 불일치: {fund.id} (잔액 {fund.amount}, "
                f"상태 {fund.status}, 예상 {'/'.join(sorted(expected))})"
            )
            problems += 1

    # 4. 시산표
    trial_balance = await ledger.get_trial_balance()
    if not trial_balance["is_balanced"]:
        logger.error(
            f"시산표 불균형: 차변 {trial_balance['total_debit']}, "
            f"대변 {trial_balance['total_credit']}"
        )
        problems += 1

    entry_count = await ledger.count_entries()
    logger.info(
        f"점검 완료: 분개 {entry_count}행, 문제 {problems}건, 중복 {len(duplicates)}건"
    )
    return problems


async def main(env: str, db_path: Path | None = None) -> int:
    path = db_path or get_db_path(Environment(env.lower()))
    logger.info(f"Ledger 점검: {path}")

    async with SQLiteAdapter(path, readonly=True) as db:
        problems = await verify(db)

    return 1 if problems else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ledger 정합성 점검")
    parser.add_argument(
        "--env",
        choices=[e.value for e in Environment],
        default=Environment.SANDBOX.value,
        help="실행 환경 (기본: sandbox)",
    )
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로 (선택)")
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.env, args.db)))

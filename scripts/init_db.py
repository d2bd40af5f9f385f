#!/usr/bin/env python3
"""
DB 초기화 스크립트

- 도메인 테이블 + 변경 알림 트리거 생성
- Ledger 테이블/View 생성, 계정과목표 삽입
- 예산 카테고리가 비어 있으면 기본 카테고리 삽입

사용법:
    python scripts/init_db.py --env sandbox
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path, init_schema
from core.ledger.schema import init_ledger_schema
from core.storage.record_store import RecordStore
from core.types import Environment

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

# 계정 결정 규칙의 키워드와 맞춘 기본 카테고리
DEFAULT_BUDGET_CATEGORIES = [
    ("Program Activities", "현장 프로그램 운영비"),
    ("Personnel", "인건비"),
    ("Administrative", "일반 관리비"),
    ("Fundraising", "모금 활동비"),
    ("Travel", "출장/교통비"),
    ("Equipment & Supplies", "장비/소모품"),
    ("Professional Services", "외부 전문 서비스"),
]


async def seed_budget_categories(db: SQLiteAdapter) -> int:
    """예산 카테고리가 비어 있을 때만 기본값 삽입

    Returns:
        삽입한 카테고리 수
    """
    row = await db.fetchone("SELECT COUNT(*) FROM budget_categories")
    if row and row[0] > 0:
        logger.info(f"예산 카테고리 {row[0]}개 존재, 기본값 삽입 생략")
        return 0

    store = RecordStore(db)
    for name, description in DEFAULT_BUDGET_CATEGORIES:
        await store.insert_budget_category(name, description=description)

    logger.info(f"기본 예산 카테고리 {len(DEFAULT_BUDGET_CATEGORIES)}개 삽입")
    return len(DEFAULT_BUDGET_CATEGORIES)


async def main(env: str, db_path: Path | None = None) -> None:
    """DB 초기화 실행

    Args:
        env: production 또는 sandbox
        db_path: DB 경로 직접 지정 (없으면 env 기본 경로)
    """
    path = db_path or get_db_path(Environment(env.lower()))
    logger.info(f"DB 초기화 시작: {path}")

    async with SQLiteAdapter(path) as db:
        await init_schema(db)
        await init_ledger_schema(db)
        await seed_budget_categories(db)

        row = await db.fetchone("SELECT COUNT(*) FROM chart_of_accounts")
        logger.info(f"등록된 계정 수: {row[0] if row else 0}")

    logger.info("DB 초기화 완료 ✓")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="fundledger DB 초기화")
    parser.add_argument(
        "--env",
        choices=[e.value for e in Environment],
        default=Environment.SANDBOX.value,
        help="실행 환경 (기본: sandbox)",
    )
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로 (선택)")
    args = parser.parse_args()

    asyncio.run(main(args.env, args.db))

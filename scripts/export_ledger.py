#!/usr/bin/env python3
"""
분개 CSV 내보내기 스크립트

사용법:
    python scripts/export_ledger.py --env production --out ledger.csv
    python scripts/export_ledger.py --from 2024-01-01 --to 2024-12-31
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.ledger.export import entries_to_csv
from core.ledger.store import LedgerStore
from core.types import Environment

logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)

# 한 번에 읽는 행 수
PAGE_SIZE = 1000


async def main(
    env: str,
    out: Path,
    date_from: date | None = None,
    date_to: date | None = None,
    db_path: Path | None = None,
) -> int:
    path = db_path or get_db_path(Environment(env.lower()))

    async with SQLiteAdapter(path, readonly=True) as db:
        store = LedgerStore(db)

        entries = []
        offset = 0
        while True:
            page = await store.list_entries(
                date_from=date_from,
                date_to=date_to,
                limit=PAGE_SIZE,
                offset=offset,
            )
            entries.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(entries_to_csv(entries), encoding="utf-8")

    logger.info(f"{len(entries)}행 내보냄: {out}")
    return len(entries)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="분개 CSV 내보내기")
    parser.add_argument(
        "--env",
        choices=[e.value for e in Environment],
        default=Environment.SANDBOX.value,
        help="실행 환경 (기본: sandbox)",
    )
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로 (선택)")
    parser.add_argument(
        "--out",
        type=Path,
        default=Path(f"general-ledger-{date.today().isoformat()}.csv"),
        help="출력 파일 경로",
    )
    parser.add_argument("--from", dest="date_from", type=date.fromisoformat, default=None)
    parser.add_argument("--to", dest="date_to", type=date.fromisoformat, default=None)
    args = parser.parse_args()

    asyncio.run(main(args.env, args.out, args.date_from, args.date_to, args.db))

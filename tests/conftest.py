"""
pytest 공통 fixture 정의

임시 DB, 설정 파일, 샘플 레코드
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.domain.events import BusinessEvent
from core.domain.models import Expense, FundSource
from core.ledger.schema import init_ledger_schema
from core.types import EventKind


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """테스트용 임시 디렉토리"""
    return tmp_path


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = """# 테스트용 settings.yaml
environment: sandbox

database:
  path: {db_path}

feed:
  poll_interval_sec: 0.05
  batch_size: 10
  queue_size: 50

sync:
  max_in_flight: 4

ledger:
  dedupe_transactions: false

logging:
  level: debug
""".format(db_path=(temp_dir / "test.db").as_posix())
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """테스트마다 Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[SQLiteAdapter, None]:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "fundledger_test.db")
    await adapter.connect()

    await init_schema(adapter)
    await init_ledger_schema(adapter)

    yield adapter

    await adapter.close()


# -------------------------------------------------------------------------
# 샘플 레코드 / 이벤트
# -------------------------------------------------------------------------

@pytest.fixture
def sample_expense() -> Expense:
    """승인된 지출 (카테고리 C1, 기금 F1)"""
    return Expense(
        id="E1",
        title="Workshop venue",
        amount=Decimal("500.00"),
        category_id="C1",
        fund_source_id="F1",
        expense_date=date(2024, 3, 1),
        status="approved",
    )


@pytest.fixture
def sample_fund() -> FundSource:
    """비제한 기금 1000"""
    return FundSource(
        id="F1",
        name="Annual Appeal",
        amount=Decimal("1000"),
        is_restricted=False,
        received_date=date(2024, 1, 15),
        status="received",
        original_amount=Decimal("1000"),
    )


@pytest.fixture
def approved_event(sample_expense: Expense) -> BusinessEvent:
    return BusinessEvent(kind=EventKind.EXPENSE_APPROVED, record=sample_expense)


@pytest.fixture
def fixed_today() -> date:
    """분개 생성기에 주입하는 고정 날짜"""
    return date(2024, 3, 10)

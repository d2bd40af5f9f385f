"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.constants import Defaults
from core.ledger.schema import init_ledger_schema
from core.logging import setup_logging
from web.routes import funds, health, ledger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    settings = get_settings()
    setup_logging("web", settings.log_level)

    # 시작 시 - DB 스키마 자동 초기화 (읽기 전용 연결은 파일이 있어야 열림)
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)
        await init_ledger_schema(db)

    logger.info(f"Web 시작: {settings.environment.value} ({settings.db_path})")

    yield

    logger.info("Web 종료")


app = FastAPI(
    title="fundledger API",
    description="NGO 기금 복식부기 조회 API",
    version=Defaults.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (대시보드 프론트엔드용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(ledger.router)
app.include_router(funds.router)

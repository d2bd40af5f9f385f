"""
로깅 설정 유틸리티

Sync와 Web 모두에서 사용하는 공통 로깅 설정.
- 콘솔: 설정 레벨 (기본 INFO)
- 파일: 설정 레벨 (TimedRotatingFileHandler, daily)

사용법:
    from core.logging import setup_logging
    setup_logging("sync")  # Sync용 로거 설정
    setup_logging("web")   # Web용 로거 설정
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


# 로그 설정 상수
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 최대 7일치 파일 유지

# 불필요한 로그를 생성하는 로거 목록 (레벨 조정 대상)
NOISY_LOGGERS = [
    "aiosqlite",       # DB 쿼리마다 executing/completed 로그 (매우 많음)
    "asyncio",         # 비동기 이벤트 루프 로그
    "httpx",           # TestClient 요청 로그
    "uvicorn.access",  # 요청마다 access 로그
]


def get_log_file_path(process_name: str) -> Path:
    """로그 파일 경로 반환

    Args:
        process_name: 프로세스 이름 ("sync" 또는 "web")

    Returns:
        로그 파일 Path
    """
    if process_name == "sync":
        return Paths.SYNC_LOGS_DIR / f"{process_name}.log"
    elif process_name == "web":
        return Paths.WEB_LOGS_DIR / f"{process_name}.log"
    else:
        return Paths.LOGS_DIR / f"{process_name}.log"


def setup_logging(
    process_name: str,
    level: int | str = logging.INFO,
    log_to_file: bool = True,
) -> logging.Logger:
    """로깅 설정 초기화

    프로세스 타입에 따라 적절한 로그 디렉토리에 파일 로그 저장.
    Daily 롤링으로 매일 자정에 새 파일 생성.

    Args:
        process_name: 프로세스 이름 ("sync" 또는 "web")
        level: 로그 레벨 (int 또는 "INFO" 같은 이름)
        log_to_file: False면 콘솔만 사용 (스크립트용)

    Returns:
        설정된 루트 Logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    # 루트 로거 설정
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 기존 핸들러 제거 (중복 방지)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # 1. 콘솔 핸들러
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # 2. 파일 핸들러 (daily)
    log_file = get_log_file_path(process_name)
    if log_to_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            interval=1,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"  # 백업 파일 형식: sync.log.2026-02-21
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # 3. 불필요한 로거 레벨 조정
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(f"로깅 초기화 완료: {process_name} ({logging.getLevelName(level)})")
    if log_to_file:
        root_logger.info(f"  - 파일: {log_file} (daily rotation, {LOG_FILE_BACKUP_COUNT}일 보관)")

    return root_logger

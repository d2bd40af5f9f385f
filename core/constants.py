"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → fundledger/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    APP_VERSION: str = "1.0.0"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # Change feed
    FEED_POLL_INTERVAL_SEC: float = 1.0
    FEED_BATCH_SIZE: int = 100
    FEED_QUEUE_SIZE: int = 1000

    # Synchronizer 동시 처리 한도 (in-flight task 수)
    SYNC_MAX_IN_FLIGHT: int = 16

    # 카테고리 조회 실패 시 사용하는 이름
    FALLBACK_CATEGORY_NAME: str = "General"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    SYNC_LOGS_DIR: Path = LOGS_DIR / "sync"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "fundledger_prod.db"
    SANDBOX_DB: Path = DATA_DIR / "fundledger_sandbox.db"


class AccountCodes:
    """분개에 사용하는 고정 계정 코드"""

    CASH_GENERAL: str = "1000"
    CASH_RESTRICTED: str = "1010"
    ACCOUNTS_PAYABLE: str = "2000"
    DONATIONS_UNRESTRICTED: str = "4000"
    DONATIONS_RESTRICTED: str = "4100"
    PROGRAM_EXPENSES: str = "5000"


class TransactionPrefixes:
    """transaction_id 접두사 ({prefix}-{source_id})"""

    EXPENSE: str = "EXP"
    PAYMENT: str = "PAY"
    FUND_RECEIPT: str = "FUND"

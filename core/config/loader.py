"""
설정 로더

settings.yaml 로드 및 실행 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.types import Environment


@dataclass(frozen=True)
class FeedConfig:
    """변경 알림 피드 설정"""

    poll_interval_sec: float = Defaults.FEED_POLL_INTERVAL_SEC
    batch_size: int = Defaults.FEED_BATCH_SIZE
    queue_size: int = Defaults.FEED_QUEUE_SIZE


@dataclass(frozen=True)
class SyncConfig:
    """Synchronizer 설정"""

    max_in_flight: int = Defaults.SYNC_MAX_IN_FLIGHT


@dataclass(frozen=True)
class LedgerConfig:
    """Ledger 저장 설정

    dedupe_transactions: 같은 transaction_id 재저장 생략 (기본 False, 재전달 시 중복 허용)
    """

    dedupe_transactions: bool = False


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    environment: Environment
    db_path: Path
    feed: FeedConfig
    sync: SyncConfig
    ledger: LedgerConfig
    log_level: str = Defaults.LOG_LEVEL
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return value


def _positive_int(section: dict[str, Any], key: str, default: int, section_name: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigLoadError(
            f"settings.yaml의 {section_name}.{key}는 양의 정수여야 합니다: {value!r}"
        )
    return value


def _positive_float(section: dict[str, Any], key: str, default: float, section_name: str) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigLoadError(
            f"settings.yaml의 {section_name}.{key}는 양수여야 합니다: {value!r}"
        )
    return float(value)


def get_db_path(environment: Environment) -> Path:
    """환경에 따른 DB 경로 반환

    Args:
        environment: 실행 환경

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if environment == Environment.PRODUCTION:
        return Paths.PROD_DB
    else:
        return Paths.SANDBOX_DB


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 environment인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise ConfigLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise ConfigLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise ConfigLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    # environment 검증
    env_str = data.get("environment")
    if env_str is None:
        raise ConfigLoadError("settings.yaml에 'environment' 필드가 없습니다")

    try:
        environment = Environment(env_str)
    except ValueError as e:
        valid_envs = [env.value for env in Environment]
        raise ValueError(
            f"유효하지 않은 environment입니다: '{env_str}'. "
            f"유효한 값: {valid_envs}"
        ) from e

    # database.path가 있으면 환경 기본 경로 대신 사용 (상대 경로는 프로젝트 루트 기준)
    database = _section(data, "database")
    if database.get("path"):
        db_path = Path(database["path"])
        if not db_path.is_absolute():
            db_path = Paths.CONFIG_DIR.parent / db_path
    else:
        db_path = get_db_path(environment)

    feed_data = _section(data, "feed")
    feed = FeedConfig(
        poll_interval_sec=_positive_float(
            feed_data, "poll_interval_sec", Defaults.FEED_POLL_INTERVAL_SEC, "feed"
        ),
        batch_size=_positive_int(feed_data, "batch_size", Defaults.FEED_BATCH_SIZE, "feed"),
        queue_size=_positive_int(feed_data, "queue_size", Defaults.FEED_QUEUE_SIZE, "feed"),
    )

    sync_data = _section(data, "sync")
    sync = SyncConfig(
        max_in_flight=_positive_int(
            sync_data, "max_in_flight", Defaults.SYNC_MAX_IN_FLIGHT, "sync"
        ),
    )

    ledger_data = _section(data, "ledger")
    dedupe = ledger_data.get("dedupe_transactions", False)
    if not isinstance(dedupe, bool):
        raise ConfigLoadError(
            f"settings.yaml의 ledger.dedupe_transactions는 true/false여야 합니다: {dedupe!r}"
        )

    logging_data = _section(data, "logging")
    log_level = str(logging_data.get("level", Defaults.LOG_LEVEL)).upper()

    web_data = _section(data, "web")

    return AppConfig(
        environment=environment,
        db_path=db_path,
        feed=feed,
        sync=sync,
        ledger=LedgerConfig(dedupe_transactions=dedupe),
        log_level=log_level,
        web_host=str(web_data.get("host", Defaults.WEB_HOST)),
        web_port=_positive_int(web_data, "port", Defaults.WEB_PORT, "web"),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def environment(self) -> Environment:
        """현재 실행 환경"""
        return self.config.environment

    @property
    def db_path(self) -> Path:
        """현재 환경의 DB 경로"""
        return self.config.db_path

    @property
    def feed(self) -> FeedConfig:
        """변경 알림 피드 설정"""
        return self.config.feed

    @property
    def sync(self) -> SyncConfig:
        """Synchronizer 설정"""
        return self.config.sync

    @property
    def ledger(self) -> LedgerConfig:
        """Ledger 저장 설정"""
        return self.config.ledger

    @property
    def log_level(self) -> str:
        """로그 레벨 이름"""
        return self.config.log_level

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)

"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class Environment(str, Enum):
    """실행 환경 (운영 / 샌드박스)"""

    PRODUCTION = "production"
    SANDBOX = "sandbox"


class ExpenseStatus(str, Enum):
    """지출 상태 (지출 관리 서브시스템 소유)"""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    REJECTED = "rejected"


class FundStatus(str, Enum):
    """기금 사용 상태

    잔액에서 파생됨:
    - fully_used ⇔ amount == 0
    - partially_used ⇔ 0 < amount < original_amount
    """

    RECEIVED = "received"
    PARTIALLY_USED = "partially_used"
    FULLY_USED = "fully_used"


class SourceType(str, Enum):
    """분개 출처 유형"""

    EXPENSE = "expense"
    PAYMENT = "payment"
    FUND_RECEIPT = "fund_receipt"


class EventKind(str, Enum):
    """Dispatcher가 Synchronizer로 전달하는 이벤트 종류"""

    EXPENSE_APPROVED = "expense_approved"
    EXPENSE_PAID = "expense_paid"
    FUND_RECEIVED = "fund_received"


class ChangeOperation(str, Enum):
    """행 단위 변경 알림 종류"""

    INSERT = "INSERT"
    UPDATE = "UPDATE"


class WatchedTables(str, Enum):
    """변경 알림을 구독하는 테이블"""

    EXPENSES = "expenses"
    FUND_SOURCES = "fund_sources"

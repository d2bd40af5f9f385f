"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.responses import (
    AccountBalanceResponse,
    AccountResponse,
    FundSourceResponse,
    HealthResponse,
    JournalEntryResponse,
    JournalTransactionResponse,
    TrialBalanceAccount,
    TrialBalanceResponse,
)

__all__ = [
    "AccountBalanceResponse",
    "AccountResponse",
    "FundSourceResponse",
    "HealthResponse",
    "JournalEntryResponse",
    "JournalTransactionResponse",
    "TrialBalanceAccount",
    "TrialBalanceResponse",
]

"""
기금 잔액 반영 모듈
"""

from syncer.balance.updater import (
    FundBalanceUpdater,
    UpdatedFundSource,
    clamp_add,
    derive_fund_status,
)

__all__ = [
    "FundBalanceUpdater",
    "UpdatedFundSource",
    "clamp_add",
    "derive_fund_status",
]

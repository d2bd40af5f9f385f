"""
Sync Handlers

이벤트 종류별 처리 핸들러
"""

from syncer.synchronizer.handlers.base import SyncHandler
from syncer.synchronizer.handlers.expense_approved import ExpenseApprovedHandler
from syncer.synchronizer.handlers.expense_paid import ExpensePaidHandler
from syncer.synchronizer.handlers.fund_received import FundReceivedHandler

__all__ = [
    "SyncHandler",
    "ExpenseApprovedHandler",
    "ExpensePaidHandler",
    "FundReceivedHandler",
]

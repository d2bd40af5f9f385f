"""
Ledger Synchronizer 모듈
"""

from syncer.synchronizer.synchronizer import LedgerSynchronizer

__all__ = [
    "LedgerSynchronizer",
]

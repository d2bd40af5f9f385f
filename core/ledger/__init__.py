"""
복식부기 (Double-Entry Bookkeeping) 시스템

지출/기금 이벤트를 균형 잡힌 분개로 기록.
journal_entries는 append-only.

사용 예시:
```python
from core.ledger import LedgerStore, JournalEntryBuilder

# 초기화
ledger_store = LedgerStore(db)
entry_builder = JournalEntryBuilder()

# 이벤트에서 분개 생성
transaction = entry_builder.build(event, category_name="Program Supplies")
await ledger_store.save_transaction(transaction)

# 잔액 조회
balance = await ledger_store.get_account_balance("2000")

# 시산표 조회
trial_balance = await ledger_store.get_trial_balance()
```
"""

from core.ledger.accounts import (
    get_account,
    resolve_cash_account_code,
    resolve_expense_account_code,
    resolve_fund_receipt_accounts,
)
from core.ledger.entry_builder import (
    JournalEntry,
    JournalEntryBuilder,
    JournalTransaction,
    make_transaction_id,
)
from core.ledger.export import entries_to_csv
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.ledger.types import (
    CHART_OF_ACCOUNTS,
    AccountCode,
    AccountType,
    JournalSide,
)

__all__ = [
    # 핵심 클래스
    "LedgerStore",
    "JournalEntryBuilder",
    "JournalEntry",
    "JournalTransaction",
    "AccountCode",
    # Enum
    "AccountType",
    "JournalSide",
    # 상수
    "CHART_OF_ACCOUNTS",
    # 함수
    "get_account",
    "resolve_expense_account_code",
    "resolve_cash_account_code",
    "resolve_fund_receipt_accounts",
    "make_transaction_id",
    "entries_to_csv",
    "init_ledger_schema",
]

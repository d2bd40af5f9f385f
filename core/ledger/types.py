"""
복식부기 타입 정의

계정 유형, 차변/대변, 계정과목표(Chart of Accounts) 정의
"""

from dataclasses import dataclass
from enum import Enum


class AccountType(str, Enum):
    """계정 유형

    비영리 회계의 5대 계정 유형.
    (자본 대신 순자산 NET_ASSETS 사용)
    """

    ASSET = "asset"
    LIABILITY = "liability"
    NET_ASSETS = "net_assets"
    REVENUE = "revenue"
    EXPENSE = "expense"


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""

    DEBIT = "debit"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "credit"  # 대변 (부채/수익 증가, 자산 감소)


@dataclass(frozen=True)
class AccountCode:
    """계정과목

    code는 4자리 숫자 문자열 (예: "1000").
    """

    code: str
    name: str
    account_type: AccountType
    normal_balance: JournalSide


# NGO 기본 계정과목표
CHART_OF_ACCOUNTS: tuple[AccountCode, ...] = (
    # 자산
    AccountCode("1000", "Cash - General Fund", AccountType.ASSET, JournalSide.DEBIT),
    AccountCode("1010", "Cash - Restricted Fund", AccountType.ASSET, JournalSide.DEBIT),
    AccountCode("1100", "Accounts Receivable", AccountType.ASSET, JournalSide.DEBIT),
    AccountCode("1200", "Grants Receivable", AccountType.ASSET, JournalSide.DEBIT),
    AccountCode("1500", "Equipment", AccountType.ASSET, JournalSide.DEBIT),
    AccountCode("1600", "Accumulated Depreciation", AccountType.ASSET, JournalSide.CREDIT),

    # 부채
    AccountCode("2000", "Accounts Payable", AccountType.LIABILITY, JournalSide.CREDIT),
    AccountCode("2100", "Accrued Expenses", AccountType.LIABILITY, JournalSide.CREDIT),
    AccountCode("2200", "Deferred Revenue", AccountType.LIABILITY, JournalSide.CREDIT),

    # 순자산
    AccountCode("3000", "Net Assets - Unrestricted", AccountType.NET_ASSETS, JournalSide.CREDIT),
    AccountCode("3100", "Net Assets - Temporarily Restricted", AccountType.NET_ASSETS, JournalSide.CREDIT),
    AccountCode("3200", "Net Assets - Permanently Restricted", AccountType.NET_ASSETS, JournalSide.CREDIT),

    # 수익
    AccountCode("4000", "Donations - Unrestricted", AccountType.REVENUE, JournalSide.CREDIT),
    AccountCode("4100", "Donations - Restricted", AccountType.REVENUE, JournalSide.CREDIT),
    AccountCode("4200", "Grant Revenue", AccountType.REVENUE, JournalSide.CREDIT),
    AccountCode("4300", "Program Service Revenue", AccountType.REVENUE, JournalSide.CREDIT),
    AccountCode("4400", "Investment Income", AccountType.REVENUE, JournalSide.CREDIT),

    # 비용
    AccountCode("5000", "Program Expenses", AccountType.EXPENSE, JournalSide.DEBIT),
    AccountCode("5100", "Personnel Expenses", AccountType.EXPENSE, JournalSide.DEBIT),
    AccountCode("5200", "Administrative Expenses", AccountType.EXPENSE, JournalSide.DEBIT),
    AccountCode("5300", "Fundraising Expenses", AccountType.EXPENSE, JournalSide.DEBIT),
    AccountCode("5400", "Travel & Transportation", AccountType.EXPENSE, JournalSide.DEBIT),
    AccountCode("5500", "Equipment & Supplies", AccountType.EXPENSE, JournalSide.DEBIT),
    AccountCode("5600", "Professional Services", AccountType.EXPENSE, JournalSide.DEBIT),
)

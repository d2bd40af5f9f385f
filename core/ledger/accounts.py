"""
계정 코드 결정기

비즈니스 카테고리/상황을 계정과목표의 고정 코드로 매핑.
상태 없음, 의존성 없음, 실패하지 않음.
"""

from core.constants import AccountCodes
from core.ledger.types import CHART_OF_ACCOUNTS, AccountCode


_ACCOUNTS_BY_CODE: dict[str, AccountCode] = {
    account.code: account for account in CHART_OF_ACCOUNTS
}

# 카테고리명 부분 문자열 규칙 (순서대로 검사, 첫 매칭 사용)
EXPENSE_ACCOUNT_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("program",), "5000"),
    (("personnel", "staff"), "5100"),
    (("admin",), "5200"),
    (("fundraising",), "5300"),
    (("travel",), "5400"),
    (("equipment", "supplies"), "5500"),
    (("professional", "services"), "5600"),
)


def get_account(code: str) -> AccountCode | None:
    """계정 코드로 계정과목 조회

    Args:
        code: 계정 코드 (예: "2000")

    Returns:
        AccountCode 또는 None (계정과목표에 없음)
    """
    return _ACCOUNTS_BY_CODE.get(code)


def resolve_expense_account_code(category_name: str | None) -> AccountCode:
    """지출 카테고리 → 비용 계정

    Args:
        category_name: 예산 카테고리 이름 (None/빈 문자열 허용)

    Returns:
        매칭된 비용 계정. 매칭 실패 시 Program Expenses (5000)

    Example:
        >>> resolve_expense_account_code("Staff Salaries").code
        '5100'
        >>> resolve_expense_account_code("Program Supplies").code
        '5000'
    """
    category = (category_name or "").lower()

    for keywords, code in EXPENSE_ACCOUNT_RULES:
        if any(keyword in category for keyword in keywords):
            return _ACCOUNTS_BY_CODE[code]

    return _ACCOUNTS_BY_CODE[AccountCodes.PROGRAM_EXPENSES]


def resolve_cash_account_code(fund_source_id: str | None = None) -> AccountCode:
    """지급 시 사용할 현금 계정

    현재는 기금의 제한 여부와 무관하게 항상 일반기금 현금(1000).
    제한기금 지급도 1000에서 차감되는 알려진 제약.
    """
    return _ACCOUNTS_BY_CODE[AccountCodes.CASH_GENERAL]


def resolve_fund_receipt_accounts(is_restricted: bool) -> tuple[AccountCode, AccountCode]:
    """기금 수령 시 (현금 계정, 수익 계정)

    Args:
        is_restricted: 기부자 제한 기금 여부

    Returns:
        제한: (1010 Cash - Restricted Fund, 4100 Donations - Restricted)
        비제한: (1000 Cash - General Fund, 4000 Donations - Unrestricted)
    """
    if is_restricted:
        return (
            _ACCOUNTS_BY_CODE[AccountCodes.CASH_RESTRICTED],
            _ACCOUNTS_BY_CODE[AccountCodes.DONATIONS_RESTRICTED],
        )
    return (
        _ACCOUNTS_BY_CODE[AccountCodes.CASH_GENERAL],
        _ACCOUNTS_BY_CODE[AccountCodes.DONATIONS_UNRESTRICTED],
    )

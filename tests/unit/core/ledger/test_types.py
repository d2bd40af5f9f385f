"""계정과목표 타입 테스트"""

from core.ledger.types import CHART_OF_ACCOUNTS, AccountType, JournalSide


class TestChartOfAccounts:
    """NGO 기본 계정과목표"""

    def test_account_count(self) -> None:
        assert len(CHART_OF_ACCOUNTS) == 24

    def test_codes_unique(self) -> None:
        codes = [a.code for a in CHART_OF_ACCOUNTS]
        assert len(codes) == len(set(codes))

    def test_codes_are_four_digits(self) -> None:
        for account in CHART_OF_ACCOUNTS:
            assert len(account.code) == 4
            assert account.code.isdigit()

    def test_code_ranges_match_account_type(self) -> None:
        prefixes = {
            "1": AccountType.ASSET,
            "2": AccountType.LIABILITY,
            "3": AccountType.NET_ASSETS,
            "4": AccountType.REVENUE,
            "5": AccountType.EXPENSE,
        }
        for account in CHART_OF_ACCOUNTS:
            assert account.account_type == prefixes[account.code[0]]

    def test_normal_balance(self) -> None:
        by_code = {a.code: a for a in CHART_OF_ACCOUNTS}

        assert by_code["1000"].normal_balance == JournalSide.DEBIT
        assert by_code["5000"].normal_balance == JournalSide.DEBIT
        assert by_code["2000"].normal_balance == JournalSide.CREDIT
        assert by_code["4100"].normal_balance == JournalSide.CREDIT
        # 감가상각누계액은 차감 자산 계정
        assert by_code["1600"].normal_balance == JournalSide.CREDIT

    def test_enums_serialize_as_strings(self) -> None:
        assert AccountType.NET_ASSETS.value == "net_assets"
        assert JournalSide.DEBIT == "debit"

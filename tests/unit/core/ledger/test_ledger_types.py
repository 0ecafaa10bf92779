"""
Ledger type tests

Enum values, normal-balance rule and legacy role mapping.
"""

from decimal import Decimal

import pytest

from core.ledger.types import (
    DEFAULT_ACCOUNTS,
    ROLE_ACCOUNT_TYPES,
    AccountRole,
    AccountType,
    EntryType,
    legacy_role,
    normal_balance,
)


class TestAccountType:
    """AccountType tests"""

    def test_values(self) -> None:
        assert {t.value for t in AccountType} == {
            "asset", "liability", "equity", "income", "expense",
        }

    def test_debit_normal(self) -> None:
        assert AccountType.ASSET.is_debit_normal
        assert AccountType.EXPENSE.is_debit_normal
        assert not AccountType.LIABILITY.is_debit_normal
        assert not AccountType.EQUITY.is_debit_normal
        assert not AccountType.INCOME.is_debit_normal

    def test_str_enum(self) -> None:
        assert AccountType("asset") == "asset"


class TestEntryType:
    """EntryType tests"""

    def test_values(self) -> None:
        assert [t.value for t in EntryType] == [
            "standard", "adjusting", "closing", "reversing",
        ]


class TestNormalBalance:
    """normal_balance tests"""

    @pytest.mark.parametrize("account_type", ["asset", "expense"])
    def test_debit_normal(self, account_type: str) -> None:
        assert normal_balance(account_type, 500, 200) == 300

    @pytest.mark.parametrize("account_type", ["liability", "equity", "income"])
    def test_credit_normal(self, account_type: str) -> None:
        assert normal_balance(account_type, 500, 200) == -300

    def test_decimal(self) -> None:
        result = normal_balance(AccountType.INCOME, Decimal("10.00"), Decimal("25.50"))
        assert result == Decimal("15.50")

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            normal_balance("revenue", 1, 0)


class TestLegacyRole:
    """legacy_role tests"""

    def test_cash_prefix(self) -> None:
        assert legacy_role("1150", "asset") == AccountRole.CASH

    def test_receivable_prefix(self) -> None:
        assert legacy_role("1200", AccountType.ASSET) == AccountRole.RECEIVABLE

    def test_payable_prefix(self) -> None:
        assert legacy_role("2100", "liability") == AccountRole.PAYABLE

    def test_prefix_with_wrong_type(self) -> None:
        """The prefix only counts for the matching account type"""
        assert legacy_role("1100", "expense") is None

    def test_no_match(self) -> None:
        assert legacy_role("1000", "asset") is None
        assert legacy_role("5600", "expense") is None


class TestDefaultAccounts:
    """Default chart of accounts tests"""

    def test_codes_unique(self) -> None:
        codes = [code for code, _, _, _ in DEFAULT_ACCOUNTS]
        assert len(codes) == len(set(codes))

    def test_roles_fit_types(self) -> None:
        for code, _, account_type, role in DEFAULT_ACCOUNTS:
            if role is not None:
                assert ROLE_ACCOUNT_TYPES[AccountRole(role)] == AccountType(account_type), code

    def test_cash_accounts(self) -> None:
        cash = {code for code, _, _, role in DEFAULT_ACCOUNTS if role == "cash"}
        assert cash == {"1000", "1100"}

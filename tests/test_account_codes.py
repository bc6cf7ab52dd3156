"""
Tests for chart-of-accounts code generation.
"""

import pytest

from src.calculations import generate_account_code
from src.models.financial import Account, AccountType


def account(code, account_type):
    return Account(id=code, name=f"Account {code}", type=account_type)


class TestGenerateAccountCode:
    """Tests for generate_account_code."""

    @pytest.mark.parametrize(
        "account_type,expected",
        [
            (AccountType.ASSET, "1001"),
            (AccountType.LIABILITY, "2001"),
            (AccountType.EQUITY, "3001"),
            (AccountType.INCOME, "4001"),
            (AccountType.EXPENSE, "5001"),
        ],
    )
    def test_first_code_per_type(self, account_type, expected):
        assert generate_account_code(account_type, "", []) == expected

    def test_next_after_highest(self):
        """Test the next code follows the highest, not the count."""
        existing = [account("1001", "asset"), account("1004", "asset")]
        assert generate_account_code("asset", "Bank", existing) == "1005"

    def test_other_types_ignored(self):
        existing = [account("1007", "asset"), account("5003", "expense")]
        assert generate_account_code("liability", "", existing) == "2001"

    def test_unknown_type_uses_fallback_prefix(self):
        assert generate_account_code("suspense", "", []) == "9001"

    def test_unparseable_codes_count_as_zero(self):
        existing = [account("1abc", "asset")]
        assert generate_account_code("asset", "", existing) == "1001"

    def test_sequence_past_three_digits(self):
        existing = [account("1999", "asset")]
        assert generate_account_code("asset", "", existing) == "11000"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

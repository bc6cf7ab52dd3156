"""
Account Code Generation

Account ids double as chart-of-accounts codes: a one-digit type prefix and a
three-digit sequence, e.g. 1004 for the fifth asset account.

NOTE: Generation is advisory. The max-scan is not atomic, so two writers
creating accounts of the same type at once can produce the same code.
The app has a single writer per session.
"""

import re
from typing import Iterable

from src.models.financial import Account, AccountType


ACCOUNT_CODE_PREFIXES = {
    AccountType.ASSET.value: "1",
    AccountType.LIABILITY.value: "2",
    AccountType.EQUITY.value: "3",
    AccountType.INCOME.value: "4",
    AccountType.EXPENSE.value: "5",
}
FALLBACK_PREFIX = "9"


def account_code_prefix(account_type: str) -> str:
    return ACCOUNT_CODE_PREFIXES.get(
        str(getattr(account_type, "value", account_type)), FALLBACK_PREFIX
    )


def _sequence_number(code: str) -> int:
    # Leading digits after the prefix; anything unparseable counts as 0.
    match = re.match(r"\d+", code[1:])
    return int(match.group()) if match else 0


def generate_account_code(
    account_type: str,
    sub_type: str,
    existing_accounts: Iterable[Account],
) -> str:
    """
    Next free code for an account type.

    Args:
        account_type: One of AccountType (unknown types get prefix 9)
        sub_type: Accepted for call-site symmetry; not part of the code
        existing_accounts: Accounts already in the chart

    Returns:
        Prefix followed by (highest existing sequence + 1), zero-padded to 3
    """
    prefix = account_code_prefix(account_type)

    highest = max(
        (
            _sequence_number(account.id)
            for account in existing_accounts
            if account.type == account_type and account.id.startswith(prefix)
        ),
        default=0,
    )

    return f"{prefix}{highest + 1:03d}"

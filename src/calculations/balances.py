"""
Balance Calculations

Account balances from the journal, running balances for the cashbook and
net worth across the chart of accounts.

All functions are pure: they read snapshots and return new values.
"""

from decimal import Decimal
from typing import Iterable, Sequence, Union

from src.models.financial import (
    ZERO,
    Account,
    AccountType,
    CashbookEntry,
    CashbookEntryType,
    NetWorth,
    Transaction,
)


# Accounts whose balance grows with debits. Everything else grows with credits.
DEBIT_NORMAL_TYPES = (AccountType.ASSET, AccountType.EXPENSE)


def is_debit_normal(account_type: str) -> bool:
    return account_type in DEBIT_NORMAL_TYPES


def calculate_account_balance(
    account: Account,
    transactions: Iterable[Transaction],
) -> Decimal:
    """
    Recompute an account's balance from the transaction journal.

    Uses the normal-balance rule: assets and expenses are debit - credit,
    liabilities, income and equity are credit - debit.
    """
    debit_normal = is_debit_normal(account.type)
    balance = ZERO

    for transaction in transactions:
        for entry in transaction.entries:
            if entry.account_id != account.id:
                continue
            if debit_normal:
                balance += entry.debit - entry.credit
            else:
                balance += entry.credit - entry.debit

    return balance


def calculate_running_balance(
    entries: Sequence[CashbookEntry],
    starting_balance: Union[Decimal, int, float] = 0,
) -> list[CashbookEntry]:
    """
    Walk cashbook entries in date order and stamp each with its running total.

    Entries sharing a date keep their original relative order. Deposits add,
    anything else subtracts. The input entries are not modified; new records
    are returned with only `balance` changed.
    """
    running = Decimal(str(starting_balance))
    result = []

    for entry in sorted(entries, key=lambda e: e.date):
        if entry.type == CashbookEntryType.DEPOSIT:
            running += entry.amount
        else:
            running -= entry.amount
        result.append(entry.model_copy(update={"balance": running}))

    return result


def _sum_active_balances(accounts: Iterable[Account], account_type: AccountType) -> Decimal:
    return sum(
        (a.balance for a in accounts if a.type == account_type and a.is_active),
        ZERO,
    )


def calculate_net_worth(accounts: Sequence[Account]) -> NetWorth:
    """
    Active assets minus active liabilities.

    Inactive (closed) accounts are left out entirely.
    """
    total_assets = _sum_active_balances(accounts, AccountType.ASSET)
    total_liabilities = _sum_active_balances(accounts, AccountType.LIABILITY)

    return NetWorth(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
    )


def calculate_cash_balance(accounts: Iterable[Account]) -> Decimal:
    """Balance held in active asset accounts classified as cash."""
    return sum(
        (
            a.balance
            for a in accounts
            if a.type == AccountType.ASSET
            and a.is_active
            and "cash" in a.sub_type.lower()
        ),
        ZERO,
    )

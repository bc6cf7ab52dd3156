"""
Record factories.

Build complete records from user input: assign the id, creation stamp and
financial year so every storage backend persists the same thing.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union
from uuid import uuid4

from src.calculations.portfolio import refresh_investment
from src.models.financial import (
    ZERO,
    Account,
    CashbookEntry,
    Category,
    CategoryType,
    Investment,
    InvestmentTransaction,
    InvestmentTransactionType,
    Transaction,
    TransactionEntry,
    utc_now,
)
from src.periods.financial_year import (
    get_current_financial_year,
    get_financial_year_from_date,
)


Number = Union[Decimal, int, float, str]


def new_id() -> str:
    return uuid4().hex


def _money(value: Optional[Number]) -> Decimal:
    if value is None or value == "":
        return ZERO
    return Decimal(str(value))


def new_account(
    account_id: str,
    name: str,
    account_type: str,
    sub_type: str = "",
    now: Optional[dt.datetime] = None,
) -> Account:
    """
    The id is the account code; see `generate_account_code`.

    Accounts open at zero. Opening balances are journal entries against
    an equity account, so the cached balance always matches the journal.
    """
    now = now or utc_now()
    return Account(
        id=account_id,
        name=name,
        type=account_type,
        sub_type=sub_type,
        is_active=True,
        created_at=now,
        financial_year=get_current_financial_year(now.date()),
    )


def new_transaction(
    date: dt.date,
    description: str,
    entries: list[TransactionEntry],
    total_amount: Decimal,
    is_balanced: bool,
    reference: Optional[str] = None,
    category: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> Transaction:
    now = now or utc_now()
    return Transaction(
        id=new_id(),
        date=date,
        description=description,
        reference=reference or None,
        category=category or None,
        entries=entries,
        total_amount=total_amount,
        is_balanced=is_balanced,
        financial_year=get_financial_year_from_date(date),
        created_at=now,
        updated_at=now,
    )


def new_cashbook_entry(
    date: dt.date,
    description: str,
    bank_account: str,
    entry_type: str,
    amount: Number,
    category: str = "",
    reference: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> CashbookEntry:
    """Balance starts at zero; the running balance pass fills it in."""
    return CashbookEntry(
        id=new_id(),
        date=date,
        description=description,
        bank_account=bank_account,
        type=entry_type,
        amount=_money(amount),
        category=category,
        reference=reference or None,
        financial_year=get_financial_year_from_date(date),
        created_at=now or utc_now(),
    )


def new_investment(
    symbol: str,
    name: str,
    investment_type: str,
    quantity: Number,
    average_price: Number,
    current_price: Optional[Number] = None,
    now: Optional[dt.datetime] = None,
) -> Investment:
    """A fresh holding with its derived metrics already computed."""
    now = now or utc_now()
    average = _money(average_price)
    investment = Investment(
        id=new_id(),
        symbol=symbol.upper(),
        name=name,
        type=investment_type,
        quantity=_money(quantity),
        average_price=average,
        current_price=average if current_price is None else _money(current_price),
        financial_year=get_current_financial_year(now.date()),
    )
    return refresh_investment(investment, now=now)


def new_investment_transaction(
    investment_id: str,
    date: dt.date,
    trade_type: InvestmentTransactionType,
    quantity: Number,
    price: Number,
    fees: Optional[Number] = None,
    notes: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> InvestmentTransaction:
    quantity = _money(quantity)
    price = _money(price)
    return InvestmentTransaction(
        id=new_id(),
        investment_id=investment_id,
        date=date,
        type=trade_type,
        quantity=quantity,
        price=price,
        total_amount=quantity * price,
        fees=_money(fees),
        notes=notes or None,
        financial_year=get_financial_year_from_date(date),
        created_at=now or utc_now(),
    )


def new_category(
    name: str,
    category_type: CategoryType,
    now: Optional[dt.datetime] = None,
) -> Category:
    return Category(
        id=new_id(),
        name=name,
        type=category_type,
        created_at=now or utc_now(),
    )

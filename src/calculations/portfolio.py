"""
Portfolio Calculations

Per-holding metrics, whole-portfolio aggregation and the bookkeeping for
buys and sells against a holding.
"""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from src.models.financial import (
    ZERO,
    Investment,
    InvestmentMetrics,
    InvestmentTransaction,
    InvestmentTransactionType,
    PortfolioValue,
    utc_now,
)


HUNDRED = Decimal("100")


class InsufficientQuantityError(ValueError):
    """A sell asked for more units than the holding has."""

    def __init__(self, symbol: str, held: Decimal, requested: Decimal):
        self.symbol = symbol
        self.held = held
        self.requested = requested
        super().__init__(
            f"Cannot sell {requested} of {symbol}: only {held} held"
        )


def _percentage(gain_loss: Decimal, cost: Decimal) -> Decimal:
    # Zero cost basis yields exactly 0, never a division error.
    if cost > 0:
        return gain_loss / cost * HUNDRED
    return ZERO


def calculate_investment_metrics(investment: Investment) -> InvestmentMetrics:
    """Cost, market value and gain/loss for a single holding."""
    total_investment = investment.quantity * investment.average_price
    current_value = investment.quantity * investment.current_price
    gain_loss = current_value - total_investment

    return InvestmentMetrics(
        total_investment=total_investment,
        current_value=current_value,
        gain_loss=gain_loss,
        gain_loss_percentage=_percentage(gain_loss, total_investment),
    )


def calculate_portfolio_value(investments: Iterable[Investment]) -> PortfolioValue:
    """
    Aggregate the whole portfolio.

    The percentage is taken on the summed totals, not averaged per holding.
    """
    total_investment = ZERO
    current_value = ZERO

    for investment in investments:
        total_investment += investment.quantity * investment.average_price
        current_value += investment.quantity * investment.current_price

    total_gain_loss = current_value - total_investment

    return PortfolioValue(
        total_investment=total_investment,
        current_value=current_value,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percentage=_percentage(total_gain_loss, total_investment),
    )


def group_portfolio_by_type(
    investments: Iterable[Investment],
) -> dict[str, PortfolioValue]:
    """Portfolio totals per investment type, for the allocation breakdown."""
    groups: dict[str, list[Investment]] = defaultdict(list)
    for investment in investments:
        groups[str(getattr(investment.type, "value", investment.type))].append(investment)

    return {
        investment_type: calculate_portfolio_value(members)
        for investment_type, members in sorted(groups.items())
    }


def refresh_investment(
    investment: Investment,
    now: Optional[datetime] = None,
) -> Investment:
    """Return a copy with the cached metric fields recomputed."""
    metrics = calculate_investment_metrics(investment)
    return investment.model_copy(
        update={
            **metrics.model_dump(),
            "last_updated": now or utc_now(),
        }
    )


def apply_investment_transaction(
    investment: Investment,
    trade: InvestmentTransaction,
    now: Optional[datetime] = None,
) -> Investment:
    """
    Apply a buy or sell to a holding.

    Buys re-weight the average price, with fees added to the cost basis.
    Sells reduce the quantity and leave the average price unchanged.

    Raises:
        InsufficientQuantityError: If a sell exceeds the quantity held
    """
    quantity = investment.quantity
    average_price = investment.average_price

    if trade.type == InvestmentTransactionType.BUY:
        cost = quantity * average_price + trade.quantity * trade.price + trade.fees
        quantity += trade.quantity
        average_price = cost / quantity
    else:
        if trade.quantity > quantity:
            raise InsufficientQuantityError(investment.symbol, quantity, trade.quantity)
        quantity -= trade.quantity

    updated = investment.model_copy(
        update={"quantity": quantity, "average_price": average_price}
    )
    return refresh_investment(updated, now=now)

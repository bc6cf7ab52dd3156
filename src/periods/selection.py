"""
Selected Financial Year

The reporting year chosen in the sidebar is read by every page and written
by one control. Each UI session owns one FinancialYearSelection; pages
subscribe to it instead of reading a process-wide global.
"""

from datetime import date
from typing import Callable, Optional

import structlog

from src.periods.financial_year import (
    get_current_financial_year,
    parse_financial_year,
)


Listener = Callable[[str], None]

logger = structlog.get_logger(__name__)


class FinancialYearSelection:
    """
    Observable store for the currently selected financial year.

    Usage:
        selection = FinancialYearSelection()
        unsubscribe = selection.subscribe(lambda fy: print(fy))
        selection.select("2023-24")
        unsubscribe()
    """

    def __init__(
        self,
        initial: Optional[str] = None,
        today: Optional[date] = None,
    ):
        self._current = get_current_financial_year(today)
        self._selected = initial or self._current
        parse_financial_year(self._selected)
        self._listeners: list[Listener] = []

    @property
    def selected(self) -> str:
        return self._selected

    @property
    def current(self) -> str:
        """The financial year containing today, fixed at creation."""
        return self._current

    @property
    def is_current_year(self) -> bool:
        return self._selected == self._current

    def select(self, financial_year: str) -> None:
        """
        Change the selection and notify subscribers.

        Raises:
            InvalidFinancialYearError: If the label is malformed
        """
        parse_financial_year(financial_year)
        if financial_year == self._selected:
            return

        self._selected = financial_year
        logger.debug("financial_year_selected", financial_year=financial_year)
        for listener in list(self._listeners):
            listener(financial_year)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

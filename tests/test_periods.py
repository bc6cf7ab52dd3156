"""
Tests for financial-year helpers and the selected-year store.
"""

import pytest
from datetime import date

from src.periods import (
    FinancialYearSelection,
    InvalidFinancialYearError,
    get_available_financial_years,
    get_current_financial_year,
    get_date_range_for_period,
    get_financial_year_dates,
    get_financial_year_from_date,
    get_financial_year_info,
    get_months_in_financial_year,
    get_quarter,
    is_current_financial_year,
    is_date_in_financial_year,
    list_financial_years,
    parse_financial_year,
)


class TestFinancialYear:
    """Tests for financial-year labels and boundaries."""

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2024, 4, 1), "2024-25"),
            (date(2024, 3, 31), "2023-24"),
            (date(2025, 1, 15), "2024-25"),
            (date(1999, 12, 31), "1999-00"),
        ],
    )
    def test_year_from_date(self, day, expected):
        assert get_financial_year_from_date(day) == expected

    def test_year_dates(self):
        assert get_financial_year_dates("2024-25") == (date(2024, 4, 1), date(2025, 3, 31))

    def test_boundaries_are_inclusive(self):
        assert is_date_in_financial_year(date(2024, 4, 1), "2024-25")
        assert is_date_in_financial_year(date(2025, 3, 31), "2024-25")
        assert not is_date_in_financial_year(date(2025, 4, 1), "2024-25")

    @pytest.mark.parametrize("label", ["2024", "2024-2025", "24-25", "2024-27", "", None])
    def test_malformed_labels_rejected(self, label):
        with pytest.raises(InvalidFinancialYearError):
            parse_financial_year(label)

    def test_current_year_uses_pinned_clock(self):
        today = date(2025, 2, 1)
        assert get_current_financial_year(today) == "2024-25"
        assert is_current_financial_year("2024-25", today)
        assert not is_current_financial_year("2025-26", today)

    def test_available_years(self):
        """Test the window of five years back and two forward, newest first."""
        years = get_available_financial_years(date(2024, 6, 1))
        assert years[0] == "2026-27"
        assert years[-1] == "2019-20"
        assert len(years) == 8
        assert "2024-25" in years

    def test_year_info(self):
        info = get_financial_year_info("2023-24", today=date(2024, 6, 1))
        assert info.start_date == date(2023, 4, 1)
        assert info.is_current is False

    def test_listed_years_flag_only_the_current_one(self):
        infos = list_financial_years(date(2024, 6, 1))
        assert [i.year for i in infos] == get_available_financial_years(date(2024, 6, 1))
        assert [i.year for i in infos if i.is_current] == ["2024-25"]
        assert infos[-1].end_date == date(2020, 3, 31)

    def test_months_in_year(self):
        months = get_months_in_financial_year("2024-25")
        assert len(months) == 12
        assert months[0] == "2024-04"
        assert months[-1] == "2025-03"

    @pytest.mark.parametrize(
        "day,quarter",
        [
            (date(2024, 4, 1), 1),
            (date(2024, 9, 30), 2),
            (date(2024, 12, 1), 3),
            (date(2025, 3, 31), 4),
        ],
    )
    def test_quarter(self, day, quarter):
        assert get_quarter(day) == quarter

    def test_date_range_for_periods(self):
        today = date(2024, 8, 20)
        assert get_date_range_for_period("week", today) == (date(2024, 8, 13), today)
        assert get_date_range_for_period("month", today) == (date(2024, 8, 1), today)
        assert get_date_range_for_period("quarter", today) == (date(2024, 7, 1), today)
        assert get_date_range_for_period("year", today) == (date(2024, 4, 1), today)


class TestFinancialYearSelection:
    """Tests for the observable selected-year store."""

    def test_defaults_to_current_year(self):
        selection = FinancialYearSelection(today=date(2024, 6, 1))
        assert selection.selected == "2024-25"
        assert selection.is_current_year is True

    def test_select_notifies_subscribers(self):
        selection = FinancialYearSelection(today=date(2024, 6, 1))
        seen = []
        selection.subscribe(seen.append)

        selection.select("2023-24")

        assert seen == ["2023-24"]
        assert selection.selected == "2023-24"
        assert selection.is_current_year is False

    def test_reselecting_same_year_is_silent(self):
        selection = FinancialYearSelection(initial="2023-24", today=date(2024, 6, 1))
        seen = []
        selection.subscribe(seen.append)
        selection.select("2023-24")
        assert seen == []

    def test_unsubscribe(self):
        selection = FinancialYearSelection(today=date(2024, 6, 1))
        seen = []
        unsubscribe = selection.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        selection.select("2022-23")
        assert seen == []

    def test_invalid_selection_keeps_previous(self):
        selection = FinancialYearSelection(today=date(2024, 6, 1))
        with pytest.raises(InvalidFinancialYearError):
            selection.select("last year")
        assert selection.selected == "2024-25"

    def test_invalid_initial_rejected(self):
        with pytest.raises(InvalidFinancialYearError):
            FinancialYearSelection(initial="2024")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

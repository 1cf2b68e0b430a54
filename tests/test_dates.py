from datetime import date

import pytest

from concierge.dates import (
    find_dates,
    format_date,
    has_explicit_year,
    nights_between,
    parse_stay_date,
)

TODAY = date(2027, 1, 10)


class TestFindDates:
    def test_range_with_role_words(self):
        found = find_dates("check in July 15 to check out July 18")
        assert (found.check_in, found.check_out) == ("July 15", "July 18")

    def test_plain_range(self):
        found = find_dates("from July 15 to July 18")
        assert (found.check_in, found.check_out) == ("July 15", "July 18")

    def test_roles_win_over_order(self):
        found = find_dates("check out July 18, check in July 15")
        assert (found.check_in, found.check_out) == ("July 15", "July 18")

    def test_trailing_year_applies_to_both(self):
        found = find_dates("July 15 to July 18, 2027")
        assert (found.check_in, found.check_out) == ("July 15, 2027", "July 18, 2027")

    def test_single_date_roles(self):
        assert find_dates("arriving July 15").check_in == "July 15"
        assert find_dates("leaving on July 20").check_out == "July 20"

    def test_single_date_without_context(self):
        found = find_dates("July 15 works")
        assert found.undated == "July 15"
        assert found.check_in is None and found.check_out is None

    def test_spanish_day_month(self):
        found = find_dates("del 15 de julio al 18 de julio")
        assert (found.check_in, found.check_out) == ("July 15", "July 18")

    def test_numeric_date(self):
        assert find_dates("7/15").undated == "7/15"

    def test_no_dates(self):
        found = find_dates("two adults please")
        assert found.check_in is None and found.check_out is None and found.undated is None


class TestParseStayDate:
    def test_future_date_this_year(self):
        assert parse_stay_date("July 15", TODAY) == date(2027, 7, 15)

    def test_past_date_rolls_to_next_year(self):
        assert parse_stay_date("January 5", TODAY) == date(2028, 1, 5)

    def test_today_does_not_roll(self):
        assert parse_stay_date("January 10", TODAY) == TODAY

    def test_explicit_year_is_kept(self):
        assert parse_stay_date("January 5, 2027", TODAY) == date(2027, 1, 5)

    def test_checkout_crossing_new_year(self):
        assert parse_stay_date("January 2", TODAY, after=date(2027, 12, 30)) == date(2028, 1, 2)

    def test_checkout_in_same_month_is_not_moved(self):
        """A same-month reversal is left for validation to reject."""
        assert parse_stay_date("July 10", TODAY, after=date(2027, 7, 15)) == date(2027, 7, 10)

    def test_spanish_month(self):
        assert parse_stay_date("15 julio", TODAY) == date(2027, 7, 15)

    def test_numeric(self):
        assert parse_stay_date("7/15", TODAY) == date(2027, 7, 15)

    def test_not_a_date(self):
        with pytest.raises(ValueError):
            parse_stay_date("February 30", TODAY)


class TestHelpers:
    def test_explicit_year(self):
        assert has_explicit_year("July 15, 2027")
        assert has_explicit_year("7/15/27")
        assert not has_explicit_year("July 15")

    def test_format_and_nights(self):
        assert format_date(date(2027, 7, 15)) == "July 15, 2027"
        assert nights_between(date(2027, 7, 15), date(2027, 7, 18)) == 3

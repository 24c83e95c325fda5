"""
Tests for date utilities using opendate library.
"""

from datetime import date

import pytest
from cds_analytics import BadDayConvention, DayCountConvention
from cds_analytics.dates import add_business_days, add_days, add_months
from cds_analytics.dates import adjust_date, days_between, is_business_day
from cds_analytics.dates import time_from, to_date, year_fraction
from opendate import Date


class TestToDate:
    """Tests for to_date conversion."""

    def test_from_iso_string(self):
        """ISO strings are parsed."""
        d = to_date('2013-06-12')
        assert d == date(2013, 6, 12)

    def test_from_python_date(self):
        """datetime.date values are converted to opendate.Date."""
        d = to_date(date(2013, 6, 12))
        assert isinstance(d, Date)
        assert d == date(2013, 6, 12)

    def test_bad_type(self):
        """Unsupported input types raise TypeError."""
        with pytest.raises(TypeError):
            to_date(20130612)


class TestYearFraction:
    """Tests for day count fractions."""

    def test_act_360(self):
        """ACT/360 counts actual days over 360."""
        assert abs(year_fraction('2013-03-20', '2013-06-20', DayCountConvention.ACT_360) - 92 / 360) < 1e-15

    def test_act_365f(self):
        """ACT/365F counts actual days over 365."""
        assert abs(year_fraction('2013-03-20', '2013-06-20', DayCountConvention.ACT_365F) - 92 / 365) < 1e-15

    def test_thirty_360_end_of_month(self):
        """30/360 caps day 31 at 30."""
        yf = year_fraction('2013-01-30', '2013-03-31', DayCountConvention.THIRTY_360)
        assert abs(yf - 60 / 360) < 1e-15

    def test_thirty_360_february(self):
        """30/360 does not adjust the end of February."""
        yf = year_fraction('2013-01-31', '2013-02-28', DayCountConvention.THIRTY_360)
        assert abs(yf - 28 / 360) < 1e-15

    def test_negative_fraction(self):
        """Reversed dates give a negative fraction."""
        assert year_fraction('2013-06-20', '2013-03-20', DayCountConvention.ACT_360) < 0.0

    def test_time_from_before_base(self):
        """Times before the base date are negative."""
        assert abs(time_from('2013-06-12', '2013-06-10') + 2 / 365) < 1e-15

    def test_days_between_leap_year(self):
        """Five years spanning a leap day."""
        assert days_between('2013-06-12', '2018-06-12') == 1826

    def test_days_between_is_signed(self):
        """An end before the start gives a negative count."""
        assert days_between('2013-06-20', '2013-06-12') == -8
        assert days_between('2013-06-12', '2013-06-12') == 0


class TestDateArithmetic:
    """Tests for calendar and business day arithmetic."""

    def test_add_days_negative(self):
        """Negative day counts go backward."""
        assert add_days('2013-03-01', -1) == date(2013, 2, 28)

    def test_add_months_end_of_month(self):
        """Adding a month to Jan 31 lands on the last day of February."""
        assert add_months('2013-01-31', 1) == date(2013, 2, 28)

    def test_weekend_is_not_business_day(self):
        """Saturdays and Sundays are holidays on the default calendar."""
        assert not is_business_day('2013-06-15')
        assert not is_business_day('2013-06-16')
        assert is_business_day('2013-06-17')

    def test_add_business_days_skips_weekend(self):
        """T+3 business days from a Wednesday is the following Monday."""
        assert add_business_days('2013-06-12', 3) == date(2013, 6, 17)


class TestAdjustDate:
    """Tests for business day conventions."""

    def test_following(self):
        """FOLLOWING rolls a Saturday to Monday."""
        assert adjust_date('2013-06-15', BadDayConvention.FOLLOWING) == date(2013, 6, 17)

    def test_preceding(self):
        """PRECEDING rolls a Saturday to Friday."""
        assert adjust_date('2013-06-15', BadDayConvention.PRECEDING) == date(2013, 6, 14)

    def test_modified_following_month_end(self):
        """MODIFIED_FOLLOWING rolls back when following would change month."""
        assert adjust_date('2013-08-31', BadDayConvention.MODIFIED_FOLLOWING) == date(2013, 8, 30)

    def test_modified_preceding_month_start(self):
        """MODIFIED_PRECEDING rolls forward when preceding would change month."""
        assert adjust_date('2013-06-01', BadDayConvention.MODIFIED_PRECEDING) == date(2013, 6, 3)

    def test_none(self):
        """NONE leaves weekend dates alone."""
        assert adjust_date('2013-06-15', BadDayConvention.NONE) == date(2013, 6, 15)

    def test_business_day_unchanged(self):
        """A business day is never moved."""
        assert adjust_date('2013-06-12', BadDayConvention.FOLLOWING) == date(2013, 6, 12)


class TestEnumParsing:
    """Tests for parsing conventions from strings."""

    def test_day_count_from_string(self):
        """Common day count spellings are recognised."""
        assert DayCountConvention.from_string('ACT/360') == DayCountConvention.ACT_360

    def test_bad_day_from_string(self):
        """Bad day conventions parse case-insensitively."""
        assert BadDayConvention.from_string('modified_following') == BadDayConvention.MODIFIED_FOLLOWING

"""
Tests for premium leg schedule generation.
"""

from datetime import date

import pytest
from cds_analytics import PremiumLegSchedule, StubMethod
from cds_analytics.schedule import unadjusted_dates


class TestUnadjustedDates:
    """Tests for unadjusted date generation."""

    def test_regular(self):
        """Whole quarters need no stub."""
        dates = unadjusted_dates('2013-03-20', '2013-12-20')
        assert dates == [date(2013, 3, 20), date(2013, 6, 20), date(2013, 9, 20), date(2013, 12, 20)]

    def test_front_short(self):
        """A short first period absorbs the odd days."""
        dates = unadjusted_dates('2013-04-15', '2013-12-20', '3M', StubMethod.FRONT_SHORT)
        assert dates == [date(2013, 4, 15), date(2013, 6, 20), date(2013, 9, 20), date(2013, 12, 20)]

    def test_front_long(self):
        """A long first period merges the stub into the next period."""
        dates = unadjusted_dates('2013-04-15', '2013-12-20', '3M', StubMethod.FRONT_LONG)
        assert dates == [date(2013, 4, 15), date(2013, 9, 20), date(2013, 12, 20)]

    def test_back_short(self):
        """Back stubs step forward from the start."""
        dates = unadjusted_dates('2013-04-15', '2013-12-20', '3M', StubMethod.BACK_SHORT)
        assert dates == [date(2013, 4, 15), date(2013, 7, 15), date(2013, 10, 15), date(2013, 12, 20)]

    def test_back_long(self):
        """A long last period merges the stub into the previous period."""
        dates = unadjusted_dates('2013-04-15', '2013-12-20', '3M', StubMethod.BACK_LONG)
        assert dates == [date(2013, 4, 15), date(2013, 7, 15), date(2013, 12, 20)]

    def test_end_before_start(self):
        """The end date must be after the start."""
        with pytest.raises(ValueError):
            unadjusted_dates('2013-12-20', '2013-03-20')


class TestPremiumLegSchedule:
    """Tests for PremiumLegSchedule."""

    def test_standard_five_year(self):
        """A 5Y standard CDS stepping in on 2013-06-13 has 21 coupons."""
        schedule = PremiumLegSchedule('2013-03-20', '2018-06-20').truncate('2013-06-13')
        assert len(schedule) == 21
        assert schedule[0].accrual_start == date(2013, 3, 20)
        assert schedule[-1].accrual_end == date(2018, 6, 21)
        assert schedule[-1].payment_date == date(2018, 6, 20)

    def test_weekend_adjustment(self):
        """Saturday 2014-09-20 is paid on Monday and the next period starts then."""
        schedule = PremiumLegSchedule('2013-03-20', '2018-06-20')
        idx = next(i for i, p in enumerate(schedule) if p.nominal_payment_date == date(2014, 9, 20))
        assert schedule[idx].payment_date == date(2014, 9, 22)
        assert schedule[idx].accrual_end == date(2014, 9, 22)
        assert schedule[idx + 1].accrual_start == date(2014, 9, 22)

    def test_no_protection_start(self):
        """Without protection from the start of day the last period ends on maturity."""
        schedule = PremiumLegSchedule('2013-03-20', '2018-06-20', protect_start=False)
        assert schedule[-1].accrual_end == date(2018, 6, 20)

    def test_periods_are_contiguous(self):
        """Each period starts where the previous one ended."""
        schedule = PremiumLegSchedule('2013-03-20', '2018-06-20')
        for prev, curr in zip(schedule.periods, schedule.periods[1:]):
            assert curr.accrual_start == prev.accrual_end

    def test_truncate_everything(self):
        """Truncating after the last period leaves an empty schedule."""
        schedule = PremiumLegSchedule('2013-03-20', '2013-12-20').truncate('2014-01-01')
        assert len(schedule) == 0

    def test_truncate_keeps_running_period(self):
        """The period containing the step-in date is kept."""
        schedule = PremiumLegSchedule('2013-03-20', '2013-12-20').truncate('2013-07-01')
        assert len(schedule) == 2
        assert schedule[0].accrual_start == date(2013, 6, 20)

    def test_from_unadjusted_dates(self):
        """Explicit dates build one period per interval."""
        schedule = PremiumLegSchedule.from_unadjusted_dates(['2013-03-20', '2013-06-20', '2013-09-20'])
        assert len(schedule) == 2
        assert schedule.payment_dates == [date(2013, 6, 20), date(2013, 9, 20)]

    def test_from_unadjusted_dates_unsorted(self):
        """Dates must be strictly ascending."""
        with pytest.raises(ValueError):
            PremiumLegSchedule.from_unadjusted_dates(['2013-06-20', '2013-03-20'])

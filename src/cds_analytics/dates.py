"""
Date utilities for the schedule model.

Uses opendate.Date as the primary date type. All numeric code downstream
works in year fractions from the trade date; this module is the only place
calendar arithmetic happens.
"""

from datetime import date, datetime
from typing import Union

from opendate import CustomCalendar, Date, register_calendar
from opendate import set_default_calendar

from .enums import BadDayConvention, DayCountConvention

# Weekends-only calendar, registered as the default
WEEKENDS_ONLY = CustomCalendar(
    name='WEEKENDS_ONLY',
    holidays=set(),
    weekmask='Mon Tue Wed Thu Fri',
)
register_calendar('WEEKENDS_ONLY', WEEKENDS_ONLY)
set_default_calendar('WEEKENDS_ONLY')

DateLike = Union[Date, date, datetime, str]


def to_date(d: DateLike) -> Date:
    """Convert any date-like input to an opendate.Date on the weekend calendar."""
    if isinstance(d, Date):
        return d.calendar(WEEKENDS_ONLY)
    if isinstance(d, datetime):
        return Date.instance(d.date()).calendar(WEEKENDS_ONLY)
    if isinstance(d, date):
        return Date.instance(d).calendar(WEEKENDS_ONLY)
    if isinstance(d, str):
        result = Date.parse(d)
        if result is None:
            raise ValueError(f'Cannot parse date: {d}')
        return result.calendar(WEEKENDS_ONLY)
    raise TypeError(f'Expected Date, date, datetime, or string, got {type(d)}')


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed number of calendar days from start to end."""
    return to_date(start).diff(to_date(end), False).in_days()


def year_fraction(
    start: DateLike,
    end: DateLike,
    convention: DayCountConvention = DayCountConvention.ACT_365F,
) -> float:
    """
    Calculate the signed year fraction between two dates.

    Args:
        start: Start date
        end: End date (may be before start, giving a negative fraction)
        convention: Day count convention to use

    Returns
        Year fraction as a float
    """
    d1 = to_date(start)
    d2 = to_date(end)

    if convention == DayCountConvention.ACT_360:
        return days_between(d1, d2) / 360.0

    if convention == DayCountConvention.ACT_365F:
        return days_between(d1, d2) / 365.0

    if convention == DayCountConvention.THIRTY_360:
        day1, day2 = d1.day, d2.day
        if day1 == 31:
            day1 = 30
        if day2 == 31 and day1 >= 30:
            day2 = 30
        return (360 * (d2.year - d1.year) + 30 * (d2.month - d1.month) + (day2 - day1)) / 360.0

    raise ValueError(f'Unknown day count convention: {convention}')


def time_from(
    base: DateLike,
    d: DateLike,
    convention: DayCountConvention = DayCountConvention.ACT_365F,
) -> float:
    """Time of d relative to base; negative when d is before base."""
    if to_date(d) < to_date(base):
        return -year_fraction(d, base, convention)
    return year_fraction(base, d, convention)


def add_days(d: DateLike, days: int) -> Date:
    """Add calendar days to a date."""
    od = to_date(d)
    return od.add(days=days) if days >= 0 else od.subtract(days=-days)


def add_months(d: DateLike, months: int) -> Date:
    """Add months to a date."""
    od = to_date(d)
    return od.add(months=months) if months >= 0 else od.subtract(months=-months)


def add_years(d: DateLike, years: int) -> Date:
    """Add years to a date."""
    od = to_date(d)
    return od.add(years=years) if years >= 0 else od.subtract(years=-years)


def add_business_days(d: DateLike, days: int) -> Date:
    """Add business days to a date."""
    od = to_date(d)
    if days == 0:
        return od
    return od.b.add(days=days) if days > 0 else od.b.subtract(days=abs(days))


def is_business_day(d: DateLike) -> bool:
    """Check if a date is a business day."""
    return to_date(d).is_business_day()


def adjust_date(
    d: DateLike,
    convention: BadDayConvention = BadDayConvention.FOLLOWING,
) -> Date:
    """
    Roll a date onto a business day.

    opendate's business-day view snaps a weekend date forward with
    ``.b.add(days=0)`` and backward with ``.b.subtract(days=0)``. The
    MODIFIED_* conventions reverse direction when the roll changes month.
    """
    od = to_date(d)
    if convention == BadDayConvention.NONE or od.is_business_day():
        return od

    following = od.b.add(days=0)
    preceding = od.b.subtract(days=0)
    rolled = {
        BadDayConvention.FOLLOWING: following,
        BadDayConvention.PRECEDING: preceding,
        BadDayConvention.MODIFIED_FOLLOWING: following if following.month == od.month else preceding,
        BadDayConvention.MODIFIED_PRECEDING: preceding if preceding.month == od.month else following,
    }
    if convention not in rolled:
        raise ValueError(f'Unknown bad day convention: {convention}')
    return rolled[convention]

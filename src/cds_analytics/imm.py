"""
IMM (International Monetary Market) date logic.

Standard CDS accrue from the previous IMM date and mature on an IMM date:
- IMM dates are the 20th of March, June, September and December
- CDS indices roll on the 20th of March and September
"""

from opendate import Date

from .dates import DateLike, to_date
from .tenor import Tenor, parse_tenor

IMM_MONTHS = (3, 6, 9, 12)

INDEX_ROLL_MONTHS = (3, 9)

IMM_DAY = 20


def is_imm_date(d: DateLike) -> bool:
    """True if the date is the 20th of March, June, September or December."""
    d = to_date(d)
    return d.day == IMM_DAY and d.month in IMM_MONTHS


def is_index_roll_date(d: DateLike) -> bool:
    """True if the date is the 20th of March or September."""
    d = to_date(d)
    return d.day == IMM_DAY and d.month in INDEX_ROLL_MONTHS


def _next_in_months(d: Date, months: tuple[int, ...]) -> Date:
    for m in months:
        if d.month < m or (d.month == m and d.day < IMM_DAY):
            return Date(d.year, m, IMM_DAY)
    return Date(d.year + 1, months[0], IMM_DAY)


def _previous_in_months(d: Date, months: tuple[int, ...]) -> Date:
    for m in reversed(months):
        if d.month > m or (d.month == m and d.day > IMM_DAY):
            return Date(d.year, m, IMM_DAY)
    return Date(d.year - 1, months[-1], IMM_DAY)


def next_imm_date(d: DateLike) -> Date:
    """
    The first IMM date strictly after the given date.

    Args:
        d: Reference date

    Returns
        Next IMM date (an IMM input moves on to the following quarter)
    """
    return to_date(_next_in_months(to_date(d), IMM_MONTHS))


def previous_imm_date(d: DateLike) -> Date:
    """
    The last IMM date strictly before the given date.

    Args:
        d: Reference date

    Returns
        Previous IMM date (an IMM input moves back to the previous quarter)
    """
    return to_date(_previous_in_months(to_date(d), IMM_MONTHS))


def next_index_roll_date(d: DateLike) -> Date:
    """The first 20th of March or September strictly after the given date."""
    return to_date(_next_in_months(to_date(d), INDEX_ROLL_MONTHS))


def imm_date_set(start: DateLike, tenors: 'list[str | Tenor]') -> list[Date]:
    """
    Maturities reached by adding each tenor to an IMM start date.

    Args:
        start: The IMM date the tenors are measured from
        tenors: Tenors such as ['6M', '1Y', '5Y']

    Returns
        One maturity per tenor, in input order
    """
    start = to_date(start)
    return [parse_tenor(t).add_to(start) for t in tenors]


def imm_dates_between(first: DateLike, last: DateLike) -> list[Date]:
    """All IMM dates in [first, last], both ends included when they are IMM dates."""
    first, last = to_date(first), to_date(last)
    d = first if is_imm_date(first) else next_imm_date(first)
    dates = []
    while d <= last:
        dates.append(d)
        d = next_imm_date(d)
    return dates

"""
Tenor parsing.

A tenor is a calendar period such as "3M" or "5Y". CDS maturities are a tenor
added to an IMM date, and premium legs step through dates by the coupon
interval tenor.
"""

import re
from dataclasses import dataclass

from opendate import Date

from .dates import DateLike, add_days, add_months, add_years, to_date

_TENOR_RE = re.compile(r'^(\d+)([DWMY])$')


@dataclass(frozen=True)
class Tenor:
    """
    A calendar period.

    Attributes
        value: Number of units (e.g. 3 for "3M")
        unit: One of 'D', 'W', 'M', 'Y'
    """

    value: int
    unit: str

    def __post_init__(self):
        if self.unit not in {'D', 'W', 'M', 'Y'}:
            raise ValueError(f'Invalid tenor unit: {self.unit}')
        if self.value < 0:
            raise ValueError(f'Tenor value must be non-negative, got {self.value}')

    def __str__(self) -> str:
        return f'{self.value}{self.unit}'

    def __mul__(self, n: int) -> 'Tenor':
        return Tenor(self.value * n, self.unit)

    __rmul__ = __mul__

    @property
    def months(self) -> int:
        """Length in whole months (0 for day and week tenors)."""
        return {'M': self.value, 'Y': 12 * self.value}.get(self.unit, 0)

    @property
    def years(self) -> float:
        """Approximate length in years."""
        if self.unit == 'D':
            return self.value / 365.0
        if self.unit == 'W':
            return 7 * self.value / 365.0
        return self.months / 12.0

    def add_to(self, d: DateLike) -> Date:
        """Add this tenor to a date (no business-day adjustment)."""
        if self.unit == 'D':
            return add_days(d, self.value)
        if self.unit == 'W':
            return add_days(d, 7 * self.value)
        if self.unit == 'M':
            return add_months(d, self.value)
        return add_years(d, self.value)

    def subtract_from(self, d: DateLike) -> Date:
        """Subtract this tenor from a date (no business-day adjustment)."""
        if self.unit == 'D':
            return add_days(d, -self.value)
        if self.unit == 'W':
            return add_days(d, -7 * self.value)
        if self.unit == 'M':
            return add_months(d, -self.value)
        return add_years(d, -self.value)


def parse_tenor(s: 'str | Tenor') -> Tenor:
    """
    Parse a tenor string such as '6M', '1Y' or '2W'.

    'ON' and 'SN' are one day and 'TN' is two days. Tenor instances are
    returned unchanged.
    """
    if isinstance(s, Tenor):
        return s
    key = s.strip().upper()
    special = {'ON': Tenor(1, 'D'), 'SN': Tenor(1, 'D'), 'TN': Tenor(2, 'D')}
    if key in special:
        return special[key]

    match = _TENOR_RE.match(key)
    if match is None:
        raise ValueError(f'Cannot parse tenor: {s}')
    return Tenor(int(match.group(1)), match.group(2))


def tenor_dates(start: DateLike, tenors: 'list[str | Tenor]') -> list[Date]:
    """Unadjusted dates reached by adding each tenor to start."""
    start = to_date(start)
    return [parse_tenor(t).add_to(start) for t in tenors]

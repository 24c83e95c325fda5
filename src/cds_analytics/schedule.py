"""
Premium leg schedule generation.

Builds the accrual and payment dates of a CDS premium leg the way the ISDA
standard model does:
- Unadjusted dates step back from maturity (front stubs) or forward from
  the accrual start (back stubs) by whole multiples of the coupon interval
- Accrual dates and payment dates are business-day adjusted, except the
  first accrual start (never adjusted) and the last accrual end, which is
  the unadjusted maturity
- With protection from the start of day the last accrual end is pushed one
  day later, so the final coupon accrues over the maturity date itself
"""

from collections.abc import Sequence
from dataclasses import dataclass

from opendate import Date

from .dates import DateLike, add_days, adjust_date, days_between, to_date
from .enums import BadDayConvention, StubMethod
from .tenor import Tenor, parse_tenor


@dataclass(frozen=True)
class CouponPeriod:
    """
    A single premium accrual period.

    Attributes
        accrual_start: Start of accrual
        accrual_end: End of accrual
        payment_date: Adjusted payment date
        nominal_payment_date: Unadjusted payment date
    """

    accrual_start: Date
    accrual_end: Date
    payment_date: Date
    nominal_payment_date: Date

    @property
    def accrual_days(self) -> int:
        return days_between(self.accrual_start, self.accrual_end)

    def __repr__(self) -> str:
        return f'CouponPeriod({self.accrual_start}, {self.accrual_end}, pay={self.payment_date})'


def unadjusted_dates(
    start: DateLike,
    end: DateLike,
    interval: str | Tenor = '3M',
    stub: StubMethod = StubMethod.FRONT_SHORT,
) -> list[Date]:
    """
    Unadjusted schedule dates from start to end inclusive.

    Each date is the anchor (maturity for front stubs, start for back stubs)
    shifted by a whole number of intervals, so month-end rolls are stable.

    Args:
        start: Accrual start date
        end: Maturity date
        interval: Coupon interval tenor
        stub: Where the stub goes and whether it is short or long

    Returns
        Ascending list of dates, the first being start and the last end
    """
    start, end = to_date(start), to_date(end)
    interval = parse_tenor(interval)
    if end <= start:
        raise ValueError(f'end date {end} must be after start date {start}')

    inner = []
    step = 1
    if stub.is_front:
        d = (interval * step).subtract_from(end)
        while d > start:
            inner.append(d)
            step += 1
            d = (interval * step).subtract_from(end)
        stub_exists = d != start
        inner.reverse()
        if stub.is_long and stub_exists and inner:
            inner = inner[1:]
    else:
        d = (interval * step).add_to(start)
        while d < end:
            inner.append(d)
            step += 1
            d = (interval * step).add_to(start)
        stub_exists = d != end
        if stub.is_long and stub_exists and inner:
            inner = inner[:-1]
    return [start, *inner, end]


class PremiumLegSchedule:
    """
    The accrual periods of a CDS premium leg.

    Use the constructor to generate from (start, end, interval, stub); use
    from_unadjusted_dates to supply the dates directly.
    """

    def __init__(
        self,
        start: DateLike,
        end: DateLike,
        interval: str | Tenor = '3M',
        stub: StubMethod = StubMethod.FRONT_SHORT,
        bad_day: BadDayConvention = BadDayConvention.FOLLOWING,
        protect_start: bool = True,
    ):
        """
        Create a premium leg schedule.

        Args:
            start: Start of the first accrual period (typically the previous IMM date)
            end: Maturity date
            interval: Coupon interval (quarterly for standard CDS)
            stub: Stub convention (front short for standard CDS)
            bad_day: Business day adjustment for accrual and payment dates
            protect_start: Protection from the start of day (adds a day to the last accrual)
        """
        dates = unadjusted_dates(start, end, interval, stub)
        self._periods = self._build(dates, bad_day, protect_start)
        self.bad_day = bad_day
        self.protect_start = protect_start

    @classmethod
    def from_unadjusted_dates(
        cls,
        dates: Sequence[DateLike],
        bad_day: BadDayConvention = BadDayConvention.FOLLOWING,
        protect_start: bool = True,
    ) -> 'PremiumLegSchedule':
        """Build a schedule from explicit, ascending unadjusted dates."""
        dates = [to_date(d) for d in dates]
        if len(dates) < 2:
            raise ValueError('need at least two dates for a schedule')
        if any(b <= a for a, b in zip(dates, dates[1:])):
            raise ValueError('schedule dates must be strictly ascending')
        return cls._from_periods(cls._build(dates, bad_day, protect_start), bad_day, protect_start)

    @classmethod
    def _from_periods(cls, periods, bad_day, protect_start) -> 'PremiumLegSchedule':
        schedule = cls.__new__(cls)
        schedule._periods = list(periods)
        schedule.bad_day = bad_day
        schedule.protect_start = protect_start
        return schedule

    @staticmethod
    def _build(dates: list[Date], bad_day: BadDayConvention, protect_start: bool) -> list[CouponPeriod]:
        periods = []
        prev_adj = dates[0]
        for nominal in dates[1:]:
            adj = adjust_date(nominal, bad_day)
            periods.append(CouponPeriod(prev_adj, adj, adj, nominal))
            prev_adj = adj

        last = periods[-1]
        last_end = add_days(last.nominal_payment_date, 1) if protect_start else last.nominal_payment_date
        periods[-1] = CouponPeriod(last.accrual_start, last_end, last.payment_date, last.nominal_payment_date)
        return periods

    def truncate(self, step_in: DateLike) -> 'PremiumLegSchedule':
        """
        Drop the periods that have finished accruing by the step-in date.

        A period is kept when its accrual end is after step_in. The result
        is empty when every period has finished.
        """
        step_in = to_date(step_in)
        kept = [p for p in self._periods if p.accrual_end > step_in]
        return self._from_periods(kept, self.bad_day, self.protect_start)

    @property
    def periods(self) -> list[CouponPeriod]:
        """List of coupon periods."""
        return list(self._periods)

    @property
    def accrual_start_dates(self) -> list[Date]:
        return [p.accrual_start for p in self._periods]

    @property
    def accrual_end_dates(self) -> list[Date]:
        return [p.accrual_end for p in self._periods]

    @property
    def payment_dates(self) -> list[Date]:
        return [p.payment_date for p in self._periods]

    def __len__(self) -> int:
        return len(self._periods)

    def __iter__(self):
        return iter(self._periods)

    def __getitem__(self, idx: int) -> CouponPeriod:
        return self._periods[idx]

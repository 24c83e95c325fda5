"""
Time-based CDS representation.

CdsAnalytic turns the calendar description of a CDS (trade date, step-in,
cash settlement, accrual start, maturity and conventions) into year
fractions from the trade date. The pricer, calibrator and sensitivity
calculators only ever see these times.
"""

from dataclasses import dataclass, field, replace

from opendate import Date

from .dates import DateLike, add_days, days_between, time_from, to_date
from .dates import year_fraction
from .enums import BadDayConvention, DayCountConvention, StubMethod
from .schedule import CouponPeriod, PremiumLegSchedule
from .tenor import Tenor


@dataclass(frozen=True)
class CdsCoupon:
    """
    One premium period, in years from the trade date.

    Attributes
        eff_start: Start of credit risk for this period (negative if before trade date)
        eff_end: End of credit risk for this period
        payment_time: Payment time
        year_frac: Accrual year fraction (accrual day count)
        ycratio: year_frac divided by the curve-day-count fraction of the same period
    """

    eff_start: float
    eff_end: float
    payment_time: float
    year_frac: float
    ycratio: float

    @classmethod
    def from_period(
        cls,
        trade_date: DateLike,
        period: CouponPeriod,
        protect_start: bool = True,
        accrual_day_count: DayCountConvention = DayCountConvention.ACT_360,
        curve_day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> 'CdsCoupon':
        """Convert a dated coupon period into times from the trade date."""
        shift = -1 if protect_start else 0
        eff_start = add_days(period.accrual_start, shift)
        eff_end = add_days(period.accrual_end, shift)
        year_frac = year_fraction(period.accrual_start, period.accrual_end, accrual_day_count)
        curve_frac = year_fraction(period.accrual_start, period.accrual_end, curve_day_count)
        return cls(
            eff_start=time_from(trade_date, eff_start, curve_day_count),
            eff_end=time_from(trade_date, eff_end, curve_day_count),
            payment_time=time_from(trade_date, period.payment_date, curve_day_count),
            year_frac=year_frac,
            ycratio=year_frac / curve_frac,
        )

    def with_offset(self, offset: float) -> 'CdsCoupon':
        """The same coupon with all times measured from `offset`."""
        return replace(
            self,
            eff_start=self.eff_start - offset,
            eff_end=self.eff_end - offset,
            payment_time=self.payment_time - offset,
        )


@dataclass(frozen=True)
class CdsAnalytic:
    """
    An immutable CDS in analytic (time-based) form.

    Build one with `from_dates` or with the `CdsAnalyticFactory`. All times
    are year fractions from the trade date in the curve day count.

    Attributes
        coupons: Remaining premium periods after step-in
        acc_start: Accrual start of the first remaining period
        effective_protection_start: Start of protection (never before the trade date)
        protection_end: End of protection (maturity)
        cash_settle_time: Time of cash settlement of the upfront amount
        accrued_year_fraction: Accrued premium (as a year fraction) at step-in
        accrued_days: Accrued days at step-in
        lgd: Loss given default, 1 - recovery rate
        pay_acc_on_default: Whether premium accrued at default is paid
        protection_from_start_of_day: Protection from the start of day
    """

    coupons: tuple[CdsCoupon, ...]
    acc_start: float
    effective_protection_start: float
    protection_end: float
    cash_settle_time: float
    accrued_year_fraction: float
    accrued_days: int
    lgd: float
    pay_acc_on_default: bool = True
    protection_from_start_of_day: bool = True
    schedule: PremiumLegSchedule | None = field(default=None, compare=False, repr=False)
    accrual_day_count: DayCountConvention = field(default=DayCountConvention.ACT_360, compare=False, repr=False)

    @classmethod
    def from_dates(
        cls,
        trade_date: DateLike,
        step_in_date: DateLike,
        cash_settle_date: DateLike,
        acc_start_date: DateLike,
        end_date: DateLike,
        pay_acc_on_default: bool = True,
        coupon_interval: str | Tenor = '3M',
        stub: StubMethod = StubMethod.FRONT_SHORT,
        protect_start: bool = True,
        recovery_rate: float = 0.4,
        bad_day: BadDayConvention = BadDayConvention.FOLLOWING,
        accrual_day_count: DayCountConvention = DayCountConvention.ACT_360,
        curve_day_count: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> 'CdsAnalytic':
        """
        Build a CDS from its dates.

        Args:
            trade_date: Trade (valuation) date; time zero
            step_in_date: Date protection and premium ownership pass to the buyer (usually T+1)
            cash_settle_date: Settlement date of the upfront amount (usually T+3 business days)
            acc_start_date: Start of the first accrual period (previous IMM date for standard CDS)
            end_date: Maturity date
            pay_acc_on_default: Whether premium accrued at default is paid
            coupon_interval: Coupon interval tenor
            stub: Stub convention
            protect_start: Protection from the start of day
            recovery_rate: Recovery rate in [0, 1]
            bad_day: Business day adjustment of accrual and payment dates
            accrual_day_count: Day count for premium accrual
            curve_day_count: Day count used to turn dates into curve times

        Returns
            CdsAnalytic (expired if end_date is on or before trade_date)
        """
        trade_date = to_date(trade_date)
        step_in_date = to_date(step_in_date)
        cash_settle_date = to_date(cash_settle_date)
        acc_start_date = to_date(acc_start_date)
        end_date = to_date(end_date)

        if step_in_date < trade_date:
            raise ValueError('require trade date <= step-in date')
        if cash_settle_date < trade_date:
            raise ValueError('require trade date <= cash settle date')
        if end_date <= acc_start_date:
            raise ValueError('require accrual start date < end date')
        if not 0.0 <= recovery_rate <= 1.0:
            raise ValueError(f'recovery rate must be in [0, 1], got {recovery_rate}')

        full = PremiumLegSchedule(acc_start_date, end_date, coupon_interval, stub, bad_day, protect_start)
        remaining = full.truncate(step_in_date)
        coupons = tuple(
            CdsCoupon.from_period(trade_date, p, protect_start, accrual_day_count, curve_day_count)
            for p in remaining
        )

        if len(remaining):
            first_start = remaining[0].accrual_start
            accrued_days, accrued = _accrued(first_start, step_in_date, accrual_day_count)
        else:
            # nothing accrues once the last period has ended
            first_start = acc_start_date
            accrued_days, accrued = 0, 0.0

        start = max(step_in_date, acc_start_date)
        if protect_start:
            start = add_days(start, -1)
        effective_start = max(0.0, time_from(trade_date, start, curve_day_count))

        return cls(
            coupons=coupons,
            acc_start=time_from(trade_date, first_start, curve_day_count),
            effective_protection_start=effective_start,
            protection_end=time_from(trade_date, end_date, curve_day_count),
            cash_settle_time=time_from(trade_date, cash_settle_date, curve_day_count),
            accrued_year_fraction=accrued,
            accrued_days=accrued_days,
            lgd=1.0 - recovery_rate,
            pay_acc_on_default=pay_acc_on_default,
            protection_from_start_of_day=protect_start,
            schedule=full,
            accrual_day_count=accrual_day_count,
        )

    @property
    def num_payments(self) -> int:
        return len(self.coupons)

    def coupon(self, index: int) -> CdsCoupon:
        return self.coupons[index]

    @property
    def recovery_rate(self) -> float:
        return 1.0 - self.lgd

    @property
    def maturity(self) -> float:
        """Alias of protection_end."""
        return self.protection_end

    def is_expired(self) -> bool:
        """True once protection has ended."""
        return self.protection_end <= 0.0

    def accrued_premium(self, fractional_spread: float) -> float:
        """Premium accrued at step-in per unit notional."""
        return self.accrued_year_fraction * fractional_spread

    def accrued_premium_at(self, step_in_date: DateLike) -> tuple[int, float]:
        """
        Accrued days and accrued year fraction at an arbitrary step-in date.

        Args:
            step_in_date: Date at which accrual is measured

        Returns
            (days, year fraction), both zero before the first accrual start
            or after the last accrual end
        """
        if self.schedule is None:
            raise ValueError('this CDS was not built from dates')
        remaining = self.schedule.truncate(step_in_date)
        if len(remaining) == 0:
            return 0, 0.0
        return _accrued(remaining[0].accrual_start, to_date(step_in_date), self.accrual_day_count)

    def with_recovery_rate(self, recovery_rate: float) -> 'CdsAnalytic':
        """A copy of this CDS with a different recovery rate."""
        if not 0.0 <= recovery_rate <= 1.0:
            raise ValueError(f'recovery rate must be in [0, 1], got {recovery_rate}')
        return replace(self, lgd=1.0 - recovery_rate)

    def with_offset(self, offset: float) -> 'CdsAnalytic':
        """
        The same CDS with all times measured from `offset` instead of zero.

        Used together with IsdaCurve.with_offset for forward valuation.
        """
        if offset < 0.0:
            raise ValueError(f'offset must be non-negative, got {offset}')
        return replace(
            self,
            coupons=tuple(c.with_offset(offset) for c in self.coupons),
            acc_start=self.acc_start - offset,
            effective_protection_start=self.effective_protection_start - offset,
            protection_end=self.protection_end - offset,
            cash_settle_time=self.cash_settle_time - offset,
        )


def _accrued(acc_start: Date, step_in: Date, day_count: DayCountConvention) -> tuple[int, float]:
    if acc_start < step_in:
        return days_between(acc_start, step_in), year_fraction(acc_start, step_in, day_count)
    return 0, 0.0

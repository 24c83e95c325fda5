"""
Analytic CDS pricer.

Prices the protection (contingent) leg and the premium (fee) leg of a
CdsAnalytic against a yield curve and a credit curve. Both curves are
piecewise log-linear, so every leg integral is evaluated exactly on each
sub-interval of the merged knot grid:

    Protection leg = LGD * integral P(t) dF(t)
    Premium leg = coupon * (sum yf_i P(pay_i) Q(end_i) + accrual on default)

Accrual on default is integrated with one of three closed forms selected
by AccrualOnDefaultFormula:
- ORIGINAL_ISDA: the ISDA C library formula, including its half-day bias
- MARKIT_FIX: the Markit-patched formula (drops the time-weighting term)
- CORRECT: the exact integral, without the half-day bias

Intervals on which the combined rate-plus-hazard increment is below 1e-5
use the epsilon series forms to avoid cancellation.

All present values are per unit notional, from the protection buyer's
view, and by default are rolled to the cash settlement time.
"""

import math
from collections.abc import Sequence

from .cds import CdsAnalytic, CdsCoupon
from .curve import CreditCurve, YieldCurve
from .enums import AccrualOnDefaultFormula, PriceType
from .integration import get_integration_points, truncate_set_inclusive
from .maths import epsilon, epsilon_p, epsilon_pp

# Half a day in years (ACT/365F); the ORIGINAL_ISDA accrual offset
HALFDAY = 1.0 / 730.0

# |dht + drt| below this uses the series forms
SMALL = 1e-5


class AnalyticCdsPricer:
    """
    Closed-form CDS pricer and its curve sensitivities.

    Args:
        formula: Accrual-on-default formula (default ORIGINAL_ISDA)
    """

    def __init__(self, formula: AccrualOnDefaultFormula = AccrualOnDefaultFormula.ORIGINAL_ISDA):
        self.formula = formula
        self.omega = HALFDAY if formula == AccrualOnDefaultFormula.ORIGINAL_ISDA else 0.0

    def __repr__(self) -> str:
        return f'AnalyticCdsPricer({self.formula.name})'

    # ------------------------------------------------------------------
    # Present value

    def pv(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupon: float,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """
        PV of a CDS per unit notional for the protection buyer.

        Args:
            cds: The instrument
            yield_curve: Discount curve
            credit_curve: Survival curve
            coupon: Running coupon (fractional spread, 0.01 = 100bps)
            price_type: CLEAN excludes the accrued premium, DIRTY includes it
            valuation_time: Time the PV is rolled to (defaults to cash settlement)

        Returns
            Protection leg minus coupon times the annuity; 0 for an expired CDS
        """
        if cds.is_expired():
            return 0.0
        if valuation_time is None:
            valuation_time = cds.cash_settle_time
        rpv01 = self.annuity(cds, yield_curve, credit_curve, price_type, 0.0)
        pro = self.protection_leg(cds, yield_curve, credit_curve, 0.0)
        return (pro - coupon * rpv01) / yield_curve.discount_factor(valuation_time)

    def pvs(
        self,
        cdss: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupons: Sequence[float] | float,
        price_type: PriceType = PriceType.CLEAN,
    ) -> list[float]:
        """PVs of several CDSs, with one coupon each or a single shared coupon."""
        if isinstance(coupons, (int, float)):
            coupons = [coupons] * len(cdss)
        if len(coupons) != len(cdss):
            raise ValueError('number of coupons does not match number of CDSs')
        return [self.pv(c, yield_curve, credit_curve, s, price_type) for c, s in zip(cdss, coupons)]

    def par_spread(self, cds: CdsAnalytic, yield_curve: YieldCurve, credit_curve: CreditCurve) -> float:
        """
        The coupon that gives a clean PV of zero.

        Raises
            ValueError: If the CDS has expired
        """
        if cds.is_expired():
            raise ValueError('CDS has expired; cannot compute a par spread for it')
        rpv01 = self.annuity(cds, yield_curve, credit_curve, PriceType.CLEAN, 0.0)
        pro = self.protection_leg(cds, yield_curve, credit_curve, 0.0)
        return pro / rpv01

    def par_spreads(
        self,
        cdss: Sequence[CdsAnalytic],
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> list[float]:
        """Par spreads of several CDSs."""
        return [self.par_spread(c, yield_curve, credit_curve) for c in cdss]

    # ------------------------------------------------------------------
    # Legs

    def protection_leg(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        valuation_time: float | None = None,
    ) -> float:
        """
        PV of the protection leg per unit notional.

        Integrates LGD * P(t) * (-dQ(t)) from the effective protection start
        to the protection end.
        """
        if cds.is_expired():
            return 0.0
        if valuation_time is None:
            valuation_time = cds.cash_settle_time

        knots = get_integration_points(
            cds.effective_protection_start, cds.protection_end, yield_curve.times, credit_curve.times
        )
        ht0 = credit_curve.rt(knots[0])
        rt0 = yield_curve.rt(knots[0])
        b0 = math.exp(-ht0 - rt0)
        pv = 0.0
        for t in knots[1:]:
            ht1 = credit_curve.rt(t)
            rt1 = yield_curve.rt(t)
            b1 = math.exp(-ht1 - rt1)
            dht = ht1 - ht0
            dhrt = dht + rt1 - rt0
            if abs(dhrt) < SMALL:
                pv += dht * b0 * epsilon(-dhrt)
            else:
                pv += (b0 - b1) * dht / dhrt
            ht0, rt0, b0 = ht1, rt1, b1

        return pv * cds.lgd / yield_curve.discount_factor(valuation_time)

    def dirty_annuity(self, cds: CdsAnalytic, yield_curve: YieldCurve, credit_curve: CreditCurve) -> float:
        """
        Risky annuity (RPV01) including accrual on default, valued at time zero.

        The accrued premium is not removed; see annuity for the clean value.
        """
        if cds.is_expired():
            return 0.0
        pv = 0.0
        for c in cds.coupons:
            q = credit_curve.survival_probability(c.eff_end)
            p = yield_curve.discount_factor(c.payment_time)
            pv += c.year_frac * p * q

        if cds.pay_acc_on_default:
            points = self._accrual_points(cds, yield_curve, credit_curve)
            for c in cds.coupons:
                pv += self._accrual_on_default(c, cds.effective_protection_start, points, yield_curve, credit_curve)
        return pv

    def annuity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        price_type: PriceType = PriceType.CLEAN,
        valuation_time: float | None = None,
    ) -> float:
        """
        Risky annuity (RPV01) rolled to the valuation time.

        For CLEAN the accrued premium at step-in, paid at cash settlement and
        conditional on survival to the protection start, is subtracted.
        """
        if valuation_time is None:
            valuation_time = cds.cash_settle_time
        pv = self.dirty_annuity(cds, yield_curve, credit_curve)
        val_df = yield_curve.discount_factor(valuation_time)
        if price_type == PriceType.CLEAN:
            cs_time = cds.cash_settle_time
            prot_start = cds.effective_protection_start
            cs_df = val_df if valuation_time == cs_time else yield_curve.discount_factor(cs_time)
            q = 1.0 if prot_start == 0.0 else credit_curve.survival_probability(prot_start)
            pv -= cds.accrued_year_fraction * cs_df * q
        return pv / val_df

    def _accrual_points(self, cds: CdsAnalytic, yield_curve: YieldCurve, credit_curve: CreditCurve):
        # With several coupons the grid starts at the accrual start so that a
        # forward-starting CDS gets the same extra node as the ISDA C library;
        # MARKIT_FIX is sensitive to it.
        start = cds.effective_protection_start if cds.num_payments == 1 else cds.acc_start
        return get_integration_points(start, cds.protection_end, yield_curve.times, credit_curve.times)

    def _accrual_on_default(
        self,
        coupon: CdsCoupon,
        effective_start: float,
        points,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
    ) -> float:
        start = max(coupon.eff_start, effective_start)
        if start >= coupon.eff_end:
            return 0.0
        knots = truncate_set_inclusive(start, coupon.eff_end, points)

        t = knots[0]
        ht0 = credit_curve.rt(t)
        rt0 = yield_curve.rt(t)
        b0 = math.exp(-rt0 - ht0)
        t0 = t - coupon.eff_start + self.omega
        markit = self.formula == AccrualOnDefaultFormula.MARKIT_FIX
        pv = 0.0
        for j in range(1, len(knots)):
            t = knots[j]
            ht1 = credit_curve.rt(t)
            rt1 = yield_curve.rt(t)
            b1 = math.exp(-rt1 - ht1)
            dt = knots[j] - knots[j - 1]
            dht = ht1 - ht0
            dhrt = dht + rt1 - rt0
            if markit:
                if abs(dhrt) < SMALL:
                    pv += dht * dt * b0 * epsilon_p(-dhrt)
                else:
                    pv += dht * dt / dhrt * ((b0 - b1) / dhrt - b1)
            else:
                t1 = t - coupon.eff_start + self.omega
                if abs(dhrt) < SMALL:
                    pv += dht * b0 * (t0 * epsilon(-dhrt) + dt * epsilon_p(-dhrt))
                else:
                    pv += dht / dhrt * (t0 * b0 - t1 * b1 + dt / dhrt * (b0 - b1))
                t0 = t1
            ht0, rt0, b0 = ht1, rt1, b1
        return coupon.ycratio * pv

    # ------------------------------------------------------------------
    # Sensitivities to the curve nodes (zero rates / zero hazard rates)

    def pv_credit_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupon: float,
        node: int,
    ) -> float:
        """Derivative of the (dirty) PV with respect to one credit curve node."""
        if cds.is_expired():
            return 0.0
        rpv01_sense = self.pv_premium_leg_credit_sensitivity(cds, yield_curve, credit_curve, node)
        pro_sense = self.protection_leg_credit_sensitivity(cds, yield_curve, credit_curve, node)
        return pro_sense - coupon * rpv01_sense

    def pv_yield_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        coupon: float,
        node: int,
    ) -> float:
        """Derivative of the (dirty) PV with respect to one yield curve node."""
        if cds.is_expired():
            return 0.0
        rpv01_sense = self.pv_premium_leg_yield_sensitivity(cds, yield_curve, credit_curve, node)
        pro_sense = self.protection_leg_yield_sensitivity(cds, yield_curve, credit_curve, node)
        return pro_sense - coupon * rpv01_sense

    def par_spread_credit_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        """
        Derivative of the par spread with respect to one credit curve node.

        Raises
            ValueError: If the CDS has expired
        """
        if cds.is_expired():
            raise ValueError('CDS has expired; cannot compute a par spread sensitivity for it')
        a = self.protection_leg(cds, yield_curve, credit_curve)
        b = self.annuity(cds, yield_curve, credit_curve, PriceType.CLEAN)
        spread = a / b
        dadh = self.protection_leg_credit_sensitivity(cds, yield_curve, credit_curve, node)
        dbdh = self.pv_premium_leg_credit_sensitivity(cds, yield_curve, credit_curve, node)
        return spread * (dadh / a - dbdh / b)

    def pv_premium_leg_credit_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        """Derivative of the dirty annuity (rolled to cash settlement) with respect to one credit node."""
        if cds.is_expired():
            return 0.0
        sense = 0.0
        for c in cds.coupons:
            dqdh = credit_curve.single_node_discount_factor_sensitivity(c.eff_end, node)
            if dqdh == 0.0:
                continue
            sense += c.year_frac * yield_curve.discount_factor(c.payment_time) * dqdh

        if cds.pay_acc_on_default:
            points = self._accrual_points(cds, yield_curve, credit_curve)
            for c in cds.coupons:
                sense += self._accrual_on_default_credit_sensitivity(
                    c, cds.effective_protection_start, points, yield_curve, credit_curve, node
                )
        return sense / yield_curve.discount_factor(cds.cash_settle_time)

    def pv_premium_leg_yield_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        """
        Derivative of the dirty annuity (rolled to cash settlement) with respect to one yield node.

        Raises
            NotImplementedError: For accrual on default under any formula but MARKIT_FIX
        """
        if cds.is_expired():
            return 0.0
        sense = 0.0
        for c in cds.coupons:
            dpdr = yield_curve.single_node_discount_factor_sensitivity(c.payment_time, node)
            if dpdr == 0.0:
                continue
            sense += c.year_frac * credit_curve.survival_probability(c.eff_end) * dpdr

        if cds.pay_acc_on_default:
            points = self._accrual_points(cds, yield_curve, credit_curve)
            for c in cds.coupons:
                sense += self._accrual_on_default_yield_sensitivity(
                    c, cds.effective_protection_start, points, yield_curve, credit_curve, node
                )

        df = yield_curve.discount_factor(cds.cash_settle_time)
        sense /= df
        df_sense = yield_curve.single_node_discount_factor_sensitivity(cds.cash_settle_time, node)
        if df_sense != 0.0:
            dirty = self.annuity(cds, yield_curve, credit_curve, PriceType.DIRTY)
            sense -= dirty / df * df_sense
        return sense

    def _accrual_on_default_credit_sensitivity(
        self,
        coupon: CdsCoupon,
        effective_start: float,
        points,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        start = max(coupon.eff_start, effective_start)
        if start >= coupon.eff_end:
            return 0.0
        knots = truncate_set_inclusive(start, coupon.eff_end, points)

        t = knots[0]
        ht0 = credit_curve.rt(t)
        rt0 = yield_curve.rt(t)
        p0 = math.exp(-rt0)
        q0 = math.exp(-ht0)
        b0 = p0 * q0
        dqdr0 = credit_curve.single_node_discount_factor_sensitivity(t, node)
        t0 = t - coupon.eff_start + self.omega
        markit = self.formula == AccrualOnDefaultFormula.MARKIT_FIX
        sense = 0.0
        for j in range(1, len(knots)):
            t = knots[j]
            ht1 = credit_curve.rt(t)
            rt1 = yield_curve.rt(t)
            p1 = math.exp(-rt1)
            q1 = math.exp(-ht1)
            b1 = p1 * q1
            dqdr1 = credit_curve.single_node_discount_factor_sensitivity(t, node)
            dt = knots[j] - knots[j - 1]
            dht = ht1 - ht0
            # the tiny shift matches the ISDA C library
            dhrt = dht + rt1 - rt0 + 1e-50

            if markit:
                if abs(dhrt) < SMALL:
                    e_p = epsilon_p(-dhrt)
                    e_pp = epsilon_pp(-dhrt)
                    dpv_dq0 = p0 * dt * ((1.0 + dht) * e_p - dht * e_pp)
                    dpv_dq1 = b0 * dt / q1 * (-e_p + dht * e_pp)
                    sense += dpv_dq0 * dqdr0 + dpv_dq1 * dqdr1
                else:
                    w1 = (b0 - b1) / dhrt
                    w2 = w1 - b1
                    w3 = dht / dhrt
                    w4 = dt / dhrt
                    w5 = (1.0 - w3) * w2
                    dpv_dq0 = w4 / q0 * (w5 + w3 * (b0 - w1))
                    dpv_dq1 = w4 / q1 * (w5 + w3 * (b1 * (1.0 + dhrt) - w1))
                    sense += dpv_dq0 * dqdr0 - dpv_dq1 * dqdr1
            else:
                t1 = t - coupon.eff_start + self.omega
                if abs(dhrt) < SMALL:
                    e = epsilon(-dhrt)
                    e_p = epsilon_p(-dhrt)
                    e_pp = epsilon_pp(-dhrt)
                    w1 = t0 * e + dt * e_p
                    w2 = t0 * e_p + dt * e_pp
                    dpv_dq0 = p0 * ((1.0 + dht) * w1 - dht * w2)
                    dpv_dq1 = b0 / q1 * (-w1 + dht * w2)
                    sense += dpv_dq0 * dqdr0 + dpv_dq1 * dqdr1
                else:
                    w1 = dt / dhrt
                    w2 = dht / dhrt
                    w3 = (t0 + w1) * b0 - (t1 + w1) * b1
                    w4 = (1.0 - w2) / dhrt
                    w5 = w1 / dhrt * (b0 - b1)
                    dpv_dq0 = w4 * w3 / q0 + w2 * ((t0 + w1) * p0 - w5 / q0)
                    dpv_dq1 = w4 * w3 / q1 + w2 * ((t1 + w1) * p1 - w5 / q1)
                    sense += dpv_dq0 * dqdr0 - dpv_dq1 * dqdr1
                t0 = t1

            ht0, rt0, p0, q0, b0, dqdr0 = ht1, rt1, p1, q1, b1, dqdr1
        return coupon.ycratio * sense

    def _accrual_on_default_yield_sensitivity(
        self,
        coupon: CdsCoupon,
        effective_start: float,
        points,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        start = max(coupon.eff_start, effective_start)
        if start >= coupon.eff_end:
            return 0.0
        if self.formula != AccrualOnDefaultFormula.MARKIT_FIX:
            raise NotImplementedError(
                f'accrual-on-default yield sensitivity is only available for MARKIT_FIX, not {self.formula.name}'
            )
        knots = truncate_set_inclusive(start, coupon.eff_end, points)

        t = knots[0]
        ht0 = credit_curve.rt(t)
        rt0 = yield_curve.rt(t)
        p0 = math.exp(-rt0)
        q0 = math.exp(-ht0)
        b0 = p0 * q0
        dpdr0 = yield_curve.single_node_discount_factor_sensitivity(t, node)
        sense = 0.0
        for j in range(1, len(knots)):
            t = knots[j]
            ht1 = credit_curve.rt(t)
            rt1 = yield_curve.rt(t)
            p1 = math.exp(-rt1)
            q1 = math.exp(-ht1)
            b1 = p1 * q1
            dpdr1 = yield_curve.single_node_discount_factor_sensitivity(t, node)
            dt = knots[j] - knots[j - 1]
            dht = ht1 - ht0
            dhrt = dht + rt1 - rt0
            e_p = epsilon_p(-dhrt)
            e_pp = epsilon_pp(-dhrt)
            dpv_dp0 = q0 * dt * dht * (e_p - e_pp)
            dpv_dp1 = b0 * dt * dht / p1 * e_pp
            sense += dpv_dp0 * dpdr0 + dpv_dp1 * dpdr1
            ht0, rt0, p0, q0, b0, dpdr0 = ht1, rt1, p1, q1, b1, dpdr1
        return coupon.ycratio * sense

    def protection_leg_credit_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        """Derivative of the protection leg (rolled to cash settlement) with respect to one credit node."""
        n = credit_curve.num_knots
        if not 0 <= node < n:
            raise ValueError(f'credit curve node {node} out of range')
        # the node only moves the curve between its neighbours
        if (node != 0 and cds.protection_end <= credit_curve.time_at(node - 1)) or (
            node < n - 2 and cds.effective_protection_start >= credit_curve.time_at(node + 1)
        ):
            return 0.0
        if cds.is_expired():
            return 0.0

        knots = get_integration_points(
            cds.effective_protection_start, cds.protection_end, yield_curve.times, credit_curve.times
        )
        t = knots[0]
        ht0 = credit_curve.rt(t)
        rt0 = yield_curve.rt(t)
        dqdr0 = credit_curve.single_node_discount_factor_sensitivity(t, node)
        q0 = math.exp(-ht0)
        p0 = math.exp(-rt0)
        sense = 0.0
        for t in knots[1:]:
            ht1 = credit_curve.rt(t)
            dqdr1 = credit_curve.single_node_discount_factor_sensitivity(t, node)
            rt1 = yield_curve.rt(t)
            q1 = math.exp(-ht1)
            p1 = math.exp(-rt1)
            if dqdr0 != 0.0 or dqdr1 != 0.0:
                h_bar = ht1 - ht0
                f_bar = rt1 - rt0
                fh_bar = h_bar + f_bar
                if abs(fh_bar) < SMALL:
                    e = epsilon(-fh_bar)
                    e_p = epsilon_p(-fh_bar)
                    dpv_dq0 = p0 * ((1.0 + h_bar) * e - h_bar * e_p)
                    dpv_dq1 = -p0 * q0 / q1 * (e - h_bar * e_p)
                    sense += dpv_dq0 * dqdr0 + dpv_dq1 * dqdr1
                else:
                    w = f_bar / fh_bar * (p0 * q0 - p1 * q1)
                    sense += ((w / q0 + h_bar * p0) / fh_bar) * dqdr0 - ((w / q1 + h_bar * p1) / fh_bar) * dqdr1
            ht0, rt0, p0, q0, dqdr0 = ht1, rt1, p1, q1, dqdr1

        sense *= cds.lgd
        return sense / yield_curve.discount_factor(cds.cash_settle_time)

    def protection_leg_yield_sensitivity(
        self,
        cds: CdsAnalytic,
        yield_curve: YieldCurve,
        credit_curve: CreditCurve,
        node: int,
    ) -> float:
        """Derivative of the protection leg (rolled to cash settlement) with respect to one yield node."""
        n = yield_curve.num_knots
        if not 0 <= node < n:
            raise ValueError(f'yield curve node {node} out of range')
        if (node != 0 and cds.protection_end <= yield_curve.time_at(node - 1)) or (
            node < n - 2 and cds.effective_protection_start >= yield_curve.time_at(node + 1)
        ):
            return 0.0
        if cds.is_expired():
            return 0.0

        knots = get_integration_points(
            cds.effective_protection_start, cds.protection_end, yield_curve.times, credit_curve.times
        )
        t = knots[0]
        ht0 = credit_curve.rt(t)
        rt0 = yield_curve.rt(t)
        dpdr0 = yield_curve.single_node_discount_factor_sensitivity(t, node)
        q0 = math.exp(-ht0)
        p0 = math.exp(-rt0)
        sense = 0.0
        for t in knots[1:]:
            ht1 = credit_curve.rt(t)
            dpdr1 = yield_curve.single_node_discount_factor_sensitivity(t, node)
            rt1 = yield_curve.rt(t)
            q1 = math.exp(-ht1)
            p1 = math.exp(-rt1)
            if dpdr0 != 0.0 or dpdr1 != 0.0:
                h_bar = ht1 - ht0
                fh_bar = h_bar + rt1 - rt0
                e = epsilon(-fh_bar)
                e_p = epsilon_p(-fh_bar)
                dpv_dp0 = q0 * h_bar * (e - e_p)
                dpv_dp1 = h_bar * p0 * q0 / p1 * e_p
                sense += dpv_dp0 * dpdr0 + dpv_dp1 * dpdr1
            ht0, rt0, p0, q0, dpdr0 = ht1, rt1, p1, q1, dpdr1

        sense *= cds.lgd
        df = yield_curve.discount_factor(cds.cash_settle_time)
        sense /= df
        df_sense = yield_curve.single_node_discount_factor_sensitivity(cds.cash_settle_time, node)
        if df_sense != 0.0:
            pro = self.protection_leg(cds, yield_curve, credit_curve)
            sense -= pro / df * df_sense
        return sense

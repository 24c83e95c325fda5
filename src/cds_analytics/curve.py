"""
The ISDA-compliant curve.

A single piecewise-log-linear curve shape serves both as the yield curve
(discount factors) and as the credit curve (survival probabilities). The
stored quantity is RT = r(t) * t at each knot:
- Between knots RT is linear, i.e. the forward rate is piecewise constant
- Before the first knot the zero rate is flat: RT(t) = RT(t0) * t / t0
- After the last knot the last forward rate continues
- The discount factor (or survival probability) is exp(-RT(t))

Curves are immutable. Every modifier returns a new instance of the same
class, so a curve can be shared freely between calculations.
"""

from collections.abc import Sequence

import numpy as np

from .exceptions import CurveError


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


class IsdaCurve:
    """
    Piecewise-linear-in-RT curve.

    Args:
        t: Knot times, strictly ascending with t[0] > 0
        r: Zero rates at the knots
    """

    def __init__(self, t: Sequence[float] | float, r: Sequence[float] | float):
        t = np.atleast_1d(np.asarray(t, dtype=float))
        r = np.atleast_1d(np.asarray(r, dtype=float))
        if len(t) != len(r):
            raise CurveError('times and rates have different lengths')
        self._set(t, r * t)

    def _set(self, t: np.ndarray, rt: np.ndarray) -> None:
        if len(t) == 0:
            raise CurveError('a curve needs at least one knot')
        if len(t) != len(rt):
            raise CurveError('times and rt have different lengths')
        if t[0] < 0.0:
            raise CurveError(f'first knot time must be >= 0, got {t[0]}')
        if t[0] == 0.0:
            # RT(0) is always 0, so a knot there has no zero rate
            raise CurveError('first knot time must be after the base time')
        if np.any(np.diff(t) <= 0.0):
            raise CurveError('knot times must be strictly ascending')
        # negative forward rates are allowed, so rt is not checked
        self._t = _frozen(t)
        self._rt = _frozen(rt)
        self._tl = self._t.tolist()
        self._rtl = self._rt.tolist()

    @classmethod
    def from_rt(cls, t: Sequence[float], rt: Sequence[float]):
        """Build a curve directly from knot times and RT values."""
        curve = cls.__new__(cls)
        curve._set(np.asarray(t, dtype=float), np.asarray(rt, dtype=float))
        return curve

    @classmethod
    def from_forward_rates(cls, t: Sequence[float], fwd: Sequence[float]):
        """
        Build a curve from piecewise-constant forward rates.

        fwd[0] applies on [0, t0] and fwd[i] on (t[i-1], t[i]].
        """
        t = np.asarray(t, dtype=float)
        fwd = np.asarray(fwd, dtype=float)
        if len(t) != len(fwd):
            raise CurveError('length of t not equal to length of fwd')
        dt = np.diff(t, prepend=0.0)
        return cls.from_rt(t, np.cumsum(fwd * dt))

    # ------------------------------------------------------------------
    # Knot access

    @property
    def times(self) -> np.ndarray:
        """Knot times (read-only array)."""
        return self._t

    @property
    def rt_values(self) -> np.ndarray:
        """RT at the knots (read-only array)."""
        return self._rt

    @property
    def zero_rates(self) -> np.ndarray:
        """Zero rates at the knots."""
        return self._rt / self._t

    @property
    def num_knots(self) -> int:
        return len(self._tl)

    def __len__(self) -> int:
        return len(self._tl)

    def time_at(self, index: int) -> float:
        return self._tl[index]

    def rt_at(self, index: int) -> float:
        return self._rtl[index]

    def zero_rate_at(self, index: int) -> float:
        return self._rtl[index] / self._tl[index]

    def __repr__(self) -> str:
        return f'{type(self).__name__}(t={self._tl}, r={self.zero_rates.tolist()})'

    # ------------------------------------------------------------------
    # Values

    def _search(self, t: float) -> int:
        """Left insertion point of t among the knots."""
        return int(np.searchsorted(self._t, t))

    def _interp_rt(self, t: float, insertion_point: int) -> float:
        if insertion_point == 0:
            return t * self._rtl[0] / self._tl[0]
        n = len(self._tl)
        if insertion_point == n:
            return self._interp_rt(t, n - 1)
        t1 = self._tl[insertion_point - 1]
        t2 = self._tl[insertion_point]
        return ((t2 - t) * self._rtl[insertion_point - 1] + (t - t1) * self._rtl[insertion_point]) / (t2 - t1)

    def rt(self, t: float) -> float:
        """RT(t) = zero rate times time."""
        t0 = self._tl[0]
        if t <= t0:
            return self._rtl[0] * t / t0
        n = len(self._tl)
        if t > self._tl[-1]:
            return self._interp_rt(t, n - 1)
        index = self._search(t)
        if self._tl[index] == t:
            return self._rtl[index]
        return self._interp_rt(t, index)

    def zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate at time t."""
        if t < 0.0:
            raise ValueError(f'require t >= 0, got {t}')
        if t <= self._tl[0]:
            return self.zero_rate_at(0)
        return self.rt(t) / t

    def discount_factor(self, t: float) -> float:
        """exp(-RT(t))."""
        return float(np.exp(-self.rt(t)))

    def forward_rate(self, t: float) -> float:
        """
        Instantaneous forward rate at t.

        The forward is undefined exactly on a knot; the value just before
        the knot is returned.
        """
        if t <= self._tl[0]:
            return self.zero_rate_at(0)
        n = len(self._tl)
        index = n - 1 if t > self._tl[-1] else self._search(t)
        if index == 0:
            return self.zero_rate_at(0)
        return (self._rtl[index] - self._rtl[index - 1]) / (self._tl[index] - self._tl[index - 1])

    def first_derivative(self, t: float) -> float:
        """Derivative of the zero rate with respect to time."""
        if t <= self._tl[0]:
            return 0.0
        return (self.forward_rate(t) - self.zero_rate(t)) / t

    # ------------------------------------------------------------------
    # Node sensitivities

    def _check_node(self, node: int) -> None:
        if not 0 <= node < len(self._tl):
            raise ValueError(f'node index {node} out of range')

    def node_sensitivity(self, t: float) -> np.ndarray:
        """Sensitivity of the zero rate at t to each knot's zero rate."""
        n = len(self._tl)
        res = np.zeros(n)
        if t <= self._tl[0] or n == 1:
            res[0] = 1.0
            return res
        if t >= self._tl[-1]:
            index = n - 1
        else:
            index = self._search(t)
            if self._tl[index] == t:
                res[index] = 1.0
                return res
        t1 = self._tl[index - 1]
        t2 = self._tl[index]
        dt = t2 - t1
        res[index - 1] = t1 * (t2 - t) / dt / t
        res[index] = t2 * (t - t1) / dt / t
        return res

    def single_node_rt_sensitivity(self, t: float, node: int) -> float:
        """Partial derivative of RT(t) with respect to the zero rate of one knot."""
        if t < 0.0:
            raise ValueError(f'require t >= 0, got {t}')
        self._check_node(node)
        n = len(self._tl)
        if t <= self._tl[0] or n == 1:
            return t if node == 0 else 0.0
        index = self._search(t)
        if index < n and self._tl[index] == t:
            return t if node == index else 0.0
        index = min(n - 1, index)
        if node != index and node != index - 1:
            return 0.0
        t1 = self._tl[index - 1]
        t2 = self._tl[index]
        if node == index:
            return t2 * (t - t1) / (t2 - t1)
        return t1 * (t2 - t) / (t2 - t1)

    def single_node_sensitivity(self, t: float, node: int) -> float:
        """Partial derivative of the zero rate at t with respect to one knot's zero rate."""
        if t < 0.0:
            raise ValueError(f'require t >= 0, got {t}')
        self._check_node(node)
        if t <= self._tl[0]:
            return 1.0 if node == 0 else 0.0
        return self.single_node_rt_sensitivity(t, node) / t

    def rt_and_sensitivity(self, t: float, node: int) -> tuple[float, float]:
        """RT(t) together with its derivative with respect to one knot's zero rate."""
        if t < 0.0:
            raise ValueError(f'require t >= 0, got {t}')
        self._check_node(node)
        n = len(self._tl)
        if n == 1 or t <= self._tl[0]:
            return self.rt(t), (t if node == 0 else 0.0)

        if t > self._tl[-1]:
            index = n - 1
        elif t == self._tl[node]:
            return self._rtl[node], t
        elif node > 0 and self._tl[node - 1] < t < self._tl[node]:
            index = node
        else:
            index = self._search(t)
            if self._tl[index] == t:
                return self._rtl[index], 0.0

        t1 = self._tl[index - 1]
        t2 = self._tl[index]
        dt = t2 - t1
        w1 = (t2 - t) / dt
        w2 = (t - t1) / dt
        rt = w1 * self._rtl[index - 1] + w2 * self._rtl[index]
        if node == index:
            return rt, t2 * w2
        if node == index - 1:
            return rt, t1 * w1
        return rt, 0.0

    def single_node_discount_factor_sensitivity(self, t: float, node: int) -> float:
        """Partial derivative of exp(-RT(t)) with respect to one knot's zero rate."""
        rt, sense = self.rt_and_sensitivity(t, node)
        return -sense * float(np.exp(-rt))

    # ------------------------------------------------------------------
    # Modifiers (all return new curves)

    def with_rate(self, rate: float, index: int):
        """A copy of this curve with one knot's zero rate replaced."""
        self._check_node(index)
        rt = self._rt.copy()
        rt[index] = rate * self._tl[index]
        return type(self).from_rt(self._t, rt)

    def with_rates(self, rates: Sequence[float]):
        """A copy of this curve with all zero rates replaced."""
        rates = np.asarray(rates, dtype=float)
        if len(rates) != len(self._tl):
            raise CurveError('number of rates does not match number of knots')
        return type(self).from_rt(self._t, rates * self._t)

    def with_discount_factor(self, discount_factor: float, index: int):
        """A copy of this curve with one knot's discount factor replaced."""
        self._check_node(index)
        rt = self._rt.copy()
        rt[index] = -np.log(discount_factor)
        return type(self).from_rt(self._t, rt)

    def with_offset(self, offset: float):
        """
        The same curve seen from a new base time.

        The result satisfies ``new.rt(t) == old.rt(t + offset) - old.rt(offset)``.
        Knots at or before the offset are dropped; if the offset is past the
        last knot the result is flat at the last forward rate.
        """
        if offset == 0.0:
            return self
        t = self._t
        rt = self._rt
        n = len(t)
        if offset < t[0]:
            eta = rt[0] / t[0] * offset
            return type(self).from_rt(t - offset, rt - eta)
        if offset >= t[-1]:
            if n == 1:
                fwd = rt[0] / t[0]
            else:
                fwd = (rt[-1] - rt[-2]) / (t[-1] - t[-2])
            return type(self).from_rt([1.0], [fwd])

        index = int(np.searchsorted(t, offset, side='right'))
        eta = self._interp_rt(offset, index)
        return type(self).from_rt(t[index:] - offset, rt[index:] - eta)


class YieldCurve(IsdaCurve):
    """An ISDA curve used for discounting."""


class CreditCurve(IsdaCurve):
    """An ISDA curve of (average) hazard rates; exp(-RT) is the survival probability."""

    def survival_probability(self, t: float) -> float:
        """Probability of no default before t."""
        return self.discount_factor(t)

    def hazard_rate(self, t: float) -> float:
        """Instantaneous (forward) hazard rate at t."""
        return self.forward_rate(t)

    @property
    def forward_hazard_rates(self) -> np.ndarray:
        """Piecewise-constant forward hazard rate on each knot interval."""
        return np.diff(self._rt, prepend=0.0) / np.diff(self._t, prepend=0.0)

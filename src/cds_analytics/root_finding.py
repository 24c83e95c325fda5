"""
One-dimensional root finders used by the bootstraps.

All solvers work on a bracket [a, b] with f(a) and f(b) of opposite sign,
so a root is always found once a bracket exists:
- brent: inverse quadratic interpolation with bisection safeguards
- newton_bracketed: Newton steps (analytic or secant slope) that fall
  back to bisection whenever a step leaves the bracket, then polish the
  converged point with a few unbracketed Newton steps
- bracket_root: grows an initial interval until it brackets a root
"""

import logging
from collections.abc import Callable

from .exceptions import ConvergenceError

logger = logging.getLogger(__name__)


def bracket_root(
    f: Callable[[float], float],
    x1: float,
    x2: float,
    lower: float | None = None,
    upper: float | None = None,
    factor: float = 1.6,
    max_tries: int = 60,
) -> tuple[float, float]:
    """
    Expand [x1, x2] geometrically until f changes sign across it.

    Args:
        f: Function to bracket
        x1: Initial lower guess
        x2: Initial upper guess (x2 > x1)
        lower: Hard lower limit; the interval never extends below it
        upper: Hard upper limit; the interval never extends above it
        factor: Growth factor applied to the interval width
        max_tries: Maximum number of expansions

    Returns
        (a, b) with f(a) * f(b) <= 0

    Raises
        ConvergenceError: If no sign change is found
    """
    if x2 <= x1:
        raise ValueError(f'require x1 < x2, got ({x1}, {x2})')
    if lower is not None:
        x1 = max(x1, lower)
    if upper is not None:
        x2 = min(x2, upper)

    f1, f2 = f(x1), f(x2)
    for _ in range(max_tries):
        if f1 * f2 <= 0.0:
            return x1, x2
        width = x2 - x1
        # move the end with the smaller |f|, which is closer to the root
        if abs(f1) < abs(f2) and (lower is None or x1 > lower):
            x1 -= factor * width
            if lower is not None:
                x1 = max(x1, lower)
            f1 = f(x1)
        elif upper is None or x2 < upper:
            x2 += factor * width
            if upper is not None:
                x2 = min(x2, upper)
            f2 = f(x2)
        else:
            break
    raise ConvergenceError(f'failed to bracket root: f({x1})={f1}, f({x2})={f2}')


def brent(
    f: Callable[[float], float],
    a: float,
    b: float,
    tol: float = 1e-12,
    max_iter: int = 100,
) -> float:
    """
    Find a root of f in [a, b] using Brent's method.

    Args:
        f: Function to find root of
        a: One end of the bracket
        b: Other end of the bracket (f(a) and f(b) must differ in sign)
        tol: Absolute tolerance in x
        max_iter: Maximum number of iterations

    Returns
        x such that f(x) ≈ 0

    Raises
        ConvergenceError: If [a, b] is not a bracket, or max_iter is exceeded
    """
    fa, fb = f(a), f(b)
    if fa == 0.0:
        return a
    if fb == 0.0:
        return b
    if fa * fb > 0.0:
        raise ConvergenceError(f'root not bracketed: f({a})={fa}, f({b})={fb}')

    c, fc = a, fa
    d = e = b - a
    for i in range(max_iter):
        if fb * fc > 0.0:
            c, fc = a, fa
            d = e = b - a
        if abs(fc) < abs(fb):
            a, b, c = b, c, b
            fa, fb, fc = fb, fc, fb

        tol1 = 2.0 * 2.2e-16 * abs(b) + 0.5 * tol
        xm = 0.5 * (c - b)
        if abs(xm) <= tol1 or fb == 0.0:
            logger.debug('brent converged after %d iterations, x=%.15g', i, b)
            return b

        if abs(e) >= tol1 and abs(fa) > abs(fb):
            s = fb / fa
            if a == c:
                # secant
                p = 2.0 * xm * s
                q = 1.0 - s
            else:
                # inverse quadratic interpolation
                q = fa / fc
                r = fb / fc
                p = s * (2.0 * xm * q * (q - r) - (b - a) * (r - 1.0))
                q = (q - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0.0:
                q = -q
            p = abs(p)
            if 2.0 * p < min(3.0 * xm * q - abs(tol1 * q), abs(e * q)):
                e, d = d, p / q
            else:
                d = e = xm
        else:
            d = e = xm

        a, fa = b, fb
        b += d if abs(d) > tol1 else (tol1 if xm > 0.0 else -tol1)
        fb = f(b)

    raise ConvergenceError(f"Brent's method did not converge in {max_iter} iterations")


def newton_bracketed(
    f: Callable[[float], float],
    a: float,
    b: float,
    x0: float | None = None,
    df: Callable[[float], float] | None = None,
    tol: float = 1e-12,
    max_iter: int = 100,
) -> float:
    """
    Safeguarded Newton iteration inside the bracket [a, b].

    With df the analytic derivative is used for each step; without it the
    slope is the secant through the last two iterates. A step that would
    leave the bracket, or that fails to halve the bracket, is replaced by
    bisection.

    Args:
        f: Function to find root of
        a: One end of the bracket
        b: Other end of the bracket
        x0: Starting point (defaults to the bracket midpoint)
        df: Derivative of f, or None for secant slopes
        tol: Absolute tolerance in x
        max_iter: Maximum number of iterations

    Returns
        x such that f(x) ≈ 0

    Raises
        ConvergenceError: If [a, b] is not a bracket, or max_iter is exceeded
    """
    fa, fb = f(a), f(b)
    if fa == 0.0:
        return a
    if fb == 0.0:
        return b
    if fa * fb > 0.0:
        raise ConvergenceError(f'root not bracketed: f({a})={fa}, f({b})={fb}')

    # orient so that f(lo) < 0 < f(hi)
    lo, hi = (a, b) if fa < 0.0 else (b, a)
    f_lo = fa if fa < 0.0 else fb

    x = 0.5 * (a + b) if x0 is None or not min(a, b) < x0 < max(a, b) else x0
    fx = f(x)
    x_prev, f_prev = lo, f_lo
    dx_old = abs(b - a)
    dx = dx_old

    for i in range(max_iter):
        if fx == 0.0:
            return x
        if df is not None:
            slope = df(x)
        else:
            slope = (fx - f_prev) / (x - x_prev) if x != x_prev else 0.0

        newton_ok = (
            slope != 0.0
            and ((x - hi) * slope - fx) * ((x - lo) * slope - fx) < 0.0
            and abs(2.0 * fx) <= abs(dx_old * slope)
        )
        dx_old = dx
        x_prev, f_prev = x, fx
        if newton_ok:
            dx = fx / slope
            x -= dx
        else:
            dx = 0.5 * (hi - lo)
            x = lo + dx
        if abs(dx) < tol:
            logger.debug('newton converged after %d iterations, x=%.15g', i, x)
            return _polish(f, x, slope, df)

        fx = f(x)
        if fx < 0.0:
            lo = x
        else:
            hi = x

    raise ConvergenceError(f'Newton iteration did not converge in {max_iter} iterations')


def _polish(
    f: Callable[[float], float],
    x: float,
    slope: float,
    df: Callable[[float], float] | None = None,
    max_steps: int = 3,
) -> float:
    """
    Newton steps from a converged x, each kept only if it reduces |f|.

    The last step of the bracketed iteration may be a bisection, which
    leaves x up to tol away from the root; this takes x to the root to
    within rounding.
    """
    fx = f(x)
    for _ in range(max_steps):
        if fx == 0.0:
            break
        if df is not None:
            slope = df(x)
        if slope == 0.0:
            break
        x_new = x - fx / slope
        f_new = f(x_new)
        if abs(f_new) >= abs(fx):
            break
        x, fx = x_new, f_new
    return x

"""
Special functions used by the closed-form leg integrals.

epsilon(x) = (exp(x) - 1) / x and its first two derivatives. The pricer
needs them near x = 0, where the closed forms cancel catastrophically, so
small arguments are evaluated from the Taylor series instead.
"""

import math

_SERIES_CUTOFF = 0.1
_N_TERMS = 16


def _series(x: float, coefficient) -> float:
    total = 0.0
    for n in reversed(range(_N_TERMS)):
        total = total * x + coefficient(n)
    return total


def epsilon(x: float) -> float:
    """(exp(x) - 1) / x, equal to 1 at x = 0."""
    if abs(x) < _SERIES_CUTOFF:
        return _series(x, lambda n: 1.0 / math.factorial(n + 1))
    return math.expm1(x) / x


def epsilon_p(x: float) -> float:
    """First derivative of epsilon; 1/2 at x = 0."""
    if abs(x) < _SERIES_CUTOFF:
        return _series(x, lambda n: (n + 1) / math.factorial(n + 2))
    return ((x - 1.0) * math.expm1(x) + x) / (x * x)


def epsilon_pp(x: float) -> float:
    """Second derivative of epsilon; 1/3 at x = 0."""
    if abs(x) < _SERIES_CUTOFF:
        return _series(x, lambda n: (n + 1) * (n + 2) / math.factorial(n + 3))
    x2 = x * x
    return (x2 * math.exp(x) - 2.0 * (x - 1.0) * math.expm1(x) - 2.0 * x) / (x2 * x)

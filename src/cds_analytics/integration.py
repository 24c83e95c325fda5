"""
Integration node generation.

The leg integrals are exact on each interval where both the yield and the
credit curve are log-linear, so the integration grid is the union of both
curves' knots inside the protection window, plus the window ends.
"""

import bisect
from collections.abc import Sequence

import numpy as np

# Points closer than this are treated as the same point
TOLERANCE = 1e-10


def _different(a: float, b: float) -> bool:
    return abs(a - b) > TOLERANCE


def truncate_set_exclusive(lower: float, upper: float, knots: Sequence[float]) -> np.ndarray:
    """Sorted knots lying strictly inside (lower, upper)."""
    knots = np.asarray(knots, dtype=float)
    n = len(knots)
    if n == 0 or upper < knots[0] or lower > knots[-1]:
        return np.empty(0)
    lo = bisect.bisect_right(knots, lower) if lower >= knots[0] else 0
    hi = bisect.bisect_left(knots, upper, lo) if upper <= knots[-1] else n
    return knots[lo:hi].copy()


def truncate_set_inclusive(lower: float, upper: float, knots: Sequence[float]) -> np.ndarray:
    """
    Knots strictly inside (lower, upper), with lower and upper added.

    An interior knot within TOLERANCE of an end is replaced by that end.
    """
    inner = truncate_set_exclusive(lower, upper, knots)
    if len(inner) == 0:
        return np.array([lower, upper])
    if not _different(lower, inner[0]):
        inner = inner[1:]
    if len(inner) and not _different(upper, inner[-1]):
        inner = inner[:-1]
    return np.concatenate(([lower], inner, [upper]))


def get_integration_points(
    start: float,
    end: float,
    knots_a: Sequence[float],
    knots_b: Sequence[float],
) -> np.ndarray:
    """
    Integration nodes for the window [start, end].

    Args:
        start: Start of the protection (or accrual) window
        end: End of the window
        knots_a: Knot times of the first curve (ascending)
        knots_b: Knot times of the second curve (ascending)

    Returns
        Sorted array starting at start and ending at end, containing every
        knot of either curve strictly inside the window. Knots within
        TOLERANCE of each other or of an end point are merged.
    """
    merged = np.sort(np.concatenate((
        truncate_set_exclusive(start, end, knots_a),
        truncate_set_exclusive(start, end, knots_b),
    )))

    points = [start]
    for t in merged:
        if _different(points[-1], t):
            points.append(float(t))
    if _different(points[-1], end):
        points.append(end)
    else:
        points[-1] = end
    # the window itself is never collapsed
    if len(points) == 1:
        points = [start, end]
    return np.asarray(points, dtype=float)

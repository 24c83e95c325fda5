"""
Tests for integration node generation.
"""

import numpy as np
from cds_analytics import get_integration_points
from cds_analytics.integration import truncate_set_exclusive, truncate_set_inclusive


class TestTruncateSet:
    """Tests for knot truncation."""

    def test_exclusive(self):
        """Only knots strictly inside the window are kept."""
        res = truncate_set_exclusive(1.0, 5.0, [0.5, 1.0, 2.0, 5.0, 7.0])
        assert res.tolist() == [2.0]

    def test_exclusive_outside(self):
        """A window beyond the knots gives nothing."""
        assert len(truncate_set_exclusive(8.0, 9.0, [0.5, 1.0])) == 0

    def test_inclusive(self):
        """The window ends are added."""
        res = truncate_set_inclusive(0.0, 5.0, [1.0, 2.0])
        assert res.tolist() == [0.0, 1.0, 2.0, 5.0]

    def test_inclusive_merges_near_end(self):
        """A knot within tolerance of an end is replaced by the end."""
        res = truncate_set_inclusive(0.0, 5.0, [1.0, 5.0 - 1e-12])
        assert res.tolist() == [0.0, 1.0, 5.0]


class TestIntegrationPoints:
    """Tests for get_integration_points."""

    def test_knot_near_end_is_merged(self):
        """Knots {0.5, 1, 5 - 1e-12, 7} in [0, 5] give [0, 0.5, 1, 5]."""
        res = get_integration_points(0.0, 5.0, [0.5, 1.0, 5.0 - 1e-12, 7.0], [])
        assert res.tolist() == [0.0, 0.5, 1.0, 5.0]

    def test_union_of_both_curves(self):
        """Knots of both curves are merged and de-duplicated."""
        res = get_integration_points(0.2, 1.5, [0.5, 1.0], [1.0, 2.0])
        assert res.tolist() == [0.2, 0.5, 1.0, 1.5]

    def test_no_interior_knots(self):
        """Without interior knots the window ends are returned."""
        res = get_integration_points(1.2, 1.8, [1.0, 2.0], [0.5, 3.0])
        assert res.tolist() == [1.2, 1.8]

    def test_sorted_and_bounded(self):
        """Output is strictly increasing and starts and ends on the window."""
        res = get_integration_points(0.1, 9.0, [0.25, 1, 2, 3, 5, 10], [0.5, 1, 3, 7])
        assert res[0] == 0.1
        assert res[-1] == 9.0
        assert np.all(np.diff(res) > 0.0)

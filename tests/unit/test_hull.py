"""
Unit tests for tidepool/core/heat/hull.py
"""

import random

from tidepool.core.heat.hull import convex_hull, cross


def signed_area(polygon):
    return 0.5 * sum(
        x0 * y1 - x1 * y0
        for (x0, y0), (x1, y1) in zip(polygon, polygon[1:] + polygon[:1])
    )


class TestConvexHull:
    """Monotone chain hull."""

    def test_square_with_interior_points(self):
        points = [(0, 0), (4, 0), (4, 4), (0, 4), (2, 2), (1, 3), (3, 1)]
        hull = convex_hull(points)
        assert sorted(hull) == [(0.0, 0.0), (0.0, 4.0), (4.0, 0.0), (4.0, 4.0)]

    def test_counter_clockwise(self):
        hull = convex_hull([(0, 0), (4, 0), (4, 4), (0, 4)])
        assert signed_area(hull) > 0

    def test_collinear_points_collapse(self):
        hull = convex_hull([(0, 0), (1, 1), (2, 2), (3, 3)])
        assert sorted(hull) == [(0.0, 0.0), (3.0, 3.0)]

    def test_degenerate_inputs(self):
        assert convex_hull([]) == []
        assert convex_hull([(1, 2)]) == [(1.0, 2.0)]
        assert convex_hull([(1, 2), (1, 2), (1, 2)]) == [(1.0, 2.0)]
        assert len(convex_hull([(0, 0), (5, 5)])) == 2

    def test_random_points_inside_hull(self):
        rng = random.Random(8)
        for _ in range(50):
            points = [(rng.uniform(-100, 100), rng.uniform(-100, 100)) for _ in range(rng.randint(3, 40))]
            hull = convex_hull(points)
            assert 3 <= len(hull) <= len(points)
            for a, b in zip(hull, hull[1:] + hull[:1]):
                for p in points:
                    assert cross(a, b, p) >= -1e-9

    def test_cross_sign(self):
        assert cross((0, 0), (1, 0), (0, 1)) > 0
        assert cross((0, 0), (0, 1), (1, 0)) < 0
        assert cross((0, 0), (1, 1), (2, 2)) == 0

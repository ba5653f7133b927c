"""
Convex Hull

Andrew's monotone chain: sort the points, sweep once for the lower hull and
once for the upper hull. O(n log n). Collinear points on the boundary are
dropped, so fully collinear input yields at most two points.
"""

from typing import List, Sequence, Tuple

Point = Tuple[float, float]


def cross(o: Point, a: Point, b: Point) -> float:
    """Z component of (a - o) x (b - o); positive for a counter-clockwise turn."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points: Sequence[Point]) -> List[Point]:
    """
    Convex hull of 2D points.

    Returns:
        Hull vertices in counter-clockwise order (for y-up axes), without
        repeating the first vertex. Inputs of 0 or 1 points are returned as-is.
    """
    pts = sorted(set((float(x), float(y)) for x, y in points))
    if len(pts) <= 1:
        return pts

    lower: List[Point] = []
    for p in pts:
        while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: List[Point] = []
    for p in reversed(pts):
        while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # Last point of each chain is the first point of the other
    return lower[:-1] + upper[:-1]

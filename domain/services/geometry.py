from __future__ import annotations

import math

from domain.models import Point


def distance(p1: Point, p2: Point) -> float:
    return math.sqrt((p2.x - p1.x) ** 2 + (p2.y - p1.y) ** 2)


def is_outside(point: Point, center: Point, radius: float) -> bool:
    # A point on the circle counts as outside.
    return distance(point, center) >= radius

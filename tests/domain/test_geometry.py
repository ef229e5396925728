from __future__ import annotations

import pytest

from domain.models import Point
from domain.services.geometry import distance, is_outside


def test_distance_is_euclidean() -> None:
    assert distance(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)
    assert distance(Point(3, 4), Point(0, 0)) == pytest.approx(5.0)


def test_point_on_circle_counts_as_outside() -> None:
    center = Point(10, 10)

    assert is_outside(Point(18, 10), center, 8) is True
    assert is_outside(Point(20, 10), center, 8) is True
    assert is_outside(Point(14, 10), center, 8) is False


def test_zero_radius_treats_every_point_as_outside() -> None:
    assert is_outside(Point(20, 20), Point(20, 20), 0) is True

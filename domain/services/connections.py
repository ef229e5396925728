from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.models import AnchorPoint, Point
from domain.services.geometry import distance, is_outside
from domain.services.nodes import Node

MIN_DISTANCE = 4.0

Candidate = tuple[AnchorPoint, AnchorPoint]


@dataclass(frozen=True)
class Connection:
    start: Point
    end: Point


def candidate_distance(candidate: Candidate) -> float:
    start, end = candidate
    return distance(Point(start.x, start.y), Point(end.x, end.y))


def all_possible_connections(
    start: Node,
    end: Node,
    has_history: bool,
    has_deep_history: bool,
) -> list[Candidate]:
    """Every out/in anchor pair of the two nodes, closest first.

    Pairs are enumerated start-anchor-major; the sort is stable so equal
    distances keep that order.
    """
    outgoing = [item.translated(start.location) for item in start.anchors_out]
    incoming = [
        item.translated(end.location) for item in end.anchors_in(has_history, has_deep_history)
    ]
    candidates = [(out_anchor, in_anchor) for out_anchor in outgoing for in_anchor in incoming]
    return sorted(candidates, key=candidate_distance)


def shortest_connections(
    candidates: Sequence[Candidate], min_distance: float = MIN_DISTANCE
) -> list[Candidate]:
    shortest = candidate_distance(candidates[0])
    return [
        candidate
        for candidate in candidates
        if abs(candidate_distance(candidate) - shortest) < min_distance
    ]


def one_end_outside_first_default(
    candidates: Sequence[Candidate], mid_point: Point, radius: float
) -> list[Candidate]:
    one_end_outside = [
        candidate
        for candidate in candidates
        if is_outside(candidate[0].point, mid_point, radius)
        or is_outside(candidate[1].point, mid_point, radius)
    ]
    return one_end_outside or [candidates[0]]


def both_ends_outside_first_default(
    candidates: Sequence[Candidate], mid_point: Point, radius: float
) -> Candidate:
    for candidate in candidates:
        if is_outside(candidate[0].point, mid_point, radius) and is_outside(
            candidate[1].point, mid_point, radius
        ):
            return candidate
    return candidates[0]


def select_connection(
    start: Node,
    end: Node,
    has_history: bool,
    has_deep_history: bool,
    mid_point: Point,
    radius: float,
    min_distance: float = MIN_DISTANCE,
) -> Connection:
    candidates = all_possible_connections(start, end, has_history, has_deep_history)
    shortest = shortest_connections(candidates, min_distance)
    preferred = one_end_outside_first_default(shortest, mid_point, radius)
    out_anchor, in_anchor = both_ends_outside_first_default(preferred, mid_point, radius)
    # Offsets only rank the candidates; the connector is drawn between the base points.
    return Connection(start=out_anchor.point, end=in_anchor.point)

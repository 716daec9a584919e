import math
import random
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..geometry import euclidean_distance
from .base import Point, Route, best_route

if TYPE_CHECKING:
    from ..spatial import PointPool


LOCAL_SEARCH_WINDOW = 3
ADD_OR_REPLACE_DRAWS = 10
OPERATOR_PROBABILITY = 0.5


def best_insertion_index(candidate: Point, points: Sequence[Point]) -> Optional[int]:
    """
    Index at which inserting ``candidate`` adds the least travel distance.

    Returns None when ``points`` already holds the candidate or has no pair of
    anchors to insert between.
    """
    if candidate in points or len(points) < 2:
        return None
    if len(points) == 2:
        return 1
    best_pos = 1
    best_inc = float("inf")
    for i in range(len(points) - 1):
        inc = euclidean_distance(points[i], candidate) + euclidean_distance(candidate, points[i + 1])
        if inc < best_inc:
            best_inc = inc
            best_pos = i + 1
    return best_pos


def insert_cheapest(route: Route, point: Point) -> Optional[Route]:
    idx = best_insertion_index(point, route.points)
    if idx is None:
        return None
    return route.insert(idx, point)


def remove_worst_duplicate_points(route: Route) -> Route:
    """
    Remove repeated points, keeping for each the occurrence whose removal
    leaves the shorter route (ties drop the first occurrence).
    """
    duplicates = route.duplicate_points()
    while route.has_duplicates:
        for point in duplicates:
            if route.points.count(point) < 2:
                continue
            first = route.points.index(point)
            last = len(route.points) - 1 - route.points[::-1].index(point)
            without_first = route.remove(first)
            without_last = route.remove(last)
            if without_last.total_distance < without_first.total_distance:
                route = without_last
            else:
                route = without_first
    return route


def singular_two_opt(route: Route, i: int, j: int) -> Route:
    pts = list(route.points)
    pts[i : j + 1] = reversed(pts[i : j + 1])
    return Route(pts)


def complete_two_opt(route: Route) -> Route:
    """One sweep of 2-opt over the interior, keeping each reversal that shortens the route."""
    n = len(route)
    best_len = route.total_distance
    for i in range(1, n - 2):
        for j in range(i + 1, n - 1):
            cand = singular_two_opt(route, i, j)
            if cand.total_distance < best_len:
                route = cand
                best_len = cand.total_distance
    return route


def add_random_point(route: Route, pool: "PointPool", t_max: float, rng: random.Random) -> Route:
    point = pool.sample(rng)
    if point is None or point in route:
        return route
    if len(route) > 2:
        cand = insert_cheapest(route, point)
    else:
        cand = Route((route.start, point, route.end))
    if cand is not None and cand.total_distance <= t_max and not cand.has_duplicates:
        return cand
    return route


def _improves(cand: Route, route: Route, t_max: float) -> bool:
    if cand.total_distance > t_max or cand.has_duplicates:
        return False
    if cand.total_score > route.total_score:
        return True
    return cand.total_score == route.total_score and cand.total_distance < route.total_distance


def locality_search(
    route: Route,
    pool: "PointPool",
    t_max: float,
    rng: random.Random,
    window: int = LOCAL_SEARCH_WINDOW,
) -> Route:
    """
    Try substituting a random selection of genes with their neighbours in
    locality order, up to ``window`` ranks either side.
    """
    if window < 1:
        raise ValueError("window cannot be less than 1.")
    n = len(route)
    if n <= 2:
        return route
    count = rng.randint(1, n - 2)
    for idx in rng.sample(range(1, n - 1), count):
        rank = pool.rank(route[idx])
        if rank is None:
            continue
        improving: List[Route] = []
        for offset in range(-window, window + 1):
            r = rank + offset
            if offset == 0 or r < 0 or r >= len(pool):
                continue
            cand = route.replace(idx, pool.at_rank(r))
            if _improves(cand, route, t_max):
                improving.append(cand)
        if improving:
            route = best_route(improving)
    return route


def _score_per_distance(score: float, distance: float) -> float:
    # a gene that adds no distance is never the worst
    if distance > 0:
        return score / distance
    return math.inf


def drop_worst_ratio_point(route: Route) -> Route:
    """Remove the gene with the lowest score per incoming travel distance."""
    if len(route) <= 2:
        return route
    worst = min(
        range(1, len(route) - 1),
        key=lambda i: _score_per_distance(route[i].score, route.step_distances[i]),
    )
    return route.remove(worst)


def add_or_replace(
    route: Route,
    pool: "PointPool",
    t_max: float,
    rng: random.Random,
    max_draws: int = ADD_OR_REPLACE_DRAWS,
) -> Route:
    """
    Insert a random unused point, making room by dropping low-ratio genes if
    needed. The result is kept only if it beats the input route.
    """
    for _ in range(max_draws):
        point = pool.sample(rng)
        if point is None:
            return route
        if point in route:
            continue
        direct = insert_cheapest(route, point)
        if direct is not None and direct.total_distance <= t_max:
            return direct
        cand = route
        while (
            cand.total_score + point.score >= route.total_score
            and point not in cand
            and len(cand) > 2
        ):
            cand = drop_worst_ratio_point(cand)
            with_point = insert_cheapest(cand, point)
            if with_point is not None and with_point.total_distance <= t_max:
                cand = with_point
        if cand.is_better_than(route):
            return cand
        return route
    return route


def mutate(
    route: Route,
    pool: "PointPool",
    t_max: float,
    rng: random.Random,
    window: int = LOCAL_SEARCH_WINDOW,
) -> Route:
    """Apply each local-search move in turn, each with even odds."""
    if rng.random() < OPERATOR_PROBABILITY:
        route = complete_two_opt(route)
    if rng.random() < OPERATOR_PROBABILITY:
        route = add_random_point(route, pool, t_max, rng)
    if rng.random() < OPERATOR_PROBABILITY:
        route = locality_search(route, pool, t_max, rng, window=window)
    if rng.random() < OPERATOR_PROBABILITY:
        route = add_or_replace(route, pool, t_max, rng)
    return route

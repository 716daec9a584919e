"""
Post-processing over the finished routes: shift genes between routes where
that shortens the pair, then spend any freed budget on nearby unused points.
"""

import logging
from typing import Dict, List, Sequence

from .solvers.base import Point, Route
from .solvers.heuristics import best_insertion_index
from .spatial import PointPool


logger = logging.getLogger(__name__)

SEARCH_RADIUS_FRACTION = 1 / 3


def rearrange(routes: Sequence[Route], t_max: float) -> List[Route]:
    """
    Single first-improvement sweep moving genes from one route to another.

    A move is kept when the receiving route stays within ``t_max`` and the
    pair's combined distance strictly drops.
    """
    routes = list(routes)
    moves = 0
    for i in range(len(routes)):
        for j in range(len(routes)):
            if i == j:
                continue
            k = 1
            while k < len(routes[i]) - 1:
                source, target = routes[i], routes[j]
                point = source[k]
                trimmed = source.remove(k)
                idx = best_insertion_index(point, target.points)
                extended = target.insert(idx, point) if idx is not None else target
                same_size = len(trimmed) + len(extended) == len(source) + len(target)
                shorter = (
                    trimmed.total_distance + extended.total_distance
                    < source.total_distance + target.total_distance
                )
                if extended.total_distance <= t_max and same_size and shorter:
                    routes[i], routes[j] = trimmed, extended
                    moves += 1
                k += 1
    if moves:
        logger.debug("rearrange moved %d points between routes", moves)
    return routes


def add_maximum_points(routes: Sequence[Route], pool: PointPool, t_max: float) -> List[Route]:
    """
    Greedily insert unused points lying within ``t_max / 3`` of any point of a
    route, highest score first, while the route stays within ``t_max``.
    Inserted points are withdrawn from ``pool``.
    """
    routes = list(routes)
    pool.remove(p for r in routes for p in r.points)
    radius = t_max * SEARCH_RADIUS_FRACTION
    added = 0
    for idx, route in enumerate(routes):
        nearby: Dict[Point, None] = {}
        for point in route.points:
            for cand in pool.within_radius(point, radius):
                nearby.setdefault(cand, None)
        for cand in sorted(nearby, key=lambda p: p.score, reverse=True):
            pos = best_insertion_index(cand, route.points)
            if pos is None:
                continue
            extended = route.insert(pos, cand)
            if extended.total_distance <= t_max:
                route = extended
                pool.remove([cand])
                added += 1
        routes[idx] = route
    if added:
        logger.debug("add_maximum_points inserted %d points", added)
    return routes

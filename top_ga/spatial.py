import random
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from .geometry import euclidean_distance
from .solvers.base import Point, with_locality_keys


MAX_BUCKETS = 10


class PointPool:
    """
    The working set of candidate points, ordered by locality key.

    Points are partitioned into ``min(MAX_BUCKETS, len(pool))`` contiguous
    buckets; sampling picks a bucket first and a point second, which biases
    draws towards sparsely populated regions of the key space. The index is
    rebuilt whenever points are removed.
    """

    def __init__(self, points: Iterable[Point], max_buckets: int = MAX_BUCKETS):
        self.max_buckets = max_buckets
        points = list(points)
        if any(p.key is None for p in points):
            points = with_locality_keys(points)
        self._points: List[Point] = sorted(points, key=lambda p: p.key)
        self._rebuild()

    def _rebuild(self) -> None:
        n = len(self._points)
        self._rank: Dict[Point, int] = {p: i for i, p in enumerate(self._points)}
        self._xs = np.array([p.x for p in self._points], dtype=np.float64)
        self._ys = np.array([p.y for p in self._points], dtype=np.float64)
        if n == 0:
            self._buckets: List[List[Point]] = []
            return
        chunks = np.array_split(np.arange(n), min(self.max_buckets, n))
        self._buckets = [[self._points[i] for i in chunk] for chunk in chunks]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def __contains__(self, point) -> bool:
        return point in self._rank

    @property
    def points(self) -> Sequence[Point]:
        return tuple(self._points)

    @property
    def buckets(self) -> List[List[Point]]:
        return [list(b) for b in self._buckets]

    def rank(self, point: Point) -> Optional[int]:
        return self._rank.get(point)

    def at_rank(self, rank: int) -> Point:
        return self._points[rank]

    def sample(self, rng: random.Random) -> Optional[Point]:
        if not self._buckets:
            return None
        bucket = self._buckets[rng.randrange(len(self._buckets))]
        return bucket[rng.randrange(len(bucket))]

    def top_scoring(self, count: int = 10) -> List[Point]:
        return sorted(self._points, key=lambda p: p.score, reverse=True)[:count]

    def remove(self, points: Iterable[Point]) -> int:
        drop = set(points)
        before = len(self._points)
        self._points = [p for p in self._points if p not in drop]
        removed = before - len(self._points)
        if removed:
            self._rebuild()
        return removed

    def discard_unreachable(self, start: Point, end: Point, t_max: float) -> int:
        """Drop points that no route from ``start`` to ``end`` within ``t_max`` can visit."""
        unreachable = [
            p
            for p in self._points
            if euclidean_distance(start, p) + euclidean_distance(p, end) > t_max
        ]
        return self.remove(unreachable)

    def within_radius(self, point: Point, radius: float) -> List[Point]:
        """Pool points no farther than ``radius`` from ``point``, nearest first."""
        if not self._points:
            return []
        dist = np.hypot(self._xs - point.x, self._ys - point.y)
        order = np.argsort(dist, kind="stable")
        return [self._points[i] for i in order if dist[i] <= radius]

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple

from ..geometry import euclidean_distance, locality_keys

if TYPE_CHECKING:
    from ..data import Dataset


@dataclass(frozen=True)
class Point:
    id: int
    x: float
    y: float
    score: float
    # derived from x and y against a shared bounding box, see with_locality_keys
    key: Optional[int] = field(default=None, compare=False)


def with_locality_keys(points: Iterable[Point]) -> List[Point]:
    """Copies of ``points`` keyed against their joint bounding box."""
    points = list(points)
    keys = locality_keys([p.x for p in points], [p.y for p in points])
    return [replace(p, key=int(k)) for p, k in zip(points, keys)]


@dataclass(frozen=True)
class Route:
    """
    Immutable ordered sequence of points with cached aggregates.

    The first and last points are the anchors. Every change builds a new
    Route, so the aggregates always describe ``points``.
    """

    points: Tuple[Point, ...]
    total_distance: float = field(init=False, compare=False, repr=False)
    total_score: float = field(init=False, compare=False, repr=False)
    has_duplicates: bool = field(init=False, compare=False, repr=False)
    step_distances: Tuple[float, ...] = field(init=False, compare=False, repr=False)
    step_scores: Tuple[float, ...] = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        points = tuple(self.points)
        distances: Tuple[float, ...] = ()
        scores: Tuple[float, ...] = ()
        if len(points) >= 2:
            distances = (0.0,) + tuple(
                euclidean_distance(a, b) for a, b in zip(points, points[1:])
            )
            scores = tuple(p.score for p in points)
        object.__setattr__(self, "points", points)
        object.__setattr__(self, "step_distances", distances)
        object.__setattr__(self, "step_scores", scores)
        object.__setattr__(self, "total_distance", float(sum(distances)))
        object.__setattr__(self, "total_score", float(sum(scores)))
        object.__setattr__(self, "has_duplicates", bool(self.duplicate_points()))

    @classmethod
    def between(cls, start: Point, end: Point) -> "Route":
        return cls((start, end))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    def __contains__(self, point) -> bool:
        return point in self.points

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def genes(self) -> Tuple[Point, ...]:
        return self.points[1:-1]

    @property
    def preference_key(self) -> Tuple[float, float]:
        # Higher score first, shorter distance breaks ties.
        return (self.total_score, -self.total_distance)

    def is_better_than(self, other: "Route") -> bool:
        return self.preference_key > other.preference_key

    def duplicate_points(self) -> List[Point]:
        """Points visited more than once, in first-seen order.

        A closed route whose start and end are the same point is not a
        duplicate on that account alone.
        """
        pts = self.points
        if len(pts) >= 2 and pts[0] == pts[-1]:
            pts = pts[:-1]
        counts = Counter(pts)
        return [p for p, c in counts.items() if c > 1]

    def insert(self, index: int, point: Point) -> "Route":
        pts = list(self.points)
        pts.insert(index, point)
        return Route(pts)

    def replace(self, index: int, point: Point) -> "Route":
        pts = list(self.points)
        pts[index] = point
        return Route(pts)

    def remove(self, index: int) -> "Route":
        pts = list(self.points)
        del pts[index]
        return Route(pts)

    def cumulative_distance(self, index: int) -> float:
        if index < 0 or index >= len(self.step_distances):
            raise IndexError("index out of bounds")
        return float(sum(self.step_distances[: index + 1]))

    def cumulative_score(self, index: int) -> float:
        if index < 0 or index >= len(self.step_scores):
            raise IndexError("index out of bounds")
        return float(sum(self.step_scores[: index + 1]))

    @property
    def ids(self) -> List[int]:
        return [p.id for p in self.points]


def best_route(routes: Iterable[Route]) -> Route:
    return max(routes, key=lambda r: r.preference_key)


def sort_best_first(routes: Sequence[Route]) -> List[Route]:
    return sorted(routes, key=lambda r: r.preference_key, reverse=True)


def sort_worst_first(routes: Sequence[Route]) -> List[Route]:
    return sorted(routes, key=lambda r: r.preference_key)


class Solver(ABC):
    name: str = "base"

    @abstractmethod
    def solve(self, dataset: "Dataset") -> "Result":
        raise NotImplementedError


@dataclass(frozen=True)
class Result:
    routes: Tuple[Route, ...]
    config: Any
    dataset_name: str
    runtime: float = 0.0

    @property
    def combined_score(self) -> float:
        return float(sum(r.total_score for r in self.routes))

    @property
    def combined_distance(self) -> float:
        return float(sum(r.total_distance for r in self.routes))

    def format_routes(self) -> str:
        lines = []
        for route in self.routes:
            ids = " ".join(str(i) for i in route.ids)
            lines.append(f"{ids} | {route.total_score:g} | {route.total_distance:.4f}")
        lines.append(f"Total Distance: {self.combined_distance:.4f}")
        lines.append(f"Total Score: {self.combined_score:g}")
        return "\n".join(lines)

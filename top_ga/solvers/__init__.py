from .base import (
    Point,
    Result,
    Route,
    Solver,
    best_route,
    sort_best_first,
    sort_worst_first,
    with_locality_keys,
)
from .heuristics import (
    add_or_replace,
    add_random_point,
    best_insertion_index,
    complete_two_opt,
    drop_worst_ratio_point,
    insert_cheapest,
    locality_search,
    mutate,
    remove_worst_duplicate_points,
    singular_two_opt,
)

__all__ = [
    "Point",
    "Result",
    "Route",
    "Solver",
    "best_route",
    "sort_best_first",
    "sort_worst_first",
    "with_locality_keys",
    "add_or_replace",
    "add_random_point",
    "best_insertion_index",
    "complete_two_opt",
    "drop_worst_ratio_point",
    "insert_cheapest",
    "locality_search",
    "mutate",
    "remove_worst_duplicate_points",
    "singular_two_opt",
]

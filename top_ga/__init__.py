"""
Genetic algorithm for the Team Orienteering Problem: evolves one budget-limited
route at a time over a shared pool of scored points, then rebalances the routes.
"""

__all__ = [
    "data",
    "evaluation",
    "evolutionary",
    "geometry",
    "rebalance",
    "spatial",
]

import logging
import sys
from pathlib import Path

from top_ga.data import load_dataset
from top_ga.evolutionary import EvolutionConfig, GeneticSolver


def main():
    path = Path(sys.argv[1] if len(sys.argv) > 1 else "data/top/p1.2.a.txt")
    if not path.exists():
        raise FileNotFoundError(f"Place a TOP-format instance at {path}")

    logging.basicConfig(level=logging.INFO)
    dataset = load_dataset(path)
    cfg = EvolutionConfig(
        population_size=50,
        tour_tries_max=20,
        max_generations=40,
        random_seed=123,
    )
    result = GeneticSolver(cfg).solve(dataset)
    print(result.format_routes())
    print(f"runtime: {result.runtime:.2f}s")


if __name__ == "__main__":
    main()

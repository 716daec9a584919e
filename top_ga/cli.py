import argparse
import logging
import sys
import time
from pathlib import Path

from top_ga.data import MalformedDatasetError, load_dataset
from top_ga.evaluation import benchmark
from top_ga.evolutionary import EvolutionConfig, GeneticSolver


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def build_config(args) -> EvolutionConfig:
    return EvolutionConfig(
        population_size=args.population_size,
        tour_tries_max=args.tour_tries,
        crossover_rate=args.crossover_rate,
        mutation_rate=args.mutation_rate,
        elite_fraction=args.elite_fraction,
        max_generations=args.max_generations,
        random_seed=args.seed,
    )


def solve(args) -> int:
    path = Path(args.file)
    dataset = load_dataset(path)
    log(
        f"loaded {dataset.name}: {len(dataset.points)} points, "
        f"m={dataset.n_routes}, tmax={dataset.t_max:g}"
    )
    result = GeneticSolver(build_config(args)).solve(dataset)
    print(result.format_routes())
    log(f"finished in {result.runtime:.2f}s")
    return 0


def run_benchmark(args) -> int:
    cfg = build_config(args)
    log(f"benchmarking {args.path} with {args.runs} run(s) per instance")
    for row in benchmark(Path(args.path), args.runs, cfg):
        print(row.format(), flush=True)
    return 0


def _add_solver_args(parser: argparse.ArgumentParser) -> None:
    defaults = EvolutionConfig()
    parser.add_argument("--population-size", type=int, default=defaults.population_size)
    parser.add_argument("--tour-tries", type=int, default=defaults.tour_tries_max,
                        help="Failed insertions tolerated while seeding a route")
    parser.add_argument("--crossover-rate", type=float, default=defaults.crossover_rate)
    parser.add_argument("--mutation-rate", type=float, default=defaults.mutation_rate)
    parser.add_argument("--elite-fraction", type=float, default=defaults.elite_fraction,
                        help="Share of children replaced by the best parents each generation")
    parser.add_argument("--max-generations", type=int, default=defaults.max_generations)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="count", default=0)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Team Orienteering Problem GA")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser("solve", help="Solve a single TOP-format instance")
    solve_parser.add_argument("file")
    _add_solver_args(solve_parser)
    solve_parser.set_defaults(func=solve)

    bench_parser = subparsers.add_parser("benchmark", help="Benchmark a TOP file or directory")
    bench_parser.add_argument("path")
    bench_parser.add_argument("--runs", type=int, default=10)
    _add_solver_args(bench_parser)
    bench_parser.set_defaults(func=run_benchmark)

    args = parser.parse_args(argv)
    level = logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except (MalformedDatasetError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

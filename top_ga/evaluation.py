import copy
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

import numpy as np

from .data import Dataset, instance_files, load_dataset
from .evolutionary import EvolutionConfig, GeneticSolver
from .solvers.base import Route, Solver


@dataclass
class RunStats:
    score: float
    runtime: float
    routes: Tuple[Route, ...]
    solver_name: str


@dataclass
class BenchmarkRow:
    name: str
    best_score: float
    avg_score: float
    avg_runtime: float
    best_routes: Tuple[Route, ...]

    def format(self) -> str:
        routes = ", ".join(
            " ".join(str(i) for i in r.ids) + f" | {r.total_score:g}" for r in self.best_routes
        )
        return f"{self.name}, {self.best_score:g}, {self.avg_score:g}, {self.avg_runtime:.3f}, {routes}"


def evaluate_solver(solver: Solver, dataset: Dataset) -> RunStats:
    start = time.perf_counter()
    result = solver.solve(dataset)
    runtime = time.perf_counter() - start
    return RunStats(
        score=result.combined_score,
        runtime=runtime,
        routes=result.routes,
        solver_name=solver.__class__.__name__,
    )


def aggregate_runs(runs: List[RunStats]) -> Dict[str, float]:
    if not runs:
        return {"best": float("nan"), "score": float("nan"), "runtime": float("nan")}
    scores = np.array([r.score for r in runs], dtype=np.float64)
    runtimes = np.array([r.runtime for r in runs], dtype=np.float64)
    return {
        "best": float(scores.max()),
        "score": float(scores.mean()),
        "runtime": float(runtimes.mean()),
    }


def benchmark_dataset(dataset: Dataset, runs: int, config: EvolutionConfig) -> BenchmarkRow:
    stats: List[RunStats] = []
    for i in range(runs):
        run_cfg = copy.deepcopy(config)
        if config.random_seed is not None:
            run_cfg.random_seed = config.random_seed + i
        stats.append(evaluate_solver(GeneticSolver(run_cfg), dataset))
    agg = aggregate_runs(stats)
    best = max(stats, key=lambda s: s.score)
    return BenchmarkRow(
        name=dataset.name,
        best_score=agg["best"],
        avg_score=agg["score"],
        avg_runtime=agg["runtime"],
        best_routes=best.routes,
    )


def benchmark(path: Path, runs: int, config: EvolutionConfig) -> Iterator[BenchmarkRow]:
    """Benchmark every TOP file under ``path`` (or ``path`` itself if it is a file)."""
    if runs < 1:
        raise ValueError("runs must be at least 1")
    for file in instance_files(Path(path)):
        yield benchmark_dataset(load_dataset(file), runs, config)

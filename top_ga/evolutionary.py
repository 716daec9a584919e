import logging
import math
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .data import Dataset, MalformedDatasetError
from .solvers.base import Result, Route, Solver, best_route, sort_best_first, sort_worst_first
from .solvers.heuristics import (
    LOCAL_SEARCH_WINDOW,
    insert_cheapest,
    mutate,
    remove_worst_duplicate_points,
)
from .rebalance import add_maximum_points, rearrange
from .spatial import PointPool


logger = logging.getLogger(__name__)

BUCKET_DRAW_PROBABILITY = 0.8
TOP_SCORE_SAMPLE = 10
STAGNATION_FRACTION = 0.25


@dataclass
class EvolutionConfig:
    population_size: int = 300
    tour_tries_max: int = 30
    crossover_rate: float = 0.75
    mutation_rate: float = 0.25
    elite_fraction: float = 0.03
    max_generations: int = 200
    random_seed: Optional[int] = None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class Phase(Enum):
    INITIALIZED = "initialized"
    EVOLVING = "evolving"
    DONE = "done"


@dataclass
class GenerationState:
    """
    Counters driving the evolution of a single route.

    ``generation`` is the zero-based index of the generation being run. The
    route is finished once generation ``max_generations`` has been recorded or
    the best child score has stayed the same for ``stop_after`` generations.
    """

    max_generations: int
    phase: Phase = Phase.INITIALIZED
    generation: int = 0
    stagnation: int = 0
    last_score: float = 0.0
    stop_after: int = field(init=False)

    def __post_init__(self):
        self.stop_after = _round_half_up(self.max_generations * STAGNATION_FRACTION)

    @property
    def done(self) -> bool:
        return self.phase is Phase.DONE

    def record(self, best_score: float) -> Phase:
        if self.done:
            raise RuntimeError("route evolution has already finished")
        self.phase = Phase.EVOLVING
        if best_score == self.last_score:
            self.stagnation += 1
        else:
            self.last_score = best_score
            self.stagnation = 0
        if self.generation == self.max_generations or self.stagnation >= self.stop_after:
            self.phase = Phase.DONE
        else:
            self.generation += 1
        return self.phase


class GeneticEngine:
    """
    Builds ``dataset.n_routes`` routes one at a time. Each route is the best
    individual of its own evolutionary run; its points are then withdrawn from
    the shared pool before the next run starts.
    """

    def __init__(self, dataset: Dataset, config: EvolutionConfig, rng: random.Random = None):
        if len(dataset.points) < 2:
            raise MalformedDatasetError(f"{dataset.file_name}: a start and an end point are required")
        self.dataset = dataset
        self.cfg = config
        self.rng = rng or random.Random(config.random_seed)
        self.start = dataset.start
        self.end = dataset.end
        self.t_max = dataset.t_max
        self._pool = PointPool(dataset.candidates)
        pruned = self._pool.discard_unreachable(self.start, self.end, self.t_max)
        if pruned:
            logger.debug("%s: discarded %d unreachable points", dataset.name, pruned)
        self._population: List[Route] = []
        self._selected_parents: List[Route] = []
        self._retained_children: List[Route] = []
        self._child_population: List[Route] = []
        self._final_routes: List[Route] = []
        self.state: Optional[GenerationState] = None
        self._result: Optional[Result] = None

    @property
    def pool(self) -> PointPool:
        return self._pool

    @property
    def population(self) -> Sequence[Route]:
        return tuple(self._population)

    @property
    def selected_parents(self) -> Sequence[Route]:
        return tuple(self._selected_parents)

    @property
    def retained_children(self) -> Sequence[Route]:
        return tuple(self._retained_children)

    @property
    def child_population(self) -> Sequence[Route]:
        return tuple(self._child_population)

    @property
    def final_routes(self) -> Sequence[Route]:
        return tuple(self._final_routes)

    def anchor_route(self) -> Route:
        return Route.between(self.start, self.end)

    def initialise_population(self) -> None:
        top_scoring = self._pool.top_scoring(TOP_SCORE_SAMPLE)
        self._population = []
        for _ in range(self.cfg.population_size):
            route = self.anchor_route()
            tries = 0
            while top_scoring and route.total_distance < self.t_max and tries < self.cfg.tour_tries_max:
                if self.rng.random() < BUCKET_DRAW_PROBABILITY:
                    point = self._pool.sample(self.rng)
                else:
                    point = self.rng.choice(top_scoring)
                if point in route:
                    tries += 1
                    continue
                cand = insert_cheapest(route, point)
                if cand.total_distance > self.t_max:
                    tries += 1
                else:
                    route = cand
                    tries = 0
            self._population.append(route)
        self.state = GenerationState(self.cfg.max_generations)

    def tournament_selection(self) -> None:
        source = self._population if self.state.generation == 0 else self._retained_children
        for _ in range(self.cfg.population_size):
            a = source[self.rng.randrange(len(source))]
            b = source[self.rng.randrange(len(source))]
            self._selected_parents.append(b if b.is_better_than(a) else a)
        self._retained_children = []

    def _recombine(self, parent1: Route, parent2: Route) -> List[Route]:
        for i in range(1, len(parent1) - 1):
            gene = parent1[i]
            if gene not in parent2:
                continue
            j = parent2.points.index(gene)
            children = [
                Route(parent1.points[:i] + parent2.points[j:]),
                Route(parent2.points[:j] + parent1.points[i:]),
            ]
            out = []
            for child, parent in zip(children, (parent1, parent2)):
                if child.has_duplicates:
                    child = remove_worst_duplicate_points(child)
                out.append(child if child.total_distance <= self.t_max else parent)
            return out
        return [parent1, parent2]

    def single_point_crossover(self) -> None:
        self._child_population = []
        participants: List[Route] = []
        for parent in self._selected_parents:
            if self.rng.random() < self.cfg.crossover_rate:
                participants.append(parent)
                if len(participants) == 2:
                    self._child_population.extend(self._recombine(*participants))
                    participants = []
            else:
                self._child_population.append(parent)
        shortfall = self.cfg.population_size - len(self._child_population)
        if participants and shortfall > 0:
            self._child_population.extend(participants[:shortfall])

    def mutate_children(self) -> None:
        for idx, child in enumerate(self._child_population):
            if self.rng.random() < self.cfg.mutation_rate:
                self._child_population[idx] = mutate(
                    child, self._pool, self.t_max, self.rng, window=LOCAL_SEARCH_WINDOW
                )

    def elitist_replacement(self) -> None:
        parents = sort_best_first(self._selected_parents)
        children = sort_worst_first(self._child_population)
        keep = min(
            int(math.floor(self.cfg.population_size * self.cfg.elite_fraction)),
            len(parents),
            len(children),
        )
        children[:keep] = parents[:keep]
        self._child_population = children
        self._selected_parents = []
        self._retained_children = list(children)

    def _log_generation(self, best: Route) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        genes = {p for r in self._retained_children for p in r.genes}
        logger.debug(
            "route %d gen %d: score=%g distance=%.2f unique_genes=%d",
            len(self._final_routes) + 1,
            self.state.generation,
            best.total_score,
            best.total_distance,
            len(genes),
        )

    def evolve_route(self) -> Route:
        self.initialise_population()
        self._selected_parents = []
        self._retained_children = []
        best = self.anchor_route()
        while not self.state.done:
            self.tournament_selection()
            self.single_point_crossover()
            self.mutate_children()
            self.elitist_replacement()
            gen_best = best_route(self._retained_children)
            if gen_best.is_better_than(best):
                best = gen_best
            self._log_generation(gen_best)
            if self.state.record(gen_best.total_score) is not Phase.DONE:
                self.rng.shuffle(self._retained_children)
        self._final_routes.append(best)
        self._pool.remove(best.genes)
        logger.info(
            "%s: route %d/%d score=%g distance=%.2f after %d generations",
            self.dataset.name,
            len(self._final_routes),
            self.dataset.n_routes,
            best.total_score,
            best.total_distance,
            self.state.generation + 1,
        )
        return best

    def run(self) -> Result:
        if self._result is not None:
            raise RuntimeError("engine has already produced a result")
        t0 = time.perf_counter()
        while len(self._final_routes) < self.dataset.n_routes:
            self.evolve_route()
        routes = rearrange(self._final_routes, self.t_max)
        routes = add_maximum_points(routes, self._pool, self.t_max)
        self._final_routes = routes
        self._result = Result(
            routes=tuple(routes),
            config=self.cfg,
            dataset_name=self.dataset.name,
            runtime=time.perf_counter() - t0,
        )
        return self._result


class GeneticSolver(Solver):
    name = "genetic"

    def __init__(self, config: EvolutionConfig = None, rng: random.Random = None):
        self.cfg = config or EvolutionConfig()
        self.rng = rng

    def solve(self, dataset: Dataset) -> Result:
        return GeneticEngine(dataset, self.cfg, rng=self.rng).run()

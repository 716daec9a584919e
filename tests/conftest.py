import random
from pathlib import Path

import pytest

from top_ga.data import load_dataset
from top_ga.evolutionary import EvolutionConfig


DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def sample_path() -> Path:
    return DATA_DIR / "small-top.txt"


@pytest.fixture
def sample_dataset(sample_path):
    return load_dataset(sample_path)


@pytest.fixture
def small_config() -> EvolutionConfig:
    return EvolutionConfig(
        population_size=20,
        tour_tries_max=20,
        crossover_rate=0.75,
        mutation_rate=0.5,
        elite_fraction=0.1,
        max_generations=12,
        random_seed=7,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)

"""Injectable pseudo-random source shared by the synthesizers."""
from typing import Optional

import numpy as np

from config.settings import RANDOM_SEED


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Seeded generator; falls back to RANDOM_SEED, then OS entropy."""
    return np.random.default_rng(RANDOM_SEED if seed is None else seed)


def uniform(rng: np.random.Generator, low: float, high: float) -> float:
    return float(rng.uniform(low, high))

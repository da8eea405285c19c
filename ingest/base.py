"""Base synthesizer abstract class."""
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from common.logger import get_logger
from common.models import ResolvedAsset
from common.rng import make_rng


class BaseSynthesizer(ABC):
    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.logger = get_logger(self.__class__.__name__)
        self.rng = rng if rng is not None else make_rng()

    @abstractmethod
    def synthesize(self, asset: ResolvedAsset):
        """Produce this synthesizer's data product for a resolved asset."""
        pass

    def jitter(self, value: float, volatility: float) -> float:
        """value * (1 + u), u ~ U(-volatility, +volatility), kept strictly positive."""
        moved = value * (1 + self.rng.uniform(-volatility, volatility))
        return float(max(moved, value * 1e-3))

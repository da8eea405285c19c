"""Base scorer abstract class."""
from abc import ABC, abstractmethod

from common.logger import get_logger
from common.models import AnalysisResult


class BaseScorer(ABC):
    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def score(self, result: AnalysisResult):
        """Derive this scorer's view of a finished analysis."""
        pass

    @staticmethod
    def clamp(value: float, low: float = 0, high: float = 100) -> float:
        return max(low, min(high, value))

    @staticmethod
    def round_half_up(value: float) -> int:
        return int(value + 0.5) if value >= 0 else -int(-value + 0.5)

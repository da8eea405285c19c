"""
Volatility tracker: realised volatility of the chart series.

  returns  = daily pct change of price
  current  = population std of the last 7 returns, in percent
  baseline = population std of all returns * U(0.8, 1.2), in percent
  trend    = increasing if current > 1.2 * baseline,
             decreasing if current < 0.8 * baseline, else stable

Series shorter than 7 points report zero volatility and a stable trend.
Levels: < 2% low, < 5% medium, otherwise high.
"""
from typing import Optional

import numpy as np
import pandas as pd

from common.models import (
    AnalysisResult, ChartPoint, RiskTier, VolatilityReport, VolatilityTrend,
)
from common.rng import make_rng
from scoring.base import BaseScorer

MIN_POINTS = 7
RECENT_WINDOW = 7
BASELINE_JITTER = (0.8, 1.2)
TREND_BAND = 0.2
LOW_VOLATILITY = 2.0
MEDIUM_VOLATILITY = 5.0


def volatility_level(volatility: float) -> RiskTier:
    if volatility < LOW_VOLATILITY:
        return RiskTier.LOW
    if volatility < MEDIUM_VOLATILITY:
        return RiskTier.MEDIUM
    return RiskTier.HIGH


class VolatilityTracker(BaseScorer):
    def __init__(self, rng: Optional[np.random.Generator] = None):
        super().__init__()
        self.rng = rng if rng is not None else make_rng()

    def score(self, result: AnalysisResult) -> VolatilityReport:
        return self.track(result.chart_data)

    def track(self, chart: list[ChartPoint]) -> VolatilityReport:
        if len(chart) < MIN_POINTS:
            return self._report(0.0, 0.0, VolatilityTrend.STABLE)

        prices = pd.Series([p.price for p in chart], dtype=float)
        returns = prices.pct_change().dropna()

        overall = float(returns.std(ddof=0)) * 100
        baseline = overall * float(self.rng.uniform(*BASELINE_JITTER))
        current = float(returns.tail(RECENT_WINDOW).std(ddof=0)) * 100

        if current > baseline * (1 + TREND_BAND):
            trend = VolatilityTrend.INCREASING
        elif current < baseline * (1 - TREND_BAND):
            trend = VolatilityTrend.DECREASING
        else:
            trend = VolatilityTrend.STABLE
        return self._report(current, baseline, trend)

    @staticmethod
    def _report(current: float, baseline: float, trend: VolatilityTrend) -> VolatilityReport:
        return VolatilityReport(
            current=current,
            baseline=baseline,
            trend=trend,
            level=volatility_level(current),
            baseline_level=volatility_level(baseline),
        )

"""
Price forecaster.

Projects the current price over fixed horizons from the technical indicators:

  volatility = |MACD| / 100 + 0.02
  direction  = +1 if RSI > 50 else -1
  target     = price * (1 + direction * volatility * days * 0.1)
  range      = price * volatility * days * 0.05
  low, high  = max(0, target - range), target + range

Confidence starts at 65, +10 when RSI sits inside (30, 70) else -10,
+10 when |MACD| < 5 else -5, clamped to [45, 95].
"""
from common.models import (
    AnalysisResult, ForecastRange, PriceForecast, TechnicalIndicatorSet,
)
from scoring.base import BaseScorer

HORIZONS = (7, 30)
BASE_VOLATILITY = 0.02
TREND_FACTOR = 0.1
RANGE_FACTOR = 0.05
MACD_CALM = 5
CONFIDENCE_BASE = 65
CONFIDENCE_BOUNDS = (45, 95)


class PriceForecaster(BaseScorer):
    def score(self, result: AnalysisResult) -> PriceForecast:
        return self.forecast(result.market_data.price, result.technical_indicators)

    def horizon(self, price: float, ind: TechnicalIndicatorSet, days: int) -> ForecastRange:
        volatility = abs(ind.macd) / 100 + BASE_VOLATILITY
        direction = 1 if ind.rsi > 50 else -1
        target = price * (1 + direction * volatility * days * TREND_FACTOR)
        spread = price * volatility * days * RANGE_FACTOR
        return ForecastRange(
            days=days,
            target=target,
            low=max(0.0, target - spread),
            high=target + spread,
            change_percent=(target - price) / price * 100,
        )

    def confidence(self, ind: TechnicalIndicatorSet) -> int:
        value = CONFIDENCE_BASE
        value += 10 if 30 < ind.rsi < 70 else -10
        value += 10 if abs(ind.macd) < MACD_CALM else -5
        return int(self.clamp(value, *CONFIDENCE_BOUNDS))

    def factors(self, price: float, ind: TechnicalIndicatorSet) -> list[str]:
        if ind.rsi > 70:
            rsi_note = "Overbought conditions may limit upside"
        elif ind.rsi < 30:
            rsi_note = "Oversold conditions suggest potential recovery"
        else:
            rsi_note = "Balanced RSI indicates stable momentum"
        return [
            rsi_note,
            "MACD shows positive momentum" if ind.macd > 0 else "MACD indicates bearish momentum",
            ("Price above 20-day moving average" if price > ind.sma20
             else "Price below 20-day moving average"),
        ]

    def forecast(self, price: float, ind: TechnicalIndicatorSet) -> PriceForecast:
        return PriceForecast(
            horizons=[self.horizon(price, ind, days) for days in HORIZONS],
            confidence=self.confidence(ind),
            factors=self.factors(price, ind),
        )

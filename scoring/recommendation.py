"""
Recommendation engine.

Counts four bullish and four bearish conditions and applies a fixed
threshold rule:

  bullish  change% > 2 | positive news > negative | RSI < 30 | price > SMA20
  bearish  change% < -2 | negative news > positive | RSI > 70 | price < SMA50

  bullish >= 3 -> BUY, else bearish >= 3 -> SELL, else HOLD

Confidence is drawn from a band that depends on the recommendation and on
whether the data was estimated; estimated results lose a further 10 points,
floored at 50.
"""
from types import MappingProxyType
from typing import NamedTuple, Optional

import numpy as np

from common.logger import get_logger
from common.models import (
    AnalysisQuality, AnalysisResult, AssetType, ChartPoint, DataQuality, MarketRecord,
    NewsItem, Recommendation, RiskTier, Sentiment, TechnicalIndicatorSet,
)
from common.rng import make_rng

logger = get_logger("recommendation")

SIGNAL_THRESHOLD = 3
MOMENTUM_THRESHOLD = 2.0       # % move counted as a signal
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
HIGH_RISK_MOVE = 5.0
MEDIUM_RISK_MOVE = 2.0
FALLBACK_PENALTY = 10
CONFIDENCE_FLOOR = 50

# (recommendation, estimated) -> confidence band
CONFIDENCE_BANDS = MappingProxyType({
    (Recommendation.BUY,  False): (75, 95),
    (Recommendation.BUY,  True):  (65, 80),
    (Recommendation.SELL, False): (70, 95),
    (Recommendation.SELL, True):  (60, 80),
    (Recommendation.HOLD, False): (60, 80),
    (Recommendation.HOLD, True):  (55, 70),
})

REASONS = MappingProxyType({
    (Recommendation.BUY, False): (
        "Strong positive price momentum",
        "Favorable news sentiment",
        "Technical indicators suggest potential upside",
    ),
    (Recommendation.BUY, True): (
        "Estimated positive price momentum based on sector trends",
        "Favorable market sentiment for similar assets",
        "Technical indicators suggest potential upside",
    ),
    (Recommendation.SELL, False): (
        "Negative price trend",
        "Concerning news developments",
        "Technical indicators suggest potential downside",
    ),
    (Recommendation.SELL, True): (
        "Estimated negative price trend based on market conditions",
        "Market uncertainty affecting similar assets",
        "Technical indicators suggest potential downside",
    ),
    (Recommendation.HOLD, False): (
        "Mixed market signals",
        "Balanced sentiment and technical indicators",
        "Neutral market conditions suggest patience",
    ),
    (Recommendation.HOLD, True): (
        "Mixed signals based on sector analysis",
        "Balanced sentiment and technical indicators",
        "Neutral market conditions suggest patience",
    ),
})

SIMILAR_ASSETS = MappingProxyType({
    ("stock", "technology"): ("AAPL", "MSFT", "GOOGL", "NVDA"),
    ("stock", "healthcare"): ("JNJ", "PFE", "UNH", "ABBV"),
    ("stock", "finance"):    ("JPM", "BAC", "WFC", "GS"),
    ("crypto", "defi"):      ("UNI", "AAVE", "COMP", "MKR"),
    ("crypto", "layer1"):    ("ETH", "SOL", "ADA", "DOT"),
    ("forex", "major"):      ("EURUSD", "GBPUSD", "USDJPY", "USDCHF"),
})
GENERIC_SIMILAR = ("BTC", "ETH", "AAPL", "MSFT")


class SignalCounts(NamedTuple):
    bullish: int
    bearish: int


def count_signals(market: MarketRecord, news: list[NewsItem],
                  indicators: TechnicalIndicatorSet) -> SignalCounts:
    change = market.change_percent_24h
    positive = sum(1 for n in news if n.sentiment == Sentiment.POSITIVE)
    negative = sum(1 for n in news if n.sentiment == Sentiment.NEGATIVE)

    bullish = sum([
        change > MOMENTUM_THRESHOLD,
        positive > negative,
        indicators.rsi < RSI_OVERSOLD,
        market.price > indicators.sma20,
    ])
    bearish = sum([
        change < -MOMENTUM_THRESHOLD,
        negative > positive,
        indicators.rsi > RSI_OVERBOUGHT,
        market.price < indicators.sma50,
    ])
    return SignalCounts(bullish, bearish)


def decide(signals: SignalCounts) -> Recommendation:
    if signals.bullish >= SIGNAL_THRESHOLD:
        return Recommendation.BUY
    if signals.bearish >= SIGNAL_THRESHOLD:
        return Recommendation.SELL
    return Recommendation.HOLD


def risk_tier(market: MarketRecord) -> RiskTier:
    move = abs(market.change_percent_24h)
    if market.asset_type == AssetType.CRYPTO or move > HIGH_RISK_MOVE:
        return RiskTier.HIGH
    if move > MEDIUM_RISK_MOVE:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def similar_assets(asset_type: AssetType, sector: Optional[str]) -> list[str]:
    key = (asset_type.value, (sector or "").lower())
    picks = (SIMILAR_ASSETS.get(key)
             or SIMILAR_ASSETS.get((asset_type.value, "technology"))
             or GENERIC_SIMILAR)
    return list(picks)


class RecommendationEngine:
    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else make_rng()

    def confidence(self, recommendation: Recommendation, fallback_used: bool) -> int:
        low, high = CONFIDENCE_BANDS[(recommendation, fallback_used)]
        value = float(self.rng.uniform(low, high))
        if fallback_used:
            value = max(CONFIDENCE_FLOOR, value - FALLBACK_PENALTY)
        return int(round(min(100.0, max(0.0, value))))

    def evaluate(self, market: MarketRecord, news: list[NewsItem],
                 chart: list[ChartPoint],
                 indicators: TechnicalIndicatorSet) -> AnalysisResult:
        fallback_used = market.data_quality == DataQuality.ESTIMATED
        signals = count_signals(market, news, indicators)
        recommendation = decide(signals)
        logger.info(f"{market.symbol}: bullish={signals.bullish} bearish={signals.bearish} "
                    f"-> {recommendation.value.upper()}")

        return AnalysisResult(
            market_data=market,
            news=news,
            chart_data=chart,
            technical_indicators=indicators,
            recommendation=recommendation,
            confidence=self.confidence(recommendation, fallback_used),
            risk_score=risk_tier(market),
            reasons=list(REASONS[(recommendation, fallback_used)]),
            data_quality=AnalysisQuality.ESTIMATED if fallback_used else AnalysisQuality.COMPLETE,
            fallback_used=fallback_used,
            similar_assets=similar_assets(market.asset_type, market.sector) if fallback_used else None,
        )

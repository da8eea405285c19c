"""
ASSET PULSE — Analysis orchestrator

Resolves an identifier (registry first, synthesized fallback otherwise), fans
out to the four independent producers and joins them in the recommendation
engine:

  market data ─┐
  news ────────┤
  chart ───────┼──> RecommendationEngine ──> AnalysisResult
  indicators ──┘

Every producer gets its own child generator spawned from the request
generator, so a seeded request yields the same result whatever order the
producers finish in.
"""
import asyncio
from typing import Optional

import numpy as np

from common.logger import get_logger
from common.models import (
    AnalysisQuality, AnalysisReport, AnalysisResult, ComparisonResult, HistoryEntry, MarketRecord,
    Recommendation, RiskTier, RiskTolerance,
)
from common.rng import make_rng
from config import settings
from ingest.chart import ChartSeriesSynthesizer
from ingest.market_data import MarketDataSynthesizer
from ingest.news import NewsGenerator
from ingest.registry import REGISTRY, CanonicalRegistry
from ingest.resolver import resolve_asset
from scoring.forecast import PriceForecaster
from scoring.indicators import TechnicalIndicatorCalculator
from scoring.portfolio import assess_portfolio_fit
from scoring.recommendation import RecommendationEngine
from scoring.risk import RiskAnalyzer
from scoring.sentiment import SentimentScorer
from scoring.volatility import VolatilityTracker
from storage import database

logger = get_logger("aggregator")

SEARCH_LIMIT = 10

RISK_ORDER = {RiskTier.LOW: 0, RiskTier.MEDIUM: 1, RiskTier.HIGH: 2}


async def _produce(label: str, fn, rng: np.random.Generator):
    if settings.SIMULATE_LATENCY:
        low, high = settings.LATENCY_WINDOWS[label]
        await asyncio.sleep(float(rng.uniform(low, high)))
    return fn()


async def analyze(symbol: str,
                  risk_tolerance: RiskTolerance = RiskTolerance.MODERATE,
                  name: Optional[str] = None,
                  rng: Optional[np.random.Generator] = None,
                  registry: CanonicalRegistry = REGISTRY,
                  timeout: Optional[float] = None) -> AnalysisResult:
    """
    Full analysis of one identifier. Never fails for any string input.

    risk_tolerance is accepted for the caller's advisory features (history,
    portfolio fit, risk match) and is not an input to the buy/hold/sell rule.
    """
    rng = rng if rng is not None else make_rng()
    resolve_rng, market_rng, news_rng, chart_rng, ind_rng, engine_rng, latency_rng = rng.spawn(7)

    asset = resolve_asset(symbol, resolve_rng, name=name, registry=registry)
    logger.info(f"Analyzing {asset.symbol} ({asset.descriptor.asset_type.value}, "
                f"{'estimated' if asset.is_estimated else 'live'}) "
                f"for {RiskTolerance(risk_tolerance).value} investor")

    market_syn = MarketDataSynthesizer(market_rng)
    news_gen = NewsGenerator(news_rng)
    chart_syn = ChartSeriesSynthesizer(chart_rng)
    ind_calc = TechnicalIndicatorCalculator(ind_rng)
    delay_rngs = latency_rng.spawn(4)

    gathered = asyncio.gather(
        _produce("market", lambda: market_syn.synthesize(asset), delay_rngs[0]),
        _produce("news", lambda: news_gen.synthesize(asset), delay_rngs[1]),
        _produce("chart", lambda: chart_syn.synthesize(asset), delay_rngs[2]),
        _produce("indicators", lambda: ind_calc.synthesize(asset), delay_rngs[3]),
    )
    limit = settings.ANALYSIS_TIMEOUT_SECONDS if timeout is None else timeout
    market, news, chart, indicators = await asyncio.wait_for(gathered, timeout=limit)

    result = RecommendationEngine(engine_rng).evaluate(market, news, chart, indicators)
    logger.info(f"✅ {asset.symbol}: {result.recommendation.value.upper()} "
                f"conf={result.confidence} risk={result.risk_score.value}")
    return result


async def search(query: str,
                 registry: CanonicalRegistry = REGISTRY,
                 rng: Optional[np.random.Generator] = None) -> list[MarketRecord]:
    """
    Registry substring matches, each with a fresh live quote; when nothing
    matches, a single estimated record for the query itself.
    """
    rng = rng if rng is not None else make_rng()
    matches = registry.search(query)[:SEARCH_LIMIT]
    market_syn = MarketDataSynthesizer(rng)

    if matches:
        return [market_syn.synthesize(resolve_asset(sym, rng, registry=registry))
                for sym in matches]

    logger.info(f"No registry match for '{query}', synthesizing a fallback record")
    return [market_syn.synthesize(resolve_asset(query, rng, registry=registry))]


def _safer(a: AnalysisResult, b: AnalysisResult) -> Optional[str]:
    ra, rb = RISK_ORDER[a.risk_score], RISK_ORDER[b.risk_score]
    if ra == rb:
        return None
    return a.market_data.symbol if ra < rb else b.market_data.symbol


def _better_overall(a: AnalysisResult, b: AnalysisResult) -> AnalysisResult:
    a_complete = a.data_quality == AnalysisQuality.COMPLETE
    b_complete = b.data_quality == AnalysisQuality.COMPLETE
    if a_complete != b_complete:
        return a if a_complete else b
    a_buy = a.recommendation == Recommendation.BUY
    b_buy = b.recommendation == Recommendation.BUY
    if a_buy != b_buy:
        return a if a_buy else b
    return a if a.confidence > b.confidence else b


def summarize_comparison(a: AnalysisResult, b: AnalysisResult) -> ComparisonResult:
    growth = a if a.market_data.change_percent_24h > b.market_data.change_percent_24h else b
    return ComparisonResult(
        first=a,
        second=b,
        safer=_safer(a, b),
        higher_growth=growth.market_data.symbol,
        better_overall=_better_overall(a, b).market_data.symbol,
    )


async def compare(first: str, second: str,
                  risk_tolerance: RiskTolerance = RiskTolerance.MODERATE,
                  rng: Optional[np.random.Generator] = None) -> ComparisonResult:
    """Two independent analyses run concurrently, then a side-by-side verdict."""
    rng = rng if rng is not None else make_rng()
    rng_a, rng_b = rng.spawn(2)
    a, b = await asyncio.gather(
        analyze(first, risk_tolerance, rng=rng_a),
        analyze(second, risk_tolerance, rng=rng_b),
    )
    return summarize_comparison(a, b)


def build_report(result: AnalysisResult,
                 risk_tolerance: RiskTolerance = RiskTolerance.MODERATE,
                 rng: Optional[np.random.Generator] = None) -> AnalysisReport:
    """Attach the advisory views (sentiment, volatility, forecast, risk, fit)."""
    tolerance = RiskTolerance(risk_tolerance)
    return AnalysisReport(
        analysis=result,
        risk_tolerance=tolerance,
        portfolio_fit=assess_portfolio_fit(result, tolerance),
        sentiment=SentimentScorer().score(result),
        volatility=VolatilityTracker(rng).score(result),
        forecast=PriceForecaster().score(result),
        risk=RiskAnalyzer(tolerance).score(result),
    )


def history_entry(result: AnalysisResult, risk_tolerance: RiskTolerance) -> HistoryEntry:
    md = result.market_data
    return HistoryEntry(
        symbol=md.symbol,
        name=md.name,
        asset_type=md.asset_type,
        recommendation=result.recommendation,
        risk_tolerance=RiskTolerance(risk_tolerance),
        price=md.price,
    )


async def record_analysis(result: AnalysisResult,
                          risk_tolerance: RiskTolerance) -> Optional[HistoryEntry]:
    """
    Append a finished analysis to the history store.

    Storage problems are reported as a warning and never reach the caller:
    the analysis itself is already complete.
    """
    try:
        return await database.append_history(history_entry(result, risk_tolerance))
    except Exception as e:
        logger.warning(f"⚠️ History not recorded for {result.market_data.symbol}: {e}")
        return None

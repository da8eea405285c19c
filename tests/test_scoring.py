"""Tests for scoring modules."""
import asyncio
from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from common.models import (
    AnalysisQuality, AnalysisResult, AssetType, BollingerBands, ChartPoint, DataQuality,
    MarketRecord, NewsItem, Recommendation, RiskTier, RiskTolerance, Sentiment,
    TechnicalIndicatorSet, VolatilityTrend,
)
from common.rng import make_rng
from config import settings
from ingest.registry import KNOWN_ASSETS, CanonicalRegistry
from scoring.aggregator import analyze, build_report, compare, search, summarize_comparison
from scoring.forecast import PriceForecaster
from scoring.indicators import TechnicalIndicatorCalculator
from scoring.portfolio import assess_portfolio_fit, diversification_score, portfolio_weight
from scoring.recommendation import (
    GENERIC_SIMILAR, RecommendationEngine, SignalCounts, count_signals, decide,
    risk_tier, similar_assets,
)
from scoring.risk import RiskAnalyzer
from scoring.sentiment import SentimentScorer, sentiment_label
from scoring.volatility import VolatilityTracker, volatility_level

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_market(change_pct: float = 0.0, price: float = 100.0,
                asset_type: AssetType = AssetType.STOCK,
                quality: DataQuality = DataQuality.LIVE,
                market_cap=None, symbol: str = "TEST", sector: str = "Technology") -> MarketRecord:
    previous = price / (1 + change_pct / 100)
    return MarketRecord(
        symbol=symbol, name=symbol, asset_type=asset_type, price=price,
        change_24h=price - previous, change_percent_24h=change_pct,
        market_cap=market_cap, volume_24h=1e6, sector=sector,
        last_updated=NOW, data_quality=quality,
    )


def make_news(positive: int = 0, negative: int = 0, neutral: int = 0) -> list[NewsItem]:
    tags = ([Sentiment.POSITIVE] * positive + [Sentiment.NEGATIVE] * negative
            + [Sentiment.NEUTRAL] * neutral)
    return [NewsItem(headline=f"h{i}", summary="s", sentiment=t, source="test",
                     published_at=NOW, url=f"https://example.com/{i}")
            for i, t in enumerate(tags)]


def make_indicators(rsi: float = 50, sma20: float = 100, sma50: float = 100,
                    macd: float = 0.0) -> TechnicalIndicatorSet:
    return TechnicalIndicatorSet(
        rsi=rsi, sma20=sma20, sma50=sma50, macd=macd,
        bollinger=BollingerBands(upper=105, middle=100, lower=95),
    )


def make_result(asset_type=AssetType.STOCK, change_pct=0.0, market_cap=None,
                recommendation=Recommendation.HOLD, confidence=70,
                quality=DataQuality.LIVE, symbol="TEST", indicators=None,
                news=None, chart=None) -> AnalysisResult:
    market = make_market(change_pct, asset_type=asset_type, quality=quality,
                         market_cap=market_cap, symbol=symbol)
    estimated = quality == DataQuality.ESTIMATED
    return AnalysisResult(
        market_data=market, news=news or [], chart_data=chart or [],
        technical_indicators=indicators or make_indicators(),
        recommendation=recommendation, confidence=confidence,
        risk_score=risk_tier(market), reasons=["a", "b", "c"],
        data_quality=AnalysisQuality.ESTIMATED if estimated else AnalysisQuality.COMPLETE,
        fallback_used=estimated,
    )


class TestIndicators:
    def test_ranges(self, rng):
        calc = TechnicalIndicatorCalculator(rng)
        for _ in range(50):
            ind = calc.calculate(200.0)
            assert 0 <= ind.rsi <= 100
            assert 190 <= ind.sma20 <= 210
            assert 180 <= ind.sma50 <= 220
            assert -5 <= ind.macd <= 5
            assert ind.bollinger.upper == pytest.approx(210)
            assert ind.bollinger.lower == pytest.approx(190)

    def test_estimated_note(self, rng):
        ind = TechnicalIndicatorCalculator(rng).calculate(10.0, True, "crypto")
        assert ind.is_estimated
        assert ind.estimation_note == "Indicators estimated from similar crypto assets"


class TestDecisionRule:
    def test_bullish_scenario_buys(self):
        market = make_market(change_pct=3.5, price=100)
        signals = count_signals(market, make_news(positive=3),
                                make_indicators(rsi=25, sma20=95, sma50=90))
        assert signals.bullish == 4
        assert decide(signals) == Recommendation.BUY

    def test_bearish_scenario_sells(self):
        market = make_market(change_pct=-3, price=100)
        signals = count_signals(market, make_news(negative=3),
                                make_indicators(rsi=80, sma20=105, sma50=110))
        assert signals.bearish == 4
        assert decide(signals) == Recommendation.SELL

    def test_two_by_two_holds(self):
        market = make_market(change_pct=3.5, price=100)
        signals = count_signals(market, make_news(positive=2, negative=1),
                                make_indicators(rsi=80, sma20=105, sma50=110))
        assert signals == SignalCounts(bullish=2, bearish=2)
        assert decide(signals) == Recommendation.HOLD

    def test_buy_checked_before_sell(self):
        assert decide(SignalCounts(3, 3)) == Recommendation.BUY

    def test_boundaries_not_signals(self):
        market = make_market(change_pct=2.0, price=100)
        signals = count_signals(market, make_news(positive=1, negative=1),
                                make_indicators(rsi=30, sma20=100, sma50=100))
        assert signals == SignalCounts(0, 0)


class TestRiskTier:
    @pytest.mark.parametrize("atype,change,expected", [
        (AssetType.CRYPTO, 0.1, RiskTier.HIGH),
        (AssetType.STOCK, 5.5, RiskTier.HIGH),
        (AssetType.STOCK, -6.0, RiskTier.HIGH),
        (AssetType.FOREX, 3.0, RiskTier.MEDIUM),
        (AssetType.STOCK, -2.5, RiskTier.MEDIUM),
        (AssetType.STOCK, 2.0, RiskTier.LOW),
    ])
    def test_tiers(self, atype, change, expected):
        assert risk_tier(make_market(change, asset_type=atype)) == expected


class TestEngine:
    @pytest.mark.parametrize("rec,estimated,lo,hi", [
        (Recommendation.BUY, False, 75, 95),
        (Recommendation.BUY, True, 55, 70),
        (Recommendation.SELL, False, 70, 95),
        (Recommendation.SELL, True, 50, 70),
        (Recommendation.HOLD, False, 60, 80),
        (Recommendation.HOLD, True, 50, 60),
    ])
    def test_confidence_bands(self, rec, estimated, lo, hi):
        engine = RecommendationEngine(make_rng(3))
        for _ in range(200):
            assert lo <= engine.confidence(rec, estimated) <= hi

    def test_similar_assets_lookup(self):
        assert similar_assets(AssetType.STOCK, "Healthcare") == ["JNJ", "PFE", "UNH", "ABBV"]
        assert similar_assets(AssetType.STOCK, "Retail") == ["AAPL", "MSFT", "GOOGL", "NVDA"]
        assert similar_assets(AssetType.CRYPTO, "Meme") == list(GENERIC_SIMILAR)
        assert similar_assets(AssetType.FOREX, "Minor") == list(GENERIC_SIMILAR)

    def test_live_result(self, rng):
        market = make_market(change_pct=3.5)
        result = RecommendationEngine(rng).evaluate(
            market, make_news(positive=3), [], make_indicators(rsi=25, sma20=95, sma50=90))
        assert result.recommendation == Recommendation.BUY
        assert result.reasons[0] == "Strong positive price momentum"
        assert result.data_quality == AnalysisQuality.COMPLETE
        assert result.similar_assets is None

    def test_fallback_result(self, rng):
        market = make_market(quality=DataQuality.ESTIMATED, sector="Defi",
                             asset_type=AssetType.CRYPTO)
        result = RecommendationEngine(rng).evaluate(market, make_news(), [], make_indicators())
        assert result.fallback_used
        assert result.data_quality == AnalysisQuality.ESTIMATED
        assert result.reasons[0] == "Mixed signals based on sector analysis"
        assert result.similar_assets == ["UNI", "AAVE", "COMP", "MKR"]
        assert result.risk_score == RiskTier.HIGH


@pytest.mark.asyncio
class TestAnalyze:
    SYMBOLS = ["AAPL", "BTC", "EURUSD", "ZZZQ123", "XyzNewToken", "", "💥", "q" * 120]

    async def test_invariants_hold_for_any_input(self):
        for seed in range(10):
            for sym in self.SYMBOLS:
                r = await analyze(sym, RiskTolerance.MODERATE, rng=make_rng(seed))
                md = r.market_data
                assert 0 <= r.confidence <= 100
                assert len(r.reasons) == 3
                if md.asset_type == AssetType.CRYPTO or abs(md.change_percent_24h) > 5:
                    assert r.risk_score == RiskTier.HIGH
                assert r.fallback_used == (r.data_quality == AnalysisQuality.ESTIMATED)
                assert r.fallback_used == (md.data_quality == DataQuality.ESTIMATED)

    async def test_registry_asset_is_live(self, rng):
        r = await analyze("aapl", rng=rng)
        assert r.market_data.sector == "Technology"
        assert r.market_data.asset_type == AssetType.STOCK
        assert r.market_data.data_quality == DataQuality.LIVE
        assert not r.fallback_used
        assert len(r.chart_data) == settings.CHART_PERIOD_DAYS + 1
        assert len(r.news) == 4

    async def test_unknown_asset_is_estimated(self, rng):
        r = await analyze("ZZZQ123", rng=rng)
        md = r.market_data
        assert md.data_quality == DataQuality.ESTIMATED
        assert md.estimation_note
        assert r.technical_indicators.is_estimated
        assert all(n.is_estimated for n in r.news)
        assert r.similar_assets == ["AAPL", "MSFT", "GOOGL", "NVDA"]
        assert r.confidence >= 50

    async def test_seeded_is_deterministic(self):
        a = await analyze("NVDA", rng=make_rng(99))
        b = await analyze("NVDA", rng=make_rng(99))
        assert a.market_data.price == b.market_data.price
        assert a.technical_indicators == b.technical_indicators
        assert a.recommendation == b.recommendation
        assert a.confidence == b.confidence

    async def test_risk_tolerance_does_not_change_decision(self):
        results = [await analyze("TSLA", tol, rng=make_rng(11)) for tol in RiskTolerance]
        assert len({(r.recommendation, r.confidence) for r in results}) == 1

    async def test_name_hint_drives_category(self, rng):
        r = await analyze("NEWCO", name="Northern Oil Co", rng=rng)
        assert r.market_data.sector == "Energy"

    async def test_timeout(self, monkeypatch):
        monkeypatch.setattr(settings, "SIMULATE_LATENCY", True)
        monkeypatch.setattr(settings, "LATENCY_WINDOWS", {
            "market": (0.5, 0.6), "news": (0.5, 0.6),
            "chart": (0.5, 0.6), "indicators": (0.5, 0.6)})
        with pytest.raises(asyncio.TimeoutError):
            await analyze("AAPL", rng=make_rng(1), timeout=0.05)


@pytest.mark.asyncio
class TestSearch:
    async def test_two_registry_matches(self, rng):
        registry = CanonicalRegistry.from_rows(
            [row for row in KNOWN_ASSETS if row[0] in ("AAPL", "MATIC", "BTC")])
        records = await search("a", registry=registry, rng=rng)
        assert sorted(r.symbol for r in records) == ["AAPL", "MATIC"]
        for r in records:
            assert r.price > 0
            assert r.volume_24h > 0
            assert r.data_quality == DataQuality.LIVE

    async def test_name_match(self, rng):
        records = await search("apple", rng=rng)
        assert [r.symbol for r in records] == ["AAPL"]

    async def test_capped_at_ten(self, rng):
        assert len(await search("", rng=rng)) == 10

    async def test_no_match_gives_one_fallback(self, rng):
        records = await search("qqqzz", rng=rng)
        assert len(records) == 1
        assert records[0].symbol == "QQQZZ"
        assert records[0].data_quality == DataQuality.ESTIMATED


@pytest.mark.asyncio
class TestCompare:
    async def test_live_beats_estimated(self, rng):
        c = await compare("AAPL", "ZZZQ123", rng=rng)
        assert c.first.market_data.symbol == "AAPL"
        assert c.second.market_data.symbol == "ZZZQ123"
        assert c.better_overall == "AAPL"

    async def test_forex_safer_than_crypto(self, rng):
        c = await compare("BTC", "EURUSD", rng=rng)
        assert c.safer == "EURUSD"


class TestComparisonSummary:
    def test_tiebreaks(self):
        a = make_result(symbol="A", change_pct=1.0, recommendation=Recommendation.BUY, confidence=60)
        b = make_result(symbol="B", change_pct=1.0, recommendation=Recommendation.HOLD, confidence=90)
        s = summarize_comparison(a, b)
        assert s.safer is None
        assert s.higher_growth == "B"
        assert s.better_overall == "A"


class TestPortfolioFit:
    def test_diversification(self):
        assert diversification_score(make_result(AssetType.CRYPTO, market_cap=2e12)) == 85
        assert diversification_score(make_result(AssetType.STOCK, market_cap=2e11)) == 70
        assert diversification_score(make_result(AssetType.FOREX)) == 70

    def test_weight_bounds_and_crypto_cap(self):
        crypto = make_result(AssetType.CRYPTO)
        assert portfolio_weight(crypto, RiskTolerance.AGGRESSIVE) == 15
        assert portfolio_weight(crypto, RiskTolerance.CONSERVATIVE) == 3
        low = make_result(AssetType.STOCK, change_pct=0.5)
        assert portfolio_weight(low, RiskTolerance.AGGRESSIVE) == 25

    def test_conservative_suitability(self):
        fit = assess_portfolio_fit(make_result(AssetType.STOCK, change_pct=0.5),
                                   RiskTolerance.CONSERVATIVE)
        assert fit.suitability == "Excellent Fit"
        assert fit.advice == "Consider as a core holding with 10% allocation"
        poor = assess_portfolio_fit(make_result(AssetType.CRYPTO), RiskTolerance.CONSERVATIVE)
        assert poor.suitability == "Poor Fit"

    def test_aggressive_likes_high_risk(self):
        fit = assess_portfolio_fit(make_result(AssetType.CRYPTO), RiskTolerance.AGGRESSIVE)
        assert fit.suitability == "Excellent Fit"
        assert fit.profile == "Aggressive Investor"


def make_chart(returns: list[float], start: float = 100.0) -> list[ChartPoint]:
    prices = [start]
    for r in returns:
        prices.append(prices[-1] * (1 + r))
    return [ChartPoint(timestamp=NOW + timedelta(days=i), price=p, volume=1e6)
            for i, p in enumerate(prices)]


class TestSentimentScorer:
    def test_no_news_is_neutral(self):
        s = SentimentScorer().score(make_result(change_pct=3.0))
        assert s.score == 50
        assert s.label == Sentiment.NEUTRAL

    def test_positive_news_with_momentum(self):
        s = SentimentScorer().summarize(make_news(positive=2), make_market(change_pct=1.0))
        assert s.score == 85
        assert s.label == Sentiment.POSITIVE
        assert (s.positive, s.neutral, s.negative) == (2, 0, 0)

    def test_flat_change_counts_as_negative_momentum(self):
        s = SentimentScorer().summarize(make_news(neutral=3), make_market(change_pct=0.0))
        assert s.score == 45
        assert s.label == Sentiment.NEUTRAL

    def test_negative_news(self):
        s = SentimentScorer().summarize(make_news(negative=2), make_market(change_pct=-1.0))
        assert s.score == 15
        assert s.label == Sentiment.NEGATIVE

    def test_half_points_round_up(self):
        # (80 + 80 + 50 + 20) / 4 = 57.5, +5 momentum
        s = SentimentScorer().summarize(make_news(positive=2, neutral=1, negative=1),
                                        make_market(change_pct=1.0))
        assert s.score == 63

    @pytest.mark.parametrize("score,label", [
        (40, Sentiment.NEGATIVE), (41, Sentiment.NEUTRAL),
        (60, Sentiment.NEUTRAL), (61, Sentiment.POSITIVE),
    ])
    def test_label_boundaries(self, score, label):
        assert sentiment_label(score) == label


class TestVolatilityTracker:
    def test_short_series_is_flat(self, rng):
        v = VolatilityTracker(rng).track(make_chart([0.01] * 5))
        assert (v.current, v.baseline) == (0.0, 0.0)
        assert v.trend == VolatilityTrend.STABLE
        assert v.level == RiskTier.LOW

    def test_constant_prices(self, rng):
        v = VolatilityTracker(rng).track(make_chart([0.0] * 30))
        assert v.current == pytest.approx(0.0)
        assert v.trend == VolatilityTrend.STABLE

    def test_recent_spike_is_increasing(self, rng):
        calm = [0.001, -0.001] * 12
        wild = [0.1, -0.1] * 3 + [0.1]
        v = VolatilityTracker(rng).track(make_chart(calm + wild))
        assert v.current == pytest.approx(10.0, rel=0.05)
        assert v.trend == VolatilityTrend.INCREASING
        assert v.level == RiskTier.HIGH

    def test_recent_calm_is_decreasing(self, rng):
        wild = [0.1, -0.1] * 12
        calm = [0.001, -0.001] * 3 + [0.001]
        v = VolatilityTracker(rng).track(make_chart(wild + calm))
        assert v.current < 0.2
        assert v.trend == VolatilityTrend.DECREASING
        assert v.level == RiskTier.LOW
        assert v.baseline_level == RiskTier.HIGH

    def test_baseline_within_jitter(self, rng):
        returns = [0.02, -0.01, 0.015, -0.02] * 7
        v = VolatilityTracker(rng).track(make_chart(returns))
        prices = pd.Series([p.price for p in make_chart(returns)])
        overall = prices.pct_change().dropna().std(ddof=0) * 100
        assert 0.8 * overall <= v.baseline <= 1.2 * overall

    @pytest.mark.parametrize("value,tier", [
        (1.99, RiskTier.LOW), (2.0, RiskTier.MEDIUM), (4.99, RiskTier.MEDIUM), (5.0, RiskTier.HIGH),
    ])
    def test_levels(self, value, tier):
        assert volatility_level(value) == tier


class TestPriceForecaster:
    def test_bullish_ranges(self):
        f = PriceForecaster().forecast(100.0, make_indicators(rsi=60, macd=0.0))
        week, month = f.horizons
        assert week.days == 7
        assert week.target == pytest.approx(101.4)
        assert (week.low, week.high) == (pytest.approx(100.7), pytest.approx(102.1))
        assert week.change_percent == pytest.approx(1.4)
        assert month.target == pytest.approx(106.0)
        assert (month.low, month.high) == (pytest.approx(103.0), pytest.approx(109.0))

    def test_rsi_at_fifty_points_down(self):
        f = PriceForecaster().forecast(100.0, make_indicators(rsi=50, macd=0.0))
        assert f.horizons[0].target == pytest.approx(98.6)

    def test_macd_widens_range(self):
        calm = PriceForecaster().forecast(100.0, make_indicators(rsi=60, macd=0.0))
        jumpy = PriceForecaster().forecast(100.0, make_indicators(rsi=60, macd=-4.0))
        assert jumpy.horizons[1].high - jumpy.horizons[1].low > calm.horizons[1].high - calm.horizons[1].low

    @pytest.mark.parametrize("rsi,macd,expected", [
        (50, 0.0, 85), (80, 0.0, 65), (50, 6.0, 70), (20, -6.0, 50),
    ])
    def test_confidence(self, rsi, macd, expected):
        assert PriceForecaster().confidence(make_indicators(rsi=rsi, macd=macd)) == expected

    def test_factors(self):
        f = PriceForecaster().forecast(90.0, make_indicators(rsi=75, macd=-1.0, sma20=100))
        assert f.factors == [
            "Overbought conditions may limit upside",
            "MACD indicates bearish momentum",
            "Price below 20-day moving average",
        ]

    def test_score_uses_market_price(self):
        result = make_result(indicators=make_indicators(rsi=60))
        assert PriceForecaster().score(result).horizons[0].target == pytest.approx(101.4)


class TestRiskAnalyzer:
    @pytest.mark.parametrize("tolerance,asset_type,change,match", [
        (RiskTolerance.CONSERVATIVE, AssetType.STOCK, 0.5, "Excellent Match"),
        (RiskTolerance.CONSERVATIVE, AssetType.STOCK, 3.0, "Moderate Match"),
        (RiskTolerance.CONSERVATIVE, AssetType.CRYPTO, 0.0, "Poor Match"),
        (RiskTolerance.MODERATE, AssetType.STOCK, 3.0, "Excellent Match"),
        (RiskTolerance.MODERATE, AssetType.CRYPTO, 0.0, "Good Match"),
        (RiskTolerance.AGGRESSIVE, AssetType.CRYPTO, 0.0, "Excellent Match"),
        (RiskTolerance.AGGRESSIVE, AssetType.STOCK, 3.0, "Good Match"),
        (RiskTolerance.AGGRESSIVE, AssetType.STOCK, 0.5, "Moderate Match"),
    ])
    def test_tolerance_match(self, tolerance, asset_type, change, match):
        r = RiskAnalyzer(tolerance).score(make_result(asset_type, change_pct=change))
        assert r.tolerance_match == match
        assert r.risk_tolerance == tolerance

    def test_normal_conditions(self):
        r = RiskAnalyzer().score(make_result(change_pct=0.5))
        assert r.risk_factors == ["Normal market conditions"]
        assert r.volatility_score == 50

    def test_stacked_factors(self):
        r = RiskAnalyzer().score(make_result(AssetType.CRYPTO,
                                             indicators=make_indicators(rsi=82.7, macd=6.0)))
        assert r.risk_factors == [
            "Overbought conditions detected",
            "High momentum divergence",
            "Elevated price volatility",
            "Market uncertainty factors",
        ]
        assert r.volatility_score == 82


@pytest.mark.asyncio
class TestBuildReport:
    async def test_report_sections(self):
        result = await analyze("AAPL", rng=make_rng(11))
        report = build_report(result, RiskTolerance.AGGRESSIVE, rng=make_rng(12))
        assert report.analysis is result
        assert report.risk_tolerance == RiskTolerance.AGGRESSIVE
        assert report.portfolio_fit.risk_tolerance == RiskTolerance.AGGRESSIVE
        assert report.risk.risk_tolerance == RiskTolerance.AGGRESSIVE
        assert report.risk.risk_score == result.risk_score
        assert report.sentiment.positive + report.sentiment.neutral + report.sentiment.negative == 4
        assert report.volatility.current > 0
        assert [h.days for h in report.forecast.horizons] == [7, 30]

    async def test_unknown_asset_report(self):
        result = await analyze("ZZZQ123", rng=make_rng(3))
        report = build_report(result)
        assert report.analysis.fallback_used
        assert 0 <= report.sentiment.score <= 100
        assert report.risk.risk_factors

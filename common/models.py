"""Core Pydantic models for ASSET PULSE."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AssetType(str, Enum):
    STOCK = "stock"
    CRYPTO = "crypto"
    FOREX = "forex"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Recommendation(str, Enum):
    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DataQuality(str, Enum):
    LIVE = "live"
    ESTIMATED = "estimated"
    HISTORICAL = "historical"


class AnalysisQuality(str, Enum):
    COMPLETE = "complete"
    ESTIMATED = "estimated"


class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class AssetDescriptor(FrozenModel):
    name: str
    asset_type: AssetType
    sector: Optional[str] = None
    market_cap: Optional[float] = Field(default=None, ge=0)


class ResolvedAsset(FrozenModel):
    """A symbol after Registry-or-Fallback resolution."""
    symbol: str
    descriptor: AssetDescriptor
    base_price: float = Field(gt=0)
    is_estimated: bool = False
    estimation_note: Optional[str] = None


class MarketRecord(FrozenModel):
    symbol: str
    name: str
    asset_type: AssetType
    price: float = Field(gt=0)
    change_24h: float
    change_percent_24h: float
    market_cap: Optional[float] = Field(default=None, ge=0)
    volume_24h: float = Field(ge=0)
    sector: Optional[str] = None
    last_updated: datetime
    data_quality: DataQuality
    estimation_note: Optional[str] = None


class NewsItem(FrozenModel):
    headline: str
    summary: str
    sentiment: Sentiment
    source: str
    published_at: datetime
    url: str
    is_estimated: bool = False


class ChartPoint(FrozenModel):
    timestamp: datetime
    price: float = Field(gt=0)
    volume: float = Field(ge=0)
    is_estimated: bool = False


class BollingerBands(FrozenModel):
    upper: float
    middle: float
    lower: float

    @model_validator(mode="after")
    def _ordered(self):
        if not (self.upper >= self.middle >= self.lower):
            raise ValueError("bollinger bands must satisfy upper >= middle >= lower")
        return self


class TechnicalIndicatorSet(FrozenModel):
    rsi: float = Field(ge=0, le=100)
    sma20: float = Field(gt=0)
    sma50: float = Field(gt=0)
    macd: float
    bollinger: BollingerBands
    is_estimated: bool = False
    estimation_note: Optional[str] = None


class AnalysisResult(FrozenModel):
    market_data: MarketRecord
    news: list[NewsItem]
    chart_data: list[ChartPoint]
    technical_indicators: TechnicalIndicatorSet
    recommendation: Recommendation
    confidence: int = Field(ge=0, le=100)
    risk_score: RiskTier
    reasons: list[str] = Field(min_length=3, max_length=3)
    data_quality: AnalysisQuality
    fallback_used: bool
    similar_assets: Optional[list[str]] = None

    @model_validator(mode="after")
    def _quality_matches_fallback(self):
        if self.fallback_used != (self.data_quality == AnalysisQuality.ESTIMATED):
            raise ValueError("fallback_used must agree with data_quality")
        return self


class PortfolioFit(FrozenModel):
    risk_tolerance: RiskTolerance
    diversification_score: int = Field(ge=0, le=100)
    portfolio_weight: int = Field(ge=0, le=100)
    profile: str
    suitability: str
    advice: str


class SentimentSummary(FrozenModel):
    score: int = Field(ge=0, le=100)
    label: Sentiment
    positive: int = Field(ge=0)
    neutral: int = Field(ge=0)
    negative: int = Field(ge=0)


class VolatilityTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class VolatilityReport(FrozenModel):
    """Realised volatility of daily returns, in percent."""
    current: float = Field(ge=0)
    baseline: float = Field(ge=0)
    trend: VolatilityTrend
    level: RiskTier
    baseline_level: RiskTier


class ForecastRange(FrozenModel):
    days: int = Field(gt=0)
    target: float = Field(gt=0)
    low: float = Field(ge=0)
    high: float = Field(gt=0)
    change_percent: float


class PriceForecast(FrozenModel):
    horizons: list[ForecastRange]
    confidence: int = Field(ge=0, le=100)
    factors: list[str]


class RiskAssessment(FrozenModel):
    risk_score: RiskTier
    risk_tolerance: RiskTolerance
    tolerance_match: str
    volatility_score: int = Field(ge=0, le=100)
    risk_factors: list[str] = Field(min_length=1)


class AnalysisReport(FrozenModel):
    analysis: AnalysisResult
    risk_tolerance: RiskTolerance
    portfolio_fit: PortfolioFit
    sentiment: SentimentSummary
    volatility: VolatilityReport
    forecast: PriceForecast
    risk: RiskAssessment


class ComparisonResult(FrozenModel):
    first: AnalysisResult
    second: AnalysisResult
    safer: Optional[str] = None          # symbol, None when risk tiers match
    higher_growth: str
    better_overall: str


class HistoryEntry(BaseModel):
    id: str = ""
    symbol: str
    name: str
    asset_type: AssetType
    recommendation: Recommendation
    risk_tolerance: RiskTolerance
    price: float
    timestamp: Optional[datetime] = None


class HistoryStats(BaseModel):
    total_analyses: int
    asset_type_breakdown: dict[str, int]
    risk_profile_breakdown: dict[str, int]
    recommendation_breakdown: dict[str, int]
    recent_analyses: list[HistoryEntry]

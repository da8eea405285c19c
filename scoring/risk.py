"""Risk analysis: how an asset's risk tier matches the investor's tolerance."""
from common.models import (
    AnalysisResult, RiskAssessment, RiskTier, RiskTolerance, TechnicalIndicatorSet,
)
from scoring.base import BaseScorer

TOLERANCE_MATCH = {
    RiskTolerance.CONSERVATIVE: {
        RiskTier.LOW: "Excellent Match",
        RiskTier.MEDIUM: "Moderate Match",
        RiskTier.HIGH: "Poor Match",
    },
    RiskTolerance.MODERATE: {
        RiskTier.LOW: "Good Match",
        RiskTier.MEDIUM: "Excellent Match",
        RiskTier.HIGH: "Good Match",
    },
    RiskTolerance.AGGRESSIVE: {
        RiskTier.LOW: "Moderate Match",
        RiskTier.MEDIUM: "Good Match",
        RiskTier.HIGH: "Excellent Match",
    },
}

MACD_DIVERGENCE = 5


def risk_factors(risk: RiskTier, ind: TechnicalIndicatorSet) -> list[str]:
    factors = []
    if ind.rsi > 70:
        factors.append("Overbought conditions detected")
    elif ind.rsi < 30:
        factors.append("Oversold conditions present")
    if abs(ind.macd) > MACD_DIVERGENCE:
        factors.append("High momentum divergence")
    if risk == RiskTier.HIGH:
        factors += ["Elevated price volatility", "Market uncertainty factors"]
    return factors or ["Normal market conditions"]


class RiskAnalyzer(BaseScorer):
    def __init__(self, tolerance: RiskTolerance = RiskTolerance.MODERATE):
        super().__init__()
        self.tolerance = RiskTolerance(tolerance)

    def score(self, result: AnalysisResult) -> RiskAssessment:
        ind = result.technical_indicators
        risk = result.risk_score
        return RiskAssessment(
            risk_score=risk,
            risk_tolerance=self.tolerance,
            tolerance_match=TOLERANCE_MATCH[self.tolerance][risk],
            volatility_score=int(self.clamp(ind.rsi)),
            risk_factors=risk_factors(risk, ind),
        )

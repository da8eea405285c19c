"""Portfolio-fit advisory: allocation and suitability for the user's risk tolerance."""
from common.models import AnalysisResult, AssetType, PortfolioFit, RiskTier, RiskTolerance

TYPE_DIVERSIFICATION = {
    AssetType.CRYPTO: 20,
    AssetType.FOREX: 15,
    AssetType.STOCK: 10,
}

TOLERANCE_WEIGHT_ADJ = {
    RiskTolerance.AGGRESSIVE: 10,
    RiskTolerance.MODERATE: 0,
    RiskTolerance.CONSERVATIVE: -5,
}

RISK_WEIGHT_ADJ = {RiskTier.LOW: 5, RiskTier.MEDIUM: 0, RiskTier.HIGH: -5}

CRYPTO_WEIGHT_CAP = 15
WEIGHT_BOUNDS = (3, 25)


def diversification_score(result: AnalysisResult) -> int:
    md = result.market_data
    score = 50 + TYPE_DIVERSIFICATION[md.asset_type]
    cap = md.market_cap or 0
    if cap > 1e12:   score += 15
    elif cap > 1e11: score += 10
    else:            score += 5
    return min(100, score)


def portfolio_weight(result: AnalysisResult, tolerance: RiskTolerance) -> int:
    weight = 10 + TOLERANCE_WEIGHT_ADJ[tolerance] + RISK_WEIGHT_ADJ[result.risk_score]
    if result.market_data.asset_type == AssetType.CRYPTO:
        weight = min(weight, CRYPTO_WEIGHT_CAP)
    lo, hi = WEIGHT_BOUNDS
    return max(lo, min(hi, weight))


def assess_portfolio_fit(result: AnalysisResult, tolerance: RiskTolerance) -> PortfolioFit:
    weight = portfolio_weight(result, tolerance)
    risk = result.risk_score

    if tolerance == RiskTolerance.CONSERVATIVE:
        profile = "Conservative Investor"
        suitability = {RiskTier.LOW: "Excellent Fit", RiskTier.MEDIUM: "Moderate Fit"}.get(risk, "Poor Fit")
        holding = "core" if risk == RiskTier.LOW else "small"
        advice = f"Consider as a {holding} holding with {weight}% allocation"
    elif tolerance == RiskTolerance.AGGRESSIVE:
        profile = "Aggressive Investor"
        suitability = "Excellent Fit" if risk == RiskTier.HIGH else "Good Fit"
        advice = f"Can be part of growth allocation with up to {weight}% maximum"
    else:
        profile = "Moderate Investor"
        suitability = "Good Fit"
        advice = f"Suitable for balanced portfolio with {weight}% allocation"

    return PortfolioFit(
        risk_tolerance=tolerance,
        diversification_score=diversification_score(result),
        portfolio_weight=weight,
        profile=profile,
        suitability=suitability,
        advice=advice,
    )

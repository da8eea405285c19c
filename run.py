"""
ASSET PULSE — Entry point
Prints a recommendation table for the given identifiers.
Run: python run.py [SYMBOL ...] [--risk conservative|moderate|aggressive]
"""
import asyncio
import sys

from common.logger import get_logger, new_request_id
from common.models import RiskTolerance
from scoring.aggregator import analyze, build_report, record_analysis

logger = get_logger("run")

DEFAULT_SYMBOLS = ["AAPL", "NVDA", "BTC", "ETH", "EURUSD", "ZZZQ123"]

REC_EMOJI = {"buy": "🟢", "hold": "🟡", "sell": "🔴"}


def parse_args(argv: list[str]) -> tuple[list[str], RiskTolerance]:
    symbols, tolerance = [], RiskTolerance.MODERATE
    it = iter(argv)
    for arg in it:
        if arg == "--risk":
            tolerance = RiskTolerance(next(it, "moderate").lower())
        elif arg.startswith("--risk="):
            tolerance = RiskTolerance(arg.split("=", 1)[1].lower())
        else:
            symbols.append(arg)
    return symbols or DEFAULT_SYMBOLS, tolerance


async def main(argv: list[str]) -> None:
    new_request_id()
    symbols, tolerance = parse_args(argv)

    print("\n" + "=" * 92)
    print(f"  🚀  ASSET PULSE  —  {tolerance.value} investor")
    print("=" * 92)
    print(f"{'Symbol':<10} {'Type':<7} {'Price':>12} {'24h %':>7} {'RSI':>6} "
          f"{'Risk':<7} {'Conf':>5}  {'Signal':<8} {'Weight':>6}  Data")
    print("-" * 92)

    for symbol in symbols:
        try:
            result = await analyze(symbol, tolerance)
            await record_analysis(result, tolerance)
            md = result.market_data
            report = build_report(result, tolerance)
            fit = report.portfolio_fit
            rec = result.recommendation.value
            print(
                f"{md.symbol:<10} {md.asset_type.value:<7} {md.price:>12.4f}"
                f" {md.change_percent_24h:>7.2f} {result.technical_indicators.rsi:>6.1f}"
                f" {result.risk_score.value:<7} {result.confidence:>5}"
                f"  {REC_EMOJI[rec]} {rec.upper():<5} {fit.portfolio_weight:>5}%"
                f"  {result.data_quality.value}"
            )
            month = report.forecast.horizons[-1]
            print(f"{'':<10} sentiment {report.sentiment.score}/100 ({report.sentiment.label.value}),"
                  f" volatility {report.volatility.current:.2f}% {report.volatility.trend.value},"
                  f" {month.days}d target {month.target:.4f} ({month.change_percent:+.1f}%),"
                  f" {report.risk.tolerance_match}")
            if result.similar_assets:
                print(f"{'':<10} similar: {', '.join(result.similar_assets)}")
        except Exception as e:
            print(f"{symbol:<10} {'ERROR':>70}  ❌ {e}")

    print("=" * 92 + "\n")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))

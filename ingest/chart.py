"""Daily price/volume series ending now."""
from typing import Optional

import numpy as np
import pandas as pd

from common.models import ChartPoint, ResolvedAsset
from config.settings import CHART_PERIOD_DAYS, SUPPORTED_CHART_PERIODS
from ingest.base import BaseSynthesizer


class ChartSeriesSynthesizer(BaseSynthesizer):
    def __init__(self, rng: Optional[np.random.Generator] = None,
                 days: int = CHART_PERIOD_DAYS):
        super().__init__(rng)
        if days not in SUPPORTED_CHART_PERIODS:
            raise ValueError(f"Unsupported chart period: {days}d (use 7 or 30)")
        self.days = days

    def frame(self, asset: ResolvedAsset) -> pd.DataFrame:
        """Random walk from the base price: days + 1 rows indexed by timestamp."""
        n = self.days + 1
        step = 0.05 if asset.is_estimated else 0.03
        dates = pd.date_range(end=pd.Timestamp.now(tz="UTC"), periods=n, freq="D")
        factors = 1 + self.rng.uniform(-step, step, size=n)
        price = np.maximum(asset.base_price * np.cumprod(factors), asset.base_price * 1e-3)
        return pd.DataFrame({
            "price": price,
            "volume": self.rng.uniform(500_000, 1_500_000, size=n),
        }, index=dates)

    def synthesize(self, asset: ResolvedAsset) -> list[ChartPoint]:
        df = self.frame(asset)
        return [
            ChartPoint(timestamp=ts.to_pydatetime(), price=float(row["price"]),
                       volume=float(row["volume"]), is_estimated=asset.is_estimated)
            for ts, row in df.iterrows()
        ]

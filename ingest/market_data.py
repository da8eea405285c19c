"""Synthetic spot quote for a resolved asset."""
from datetime import datetime, timezone
from typing import NamedTuple

from common.models import DataQuality, MarketRecord, ResolvedAsset
from ingest.base import BaseSynthesizer


class VolatilityProfile(NamedTuple):
    current: float
    previous: float


LIVE_PROFILE = VolatilityProfile(current=0.01, previous=0.02)
ESTIMATED_PROFILE = VolatilityProfile(current=0.05, previous=0.06)

VOLUME_BAND = (10_000_000, 110_000_000)


class MarketDataSynthesizer(BaseSynthesizer):
    def synthesize(self, asset: ResolvedAsset) -> MarketRecord:
        profile = ESTIMATED_PROFILE if asset.is_estimated else LIVE_PROFILE
        current = self.jitter(asset.base_price, profile.current)
        previous = self.jitter(asset.base_price, profile.previous)
        change = current - previous
        d = asset.descriptor
        return MarketRecord(
            symbol=asset.symbol,
            name=d.name,
            asset_type=d.asset_type,
            price=current,
            change_24h=change,
            change_percent_24h=change / previous * 100,
            market_cap=d.market_cap,
            volume_24h=float(self.rng.uniform(*VOLUME_BAND)),
            sector=d.sector,
            last_updated=datetime.now(timezone.utc),
            data_quality=DataQuality.ESTIMATED if asset.is_estimated else DataQuality.LIVE,
            estimation_note=asset.estimation_note,
        )

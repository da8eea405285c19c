"""Templated news headlines with pre-labelled sentiment."""
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Optional

import numpy as np

from common.models import AssetType, NewsItem, ResolvedAsset, Sentiment
from ingest.base import BaseSynthesizer

POS, NEG, NEU = Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL

# (headline, summary, sentiment, source); {symbol} is substituted
NEWS_TEMPLATES = MappingProxyType({
    AssetType.STOCK: (
        ("{symbol} Shows Strong Performance in Current Market Conditions",
         "Recent market analysis indicates positive momentum and investor confidence", POS, "MarketWatch"),
        ("Analysts Update {symbol} Price Targets Following Market Trends",
         "Market dynamics and sector performance drive updated analyst outlook", POS, "Reuters"),
        ("Market Volatility Affects {symbol} Trading Patterns",
         "Broader market conditions influence individual asset performance", NEU, "CNBC"),
        ("{symbol} Faces Market Headwinds Amid Economic Uncertainty",
         "Economic factors create challenges for asset performance", NEG, "Financial Times"),
    ),
    AssetType.CRYPTO: (
        ("{symbol} Gains Traction in Digital Asset Market",
         "Growing adoption and market interest drive positive sentiment", POS, "CoinDesk"),
        ("{symbol} Network Activity Shows Increased Usage",
         "On-chain metrics indicate growing user adoption and activity", POS, "CoinTelegraph"),
        ("Regulatory Developments Impact {symbol} Market Dynamics",
         "Policy discussions create market uncertainty and volatility", NEG, "CryptoNews"),
        ("{symbol} Trading Volume Reflects Market Interest",
         "Market activity signals continued investor engagement", NEU, "Decrypt"),
    ),
    AssetType.FOREX: (
        ("{symbol} Exchange Rate Influenced by Economic Data",
         "Economic indicators and policy decisions drive currency movement", NEU, "ForexFactory"),
        ("Central Bank Policies Affect {symbol} Outlook",
         "Monetary policy decisions impact currency pair dynamics", POS, "FXStreet"),
        ("Global Economic Trends Impact {symbol} Volatility",
         "International economic conditions influence currency flows", NEG, "DailyFX"),
    ),
})

MAX_ITEMS = 4
SPACING = timedelta(hours=2)


class NewsGenerator(BaseSynthesizer):
    def __init__(self, rng: Optional[np.random.Generator] = None, clock=None):
        super().__init__(rng)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def generate(self, symbol: str, asset_type: AssetType,
                 is_estimated: bool = False) -> list[NewsItem]:
        templates = NEWS_TEMPLATES.get(asset_type, NEWS_TEMPLATES[AssetType.STOCK])
        now = self.clock()
        slug = symbol.lower()
        return [
            NewsItem(
                headline=headline.format(symbol=symbol),
                summary=summary,
                sentiment=sentiment,
                source=source,
                published_at=now - (i + 1) * SPACING,
                url=f"https://example.com/news/{slug}-{i + 1}",
                is_estimated=is_estimated,
            )
            for i, (headline, summary, sentiment, source) in enumerate(templates[:MAX_ITEMS])
        ]

    def synthesize(self, asset: ResolvedAsset) -> list[NewsItem]:
        return self.generate(asset.symbol, asset.descriptor.asset_type, asset.is_estimated)

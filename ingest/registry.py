"""Canonical registry of known symbols with reference base prices."""
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from common.models import AssetDescriptor, AssetType

S, C, F = AssetType.STOCK, AssetType.CRYPTO, AssetType.FOREX

KNOWN_ASSETS = (
    # symbol,   name,                            type, sector,              market cap,        base price
    # Stocks
    ("AAPL",   "Apple Inc.",                     S, "Technology",           2_800_000_000_000, 175.84),
    ("TSLA",   "Tesla Inc.",                     S, "Electric Vehicles",      789_200_000_000, 248.50),
    ("MSFT",   "Microsoft Corporation",          S, "Technology",           2_900_000_000_000, 378.85),
    ("GOOGL",  "Alphabet Inc.",                  S, "Technology",           1_700_000_000_000, 142.56),
    ("AMZN",   "Amazon.com Inc.",                S, "E-commerce",           1_500_000_000_000, 155.89),
    ("META",   "Meta Platforms Inc.",            S, "Social Media",           800_000_000_000, 485.22),
    ("NVDA",   "NVIDIA Corporation",             S, "Semiconductors",       1_800_000_000_000, 875.28),
    ("NFLX",   "Netflix Inc.",                   S, "Streaming",              180_000_000_000, 425.67),
    ("AMD",    "Advanced Micro Devices",         S, "Semiconductors",         240_000_000_000, 145.23),
    ("INTC",   "Intel Corporation",              S, "Semiconductors",         200_000_000_000,  48.92),
    # Crypto
    ("BTC",    "Bitcoin",                        C, "Digital Currency",       847_200_000_000, 43250.00),
    ("ETH",    "Ethereum",                       C, "Smart Contracts",        318_500_000_000,  2650.00),
    ("BNB",    "Binance Coin",                   C, "Exchange Token",          85_000_000_000,   315.45),
    ("ADA",    "Cardano",                        C, "Smart Contracts",         45_000_000_000,     0.52),
    ("SOL",    "Solana",                         C, "Smart Contracts",         78_000_000_000,    98.75),
    ("XRP",    "Ripple",                         C, "Payment Protocol",        35_000_000_000,     0.63),
    ("DOT",    "Polkadot",                       C, "Interoperability",        12_000_000_000,     7.85),
    ("AVAX",   "Avalanche",                      C, "Smart Contracts",         15_000_000_000,    38.92),
    ("MATIC",  "Polygon",                        C, "Layer 2",                  8_000_000_000,     0.89),
    ("LINK",   "Chainlink",                      C, "Oracle Network",           9_000_000_000,    15.67),
    # Forex
    ("EURUSD", "Euro / US Dollar",               F, "Major Pairs",                       None, 1.0875),
    ("GBPUSD", "British Pound / US Dollar",      F, "Major Pairs",                       None, 1.2654),
    ("USDJPY", "US Dollar / Japanese Yen",       F, "Major Pairs",                       None, 149.85),
    ("USDCHF", "US Dollar / Swiss Franc",        F, "Major Pairs",                       None, 0.8756),
    ("AUDUSD", "Australian Dollar / US Dollar",  F, "Major Pairs",                       None, 0.6589),
    ("USDCAD", "US Dollar / Canadian Dollar",    F, "Major Pairs",                       None, 1.3456),
    ("NZDUSD", "New Zealand Dollar / US Dollar", F, "Major Pairs",                       None, 0.6123),
    ("EURGBP", "Euro / British Pound",           F, "Cross Pairs",                       None, 0.8598),
)


class CanonicalRegistry:
    """Read-only symbol -> (descriptor, base price) table."""

    def __init__(self, descriptors: Mapping[str, AssetDescriptor],
                 base_prices: Mapping[str, float]):
        self._descriptors = MappingProxyType({k.upper(): v for k, v in descriptors.items()})
        self._base_prices = MappingProxyType({k.upper(): float(v) for k, v in base_prices.items()})

    @classmethod
    def from_rows(cls, rows) -> "CanonicalRegistry":
        descriptors, prices = {}, {}
        for symbol, name, atype, sector, mcap, price in rows:
            descriptors[symbol] = AssetDescriptor(
                name=name, asset_type=atype, sector=sector,
                market_cap=float(mcap) if mcap is not None else None)
            prices[symbol] = price
        return cls(descriptors, prices)

    def lookup(self, symbol: str) -> Optional[AssetDescriptor]:
        """Descriptor for *symbol*, or None when it is not a curated asset."""
        key = (symbol or "").strip().upper()
        if key not in self._base_prices:
            return None
        return self._descriptors.get(key)

    def base_price(self, symbol: str) -> Optional[float]:
        return self._base_prices.get((symbol or "").strip().upper())

    def search(self, term: str) -> list[str]:
        """Symbols whose ticker or name contains *term* (case-insensitive)."""
        needle = (term or "").lower()
        return [sym for sym, d in self._descriptors.items()
                if needle in sym.lower() or needle in d.name.lower()]

    def symbols(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __contains__(self, symbol: str) -> bool:
        return self.lookup(symbol) is not None

    def __len__(self) -> int:
        return len(self._descriptors)


REGISTRY = CanonicalRegistry.from_rows(KNOWN_ASSETS)

"""
Fallback descriptor synthesizer.

Any identifier missing from the canonical registry still gets a usable
descriptor: the asset type comes from the classifier, the category from
keywords in the optional free-text name, and the price from the category's
reference level with ±20% jitter.
"""
from types import MappingProxyType
from typing import NamedTuple, Optional

import numpy as np

from common.models import AssetDescriptor, AssetType
from common.rng import uniform


class CategoryProfile(NamedTuple):
    base_price: float
    volatility: float
    market_cap: Optional[float]


FALLBACK_PROFILES = MappingProxyType({
    AssetType.STOCK: MappingProxyType({
        "technology": CategoryProfile(150.0, 0.030, 500_000_000_000),
        "healthcare": CategoryProfile(120.0, 0.025, 300_000_000_000),
        "finance":    CategoryProfile(80.0,  0.035, 200_000_000_000),
        "energy":     CategoryProfile(90.0,  0.040, 150_000_000_000),
        "retail":     CategoryProfile(60.0,  0.030, 100_000_000_000),
    }),
    AssetType.CRYPTO: MappingProxyType({
        "defi":   CategoryProfile(25.0, 0.08, 2_000_000_000),
        "layer1": CategoryProfile(45.0, 0.06, 5_000_000_000),
        "layer2": CategoryProfile(15.0, 0.07, 1_500_000_000),
        "meme":   CategoryProfile(0.05, 0.15,   500_000_000),
        "gaming": CategoryProfile(8.0,  0.09,   800_000_000),
    }),
    AssetType.FOREX: MappingProxyType({
        "major": CategoryProfile(1.10, 0.010, None),
        "minor": CategoryProfile(0.85, 0.015, None),
    }),
})

# Priority order: first category whose keyword appears in the name wins
CATEGORY_KEYWORDS = MappingProxyType({
    AssetType.STOCK: (
        ("energy",     ("energy", "oil")),
        ("finance",    ("bank", "finance")),
        ("healthcare", ("health", "pharma")),
        ("retail",     ("retail", "store", "shop")),
    ),
    AssetType.CRYPTO: (
        ("layer2", ("layer 2", "layer2", "rollup")),
        ("layer1", ("layer", "chain")),
        ("meme",   ("meme", "dog")),
        ("gaming", ("game", "nft")),
    ),
})

DEFAULT_CATEGORY = MappingProxyType({
    AssetType.STOCK: "technology",
    AssetType.CRYPTO: "defi",
    AssetType.FOREX: "major",
})

NAME_SUFFIX = MappingProxyType({
    AssetType.STOCK: "Corporation",
    AssetType.CRYPTO: "Token",
    AssetType.FOREX: "Currency Pair",
})


class FallbackDescriptor(NamedTuple):
    descriptor: AssetDescriptor
    category: str
    profile: CategoryProfile
    base_price: float


def select_category(symbol: str, name: Optional[str], asset_type: AssetType) -> str:
    if asset_type == AssetType.FOREX:
        return "major" if "USD" in (symbol or "").upper() else "minor"
    text = (name or "").lower()
    for category, keywords in CATEGORY_KEYWORDS.get(asset_type, ()):
        if any(k in text for k in keywords):
            return category
    return DEFAULT_CATEGORY[asset_type]


def synthesize_descriptor(symbol: str, name: Optional[str], asset_type: AssetType,
                          rng: np.random.Generator) -> FallbackDescriptor:
    """Plausible descriptor and base price for an unknown symbol."""
    upper = (symbol or "").strip().upper() or "UNKNOWN"
    category = select_category(upper, name, asset_type)
    profile = FALLBACK_PROFILES[asset_type][category]

    descriptor = AssetDescriptor(
        name=name.strip() if name and name.strip() else f"{upper} {NAME_SUFFIX[asset_type]}",
        asset_type=asset_type,
        sector=category.capitalize(),
        market_cap=profile.market_cap,
    )
    base_price = profile.base_price * uniform(rng, 0.8, 1.2)
    return FallbackDescriptor(descriptor, category, profile, base_price)

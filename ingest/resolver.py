"""Registry-or-fallback resolution of a free-form identifier."""
from typing import Optional

import numpy as np

from common.logger import get_logger
from common.models import AssetDescriptor, ResolvedAsset
from ingest.classifier import classify_asset
from ingest.fallback import synthesize_descriptor
from ingest.registry import REGISTRY, CanonicalRegistry

logger = get_logger("resolver")


def estimation_note(descriptor: AssetDescriptor) -> str:
    return (f"Live data limited - using {descriptor.sector} "
            f"{descriptor.asset_type.value} averages and AI estimation")


def resolve_asset(symbol: str, rng: np.random.Generator,
                  name: Optional[str] = None,
                  registry: CanonicalRegistry = REGISTRY) -> ResolvedAsset:
    upper = (symbol or "").strip().upper()
    descriptor = registry.lookup(upper)
    if descriptor is not None:
        return ResolvedAsset(symbol=upper, descriptor=descriptor,
                             base_price=registry.base_price(upper))

    asset_type = classify_asset(symbol)
    fb = synthesize_descriptor(upper, name, asset_type, rng)
    logger.info(f"{upper or '<empty>'} not in registry -> estimated "
                f"{asset_type.value}/{fb.category} @ {fb.base_price:.4f}")
    return ResolvedAsset(
        symbol=upper or "UNKNOWN",
        descriptor=fb.descriptor,
        base_price=fb.base_price,
        is_estimated=True,
        estimation_note=estimation_note(fb.descriptor),
    )

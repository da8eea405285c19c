"""Heuristic asset type classifier."""
import re

from common.models import AssetType

CRYPTO_SYMBOLS = frozenset({
    "BTC", "ETH", "BNB", "ADA", "SOL", "XRP", "DOT", "AVAX", "MATIC", "LINK",
})

CURRENCY_CODES = ("USD", "EUR", "GBP")
CRYPTO_MARKERS = ("COIN", "TOKEN")

_SIX_LETTERS = re.compile(r"^[A-Z]{6}$")


def classify_asset(identifier: str) -> AssetType:
    """
    Map any identifier to stock / crypto / forex. Never raises.

    Rules, first match wins:
      1. six alphabetic letters (EURUSD, usdjpy)      -> forex
      2. contains USD / EUR / GBP                     -> forex
      3. known crypto symbol, or contains COIN/TOKEN  -> crypto
      4. anything else                                -> stock

    Currency codes match in any case. COIN/TOKEN markers are matched as typed:
    tickers are written in upper case, so "XyzNewToken" reads as a company
    name, "XYZTOKEN" as a token.
    """
    raw = (identifier or "").strip()
    upper = raw.upper()

    if _SIX_LETTERS.match(upper):
        return AssetType.FOREX
    if any(code in upper for code in CURRENCY_CODES):
        return AssetType.FOREX

    if upper in CRYPTO_SYMBOLS or any(m in raw for m in CRYPTO_MARKERS):
        return AssetType.CRYPTO

    return AssetType.STOCK

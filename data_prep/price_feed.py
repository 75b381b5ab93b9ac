"""
Live spot-price lookup for the asset, with an explicit cache and fallback.

The engine never calls this; the surrounding layer resolves a price first
and passes it in as ``current_unit_price``. Failures never propagate: the
caller always gets a usable number back (FALLBACK_UNIT_PRICE at worst).
"""

from __future__ import annotations

import json
import logging
import time
import urllib.request
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

FALLBACK_UNIT_PRICE = 45000.0
DEFAULT_TTL_SECONDS = 60.0
PRICE_KEY = "spot_price_usd"

SPOT_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price?ids=bitcoin&vs_currencies=usd"


class PriceCache:
    """
    Key -> value store with per-entry expiry.

    Owned by the caller and passed into get_current_asset_price; the clock
    is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, float]] = {}  # key -> (value, stored_at)
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[float]:
        item = self._entries.get(key)
        if item is None:
            self.misses += 1
            return None
        value, stored_at = item
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return value

    def set(self, key: str, value: float) -> None:
        self._entries[key] = (float(value), self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, float]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses, "ttl_seconds": self.ttl_seconds}


@dataclass(frozen=True)
class PriceQuote:
    price: float
    source: str  # "live" | "cache" | "fallback"
    cached: bool = False
    error: Optional[str] = None


def fetch_spot_price(url: str = SPOT_PRICE_URL, timeout: float = 10.0) -> float:
    """Fetch the USD spot price from the public simple-price endpoint."""
    req = urllib.request.Request(url, headers={"Accept": "application/json"})
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        payload = json.loads(resp.read().decode("utf-8"))
    price = float(payload["bitcoin"]["usd"])
    if price <= 0:
        raise ValueError(f"Non-positive spot price returned: {price}")
    return price


def get_current_asset_price(
    fetch: Callable[[], float] = fetch_spot_price,
    cache: Optional[PriceCache] = None,
    *,
    fallback: float = FALLBACK_UNIT_PRICE,
    key: str = PRICE_KEY,
) -> PriceQuote:
    """
    Resolve the current spot price: cache first, then ``fetch``, then ``fallback``.

    Any exception from ``fetch`` (network, parse, bad value) is logged and
    answered with the fallback price. Fallback prices are not cached.
    """
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return PriceQuote(price=cached, source="cache", cached=True)

    try:
        price = float(fetch())
        if price <= 0:
            raise ValueError(f"Non-positive spot price: {price}")
    except Exception as exc:
        logger.warning("Spot price lookup failed (%s); using fallback %.2f", exc, fallback)
        return PriceQuote(price=float(fallback), source="fallback", error=str(exc))

    if cache is not None:
        cache.set(key, price)
    return PriceQuote(price=price, source="live")

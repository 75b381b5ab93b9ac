"""
Data preparation: input parsing and validation, live spot-price lookup.
"""

from .validators import FieldError, ValidationResult, parse_inputs, validate_inputs
from .price_feed import (
    FALLBACK_UNIT_PRICE,
    PriceCache,
    PriceQuote,
    fetch_spot_price,
    get_current_asset_price,
)

__all__ = [
    "FieldError",
    "ValidationResult",
    "parse_inputs",
    "validate_inputs",
    "FALLBACK_UNIT_PRICE",
    "PriceCache",
    "PriceQuote",
    "fetch_spot_price",
    "get_current_asset_price",
]

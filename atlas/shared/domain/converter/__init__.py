"""Currency converter domain service."""

from .service import (
    CurrencyConverter,
    RateConversion,
    format_rate,
    format_result,
)

__all__ = [
    "CurrencyConverter",
    "RateConversion",
    "format_rate",
    "format_result",
]

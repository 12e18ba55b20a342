"""
Shared Infrastructure Module
=============================

Technical adapters for external systems (country lookup, rate conversion).
"""

from atlas.shared.infrastructure.http import (
    ServiceError,
    LookupFailure,
    ConversionUnsupported,
    TransportFailure,
    CountryLookupClient,
    RateConversionClient,
)

__all__ = [
    "ServiceError",
    "LookupFailure",
    "ConversionUnsupported",
    "TransportFailure",
    "CountryLookupClient",
    "RateConversionClient",
]

"""HTTP adapters for the country lookup and rate conversion services."""

from atlas.shared.infrastructure.http.base import (
    ServiceError,
    LookupFailure,
    ConversionUnsupported,
    TransportFailure,
    JSONServiceClient,
)
from atlas.shared.infrastructure.http.countries import CountryLookupClient
from atlas.shared.infrastructure.http.rates import RateConversionClient

__all__ = [
    # Errors
    "ServiceError",
    "LookupFailure",
    "ConversionUnsupported",
    "TransportFailure",
    # Clients
    "JSONServiceClient",
    "CountryLookupClient",
    "RateConversionClient",
]

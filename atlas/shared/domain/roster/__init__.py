"""Country roster domain service."""

from .service import CountryLookup, CountryRoster

__all__ = ["CountryLookup", "CountryRoster"]

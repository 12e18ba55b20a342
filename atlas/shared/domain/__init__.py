"""
Shared Domain Module
====================

Country roster and currency converter state machines.
"""

# Models
from atlas.shared.domain.models import Country, ConverterState, ConverterStatus

# Roster
from atlas.shared.domain.roster.service import CountryRoster

# Converter
from atlas.shared.domain.converter.service import CurrencyConverter

__all__ = [
    # Models
    "Country",
    "ConverterState",
    "ConverterStatus",
    # Roster
    "CountryRoster",
    # Converter
    "CurrencyConverter",
]

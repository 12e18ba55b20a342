"""Domain models for the roster and the converter."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Country(BaseModel):
    """A country as returned by the lookup service. Read-only after fetch."""
    model_config = ConfigDict(frozen=True)

    cca3: str = Field(min_length=3, max_length=3)
    name: str
    capital: Optional[str] = None
    region: str = ""
    population: int = Field(default=0, ge=0)
    currencies: Tuple[str, ...] = ()
    flag_url: str = ""
    latlng: Optional[Tuple[float, float]] = None

    @property
    def primary_currency(self) -> Optional[str]:
        return self.currencies[0] if self.currencies else None

    @property
    def has_coordinates(self) -> bool:
        return self.latlng is not None

    @classmethod
    def from_api(cls, candidate: Dict[str, Any]) -> "Country":
        """Build a country from one lookup candidate.

        Absent optional fields (capital, currencies, coordinates, flag) are
        mapped to empty values rather than raising.

        Raises:
            ValueError: If the candidate lacks an identifier or a name
        """
        cca3 = candidate.get("cca3")
        name_block = candidate.get("name")
        name = name_block.get("common") if isinstance(name_block, dict) else name_block
        if not cca3 or not name:
            raise ValueError("Lookup candidate has no cca3/name")

        capitals = candidate.get("capital") or []
        if isinstance(capitals, str):
            capitals = [capitals]

        flags = candidate.get("flags")
        flag_url = ""
        if isinstance(flags, dict):
            flag_url = flags.get("svg") or flags.get("png") or ""

        currencies = candidate.get("currencies")
        codes = tuple(currencies.keys()) if isinstance(currencies, dict) else ()

        latlng = candidate.get("latlng") or []
        coords: Optional[Tuple[float, float]] = None
        if isinstance(latlng, (list, tuple)) and len(latlng) >= 2:
            coords = (float(latlng[0]), float(latlng[1]))

        return cls(
            cca3=str(cca3).upper(),
            name=str(name),
            capital=str(capitals[0]) if capitals else None,
            region=candidate.get("region") or "",
            population=int(candidate.get("population") or 0),
            currencies=codes,
            flag_url=flag_url,
            latlng=coords,
        )


class ConverterStatus(str, Enum):
    """Converter lifecycle states."""
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    SETTLED = "settled"


class ConverterState(BaseModel):
    """Mutable converter state.

    ``result`` and ``rate`` are derived and only trusted when the status is
    SETTLED. On ERROR they keep whatever they held before the failed request.
    """

    amount: float = 1.0
    source: str = "BRL"
    target: str = "USD"
    result: float = 0.0
    rate: float = 0.0
    status: ConverterStatus = ConverterStatus.IDLE
    error: Optional[str] = None

    @property
    def inputs(self) -> Tuple[float, str, str]:
        return (self.amount, self.source, self.target)

    @property
    def is_trusted(self) -> bool:
        return self.status == ConverterStatus.SETTLED and self.error is None

    def snapshot(self) -> "ConverterState":
        return self.model_copy()

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def roster_ids(countries: List[Country]) -> List[str]:
    return [country.cca3 for country in countries]

"""View models for the dashboard.

Pure functions from domain state to display-ready values. Optional data
(coordinates, currencies, capital) is checked here and mapped to absent UI
elements or empty fields.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel

from atlas.shared.domain.converter.service import format_rate, format_result
from atlas.shared.domain.models import ConverterState, ConverterStatus, Country

OSM_EMBED_URL = "https://www.openstreetmap.org/export/embed.html"
MAP_SPAN_DEGREES = 1.0
LOADING_TEXT = "Loading..."


class CountryCardView(BaseModel):
    cca3: str
    name: str
    flag_url: str
    expanded: bool
    capital: str
    region: str
    population: str
    currency: str
    map_url: Optional[str] = None


class TrashItemView(BaseModel):
    cca3: str
    name: str


class ConverterView(BaseModel):
    loading: bool
    error: Optional[str] = None
    result_line: Optional[str] = None
    rate_line: Optional[str] = None


def map_embed_url(latlng: Optional[Tuple[float, float]]) -> Optional[str]:
    """OpenStreetMap embed URL centred on the coordinates, or None without them."""
    if latlng is None:
        return None
    lat, lng = latlng
    bbox = "%2C".join(
        str(v) for v in (
            lng - MAP_SPAN_DEGREES,
            lat - MAP_SPAN_DEGREES,
            lng + MAP_SPAN_DEGREES,
            lat + MAP_SPAN_DEGREES,
        )
    )
    return f"{OSM_EMBED_URL}?bbox={bbox}&marker={lat}%2C{lng}"


def country_card(country: Country, expanded: bool = False) -> CountryCardView:
    return CountryCardView(
        cca3=country.cca3,
        name=country.name,
        flag_url=country.flag_url,
        expanded=expanded,
        capital=country.capital or "",
        region=country.region,
        population=f"{country.population:,}",
        currency=country.primary_currency or "",
        map_url=map_embed_url(country.latlng),
    )


def country_cards(countries: List[Country], expanded: Optional[str]) -> List[CountryCardView]:
    return [country_card(c, c.cca3 == expanded) for c in countries]


def trash_items(countries: List[Country]) -> List[TrashItemView]:
    return [TrashItemView(cca3=c.cca3, name=c.name) for c in countries]


def _amount_text(amount: float) -> str:
    return f"{amount:g}"


def converter_view(state: ConverterState) -> ConverterView:
    """Loading text, error text, or the formatted result and rate lines."""
    if state.status == ConverterStatus.LOADING:
        return ConverterView(loading=True)
    if state.status == ConverterStatus.ERROR:
        return ConverterView(loading=False, error=state.error)
    return ConverterView(
        loading=False,
        result_line=f"{_amount_text(state.amount)} {state.source} = {format_result(state.result)} {state.target}",
        rate_line=f"Rate: 1 {state.source} = {format_rate(state.rate)} {state.target}",
    )

"""Presentation helpers: theme palettes and view models."""

from .theme import palette_for, page_css, theme_toggle_label
from .views import (
    ConverterView,
    CountryCardView,
    TrashItemView,
    converter_view,
    country_card,
    country_cards,
    map_embed_url,
    trash_items,
)

__all__ = [
    "palette_for",
    "page_css",
    "theme_toggle_label",
    "ConverterView",
    "CountryCardView",
    "TrashItemView",
    "converter_view",
    "country_card",
    "country_cards",
    "map_embed_url",
    "trash_items",
]

import pytest

from atlas.dashboard.ui import theme
from atlas.dashboard.ui.views import (
    converter_view,
    country_card,
    country_cards,
    map_embed_url,
    trash_items,
)
from atlas.shared.domain.models import ConverterState, ConverterStatus, Country
from tests.conftest import candidate, make_country


def test_map_url_spans_one_degree_around_marker():
    url = map_embed_url((-10.0, -55.0))
    assert url == (
        "https://www.openstreetmap.org/export/embed.html"
        "?bbox=-56.0%2C-11.0%2C-54.0%2C-9.0&marker=-10.0%2C-55.0"
    )


def test_map_url_absent_without_coordinates():
    assert map_embed_url(None) is None


def test_country_card_fields():
    card = country_card(make_country("Brazil"), expanded=True)

    assert card.expanded
    assert card.capital == "Brasília"
    assert card.population == "212,559,409"
    assert card.currency == "BRL"
    assert card.map_url is not None


def test_country_card_without_optional_data():
    country = Country.from_api(candidate("ATA", "Antarctica", region="Antarctic", population=0))
    card = country_card(country)

    assert card.capital == ""
    assert card.currency == ""
    assert card.map_url is None
    assert card.population == "0"


def test_only_expanded_card_is_flagged():
    countries = [make_country("Brazil"), make_country("Canada")]
    cards = country_cards(countries, expanded="CAN")
    assert [c.expanded for c in cards] == [False, True]


def test_trash_items():
    items = trash_items([make_country("Portugal")])
    assert [(i.cca3, i.name) for i in items] == [("PRT", "Portugal")]


class TestConverterView:
    def test_loading(self):
        view = converter_view(ConverterState(status=ConverterStatus.LOADING, result=5))
        assert view.loading
        assert view.result_line is None

    def test_error_hides_stale_numbers(self):
        view = converter_view(ConverterState(status=ConverterStatus.ERROR, error="nope", result=5, rate=1))
        assert view.error == "nope"
        assert view.result_line is None
        assert view.rate_line is None

    def test_settled_lines(self):
        state = ConverterState(amount=10, status=ConverterStatus.SETTLED, result=1.85, rate=0.185)
        view = converter_view(state)
        assert view.result_line == "10 BRL = 1.85 USD"
        assert view.rate_line == "Rate: 1 BRL = 0.1850 USD"

    def test_idle_shows_zero(self):
        view = converter_view(ConverterState(amount=0, status=ConverterStatus.IDLE))
        assert view.result_line == "0 BRL = 0.00 USD"


class TestTheme:
    def test_palette_follows_flag(self):
        assert theme.palette_for(True) == theme.DARK_PALETTE
        assert theme.palette_for(False) == theme.LIGHT_PALETTE

    def test_palette_is_a_copy(self):
        palette = theme.palette_for(False)
        palette["background"] = "#000"
        assert theme.LIGHT_PALETTE["background"] != "#000"

    def test_toggle_label_names_the_other_theme(self):
        assert "Dark" in theme.theme_toggle_label(False)
        assert "Light" in theme.theme_toggle_label(True)

    @pytest.mark.parametrize("level", ["info", "success", "warning", "error", "unknown"])
    def test_log_colors_come_from_palette(self, level):
        assert theme.get_log_color(level, True) in theme.DARK_PALETTE.values()

    def test_page_css_uses_palette(self):
        assert theme.DARK_PALETTE["background"] in theme.page_css(True)

"""Main Streamlit application entry point for the Atlas dashboard.

Run with: streamlit run atlas/dashboard/app.py

The page shows:
- Country cards with expandable details and a remove action
- A trash section to restore removed countries
- A currency converter
- A light/dark theme toggle
"""

from __future__ import annotations

import concurrent.futures
import logging

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from atlas.dashboard.runtime import ServiceRuntime
from atlas.dashboard.state import Store
from atlas.dashboard.ui.theme import page_css, theme_toggle_label
from atlas.dashboard.ui.views import converter_view, country_cards, trash_items
from atlas.shared.core.configuration import ValidationLevel, get_config
from atlas.shared.core.logging_setup import configure_logging

logger = logging.getLogger(__name__)


@st.cache_resource
def get_runtime() -> ServiceRuntime:
    """Start the service loop once per Streamlit server process."""
    load_dotenv()
    config = get_config(ValidationLevel.LENIENT)
    configure_logging(config.logging)
    runtime = ServiceRuntime(config)
    runtime.start()
    return runtime


def render_header(runtime: ServiceRuntime, store: Store) -> None:
    col1, col2 = st.columns([5, 1])
    with col1:
        st.title(store.config.ui.page_title)
        st.caption(store.app.status_text)
    with col2:
        if st.button(theme_toggle_label(store.app.dark_mode), key="theme_toggle"):
            runtime.submit(store.app.toggle_theme())
            st.rerun()


def render_countries(runtime: ServiceRuntime, store: Store) -> None:
    roster = store.roster
    cards = country_cards(list(roster.active), roster.expanded)
    if not cards:
        st.info("No countries to show.")
        return

    columns = st.columns(min(len(cards), 4))
    for index, card in enumerate(cards):
        with columns[index % len(columns)]:
            with st.container(border=True):
                if card.flag_url:
                    st.image(card.flag_url, width=120)
                if st.button(card.name, key=f"toggle_{card.cca3}"):
                    runtime.submit(roster.toggle_details(card.cca3))
                    st.rerun()

                if card.expanded:
                    st.markdown(f"**Capital:** {card.capital}")
                    st.markdown(f"**Region:** {card.region}")
                    st.markdown(f"**Population:** {card.population}")
                    st.markdown(f"**Currency:** {card.currency}")
                    if card.map_url:
                        components.iframe(card.map_url, height=150)
                    if st.button("Remove country", key=f"remove_{card.cca3}"):
                        runtime.submit(roster.remove(card.cca3))
                        st.rerun()


def render_trash(runtime: ServiceRuntime, store: Store) -> None:
    items = trash_items(list(store.roster.removed))
    if not items:
        return

    st.subheader("🗑️ Trash")
    for item in items:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.write(item.name)
        with col2:
            if st.button("Restore", key=f"restore_{item.cca3}"):
                runtime.submit(store.roster.restore(item.cca3))
                st.rerun()


def render_converter(runtime: ServiceRuntime, store: Store) -> None:
    converter = store.converter
    state = converter.state
    currencies = list(converter.currencies)

    st.subheader("💱 Currency Converter")
    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        amount = st.number_input("Amount", min_value=0.0, value=float(state.amount), key="amount")
    with col2:
        source = st.selectbox("From", currencies, index=currencies.index(state.source), key="source")
    with col3:
        target = st.selectbox("To", currencies, index=currencies.index(state.target), key="target")

    if (amount, source, target) != state.inputs:
        runtime.submit(converter.update(amount=amount, source=source, target=target))

    try:
        runtime.submit(converter.wait_until_settled(), timeout=store.config.services.timeout + 1)
    except concurrent.futures.TimeoutError:
        logger.warning("Conversion still pending at render time")

    view = converter_view(converter.state)
    if view.loading:
        st.write("Loading...")
    elif view.error:
        st.markdown(f"<p class='atlas-error'>{view.error}</p>", unsafe_allow_html=True)
    else:
        st.markdown(f"<p class='atlas-result'>{view.result_line}</p>", unsafe_allow_html=True)
        st.markdown(f"<p class='atlas-muted'>{view.rate_line}</p>", unsafe_allow_html=True)


def render_log_feed(store: Store) -> None:
    with st.sidebar:
        st.markdown("### Log")
        for entry in store.app.recent_logs():
            st.caption(f"[{entry.get('level', 'info')}] {entry.get('message', '')}")


def main():
    """Main Streamlit application entry point."""
    st.set_page_config(
        page_title="Atlas",
        page_icon="🌍",
        layout="wide",
    )

    runtime = get_runtime()
    store = runtime.store
    if store is None:
        st.error("Services failed to start. Check logs/atlas.log.")
        return

    st.markdown(page_css(store.app.dark_mode), unsafe_allow_html=True)

    render_header(runtime, store)
    render_countries(runtime, store)
    render_trash(runtime, store)
    st.markdown("---")
    render_converter(runtime, store)
    render_log_feed(store)


if __name__ == "__main__":
    main()

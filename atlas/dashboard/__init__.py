"""Atlas dashboard: shell state, presentation helpers and the Streamlit page."""

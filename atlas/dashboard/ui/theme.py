"""
Atlas Theme - light and dark palettes.

The theme is a pure function of the ``dark_mode`` flag held in AppState;
nothing here mutates global page state.
"""

from __future__ import annotations

from typing import Dict

# =============================================================================
# PRIMARY ACCENT COLORS
# =============================================================================
BLUE_PRIMARY = "#2b6cb0"       # Links, selected card border
TEAL_PRIMARY = "#4ECDC4"       # Converter result
RED_PRIMARY = "#FF6B6B"        # Errors, remove button
GREEN_PRIMARY = "#38a169"      # Restore button

# =============================================================================
# PALETTES
# =============================================================================
LIGHT_PALETTE: Dict[str, str] = {
    "background": "#f5f7fa",
    "card": "#ffffff",
    "text": "#1a202c",
    "muted": "#6E879B",
    "border": "rgba(0,0,0,0.08)",
    "accent": BLUE_PRIMARY,
    "result": "#2c7a7b",
    "error": "#c53030",
    "remove": RED_PRIMARY,
    "restore": GREEN_PRIMARY,
}

DARK_PALETTE: Dict[str, str] = {
    "background": "#0a0f1c",
    "card": "rgba(255,255,255,0.04)",
    "text": "#AFC5D6",
    "muted": "#8A9BA8",
    "border": "rgba(255,255,255,0.1)",
    "accent": "#48b0f7",
    "result": TEAL_PRIMARY,
    "error": RED_PRIMARY,
    "remove": RED_PRIMARY,
    "restore": TEAL_PRIMARY,
}

LOG_COLORS = {
    "info": "accent",
    "success": "result",
    "warning": "muted",
    "error": "error",
}


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================
def palette_for(dark_mode: bool) -> Dict[str, str]:
    """Return a copy of the palette for the given theme flag."""
    return dict(DARK_PALETTE if dark_mode else LIGHT_PALETTE)


def theme_toggle_label(dark_mode: bool) -> str:
    """Label of the button that switches to the other theme."""
    return "☀️ Light" if dark_mode else "🌙 Dark"


def get_log_color(level: str, dark_mode: bool) -> str:
    """Get the color for a log level."""
    palette = palette_for(dark_mode)
    return palette[LOG_COLORS.get(level.lower(), "muted")]


def page_css(dark_mode: bool) -> str:
    """CSS injected by the Streamlit page for the current theme."""
    p = palette_for(dark_mode)
    return f"""
<style>
.stApp {{ background: {p['background']}; color: {p['text']}; }}
.atlas-card {{ background: {p['card']}; border: 1px solid {p['border']}; border-radius: 8px; padding: 12px; }}
.atlas-muted {{ color: {p['muted']}; }}
.atlas-result {{ color: {p['result']}; font-weight: 600; }}
.atlas-error {{ color: {p['error']}; }}
</style>
"""

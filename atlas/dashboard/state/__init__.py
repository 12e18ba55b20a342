"""State management for the dashboard.

Architecture:
- AppState: shell state (theme flag, status line, log feed)
- Store: Service locator for accessing state and domain services
"""

from .app_state import AppState
from .store import Store

__all__ = ["AppState", "Store"]

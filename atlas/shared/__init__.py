"""
Atlas Shared Kernel
===================

Business logic and infrastructure used by the Atlas front ends.

Architecture:
- core: EventBus, configuration, logging setup
- infrastructure: HTTP adapters (country lookup, rate conversion)
- domain: Country roster and currency converter
"""

__version__ = "1.0.0"

__all__ = []

"""
Shared Core Module
==================

Event system, configuration and logging setup.
"""

# Event System
from .event_bus import EventBus, EventPayload
from . import events

# Configuration
from .configuration import (
    ConfigManager,
    SystemConfig,
    ValidationLevel,
    get_config_manager,
    get_config,
)

# Logging
from .logging_setup import configure_logging

__all__ = [
    # Event System
    "EventBus",
    "EventPayload",
    "events",
    # Configuration
    "ConfigManager",
    "SystemConfig",
    "ValidationLevel",
    "get_config_manager",
    "get_config",
    # Logging
    "configure_logging",
]

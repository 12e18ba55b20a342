"""
Shared Config Module
====================

YAML settings files (defaults, user, project) read by ConfigManager.
"""

"""Configuration management for folioshell.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for sensitive values like
the escalation secret and database credentials.
"""

from folioshell.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]

"""
Configuration handler for attachkit.module.
Loads .env and config.toml with ${env:VAR|default} expansion and exposes typed settings.
"""

from attachkit.module.config_handler.config import ConfigError, Settings, load_settings, parse_mode, settings  # noqa: F401

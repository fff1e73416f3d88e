"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from schema_db.config import load_db_config, DatabaseProfile, DatabaseConfig
"""

from schema_db.config.loader import load_db_config
from schema_db.config.models import DatabaseConfig, DatabaseProfile

__all__ = ["load_db_config", "DatabaseConfig", "DatabaseProfile"]

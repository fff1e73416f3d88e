"""Load ``db.toml`` into ``DatabaseConfig``."""

import tomllib
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from schema_db.adapters.types import AdapterOptions
from schema_db.config.models import DatabaseConfig, DatabaseProfile


def load_db_config(config_path: Path | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Args:
        config_path: Path to db.toml (default: ``db.toml`` in the current
            working directory)

    Returns:
        DatabaseConfig with all profiles

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / "db.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create db.toml with at least one [profiles.<name>] section."
        )

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    schema_settings = data.get("schema", {})

    try:
        profiles = {
            name: DatabaseProfile(**profile_data)
            for name, profile_data in data.get("profiles", {}).items()
        }
        return DatabaseConfig(
            profiles=profiles,
            adapter=AdapterOptions.model_validate(data.get("adapter", {})),
            schema_target=schema_settings.get("target"),
            validate_on_connect=schema_settings.get("validate_on_connect", True),
        )
    except PydanticValidationError as e:
        raise ValueError(f"Invalid database config in {config_path}: {e}") from e

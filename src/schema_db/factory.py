"""Adapter factory.

Creates adapters for a schema, either directly (``create_adapter``,
``memory_adapter``) or from a ``db.toml`` profile (``get_adapter``).

Profile selection:
1. Explicit ``profile_name`` argument
2. ``{env_prefix}DB_PROFILE`` env var (for initial connect or CI/CD)
3. ``.db-profile`` lock file in the current directory, written by a
   successful ``connect_and_validate``

Usage:
    from schema_db.factory import create_adapter, get_adapter

    adapter = create_adapter(db, {"experimental": {"joins": True}})
    adapter = await get_adapter(db, profile_name="dev")
"""

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import quote

from schema_db.adapters.base import Adapter
from schema_db.adapters.memory import MemoryAdapter
from schema_db.adapters.sql import AsyncSqlAdapter
from schema_db.adapters.types import AdapterOptions, parse_options
from schema_db.config.loader import load_db_config
from schema_db.config.models import DatabaseProfile
from schema_db.memory.store import MemoryStore
from schema_db.schema.builder import DatabaseDefinition, as_schema
from schema_db.schema.comparator import expected_columns, validate_schema
from schema_db.schema.models import (
    ConnectionResult,
    SchemaDefinition,
    SchemaValidationResult,
)

logger = logging.getLogger(__name__)

# Profile lock file name, resolved against the working directory on use
_PROFILE_LOCK_NAME = ".db-profile"


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


# ============================================================================
# Direct Construction
# ============================================================================


def create_adapter(
    db: DatabaseDefinition | SchemaDefinition,
    options: AdapterOptions | Mapping[str, Any] | None = None,
    *,
    store: MemoryStore | None = None,
) -> MemoryAdapter:
    """Create an in-memory adapter for *db*.

    The schema is finalized here when ``db`` is a ``DatabaseDefinition``.

    Example:
        >>> adapter = create_adapter(db, {"use_number_id": True})
        >>> author = await adapter.create("author", {"name": "Jane"})
    """
    return MemoryAdapter(db, options, store=store)


def _merge_options(
    base: AdapterOptions, override: AdapterOptions | Mapping[str, Any] | None
) -> AdapterOptions:
    """Overlay *override* on *base*; only fields the caller set take effect."""
    if override is None:
        return base
    if isinstance(override, AdapterOptions):
        changes = override.model_dump(exclude_unset=True)
    else:
        changes = parse_options(override).model_dump(exclude_unset=True)
    merged = base.model_dump()
    for name, value in changes.items():
        if isinstance(value, dict):
            merged[name] = {**merged[name], **value}
        else:
            merged[name] = value
    return AdapterOptions.model_validate(merged)


def memory_adapter(
    db: DatabaseDefinition | SchemaDefinition,
    options: AdapterOptions | Mapping[str, Any] | None = None,
) -> Callable[..., MemoryAdapter]:
    """Return a factory producing memory adapters over one shared store.

    Every adapter from the factory sees the same records.  Options passed
    to the factory call are merged over *options*.

    Example:
        >>> make = memory_adapter(db)
        >>> writer = make()
        >>> reader = make({"experimental": {"joins": True}})
    """
    schema = as_schema(db)
    base = parse_options(options)
    store = MemoryStore()

    def factory(
        call_options: AdapterOptions | Mapping[str, Any] | None = None,
    ) -> MemoryAdapter:
        return MemoryAdapter(schema, _merge_options(base, call_options), store=store)

    return factory


# ============================================================================
# Profile Lock File Operations
# ============================================================================


def _lock_file() -> Path:
    return Path.cwd() / _PROFILE_LOCK_NAME


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise
    """
    lock_file = _lock_file()
    if lock_file.exists():
        return lock_file.read_text().strip() or None
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after a successful connection.
    """
    _lock_file().write_text(profile_name)


def clear_profile_lock() -> None:
    """Remove profile lock file."""
    _lock_file().unlink(missing_ok=True)


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from env var or lock file.

    Priority:
    1. ``{env_prefix}DB_PROFILE`` env var
    2. .db-profile file (profile from a previous successful connect)
    3. Raise ProfileNotFoundError

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_profile = os.environ.get(f"{env_prefix}DB_PROFILE")
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {env_prefix}DB_PROFILE=<name> schema-db connect\n"
        "Available profiles are listed by: schema-db profiles"
    )


def get_active_profile(
    env_prefix: str = "", config_path: Path | None = None
) -> tuple[str, DatabaseProfile]:
    """Get active profile name and configuration.

    Raises:
        ProfileNotFoundError: If no profile is configured or it is not in
            db.toml
        FileNotFoundError: If db.toml does not exist
    """
    profile_name = get_active_profile_name(env_prefix=env_prefix)
    config = load_db_config(config_path)

    if profile_name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    return profile_name, config.profiles[profile_name]


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    ``[YOUR-PASSWORD]`` is replaced with the URL-encoded ``db_password``.
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Profile-based Construction
# ============================================================================


def _build_adapter(
    db: DatabaseDefinition | SchemaDefinition,
    profile: DatabaseProfile,
    options: AdapterOptions,
) -> Adapter:
    if profile.provider == "memory":
        return create_adapter(db, options)
    if not profile.url:
        raise ProfileNotFoundError(
            f"Profile with provider '{profile.provider}' has no url"
        )
    return AsyncSqlAdapter(db, resolve_url(profile), options)


async def get_adapter(
    db: DatabaseDefinition | SchemaDefinition,
    profile_name: str | None = None,
    database_url: str | None = None,
    env_prefix: str = "",
    options: AdapterOptions | Mapping[str, Any] | None = None,
    config_path: Path | None = None,
) -> Adapter:
    """Create an adapter from a profile or an explicit URL.

    Each call creates a new adapter; callers own its lifecycle.

    Args:
        db: Schema the adapter serves.
        profile_name: Profile from db.toml.  Defaults to the active profile.
        database_url: Connect directly to this URL, ignoring profiles.
        env_prefix: Prefix for the ``DB_PROFILE`` env var lookup.
        options: Adapter options, merged over the ``[adapter]`` table of
            db.toml when a profile is used.
        config_path: Path to db.toml (default: ``./db.toml``).

    Raises:
        ProfileNotFoundError: If no profile is configured or it is unknown
        FileNotFoundError: If db.toml is needed but missing

    Example:
        >>> adapter = await get_adapter(db, database_url="sqlite:///app.db")
        >>> await adapter.create_tables()
    """
    if database_url:
        return AsyncSqlAdapter(db, database_url, parse_options(options))

    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix=env_prefix)

    config = load_db_config(config_path)
    if profile_name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    profile = config.profiles[profile_name]
    logger.debug(f"Creating {profile.provider} adapter for profile '{profile_name}'")
    return _build_adapter(db, profile, _merge_options(config.adapter, options))


# ============================================================================
# Connection and Validation
# ============================================================================


async def connect_and_validate(
    db: DatabaseDefinition | SchemaDefinition | None = None,
    profile_name: str | None = None,
    env_prefix: str = "",
    validate_only: bool = False,
    config_path: Path | None = None,
) -> ConnectionResult:
    """Connect to a profile's database and validate it against *db*.

    This is the primary setup API.  On success the profile is persisted in
    the lock file so later ``get_adapter`` calls pick it up.

    Without *db* (or with ``validate_on_connect = false`` in db.toml) only
    the connection is checked and ``schema_valid`` is ``None``.  Memory
    profiles always connect; their tables are created from the schema.

    Args:
        db: Schema to validate the database against.
        profile_name: Profile name from db.toml.  Defaults to the active
            profile.
        env_prefix: Prefix for the ``DB_PROFILE`` env var lookup.
        validate_only: Validate without writing the lock file.
        config_path: Path to db.toml (default: ``./db.toml``).

    Example:
        >>> result = await connect_and_validate(db, "dev")
        >>> if not result.success:
        ...     print(result.error)
    """
    if profile_name is None:
        try:
            profile_name = get_active_profile_name(env_prefix=env_prefix)
        except ProfileNotFoundError as e:
            return ConnectionResult(success=False, error=str(e))

    try:
        config = load_db_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        return ConnectionResult(success=False, profile_name=profile_name, error=str(e))

    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys())
        return ConnectionResult(
            success=False,
            profile_name=profile_name,
            error=f"Profile '{profile_name}' not found. Available: {available}",
        )
    profile = config.profiles[profile_name]
    schema = as_schema(db) if db is not None else None
    validate = schema is not None and config.validate_on_connect

    validation = None
    if profile.provider != "memory":
        if not profile.url:
            return ConnectionResult(
                success=False,
                profile_name=profile_name,
                provider=profile.provider,
                error=f"Profile '{profile_name}' has no url",
            )
        adapter = AsyncSqlAdapter(
            schema if schema is not None else SchemaDefinition({}),
            resolve_url(profile),
            config.adapter,
        )
        try:
            if validate:
                actual_columns = await adapter.get_column_names()
                validation = validate_schema(actual_columns, expected_columns(schema))
            else:
                await adapter.test_connection()
        except Exception as e:
            return ConnectionResult(
                success=False,
                profile_name=profile_name,
                provider=profile.provider,
                error=f"Failed to connect to database: {e}",
            )
        finally:
            await adapter.close()
    elif validate:
        # memory tables are created from the schema itself
        validation = SchemaValidationResult(valid=True)

    if validation is not None and not validation.valid:
        return ConnectionResult(
            success=False,
            profile_name=profile_name,
            provider=profile.provider,
            schema_valid=False,
            schema_report=validation,
            error=f"Schema validation failed: {validation.error_count} errors",
        )

    if not validate_only:
        write_profile_lock(profile_name)
        logger.info(f"Profile '{profile_name}' locked in {_lock_file()}")

    return ConnectionResult(
        success=True,
        profile_name=profile_name,
        provider=profile.provider,
        schema_valid=True if validation is not None else None,
        schema_report=validation,
    )

"""Pydantic models for database configuration."""

from typing import Literal

from pydantic import BaseModel, Field

from schema_db.adapters.types import AdapterOptions


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str = ""  # Unused by the memory provider
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: Literal["memory", "postgres", "sqlite"] = "memory"


class DatabaseConfig(BaseModel):
    """Complete database configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    adapter: AdapterOptions = Field(default_factory=AdapterOptions)
    schema_target: str | None = None  # module:attribute for the CLI
    validate_on_connect: bool = True

"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Nothing in this module reads the environment at import time. Settings are
built on first call to ``get_settings()``, and display-only values go through
``resolve_with_fallback()`` so they never fail.
"""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from estate.core.exceptions import (
    InvalidConfigurationException,
    MissingConfigurationException,
)


# ========== Fallbacks for display-only values ==========

DEFAULT_SITE_URL = "https://example.com"
DEFAULT_SITE_NAME = "Estate Listings"
DEFAULT_CORS_ORIGINS = "http://localhost:3000"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Required values have no default; use ``require()`` to read them so a
    missing value surfaces as ``MissingConfigurationException``.
    """

    # ========== Application ==========
    app_name: str = Field(default="estate-listings", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="production", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: Optional[str] = Field(
        default=None,
        description="Datastore connection URL (async driver). Required, never defaulted."
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)
    db_connect_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for establishing and verifying a connection",
        gt=0,
        le=60
    )
    db_create_tables: bool = Field(
        default=False,
        description="Create missing tables after the first connect (development only)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("database_url")
    @classmethod
    def blank_url_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    def require(self, field_name: str) -> str:
        """
        Return a required setting or fail naming its environment variable.

        Raises:
            MissingConfigurationException: If the value is unbound or empty
        """
        value = getattr(self, field_name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingConfigurationException(field_name.upper())
        return value


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached Settings instance.

    Raises:
        InvalidConfigurationException: A bound variable fails validation
    """
    try:
        return Settings()
    except ValidationError as e:
        raise invalid_configuration(e) from e


def invalid_configuration(error: ValidationError) -> InvalidConfigurationException:
    """Name the environment variables behind a settings validation error."""
    names = []
    for item in error.errors():
        loc = item.get("loc") or ("settings",)
        name = str(loc[0]).upper()
        if name not in names:
            names.append(name)
    return InvalidConfigurationException(names)


def resolve_with_fallback(name: str, fallback: str) -> str:
    """
    Resolve a display-only environment value.

    Returns the bound value when present and non-empty, otherwise
    ``fallback`` verbatim. Never raises. Do not use this for credentials or
    connection strings.
    """
    value = os.environ.get(name)
    if value is None or not value.strip():
        return fallback
    return value.strip()


def get_site_url() -> str:
    """Public base URL used for canonical links and page metadata."""
    return resolve_with_fallback("PUBLIC_SITE_URL", DEFAULT_SITE_URL).rstrip("/")


def get_site_name() -> str:
    return resolve_with_fallback("SITE_NAME", DEFAULT_SITE_NAME)


def get_cors_origins() -> List[str]:
    raw = resolve_with_fallback("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or [DEFAULT_CORS_ORIGINS]


# ========== Constants ==========

class PropertyType(str):
    """Kinds of property a listing can describe."""
    HOUSE = "house"
    APARTMENT = "apartment"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    LAND = "land"
    COMMERCIAL = "commercial"


class ListingStatus(str):
    """Listing lifecycle statuses."""
    ACTIVE = "active"
    PENDING = "pending"
    SOLD = "sold"
    WITHDRAWN = "withdrawn"


# ========== Lists for validation ==========

PROPERTY_TYPES = [
    PropertyType.HOUSE, PropertyType.APARTMENT, PropertyType.CONDO,
    PropertyType.TOWNHOUSE, PropertyType.LAND, PropertyType.COMMERCIAL
]
LISTING_STATUSES = [
    ListingStatus.ACTIVE, ListingStatus.PENDING,
    ListingStatus.SOLD, ListingStatus.WITHDRAWN
]

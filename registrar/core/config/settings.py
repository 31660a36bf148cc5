# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Registrar Core configuration.

Values come from the environment (and an optional .env file). Database and
API options live in their own prefixed groups; Settings nests both.

Example:
    >>> from registrar.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_PASSWORD = "registrar_password"


class DatabaseSettings(BaseSettings):
    """Relational entity store configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        name: Database name.
        url_override: Full async URL; takes precedence over the components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Log every SQL statement.
    """

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        extra="ignore",
    )

    user: str = "registrar"
    password: SecretStr = SecretStr(DEFAULT_DATABASE_PASSWORD)
    host: str = "localhost"
    port: int = 5432
    name: str = "registrar"
    url_override: str | None = Field(
        default=None,
        description="Explicit SQLAlchemy async URL, e.g. sqlite+aiosqlite:///./registrar.db",
    )
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.name}"

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL points at SQLite."""
        return self.url.startswith("sqlite")


class APISettings(BaseSettings):
    """HTTP server settings.

    Attributes:
        title: OpenAPI title.
        host: Bind address.
        port: Bind port.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    title: str = "Registrar Core API"
    host: str = "0.0.0.0"
    port: int = 8000


class Settings(BaseSettings):
    """Top-level settings object.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Entity store settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Refuse the shipped database password outside development and staging."""
        if self.environment == "production":
            if (
                self.database.url_override is None
                and self.database.password.get_secret_value() == DEFAULT_DATABASE_PASSWORD
            ):
                raise ValueError(
                    "DATABASE_PASSWORD must be set in production "
                    "(or DATABASE_URL_OVERRIDE pointing at another store)"
                )
        return self

    @property
    def is_development(self) -> bool:
        """True for the development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """True for the production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()

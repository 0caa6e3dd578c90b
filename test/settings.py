"""
Test Configuration Settings.

This module defines the test environment configuration using Pydantic's BaseSettings.
Pydantic automatically loads configuration from the test/.env file via env_file configuration.

Environment variables use double underscore (__) as delimiters for nested properties.
For example: DATABASE__POSTGRES_URL maps to test_settings.database.postgres_url
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TestDatabaseConfig(BaseModel):
    """Database configuration container for tests."""

    url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Test database connection URL (defaults to in-memory SQLite)",
    )
    postgres_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL URL for tests that need Postgres-only features (table sizes)",
    )

    model_config = ConfigDict(strict=False)


class TestSettings(BaseSettings):
    """
    Test environment settings model.

    Examples:
    - DATABASE__URL → test_settings.database.url
    - DATABASE__POSTGRES_URL → test_settings.database.postgres_url
    """

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    database: TestDatabaseConfig = Field(
        default_factory=TestDatabaseConfig,
        description="Database configuration (SQLite, PostgreSQL)",
    )
    fixture_password: str = Field(default="password123", description="Plain password given to users created by fixtures")


test_settings = TestSettings()

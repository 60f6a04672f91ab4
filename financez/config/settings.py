"""
Configuration Management for FinanceZ

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so the one external dependency
(the hosted backend) and every tunable are validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Hosted backend (database + auth) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Project URL, e.g. https://<ref>.supabase.co"
    )
    anon_key: str = Field(
        ...,
        min_length=1,
        description="Public anon key used by the client"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """The project URL must be an http(s) endpoint."""
        v = v.strip().rstrip("/")
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Backend URL must start with http:// or https://, got: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    app_name: str = Field(
        default="FinanceZ",
        description="Name shown in greetings and titles"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local logs"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False = human readable console output)"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Currency symbol used when formatting money"
    )

    # Forms
    min_password_length: int = Field(
        default=6,
        ge=1,
        description="Minimum password length accepted at sign-up"
    )

    # Dashboard
    recent_items_limit: int = Field(
        default=3,
        ge=1,
        le=20,
        description="How many recent goals/transactions the home screen shows"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so a missing backend configuration
    # does not prevent reading the app settings.

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus
    {setting_name}_error entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.supabase
        results["supabase"] = True
    except Exception as e:
        results["supabase"] = False
        results["supabase_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results

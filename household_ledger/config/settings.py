"""
Configuration Management for the Household Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself takes its base currency as an argument; settings only
supply the default and the accepted timestamp formats.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Aggregation engine configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    base_currency: str = Field(
        default="CNY",
        min_length=1,
        description="Currency all totals are converted into by default"
    )
    timestamp_formats: str = Field(
        default="%Y-%m-%d,%Y/%m/%d,%Y-%m-%d %H:%M:%S,%Y/%m/%d %H:%M:%S,%d/%m/%Y",
        description="Comma-separated strptime formats tried after ISO-8601"
    )
    supported_base_currencies: str = Field(
        default="USD,CNY,HKD,EUR,JPY,GBP",
        description="Comma-separated currencies offered in base currency pickers"
    )
    
    @field_validator('base_currency')
    @classmethod
    def validate_base_currency(cls, v: str) -> str:
        """Currency codes are compared exactly; only reject blanks."""
        if not v.strip():
            raise ValueError("Base currency must be a non-empty currency code")
        return v
    
    @property
    def timestamp_formats_list(self) -> list[str]:
        """Get timestamp formats as a list."""
        return [fmt.strip() for fmt in self.timestamp_formats.split(",") if fmt.strip()]
    
    @property
    def supported_base_currencies_list(self) -> list[str]:
        """Get supported base currencies as a list."""
        return [
            code.strip()
            for code in self.supported_base_currencies.split(",")
            if code.strip()
        ]


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
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for engine diagnostics"
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
    
    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.engine
        results["engine"] = True
    except Exception as e:
        results["engine"] = False
        results["engine_error"] = str(e)
    
    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
    
    return results

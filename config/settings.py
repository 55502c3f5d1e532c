"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional, Union


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # STORE
    # ===================
    store_id: Optional[str] = Field(
        None,
        description="Store that owns every product written by this instance"
    )
    store_currency: str = Field(
        default="USD",
        pattern="^[A-Za-z]{3}$",
        description="ISO 4217 code used to convert prices to the smallest unit"
    )
    max_products: Optional[int] = Field(
        default=None,
        ge=0,
        description="Product limit for the store tier (None = unlimited)"
    )
    payment_tier: str = Field(
        default="starter",
        pattern="^(starter|pro|hosted)$",
        description="Billing tier of the store"
    )

    # ===================
    # IMPORT
    # ===================
    import_max_file_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1024,
        description="Largest CSV upload accepted by the import routes"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # VALIDATORS
    # ===================
    @field_validator("store_currency")
    @classmethod
    def currency_uppercase(cls, v: str) -> str:
        return v.upper()

    @field_validator("max_products", mode="before")
    @classmethod
    def parse_unlimited(cls, v: Union[str, int, None]) -> Optional[Union[str, int]]:
        """MAX_PRODUCTS accepts a number or the word 'unlimited'."""
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            if not v or v.lower() == "unlimited":
                return None
        return v

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def has_product_limit(self) -> bool:
        return self.max_products is not None


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()

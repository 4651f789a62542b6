"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./ledger.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24


class PricingSettings(BaseModel):
    """Upstream price source and the in-process cache window."""

    url: str = "https://api.coingecko.com/api/v3/simple/price"
    token_id: str = "tether"
    vs_currency: str = "usd"
    timeout_seconds: float = Field(default=5.0, gt=0)
    cache_ttl_seconds: float = Field(default=60.0, gt=0)


class WithdrawalSettings(BaseModel):
    default_min_reference_value: float = Field(default=40.0, ge=0)
    # When the price feed is down the minimum-value check cannot be evaluated.
    allow_when_rate_unknown: bool = True


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Token Ledger Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    pricing: PricingSettings = PricingSettings()
    withdrawal: WithdrawalSettings = WithdrawalSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url


@lru_cache()
def get_settings() -> Settings:
    return Settings()

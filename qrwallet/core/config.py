"""Application configuration using pydantic settings with structured sections."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./qrwallet.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    """Bearer JWT settings for officers and administrators calling the API."""

    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12


class TokenSettings(BaseModel):
    """Keyring used to derive participant authorization tokens.

    New tokens are always derived with ``active_key_id``. Tokens issued under a
    key that has since been rotated out stay valid: they are looked up by their
    stored value, not re-derived. Use token reissue to revoke them.
    """

    keys: dict[str, str] = Field(default_factory=lambda: {"k1": "change-me-token-secret"})
    active_key_id: str = "k1"
    default_ttl_days: Optional[int] = Field(default=None, gt=0)
    nonce_bytes: int = Field(default=16, ge=16)


class TransferSettings(BaseModel):
    """Per-call amount caps. ``None`` disables the cap."""

    max_credit_amount: Optional[Decimal] = Decimal("1000.00")
    max_debit_amount: Optional[Decimal] = None
    max_adjust_amount: Optional[Decimal] = None

    @model_validator(mode="after")
    def _check_caps(self) -> "TransferSettings":
        for name in ("max_credit_amount", "max_debit_amount", "max_adjust_amount"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive")
        return self


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


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
    project_name: str = "QR Wallet Ledger"
    api_prefix: str = "/api"

    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    tokens: TokenSettings = TokenSettings()
    transfers: TransferSettings = TransferSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes


@lru_cache()
def get_settings() -> Settings:
    return Settings()

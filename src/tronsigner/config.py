"""Application configuration using pydantic-settings.

The shared secret and the hot wallet private key are required. Use
validate_startup() at boot so the hosting layer decides how to fail.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from tronsigner.errors import ConfigError

# TronGrid endpoints
TRONGRID_MAINNET = "https://api.trongrid.io"
TRONGRID_TESTNET = "https://api.shasta.trongrid.io"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=3000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ======================
    # Credentials
    # ======================
    signer_secret: Optional[SecretStr] = Field(
        default=None, description="Shared secret callers send in X-Signer-Secret"
    )
    signer_private_key: Optional[SecretStr] = Field(
        default=None, description="Hot wallet private key (64 hex chars)"
    )

    # ======================
    # TRON node
    # ======================
    trongrid_base: str = Field(default=TRONGRID_TESTNET, description="TronGrid base URL")
    trongrid_api_key: Optional[str] = Field(default=None, description="TronGrid API key")
    node_timeout: float = Field(default=30.0, description="Node request timeout in seconds")

    # ======================
    # Signing policy
    # ======================
    fee_limit_sun: int = Field(
        default=30_000_000, description="Fee ceiling for contract calls in sun (30 TRX)"
    )
    enforce_owner_match: bool = Field(
        default=False, description="Reject requests whose 'from' is not the signer's address"
    )
    account_lock_timeout: float = Field(
        default=30.0, description="Max seconds to wait for a busy source account"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_mainnet(self) -> bool:
        return self.trongrid_base.rstrip("/") == TRONGRID_MAINNET

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "port": self.port,
            "trongrid_base": self.trongrid_base,
            "trongrid_api_key": "***" if self.trongrid_api_key else "(not set)",
            "signer_secret": "***" if self.signer_secret else "(not set)",
            "signer_private_key": "***" if self.signer_private_key else "(not set)",
            "fee_limit_sun": self.fee_limit_sun,
            "enforce_owner_match": self.enforce_owner_match,
            "node_timeout": self.node_timeout,
            "account_lock_timeout": self.account_lock_timeout,
        }


def validate_startup(settings: Settings):
    """Check required configuration and load the signing credential.

    Returns:
        Credential for the configured private key

    Raises:
        ConfigError: listing every missing or invalid setting
    """
    from tronsigner.signing.local import Credential

    problems = []
    secret = settings.signer_secret.get_secret_value() if settings.signer_secret else ""
    if not secret.strip():
        problems.append("SIGNER_SECRET is not set")

    key = settings.signer_private_key.get_secret_value() if settings.signer_private_key else ""
    credential = None
    if not key.strip():
        problems.append("SIGNER_PRIVATE_KEY is not set")
    else:
        try:
            credential = Credential.from_hex(key)
        except ValueError as e:
            problems.append(f"SIGNER_PRIVATE_KEY is invalid: {e}")

    if settings.fee_limit_sun <= 0:
        problems.append("FEE_LIMIT_SUN must be positive")

    if problems:
        raise ConfigError(problems)

    return credential


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

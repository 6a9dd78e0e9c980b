"""
Configuration settings for the Payload Guard.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Payload Guard"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Sanitize Policy ===
    POLICY_VARIANT: str = "delete_on_deny"  # allow_encrypt | delete_on_deny | strip_noise
    ALLOWLIST_PATH: str = "config/allowlist-fields.json"
    MAX_DEPTH: int = 12
    MAX_ARRAY_ITEMS: Optional[int] = None  # Unset: the variant default (50, or 10 for strip_noise)
    MAX_STRING_LENGTH: Optional[int] = None  # Unset: the variant default (4000, or 500 for strip_noise)
    MAX_PAYLOAD_BYTES: int = 150000  # Hard ceiling for the LLM input
    PRESERVE_UNPARSEABLE_URLS: bool = True

    # === Path Filters ===
    KEEP_PATHS: list[str] = []  # e.g. ["data.set0", "data.set1[].DES_RETORNO"]
    DROP_PATHS: list[str] = []

    # === Field Encryption ===
    CRYPTO_ENABLED: bool = True
    CRYPTO_TIME_WINDOW: str = "hour"  # hour | day
    CRYPTO_FORMAT: str = "{{field}}:ENC[v1|{{window}}|{{nonceB64}}|{{cipherB64}}]"
    CRYPTO_ITERATIONS: int = 200000
    CRYPTO_PASSPHRASE: Optional[str] = None  # Required when the variant encrypts

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()

"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across the unit tests.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from payload_guard.config import Settings
from payload_guard.models import CryptoConfig, PolicyVariant, SanitizePolicy, TimeWindow
from payload_guard.sanitizer import FieldEncryptor, SanitizeContext, Sanitizer


TEST_PASSPHRASE = "correct horse battery staple"
FIXED_NOW = datetime(2026, 3, 5, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.POLICY_VARIANT = "strip_noise"
    """
    allow_list_path = tmp_path / "allowlist-fields.json"
    allow_list_path.write_text(json.dumps(["mensagem", "COD_PROPOSTA"]), encoding="utf-8")
    return Settings(
        # === Application ===
        APP_NAME="Payload Guard (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Sanitize Policy ===
        POLICY_VARIANT="delete_on_deny",
        ALLOWLIST_PATH=str(allow_list_path),

        # === Field Encryption ===
        CRYPTO_ITERATIONS=1000,  # Keep PBKDF2 fast in tests
        CRYPTO_PASSPHRASE=TEST_PASSPHRASE,

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def crypto_config() -> CryptoConfig:
    """Hourly window with a low iteration count."""
    return CryptoConfig(time_window=TimeWindow.HOUR, iterations=1000)


@pytest.fixture
def encryptor(crypto_config: CryptoConfig) -> FieldEncryptor:
    """Encryptor pinned to a fixed moment (window 20260305T14)."""
    return FieldEncryptor(crypto_config, TEST_PASSPHRASE, now=FIXED_NOW)


@pytest.fixture
def make_sanitizer(encryptor: FieldEncryptor) -> Callable[..., Sanitizer]:
    """Factory: make_sanitizer(variant, allow_list, **policy_overrides).

    The encryptor is only attached when the variant encrypts.
    """

    def _make(
        variant: PolicyVariant | str = PolicyVariant.DELETE_ON_DENY,
        allow_list=(),
        **overrides,
    ) -> Sanitizer:
        policy = SanitizePolicy.preset(variant, **overrides)
        context = SanitizeContext.build(policy, allow_list)
        uses_crypto = policy.deny_action.value == "encrypt"
        return Sanitizer(context, encryptor if uses_crypto else None)

    return _make


@pytest.fixture
def write_allow_list(tmp_path: Path) -> Callable[[object], Path]:
    """Write arbitrary JSON to an allow-list file and return its path."""

    def _write(content: object, name: str = "allowlist.json") -> Path:
        path = tmp_path / name
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def passphrase() -> str:
    return TEST_PASSPHRASE


@pytest.fixture
def fixed_now() -> datetime:
    """2026-03-05 14:30 UTC (hour window 20260305T14)."""
    return FIXED_NOW

"""Unit tests for windowed field encryption."""

from datetime import datetime, timedelta, timezone

import pytest

from payload_guard.models.enums import TimeWindow
from payload_guard.models.policy import CryptoConfig
from payload_guard.sanitizer.crypto import (
    FieldEncryptor,
    derive_key,
    format_window,
    parse_envelope,
    render_envelope,
)
from payload_guard.sanitizer.exceptions import CryptoConfigurationError, DecryptionError


class TestFormatWindow:
    """Test window labels."""

    def test_hour(self, fixed_now):
        assert format_window(fixed_now, TimeWindow.HOUR) == "20260305T14"

    def test_day(self, fixed_now):
        assert format_window(fixed_now, TimeWindow.DAY) == "20260305"

    def test_converted_to_utc(self):
        local = datetime(2026, 3, 5, 11, 30, tzinfo=timezone(timedelta(hours=-3)))
        assert format_window(local, TimeWindow.HOUR) == "20260305T14"


class TestDeriveKey:
    def test_deterministic_per_window(self):
        assert derive_key("p", "20260305T14", 10) == derive_key("p", "20260305T14", 10)

    def test_window_changes_key(self):
        assert derive_key("p", "20260305T14", 10) != derive_key("p", "20260305T15", 10)

    def test_key_length(self):
        assert len(derive_key("p", "20260305", 10)) == 32


class TestEnvelope:
    """Test envelope rendering and parsing."""

    def test_render_default_template(self):
        rendered = render_envelope(
            CryptoConfig().format, field="NOM_CLIENTE", window="20260305T14",
            nonce_b64="bm9uY2U=", cipher_b64="Y2lwaGVy",
        )
        assert rendered == "NOM_CLIENTE:ENC[v1|20260305T14|bm9uY2U=|Y2lwaGVy]"

    def test_parse_roundtrip_parts(self):
        parts = parse_envelope("NOM_CLIENTE:ENC[v1|20260305T14|bm9uY2U=|Y2lwaGVy]")
        assert parts == {
            "field": "NOM_CLIENTE",
            "window": "20260305T14",
            "nonce": "bm9uY2U=",
            "cipher": "Y2lwaGVy",
        }

    def test_parse_rejects_plain_text(self):
        assert parse_envelope("hello") is None


class TestFieldEncryptor:
    """Test encryptor construction, encryption and decryption."""

    def test_envelope_shape(self, encryptor):
        envelope = encryptor.encrypt("NOM_CLIENTE", "Maria")
        parts = parse_envelope(envelope)
        assert parts is not None
        assert parts["field"] == "NOM_CLIENTE"
        assert parts["window"] == "20260305T14"
        assert "Maria" not in envelope

    def test_decrypt_recovers_value(self, encryptor):
        envelope = encryptor.encrypt("NOM_CLIENTE", "Maria da Silva")
        assert encryptor.decrypt_envelope(envelope) == "Maria da Silva"

    def test_fresh_nonce_per_call(self, encryptor):
        """Same value twice never yields the same envelope."""
        first = encryptor.encrypt("f", "same")
        second = encryptor.encrypt("f", "same")
        assert first != second
        assert parse_envelope(first)["nonce"] != parse_envelope(second)["nonce"]

    def test_same_window_same_key(self, crypto_config, encryptor, passphrase, fixed_now):
        other = FieldEncryptor(crypto_config, passphrase, now=fixed_now + timedelta(minutes=20))
        envelope = encryptor.encrypt("f", "valor")
        assert other.decrypt_envelope(envelope) == "valor"

    def test_other_window_rejected(self, crypto_config, encryptor, passphrase, fixed_now):
        later = FieldEncryptor(crypto_config, passphrase, now=fixed_now + timedelta(hours=1))
        envelope = encryptor.encrypt("f", "valor")
        with pytest.raises(DecryptionError):
            later.decrypt_envelope(envelope)

    def test_wrong_passphrase_fails_authentication(self, crypto_config, encryptor, fixed_now):
        intruder = FieldEncryptor(crypto_config, "wrong", now=fixed_now)
        parts = parse_envelope(encryptor.encrypt("f", "valor"))
        with pytest.raises(DecryptionError):
            intruder.decrypt(parts["nonce"], parts["cipher"])

    def test_malformed_base64_fails(self, encryptor):
        with pytest.raises(DecryptionError):
            encryptor.decrypt("!!!", "???")

    def test_missing_passphrase_raises(self, crypto_config):
        with pytest.raises(CryptoConfigurationError):
            FieldEncryptor(crypto_config, None)
        with pytest.raises(CryptoConfigurationError):
            FieldEncryptor(crypto_config, "")

    def test_disabled_renders_redacted(self, fixed_now):
        disabled = FieldEncryptor(CryptoConfig(enabled=False), None, now=fixed_now)
        assert not disabled.enabled
        assert disabled.encrypt("NOM_CLIENTE", "Maria") == "NOM_CLIENTE:REDACTED"
        with pytest.raises(DecryptionError):
            disabled.decrypt("a", "b")

    def test_custom_template(self, passphrase, fixed_now):
        config = CryptoConfig(format="<{{field}}@{{window}}>", iterations=10)
        custom = FieldEncryptor(config, passphrase, now=fixed_now)
        assert custom.encrypt("f", "v") == "<f@20260305T14>"

    def test_empty_template_falls_back_to_default(self, passphrase, fixed_now):
        config = CryptoConfig(format="", iterations=10)
        fallback = FieldEncryptor(config, passphrase, now=fixed_now)
        assert parse_envelope(fallback.encrypt("f", "v")) is not None

    def test_day_window(self, passphrase, fixed_now):
        config = CryptoConfig(time_window=TimeWindow.DAY, iterations=10)
        daily = FieldEncryptor(config, passphrase, now=fixed_now)
        assert daily.window == "20260305"

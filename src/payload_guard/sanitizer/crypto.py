"""
Field-level encryption for values that are not allow-listed.

A key is derived from the long-term passphrase and a wall-clock window label
(hour or day bucket, UTC) with PBKDF2-HMAC-SHA256. Every value is then
sealed with AES-256-GCM under a fresh random nonce, so two encryptions of
the same value never produce the same envelope. The window is key-derivation
context only, never a nonce.

Default envelope:
    <field>:ENC[v1|<window>|<nonceB64>|<ciphertext+tag B64>]
"""

import base64
import os
import re
from datetime import datetime, timezone
from typing import Optional

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..models.enums import TimeWindow
from ..models.policy import DEFAULT_ENVELOPE_FORMAT, CryptoConfig
from .exceptions import CryptoConfigurationError, DecryptionError


logger = structlog.get_logger(__name__)

KEY_LENGTH = 32
NONCE_LENGTH = 12

_ENVELOPE = re.compile(
    r"^(?P<field>.*?):ENC\[v1\|(?P<window>[0-9T]+)\|(?P<nonce>[A-Za-z0-9+/=]+)\|(?P<cipher>[A-Za-z0-9+/=]+)\]$"
)


def format_window(moment: datetime, time_window: TimeWindow) -> str:
    """
    Render the key window label for a moment in time (UTC).

    Examples:
        >>> format_window(datetime(2026, 3, 5, 14, 30, tzinfo=timezone.utc), TimeWindow.HOUR)
        '20260305T14'
        >>> format_window(datetime(2026, 3, 5, 14, 30, tzinfo=timezone.utc), TimeWindow.DAY)
        '20260305'
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    if TimeWindow(time_window) is TimeWindow.DAY:
        return moment.strftime("%Y%m%d")
    return moment.strftime("%Y%m%dT%H")


def derive_key(passphrase: str, window: str, iterations: int) -> bytes:
    """Deliberately slow PBKDF2 derivation; the window label is the salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=window.encode("utf-8"),
        iterations=iterations,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def render_envelope(template: str, field: str, window: str, nonce_b64: str, cipher_b64: str) -> str:
    return (
        template.replace("{{field}}", field)
        .replace("{{window}}", window)
        .replace("{{nonceB64}}", nonce_b64)
        .replace("{{cipherB64}}", cipher_b64)
    )


def parse_envelope(text: str) -> Optional[dict[str, str]]:
    """
    Split a default-format envelope into field, window, nonce and cipher.

    Returns None for anything that is not a default-format envelope.
    """
    match = _ENVELOPE.match(text)
    if match is None:
        return None
    return match.groupdict()


class FieldEncryptor:
    """
    Encrypts individual field values for one time window.

    Construct one per sanitize call; the window is fixed at construction.

    Raises:
        CryptoConfigurationError: At construction, when encryption is enabled
            and no passphrase is configured
    """

    def __init__(
        self,
        config: CryptoConfig,
        passphrase: Optional[str],
        now: Optional[datetime] = None,
    ):
        self.config = config
        self.window = format_window(now or datetime.now(timezone.utc), config.time_window)
        self._template = config.format or DEFAULT_ENVELOPE_FORMAT
        self._aead: Optional[AESGCM] = None

        if not config.enabled:
            logger.debug("Field encryption disabled, denied values render as REDACTED")
            return

        if not passphrase:
            raise CryptoConfigurationError(
                "CRYPTO_PASSPHRASE is not configured",
                details={"time_window": config.time_window.value},
            )

        self._aead = AESGCM(derive_key(passphrase, self.window, config.iterations))
        logger.debug(
            "Field encryptor ready",
            window=self.window,
            iterations=config.iterations,
        )

    @property
    def enabled(self) -> bool:
        return self._aead is not None

    def encrypt(self, field_name: str, plaintext: str) -> str:
        """
        Seal one value and render it through the envelope template.

        When encryption is disabled the value is never recoverable: the
        result is just "<field>:REDACTED".
        """
        if self._aead is None:
            return f"{field_name}:REDACTED"

        nonce = os.urandom(NONCE_LENGTH)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return render_envelope(
            self._template,
            field=field_name,
            window=self.window,
            nonce_b64=base64.b64encode(nonce).decode("ascii"),
            cipher_b64=base64.b64encode(sealed).decode("ascii"),
        )

    def decrypt(self, nonce_b64: str, cipher_b64: str) -> str:
        """
        Open a value sealed by this encryptor (same passphrase and window).

        Raises:
            DecryptionError: If encryption is disabled, the input is not valid
                base64, or authentication fails
        """
        if self._aead is None:
            raise DecryptionError("Encryption is disabled; REDACTED values cannot be recovered")
        try:
            nonce = base64.b64decode(nonce_b64, validate=True)
            sealed = base64.b64decode(cipher_b64, validate=True)
            return self._aead.decrypt(nonce, sealed, None).decode("utf-8")
        except (InvalidTag, ValueError) as e:
            raise DecryptionError(
                "Encrypted value failed authentication",
                details={"window": self.window, "error_type": type(e).__name__},
            ) from e

    def decrypt_envelope(self, envelope: str) -> str:
        """Decrypt a default-format envelope produced in this window."""
        parts = parse_envelope(envelope)
        if parts is None:
            raise DecryptionError("Not an encrypted envelope")
        if parts["window"] != self.window:
            raise DecryptionError(
                "Envelope belongs to a different key window",
                details={"envelope_window": parts["window"], "window": self.window},
            )
        return self.decrypt(parts["nonce"], parts["cipher"])

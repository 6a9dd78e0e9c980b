"""
Custom exceptions for the sanitization layer.

Setup-time problems (missing passphrase, broken allow-list file, inconsistent
policy) fail fast with a ConfigurationError before any record is processed.
Per-record data problems (malformed embedded JSON, unparseable URLs, payloads
that do not fit the budget) never raise; they are reflected in the output
and in the stats instead.
"""

from typing import Any


class SanitizerError(Exception):
    """
    Base exception for all sanitization errors.

    Carries a human-readable message plus structured details for logging.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SanitizerError):
    """Base class for setup-time errors (raised before processing any data)."""
    pass


class CryptoConfigurationError(ConfigurationError):
    """
    Raised when encryption is enabled but cannot be set up.

    Typically a missing CRYPTO_PASSPHRASE. Raised at encryptor construction,
    never per field.
    """
    pass


class PolicyConfigurationError(ConfigurationError):
    """
    Raised when a sanitize policy cannot be applied as configured.

    Example: deny_action=ENCRYPT but no encryptor supplied.
    """
    pass


class AllowListLoadError(ConfigurationError):
    """
    Raised when the allow-list file is missing or malformed.

    The file must be a JSON array of strings.
    """

    def __init__(self, message: str, path: str | None = None, reason: str | None = None):
        details = {}
        if path:
            details["path"] = path
        if reason:
            details["reason"] = reason
        super().__init__(message, details)


class UnsupportedNodeError(SanitizerError, TypeError):
    """
    Raised when the input tree contains a value that is not JSON-compatible.

    Only None, bool, int, float, str, list and dict (with str keys) are
    accepted. Callers mapping database rows must convert dates, decimals,
    bytes etc. before sanitizing.
    """

    def __init__(self, value: Any, path: str = ""):
        type_name = type(value).__name__
        super().__init__(
            f"Unsupported node type '{type_name}'",
            details={"type": type_name, "path": path or "<root>"},
        )


class DecryptionError(SanitizerError):
    """Raised when an encrypted envelope fails authentication or parsing."""
    pass

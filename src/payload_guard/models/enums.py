"""
Enumerations for sanitize policies and detector results.

All enums are closed: policies are selected by value, never by free text.
"""

from enum import Enum


class PolicyVariant(str, Enum):
    """
    Named sanitize policy presets.

    The call sites of the pipeline historically expected different rules
    (allow-listing vs binary detection, truncation metadata, masking of
    allow-listed fields). Each preset pins one consistent set of flags.
    """

    ALLOW_ENCRYPT = "allow_encrypt"
    DELETE_ON_DENY = "delete_on_deny"
    STRIP_NOISE = "strip_noise"


class DenyAction(str, Enum):
    """What happens to a leaf that is not allow-listed."""

    DELETE = "delete"
    ENCRYPT = "encrypt"


class ArrayTruncation(str, Enum):
    """
    How an over-long array is reported.

    METADATA wraps the kept items as {"meta": {...}, "items": [...]};
    SLICE returns the bounded list with no marker.
    """

    METADATA = "metadata"
    SLICE = "slice"


class TimeWindow(str, Enum):
    """Granularity of the encryption key window."""

    HOUR = "hour"
    DAY = "day"


class SecretKind(str, Enum):
    """
    Secret shapes recognized in string leaves, in detection priority order.

    The value is the opaque marker that replaces the whole string.
    """

    PEM = "[REMOVIDO_CHAVE]"
    JWT = "[REMOVIDO_TOKEN]"
    BASE64 = "[REMOVIDO_BASE64]"
    HEX = "[REMOVIDO_HEX]"

    @property
    def marker(self) -> str:
        return self.value


class StringOversize(str, Enum):
    """What happens to a string longer than max_string_length."""

    TRUNCATE = "truncate"
    REPLACE = "replace"

"""
Sensitive content detectors.

Pure, total functions over arbitrary strings: none of them raises. They
classify or mask; the sanitizer engine decides what to do with the result.

- National IDs (CPF 11 digits, CNPJ 14 digits, punctuated or bare)
- Secrets: PEM blocks, JWTs, base64 blobs, hex blobs
- Embedded JSON detection
- URL scrubbing (query parameters, IDs in the path)
"""

import re
from typing import Iterable, Optional
from urllib.parse import unquote_plus, urlsplit, urlunsplit

from ..models.enums import SecretKind
from .normalize import matches_marker, normalize_field_name


# CNPJ first so a 14-digit run is never consumed as a CPF plus leftovers.
_NATIONAL_ID = re.compile(
    r"(?<!\d)"
    r"(?:\d{2}\.?\d{3}\.?\d{3}/?\d{4}-?\d{2}"
    r"|\d{3}\.?\d{3}\.?\d{3}-?\d{2})"
    r"(?!\d)"
)
_MULTI_SPACE = re.compile(r" {2,}")
_JWT = re.compile(r"[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")
_HEX = re.compile(r"[A-Fa-f0-9]+")
_BASE64_CHAR = re.compile(r"[A-Za-z0-9+/=]")
_LINE_BREAKS = re.compile(r"[\r\n]")

JWT_MIN_LENGTH = 80
HEX_MIN_LENGTH = 64
BASE64_MIN_LENGTH = 2000
BASE64_RATIO_THRESHOLD = 0.95
# PDF, JPEG, PNG, ZIP/Office
BASE64_MAGIC_PREFIXES = ("JVBERi0x", "/9j/", "iVBORw0KG", "UEsDB")


# === National IDs ===

def has_national_id(text: str) -> bool:
    """True if the text contains a CPF or CNPJ shaped digit run."""
    return _NATIONAL_ID.search(text) is not None


def mask_national_ids(text: str, mask_char: str = "*") -> tuple[str, int]:
    """
    Replace every CPF/CNPJ run with mask characters of the same length.

    Surrounding text is untouched, so len(result) == len(text).

    Returns:
        Tuple of (masked text, number of runs masked)

    Examples:
        >>> mask_national_ids("CPF:14028002664")
        ('CPF:***********', 1)
    """
    return _NATIONAL_ID.subn(lambda m: mask_char * len(m.group(0)), text)


def collapse_spaces(text: str) -> str:
    """Collapse runs of two or more spaces into one. Other whitespace is kept."""
    return _MULTI_SPACE.sub(" ", text)


# === Secrets ===

def looks_like_pem(text: str) -> bool:
    return "-----BEGIN " in text or "PRIVATE KEY" in text


def looks_like_jwt(text: str) -> bool:
    if len(text) < JWT_MIN_LENGTH:
        return False
    return _JWT.fullmatch(text) is not None


def looks_like_base64_blob(text: str) -> bool:
    """
    Detect binary content encoded as base64.

    Either a known file magic prefix, or a long string made almost entirely of
    base64 alphabet characters (line breaks ignored).
    """
    if text.startswith(BASE64_MAGIC_PREFIXES):
        return True
    if len(text) < BASE64_MIN_LENGTH:
        return False
    compact = _LINE_BREAKS.sub("", text)
    if not compact:
        return False
    matched = len(_BASE64_CHAR.findall(compact))
    return matched / len(compact) >= BASE64_RATIO_THRESHOLD


def looks_like_hex_blob(text: str) -> bool:
    if len(text) < HEX_MIN_LENGTH:
        return False
    return _HEX.fullmatch(text) is not None


def detect_secret(text: str) -> Optional[SecretKind]:
    """
    Classify a string as a secret, in priority order PEM > JWT > base64 > hex.

    Returns:
        The SecretKind (whose value is the replacement marker), or None
    """
    if looks_like_pem(text):
        return SecretKind.PEM
    if looks_like_jwt(text):
        return SecretKind.JWT
    if looks_like_base64_blob(text):
        return SecretKind.BASE64
    if looks_like_hex_blob(text):
        return SecretKind.HEX
    return None


# === Embedded JSON ===

def looks_like_json(text: str) -> bool:
    """Cheap pre-check before attempting json.loads on a string leaf."""
    trimmed = text.strip()
    return trimmed.startswith(("{", "[", '"{', '"['))


# === URLs ===

def scrub_url(text: str, sensitive_markers: Iterable[str], mask_char: str = "*") -> Optional[str]:
    """
    Remove sensitive query parameters from an absolute URL.

    A parameter is dropped when its normalized name contains a sensitive
    marker or its decoded value contains a CPF/CNPJ. Kept parameters keep
    their raw text and order; an emptied query is removed entirely. CPF/CNPJ
    runs in the path are masked in place.

    Args:
        text: Candidate URL
        sensitive_markers: Already-normalized field-name markers
        mask_char: Character used to mask IDs found in the path

    Returns:
        The scrubbed URL, or None when text is not an absolute URL
    """
    try:
        parts = urlsplit(text.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None

    markers = tuple(sensitive_markers)
    kept: list[str] = []
    for param in parts.query.split("&"):
        if not param:
            continue
        raw_name, _, raw_value = param.partition("=")
        name = normalize_field_name(unquote_plus(raw_name))
        value = unquote_plus(raw_value)
        if matches_marker(name, markers) or has_national_id(value):
            continue
        kept.append(param)

    path, _ = mask_national_ids(parts.path, mask_char)
    return urlunsplit((parts.scheme, parts.netloc, path, "&".join(kept), parts.fragment))

"""
Field name normalization.

Keys coming from the proposal database mix casing, underscores, accents and
camelCase (COD_PROPOSTA, codigoProposta, Código). Every marker and allow-list
comparison happens on the normalized form.
"""

import re
import unicodedata
from typing import Any, Iterable


_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_field_name(name: Any) -> str:
    """
    Canonicalize a field name for comparisons.

    NFD-decompose, strip combining marks, lowercase, and drop every character
    outside [a-z0-9]. Idempotent; None or empty input yields "".

    Examples:
        >>> normalize_field_name("DES_RETORNO")
        'desretorno'
        >>> normalize_field_name("Código Sessão")
        'codigosessao'
    """
    if name is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(name))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped.lower())


def normalize_markers(markers: Iterable[str]) -> tuple[str, ...]:
    """Normalize a marker list, dropping empties and duplicates (order kept)."""
    seen: dict[str, None] = {}
    for marker in markers:
        normalized = normalize_field_name(marker)
        if normalized:
            seen.setdefault(normalized, None)
    return tuple(seen)


def matches_marker(normalized_name: str, markers: Iterable[str]) -> bool:
    """
    Substring containment test against already-normalized markers.

    "cpfcliente" matches marker "cpf". An empty name never matches.
    """
    if not normalized_name:
        return False
    return any(marker in normalized_name for marker in markers)

"""
Key-based redaction for log output.

Log events may carry request context, settings or fragments of a record.
Values under keys that look personal or secret are replaced before the
event is rendered.
"""

from typing import Any, Iterable

from structlog.types import EventDict, WrappedLogger


REDACTED = "[REDACTED]"

DEFAULT_LOG_MARKERS = (
    "cpf",
    "cnpj",
    "email",
    "telefone",
    "nome",
    "des_json",
    "des_envio",
    "des_retorno",
    "authorization",
    "cookie",
    "passphrase",
    "api_key",
)


def _should_redact(key: Any, markers: Iterable[str]) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in markers)


def redact_sensitive(value: Any, markers: Iterable[str] = DEFAULT_LOG_MARKERS) -> Any:
    """
    Return a copy of value with sensitive-keyed entries replaced by [REDACTED].

    Keys are compared lowercased by substring, so "CPF_CLIENTE" and
    "DES_RETORNO" are both caught. Lists and nested mappings are walked.

    Examples:
        >>> redact_sensitive({"nome": "Maria", "status": "OK"})
        {'nome': '[REDACTED]', 'status': 'OK'}
    """
    markers = tuple(markers)
    if isinstance(value, list):
        return [redact_sensitive(item, markers) for item in value]
    if isinstance(value, dict):
        return {
            key: REDACTED if _should_redact(key, markers) else redact_sensitive(child, markers)
            for key, child in value.items()
        }
    return value


def redact_event_processor(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """structlog processor applying redact_sensitive to every event field."""
    return {
        key: REDACTED if key != "event" and _should_redact(key, DEFAULT_LOG_MARKERS)
        else redact_sensitive(child)
        for key, child in event_dict.items()
    }

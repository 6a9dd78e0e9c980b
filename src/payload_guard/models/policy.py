"""
Policy and configuration records for the sanitization pipeline.

These are pure data: frozen pydantic models built once at startup and shared
read-only by every sanitize call.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import ArrayTruncation, DenyAction, PolicyVariant, StringOversize, TimeWindow


DEPTH_LIMIT_PLACEHOLDER = "<DEPTH_LIMIT_REACHED>"
STRING_TRUNCATION_SUFFIX = "...(truncado)"
OVERSIZE_STRING_MARKER = "[REMOVIDO_POR_TAMANHO]"
DEFAULT_ENVELOPE_FORMAT = "{{field}}:ENC[v1|{{window}}|{{nonceB64}}|{{cipherB64}}]"

# Field-name markers of the delete-on-deny variant (documents, credentials,
# attachments). Compared by substring containment on normalized names.
DELETE_SENSITIVE_MARKERS = (
    "cpf", "cpfcnpj", "cnpj", "documento", "numdocumento", "rg", "pis", "nit",
    "token", "authorization", "auth", "apikey", "api_key", "secret", "senha",
    "password", "key", "username", "login", "email", "sharsakey",
    "hashassinatura", "assinatura", "sessionid", "session_id", "cookies",
    "dados", "arquivo", "anexo", "pdf", "base64", "imagem", "boletobase64",
    "conteudo", "content", "payloadbase64",
)
DELETE_BINARY_MARKERS = (
    "desenvio", "desretorno", "base64", "arquivo", "anexo", "imagem", "file",
)

# Noise-stripping variant: credentials only, attachments dropped by name,
# operational fields kept without explicit allow-listing.
NOISE_TOKEN_MARKERS = (
    "token", "bearer", "authorization", "cookie", "sha", "rsa", "key", "secret",
)
NOISE_BINARY_MARKERS = (
    "base64", "arquivo", "file", "documento", "anexo", "imagem", "payload", "conteudo",
)
NOISE_INFORMATIVE_MARKERS = (
    "status", "sucesso", "mensagem", "mensagens", "codigo", "descricao", "data",
    "hora", "tempo", "sessao", "session",
)

URL_FIELD_MARKERS = ("url", "urlservico", "endpoint", "targeturl")

# Readable free-text fields of the noise variant get their own length limit.
MESSAGE_FIELD_MARKERS = ("mensagem", "descricao")
STACKTRACE_FIELD_MARKERS = ("stacktrace",)


class CryptoConfig(BaseModel):
    """Field encryption settings (key window and envelope template)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(True, description="Encrypt denied values; False renders <field>:REDACTED")
    time_window: TimeWindow = Field(TimeWindow.HOUR, description="Key derivation window granularity")
    format: str = Field(DEFAULT_ENVELOPE_FORMAT, description="Envelope template")
    iterations: int = Field(200_000, ge=1, description="PBKDF2 iterations")


class PathFilterConfig(BaseModel):
    """keepPaths / dropPaths pattern sets applied before sanitization."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    keep_paths: tuple[str, ...] = ()
    drop_paths: tuple[str, ...] = ()


class SanitizePolicy(BaseModel):
    """
    Immutable sanitize policy.

    Use SanitizePolicy.preset() to get one of the named variants; individual
    flags can be overridden for a specific call site.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    variant: PolicyVariant = PolicyVariant.DELETE_ON_DENY

    # === Limits ===
    max_depth: int = Field(12, ge=0)
    max_array_items: int = Field(50, ge=1)
    max_string_length: int = Field(4000, ge=1)
    max_payload_bytes: Optional[int] = Field(150_000, ge=1)
    max_json_reparse: int = Field(2, ge=0, description="Parse attempts along one embedded-JSON chain")
    max_message_length: Optional[int] = Field(None, ge=1, description="Limit for message_markers fields")
    max_stacktrace_length: Optional[int] = Field(None, ge=1, description="Limit for stacktrace_markers fields")

    # === Behavior flags ===
    deny_action: DenyAction = DenyAction.DELETE
    array_truncation: ArrayTruncation = ArrayTruncation.SLICE
    string_oversize: StringOversize = StringOversize.TRUNCATE
    remove_binary: bool = True
    preserve_unparseable_urls: bool = True
    drop_sensitive_keys: bool = True
    binary_key_requires_blob: bool = True
    detection_overrides_allow_list: bool = True
    mask_allow_listed: bool = True
    parse_embedded_json: bool = True
    sanitize_strings: bool = Field(True, description="False: secret detectors only, text otherwise verbatim")

    # === Markers (raw text; SanitizeContext normalizes them once) ===
    sensitive_markers: tuple[str, ...] = DELETE_SENSITIVE_MARKERS
    binary_markers: tuple[str, ...] = DELETE_BINARY_MARKERS
    url_markers: tuple[str, ...] = URL_FIELD_MARKERS
    allow_markers: tuple[str, ...] = ()
    allow_prefixes: tuple[str, ...] = ()
    message_markers: tuple[str, ...] = ()
    stacktrace_markers: tuple[str, ...] = ()

    # === Output text ===
    depth_placeholder: str = DEPTH_LIMIT_PLACEHOLDER
    truncation_suffix: str = STRING_TRUNCATION_SUFFIX
    oversize_marker: str = OVERSIZE_STRING_MARKER
    mask_char: str = Field("*", min_length=1, max_length=1)

    @classmethod
    def preset(cls, variant: PolicyVariant | str, **overrides: Any) -> "SanitizePolicy":
        """
        Build the named preset, optionally overriding individual fields.

        Examples:
            >>> SanitizePolicy.preset("allow_encrypt").deny_action
            <DenyAction.ENCRYPT: 'encrypt'>
            >>> SanitizePolicy.preset(PolicyVariant.STRIP_NOISE, max_array_items=5).max_array_items
            5
        """
        variant = PolicyVariant(variant)
        values = dict(_PRESETS[variant])
        values.update(overrides)
        values["variant"] = variant
        return cls(**values)


_PRESETS: dict[PolicyVariant, dict[str, Any]] = {
    PolicyVariant.ALLOW_ENCRYPT: {
        "deny_action": DenyAction.ENCRYPT,
        "array_truncation": ArrayTruncation.METADATA,
        "remove_binary": False,
        "drop_sensitive_keys": False,
        "binary_key_requires_blob": True,
        "detection_overrides_allow_list": False,
        "mask_allow_listed": False,
    },
    PolicyVariant.DELETE_ON_DENY: {
        "deny_action": DenyAction.DELETE,
        "array_truncation": ArrayTruncation.SLICE,
        "remove_binary": True,
        "drop_sensitive_keys": True,
        "binary_key_requires_blob": True,
        "detection_overrides_allow_list": True,
        "mask_allow_listed": True,
    },
    PolicyVariant.STRIP_NOISE: {
        "deny_action": DenyAction.DELETE,
        "array_truncation": ArrayTruncation.SLICE,
        "remove_binary": False,
        "drop_sensitive_keys": True,
        "binary_key_requires_blob": False,
        "detection_overrides_allow_list": True,
        "mask_allow_listed": True,
        "max_array_items": 10,
        "max_string_length": 500,
        "max_message_length": 2000,
        "max_stacktrace_length": 2000,
        "string_oversize": StringOversize.REPLACE,
        "sensitive_markers": NOISE_TOKEN_MARKERS,
        "binary_markers": NOISE_BINARY_MARKERS,
        "allow_markers": NOISE_INFORMATIVE_MARKERS,
        "allow_prefixes": ("cod",),
        "message_markers": MESSAGE_FIELD_MARKERS,
        "stacktrace_markers": STACKTRACE_FIELD_MARKERS,
    },
}

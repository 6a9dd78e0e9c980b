"""
Sanitization pipeline: path filter -> sanitizer -> byte budget.

Single entry point used by the analysis flow before a record is handed to
the external LLM (or shown in the UI). Crypto settings are validated when
the pipeline is built, so a missing passphrase fails at startup instead of
on the first record.
"""

import time
from typing import Any, Optional

import structlog

from ..config import Settings
from ..models.enums import DenyAction, PolicyVariant, TimeWindow
from ..models.policy import CryptoConfig, PathFilterConfig, SanitizePolicy
from ..models.results import SanitizeResult
from ..monitoring.metrics import record_budget, record_sanitize_run
from .allow_list import AllowList, SanitizeContext
from .budget import apply_payload_budget
from .crypto import FieldEncryptor
from .engine import Sanitizer
from .path_filter import filter_by_paths
from .tree import ABSENT, serialized_size


logger = structlog.get_logger(__name__)


class SanitizationPipeline:
    """
    Orchestrates one sanitize call end to end.

    Args:
        context: Immutable policy + allow-list + path matchers
        crypto_config: Encryption settings (used when the policy encrypts)
        passphrase: Long-term encryption passphrase
        metrics_enabled: Record Prometheus metrics per run

    Raises:
        CryptoConfigurationError: If the policy encrypts denied values,
            encryption is enabled and no passphrase is configured
    """

    def __init__(
        self,
        context: SanitizeContext,
        crypto_config: Optional[CryptoConfig] = None,
        passphrase: Optional[str] = None,
        metrics_enabled: bool = True,
    ):
        self.context = context
        self.crypto_config = crypto_config or CryptoConfig()
        self._passphrase = passphrase
        self.metrics_enabled = metrics_enabled

        if self.encrypts:
            # Fail fast: building an encryptor validates the passphrase.
            FieldEncryptor(self.crypto_config, passphrase)

        logger.info(
            "SanitizationPipeline initialized",
            variant=context.policy.variant.value,
            allow_list_entries=len(context.allow_list),
            keep_paths=len(context.keep_paths),
            drop_paths=len(context.drop_paths),
            encrypts=self.encrypts,
            max_payload_bytes=context.policy.max_payload_bytes,
        )

    @property
    def encrypts(self) -> bool:
        return self.context.policy.deny_action is DenyAction.ENCRYPT

    @classmethod
    def from_settings(cls, settings: Settings, allow_list: Optional[AllowList] = None) -> "SanitizationPipeline":
        """
        Build the pipeline from environment settings.

        The allow-list file is read here (once per process) unless an
        already-loaded AllowList is passed in.
        """
        limits = {
            "max_array_items": settings.MAX_ARRAY_ITEMS,
            "max_string_length": settings.MAX_STRING_LENGTH,
        }
        policy = SanitizePolicy.preset(
            PolicyVariant(settings.POLICY_VARIANT),
            max_depth=settings.MAX_DEPTH,
            max_payload_bytes=settings.MAX_PAYLOAD_BYTES,
            preserve_unparseable_urls=settings.PRESERVE_UNPARSEABLE_URLS,
            **{name: value for name, value in limits.items() if value is not None},
        )
        if allow_list is None:
            allow_list = AllowList.from_file(settings.ALLOWLIST_PATH)
        context = SanitizeContext.build(
            policy,
            allow_list,
            PathFilterConfig(keep_paths=tuple(settings.KEEP_PATHS), drop_paths=tuple(settings.DROP_PATHS)),
        )
        crypto_config = CryptoConfig(
            enabled=settings.CRYPTO_ENABLED,
            time_window=TimeWindow(settings.CRYPTO_TIME_WINDOW),
            format=settings.CRYPTO_FORMAT,
            iterations=settings.CRYPTO_ITERATIONS,
        )
        return cls(
            context,
            crypto_config=crypto_config,
            passphrase=settings.CRYPTO_PASSPHRASE,
            metrics_enabled=settings.PROMETHEUS_ENABLED,
        )

    def run(self, tree: Any) -> SanitizeResult:
        """
        Filter, sanitize and fit one record.

        Args:
            tree: Raw record (JSON-compatible, never mutated)

        Returns:
            SanitizeResult; sanitized is {} when everything was removed
        """
        started = time.perf_counter()
        policy = self.context.policy

        filtered = filter_by_paths(tree, self.context.keep_paths, self.context.drop_paths)

        encryptor = FieldEncryptor(self.crypto_config, self._passphrase) if self.encrypts else None
        sanitizer = Sanitizer(self.context, encryptor)

        if filtered.tree is ABSENT:
            outcome_tree, stats = ABSENT, sanitizer.sanitize({}).stats
        else:
            outcome = sanitizer.sanitize(filtered.tree)
            outcome_tree, stats = outcome.tree, outcome.stats
        stats.total_leaves += filtered.removed
        stats.removed_by_path += filtered.removed

        sanitized = {} if outcome_tree is ABSENT else outcome_tree

        budget = None
        if policy.max_payload_bytes is not None:
            budget = apply_payload_budget(sanitized, policy.max_payload_bytes)
            sanitized = budget.payload

        result = SanitizeResult(
            sanitized=sanitized,
            stats=stats,
            variant=policy.variant,
            window=encryptor.window if encryptor is not None else None,
            budget=budget,
        )

        elapsed = time.perf_counter() - started
        if self.metrics_enabled:
            record_sanitize_run(policy.variant.value, stats.to_dict(), elapsed)
            if budget is not None:
                record_budget(budget.arrays_removed, budget.strings_trimmed, budget.exceeded)

        logger.info(
            "Sanitize metrics",
            variant=policy.variant.value,
            payload_bytes_before=serialized_size(tree),
            payload_bytes_after=serialized_size(sanitized),
            payload_trimmed=result.payload_trimmed,
            exceeded=result.exceeded,
            elapsed_ms=round(elapsed * 1000),
            **stats.to_dict(),
        )
        return result

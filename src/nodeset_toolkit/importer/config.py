"""
Module: importer.config

Purpose:
    Configuration for the nodeset import pipeline. Provides immutable
    settings for size limits, accepted formats and the namespace conflict
    strategy, plus the helpers that turn operator input into a size limit.

Key Classes:
    - ConflictStrategy: How namespace URI collisions are handled
    - ImportConfig: Main configuration for an import session

Key Functions:
    - normalize_user_max_mb(): Clamp operator input for the size override
    - default_user_max_mb(): Initial override value shown to the operator

Used By:
    - importer.pipeline: Size/format gate and conflict resolution
    - gui.controller: Operator-facing max-size override
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
DEFAULT_MAX_FILE_SIZE = 10 * MIB
# Operator overrides at or below this are replaced by MIN_USER_MAX_MB
USER_MAX_MB_FLOOR = 0.1
MIN_USER_MAX_MB = 0.2


class ConflictStrategy(str, Enum):
    """Policy applied when an incoming namespace URI is already loaded."""

    REJECT = "REJECT"
    RENAME = "RENAME"
    # MERGE currently behaves exactly like WARN_AND_CONTINUE
    MERGE = "MERGE"
    WARN_AND_CONTINUE = "WARN_AND_CONTINUE"


@dataclass(frozen=True)
class ImportConfig:
    """
    Configuration for a nodeset import session.

    Attributes:
        max_file_size: Default per-file size limit in bytes (10 MiB).
        user_max_file_size_mb: Operator override in MiB; used instead of
            max_file_size when set and positive.
        accepted_formats: Accepted file name extensions.
        namespace_conflict_strategy: Strategy for namespace URI collisions.
        reset_delay_s: Delay before the upload state returns to SELECT_FILE.
        close_delay_s: Delay before a GUI close request after a success.
        notification_limit: Capacity of the notification buffer.
        recent_limit: Capacity of the recent-files history.
    """
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    user_max_file_size_mb: Optional[float] = None
    accepted_formats: Tuple[str, ...] = (".xml",)
    namespace_conflict_strategy: ConflictStrategy = ConflictStrategy.WARN_AND_CONTINUE
    reset_delay_s: float = 3.0
    close_delay_s: float = 1.5
    notification_limit: int = 5
    recent_limit: int = 5

    @property
    def effective_max_file_size(self) -> int:
        """Size limit in bytes after applying the operator override."""
        override = self.user_max_file_size_mb
        if override and override > 0:
            return round(override * MIB)
        return self.max_file_size

    def accepts_file_name(self, file_name: str) -> bool:
        """Check the file name against the accepted extensions (case-insensitive)."""
        lowered = file_name.lower()
        return any(lowered.endswith(fmt.lower()) for fmt in self.accepted_formats)

    def with_user_max_mb(self, value: Any) -> ImportConfig:
        """Return a copy with a normalized operator size override."""
        return replace(self, user_max_file_size_mb=normalize_user_max_mb(value))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ImportConfig:
        """
        Build a config from untrusted settings data.

        Unknown keys are ignored and malformed values fall back to the
        defaults. Never raises for bad input.

        Args:
            raw: Mapping with any of the keys maxFileSize, userMaxFileSizeMB,
                acceptedFormats, namespaceConflictStrategy (camelCase as
                stored by the settings file) or the snake_case field names.
        """
        defaults = cls()
        if not isinstance(raw, Mapping):
            logger.warning(f"Ignoring malformed import settings: {type(raw).__name__}")
            return defaults

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in raw:
                    return raw[key]
            return None

        max_size = _safe_int(pick("maxFileSize", "max_file_size"), defaults.max_file_size)
        if max_size <= 0:
            max_size = defaults.max_file_size

        user_mb = pick("userMaxFileSizeMB", "user_max_file_size_mb")
        user_override = normalize_user_max_mb(user_mb) if user_mb is not None else None

        formats_raw = pick("acceptedFormats", "accepted_formats")
        formats = defaults.accepted_formats
        if isinstance(formats_raw, (list, tuple)):
            cleaned = tuple(
                str(fmt).strip().lower() for fmt in formats_raw
                if isinstance(fmt, str) and fmt.strip()
            )
            if cleaned:
                formats = cleaned

        strategy = defaults.namespace_conflict_strategy
        strategy_raw = pick("namespaceConflictStrategy", "namespace_conflict_strategy")
        if isinstance(strategy_raw, ConflictStrategy):
            strategy = strategy_raw
        elif strategy_raw is not None:
            try:
                strategy = ConflictStrategy(str(strategy_raw).upper())
            except ValueError:
                logger.warning(f"Unknown namespace conflict strategy {strategy_raw!r}, using {strategy.value}")

        return cls(
            max_file_size=max_size,
            user_max_file_size_mb=user_override,
            accepted_formats=formats,
            namespace_conflict_strategy=strategy,
            reset_delay_s=_safe_float(pick("resetDelay", "reset_delay_s"), defaults.reset_delay_s),
            close_delay_s=_safe_float(pick("closeDelay", "close_delay_s"), defaults.close_delay_s),
        )


def normalize_user_max_mb(value: Any) -> float:
    """
    Clamp an operator-entered max size (MiB).

    Non-numeric input and anything at or below 0.1 MiB becomes 0.2 MiB.

    Example:
        >>> normalize_user_max_mb("abc")
        0.2
        >>> normalize_user_max_mb(25)
        25.0
    """
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return MIN_USER_MAX_MB
    if not math.isfinite(parsed) or parsed <= USER_MAX_MB_FLOOR:
        return MIN_USER_MAX_MB
    return parsed


def default_user_max_mb(max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> float:
    """Max size in MiB rounded to one decimal, as first shown to the operator."""
    return round((max_file_size / MIB) * 10) / 10


def _safe_int(value: Any, default: int) -> int:
    """Safely convert a value to int, returning default on failure."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def _safe_float(value: Any, default: float) -> float:
    """Safely convert a value to a finite non-negative float."""
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = float(value)
    except (ValueError, TypeError):
        return default
    if math.isnan(parsed) or math.isinf(parsed) or parsed < 0:
        return default
    return parsed

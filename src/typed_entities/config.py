"""Runtime configuration for typed_entities.

This module owns all environment variable parsing and validation. Other
modules receive a typed config object instead of reading the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from typed_entities.errors import ConfigError
from typed_entities.types import SumTypeMode

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EntityConfig:
    """Validated configuration.

    Attributes:
        namespace: Store namespace used when a Dao does not name one.
        sum_type_mode: How sum types are written and read.
        log_level: Minimum level for ``configure_logging``.
    """

    namespace: str = ""
    sum_type_mode: SumTypeMode = SumTypeMode.UNTAGGED
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> EntityConfig:
        """Build config from process environment variables.

        Reads ``TYPED_ENTITIES_NAMESPACE``, ``TYPED_ENTITIES_SUM_TYPE_MODE``
        and ``TYPED_ENTITIES_LOG_LEVEL``.

        Raises:
            ConfigError: If an environment value is invalid.
        """
        return cls(
            namespace=os.getenv("TYPED_ENTITIES_NAMESPACE", "").strip(),
            sum_type_mode=_parse_sum_type_mode(os.getenv("TYPED_ENTITIES_SUM_TYPE_MODE", "untagged")),
            log_level=_parse_log_level(os.getenv("TYPED_ENTITIES_LOG_LEVEL", "WARNING")),
        )


def _parse_sum_type_mode(raw_value: str) -> SumTypeMode:
    try:
        return SumTypeMode(raw_value.strip().lower())
    except ValueError as e:
        choices = ", ".join(m.value for m in SumTypeMode)
        raise ConfigError(
            f"Invalid TYPED_ENTITIES_SUM_TYPE_MODE {raw_value!r}; expected one of: {choices}"
        ) from e


def _parse_log_level(raw_value: str) -> str:
    level = raw_value.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(
            f"Invalid TYPED_ENTITIES_LOG_LEVEL {raw_value!r}; expected one of: {', '.join(LOG_LEVELS)}"
        )
    return level

"""Search configuration for elementfinder.

Values default to the tuned constants of the viewer extension and can be
overridden through environment variables or explicit keyword arguments.

Environment Variables:
    ELEMENTFINDER_BATCH_SIZE: Oracle calls in flight per traversal batch (default: 20)
    ELEMENTFINDER_PROPERTY_BATCH_SIZE: Batch size for property scans (default: 50)
    ELEMENTFINDER_DEEP_SCAN_MAX_NODES: Leaf cap for the deep substring scan (default: 1000)
    ELEMENTFINDER_PROPERTY_EARLY_EXIT_MIN_VISITED: Nodes scanned before a property
        scan may stop on its first matches (default: 500)
    ELEMENTFINDER_ORACLE_TIMEOUT: Per-call property fetch timeout in seconds,
        0 disables (default: 10.0)
    ELEMENTFINDER_MAX_EXECUTION_TIME: Deadline for a single traversal in
        seconds, 0 disables (default: 0)
    ELEMENTFINDER_NATIVE_SEARCH_FIELDS: Comma-separated attribute names for the
        host-native search (default: "Name")
    ELEMENTFINDER_DEBUG: Enable verbose match logging (default: "false")
"""

import logging
import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from elementfinder.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "ELEMENTFINDER_"

# Field name -> environment variable suffix
_ENV_FIELDS: Dict[str, str] = {
    "batch_size": "BATCH_SIZE",
    "property_batch_size": "PROPERTY_BATCH_SIZE",
    "deep_scan_max_nodes": "DEEP_SCAN_MAX_NODES",
    "property_early_exit_min_visited": "PROPERTY_EARLY_EXIT_MIN_VISITED",
    "oracle_timeout": "ORACLE_TIMEOUT",
    "max_execution_time": "MAX_EXECUTION_TIME",
    "native_search_fields": "NATIVE_SEARCH_FIELDS",
    "debug": "DEBUG",
}


class SearchConfig(BaseModel):
    """Tunable limits for traversals, scans and the strategy cascade."""

    batch_size: int = Field(default=20, ge=1, description="Oracle calls per batch")
    property_batch_size: int = Field(
        default=50, ge=1, description="Oracle calls per batch in property scans"
    )
    deep_scan_max_nodes: int = Field(
        default=1000, ge=0, description="Leaf nodes inspected by the deep scan (0 = unlimited)"
    )
    property_early_exit_min_visited: Optional[int] = Field(
        default=500,
        ge=0,
        description="Scanned nodes required before a property scan stops on a hit",
    )
    oracle_timeout: float = Field(
        default=10.0, ge=0.0, description="Per-call oracle timeout in seconds (0 = none)"
    )
    max_execution_time: float = Field(
        default=0.0, ge=0.0, description="Traversal deadline in seconds (0 = none)"
    )
    native_search_fields: List[str] = Field(default_factory=lambda: ["Name"])
    property_aliases: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Extra display-name aliases keyed by canonical property name",
    )
    debug: bool = Field(
        default=False, description="Log every match at TRACE level on the package logger"
    )

    @field_validator("native_search_fields", mode="before")
    @classmethod
    def _split_fields(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "SearchConfig":
        """Build a configuration from environment variables.

        Explicit keyword overrides win over the environment.

        Raises:
            ConfigurationError: If a value cannot be validated
        """
        values: Dict[str, Any] = {}
        for field_name, suffix in _ENV_FIELDS.items():
            raw = os.getenv(f"{ENV_PREFIX}{suffix}")
            if raw is None or raw.strip() == "":
                continue
            if field_name == "debug":
                values[field_name] = raw.strip().lower() in ("1", "true", "yes", "on")
            else:
                values[field_name] = raw.strip()
        values.update(overrides)

        try:
            return cls(**values)
        except ValidationError as e:
            fields = [".".join(str(loc) for loc in err["loc"]) for err in e.errors()]
            raise ConfigurationError(
                f"Invalid search configuration: {', '.join(fields)}",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e


_default_config: Optional[SearchConfig] = None


def get_search_config() -> SearchConfig:
    """Return the process default configuration, reading the environment once."""
    global _default_config
    if _default_config is None:
        _default_config = SearchConfig.from_env()
        logger.debug(f"Loaded search configuration: {_default_config.model_dump()}")
    return _default_config


def set_search_config(config: Optional[SearchConfig]) -> None:
    """Replace the process default configuration (None re-reads the environment)."""
    global _default_config
    _default_config = config


__all__ = [
    "SearchConfig",
    "get_search_config",
    "set_search_config",
]

import os
from dataclasses import dataclass, field
from typing import Any

from .constants import (
    DEFAULT_SOCKET,
    MULLVAD_SUFFIX,
    PER_REGION,
    PROBE_CONCURRENCY,
    PROBE_TIMEOUT,
    TOP_REGIONS,
)


def _env_str(name: str, default: str) -> Any:
    return field(default_factory=lambda: os.getenv(name, default))


def _env_int(name: str, default: int) -> Any:
    return field(default_factory=lambda: int(os.getenv(name, str(default))))


def _env_float(name: str, default: float) -> Any:
    return field(default_factory=lambda: float(os.getenv(name, str(default))))


def _env_bool(name: str, default: str = "False") -> Any:
    return field(
        default_factory=lambda: os.getenv(name, default).lower() in ("1", "true", "yes")
    )


@dataclass(frozen=True)
class SelectionOptions:
    """Per-run selection settings, passed explicitly into each operation."""

    country: str = ""
    prefer_priority: bool = False
    top_regions: int = TOP_REGIONS
    per_region: int = PER_REGION
    probe_timeout: float = PROBE_TIMEOUT
    concurrency: int = PROBE_CONCURRENCY
    provider_suffix: str = MULLVAD_SUFFIX

    def __post_init__(self) -> None:
        if self.top_regions < 1:
            raise ValueError("top_regions must be at least 1")
        if self.per_region < 1:
            raise ValueError("per_region must be at least 1")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.probe_timeout <= 0:
            raise ValueError("probe_timeout must be positive")


@dataclass
class AppSettings:
    """Centralized configuration read from the environment"""

    # Daemon connection
    SOCKET_PATH: str = _env_str("EXITNODE_SOCKET", DEFAULT_SOCKET)
    PROVIDER_SUFFIX: str = _env_str("EXITNODE_PROVIDER_SUFFIX", MULLVAD_SUFFIX)

    # Latency probing
    PROBE_TIMEOUT: float = _env_float("EXITNODE_PROBE_TIMEOUT", PROBE_TIMEOUT)
    TOP_REGIONS: int = _env_int("EXITNODE_TOP_REGIONS", TOP_REGIONS)
    PER_REGION: int = _env_int("EXITNODE_PER_REGION", PER_REGION)
    PROBE_CONCURRENCY: int = _env_int("EXITNODE_PROBE_CONCURRENCY", PROBE_CONCURRENCY)
    PREFER_PRIORITY: bool = _env_bool("EXITNODE_PREFER_PRIORITY")

    # Logging
    LOG_LEVEL: str = _env_str("LOG_LEVEL", "WARNING")
    MASK_SENSITIVE_DATA: bool = _env_bool("MASK_SENSITIVE_DATA", "True")
    LOG_FILE: str = _env_str("EXITNODE_LOG_FILE", "")

    def selection_options(self, **overrides: Any) -> SelectionOptions:
        """Build run options from these settings; ``None`` overrides are ignored."""
        options: dict[str, Any] = {
            "prefer_priority": self.PREFER_PRIORITY,
            "top_regions": self.TOP_REGIONS,
            "per_region": self.PER_REGION,
            "probe_timeout": self.PROBE_TIMEOUT,
            "concurrency": self.PROBE_CONCURRENCY,
            "provider_suffix": self.PROVIDER_SUFFIX,
        }
        options.update({key: value for key, value in overrides.items() if value is not None})
        return SelectionOptions(**options)

"""Data model for watchdog configuration."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class UnsupportedConfiguration(Exception):
    """Requested watchdog type is incompatible with the host."""

    pass


class InvalidInput(Exception):
    """Malformed numeric or path input."""

    pass


IPMI_MODULE = "ipmi_watchdog"
TCO_MODULE = "iTCO_wdt"
SOFT_MODULE = "softdog"


class WatchdogType(str, Enum):
    """Watchdog driver selection strategy."""

    AUTO = "auto"
    BEST = "best"
    TCO = "tco"
    SOFT = "soft"
    IPMI = "ipmi"

    @classmethod
    def parse(cls, value: "str | WatchdogType") -> "WatchdogType":
        """
        Parse a watchdog type from a string.

        Raises:
            UnsupportedConfiguration: If the value is not a known type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedConfiguration(f"Unknown watchdog type: {value}") from None


@dataclass(frozen=True)
class HostFacts:
    """Snapshot of the host facts the selector depends on."""

    is_virtual: bool
    cpu_vendor: str
    has_ipmi_support: bool
    total_memory_bytes: int
    page_size_bytes: int
    hardware_model: str = "x86_64"
    processor_count: int = 1

    @property
    def is_intel(self) -> bool:
        """True if the CPU vendor names Intel (model string or vendor_id)."""
        vendor = self.cpu_vendor.strip().lower()
        return vendor.startswith("intel") or vendor.startswith("genuineintel")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WatchdogDecision:
    """Kernel module to load and whether Intel TCO must be blacklisted."""

    module_to_load: str | None
    blacklist_intel_tco: bool = False

    def __post_init__(self) -> None:
        if self.blacklist_intel_tco and self.module_to_load == TCO_MODULE:
            raise ValueError(f"Cannot blacklist {TCO_MODULE} while loading it")


@dataclass(frozen=True)
class FileWatch:
    """A file whose modification time must change within a window."""

    path: str
    max_seconds_unchanged: int


@dataclass(frozen=True)
class RepairCommand:
    """Repair binary run before the watchdog reboots the host."""

    path: str
    timeout_seconds: int | None = None
    max_attempts: int | None = None


@dataclass(frozen=True)
class MonitoringThresholds:
    """User-supplied monitoring thresholds for the watchdog daemon."""

    load_per_core_1m: int | None = None
    load_per_core_5m: int | None = None
    load_per_core_15m: int | None = None
    min_mem_percent: int | None = None
    files_change: tuple[FileWatch, ...] = field(default_factory=tuple)
    watchdog_timeout: int = 300
    repair: RepairCommand | None = None


@dataclass(frozen=True)
class WatchdogConfiguration:
    """Everything needed to render and apply the watchdog setup."""

    decision: WatchdogDecision
    thresholds: MonitoringThresholds
    min_free_pages: int | None = None
    max_load_1: int | None = None
    max_load_5: int | None = None
    max_load_15: int | None = None

    @property
    def module_to_load(self) -> str | None:
        return self.decision.module_to_load

    @property
    def blacklist_intel_tco(self) -> bool:
        return self.decision.blacklist_intel_tco

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dict suitable for JSON output."""
        data = asdict(self)
        data["thresholds"]["files_change"] = [
            asdict(watch) for watch in self.thresholds.files_change
        ]
        return data

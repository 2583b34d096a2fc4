"""Configuration loading with layered overrides."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from watchdogctl.core.model import (
    FileWatch,
    InvalidInput,
    MonitoringThresholds,
    RepairCommand,
    WatchdogType,
)

SYSTEM_CONFIG = Path("/etc/watchdogctl/config.yaml")
PROJECT_CONFIG = Path(".watchdogctl.yaml")


def user_config_path() -> Path:
    return Path.home() / ".config" / "watchdogctl" / "config.yaml"


@dataclass(frozen=True)
class WatchdogOptions:
    """Validated user options."""

    type: WatchdogType = WatchdogType.BEST
    thresholds: MonitoringThresholds = field(default_factory=MonitoringThresholds)
    package: str = "watchdog"
    service: str = "watchdog"
    config_path: str = "/etc/watchdog.conf"
    device: str = "/dev/watchdog"
    disable_systemd_watchdog: bool = True


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML config file if it exists.

    Raises:
        InvalidInput: If the file is not valid YAML or not a mapping
    """
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidInput(f"Invalid YAML in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidInput(f"Cannot read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput(f"Config file must contain a mapping: {path}")
    return data


def load_layered_config(explicit: Path | None = None) -> dict[str, Any]:
    """Merge system, user, project and explicit config files, later wins."""
    layers = [SYSTEM_CONFIG, user_config_path(), PROJECT_CONFIG]
    if explicit is not None:
        if not explicit.exists():
            raise InvalidInput(f"Config file not found: {explicit}")
        layers.append(explicit)

    merged: dict[str, Any] = {}
    for path in layers:
        merged.update(load_config_file(path))
    return merged


def _int(data: dict[str, Any], key: str, minimum: int, maximum: int | None = None) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{key} must be an integer: {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bound = f"{minimum}-{maximum}" if maximum is not None else f">= {minimum}"
        raise InvalidInput(f"{key} must be {bound}: {value}")
    return value


def _bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise InvalidInput(f"{key} must be true or false: {value!r}")
    return value


def _absolute_path(value: Any, key: str) -> str:
    if not isinstance(value, str) or not value.startswith("/"):
        raise InvalidInput(f"{key} must be an absolute path: {value!r}")
    return value


def _files_change(entries: Any) -> tuple[FileWatch, ...]:
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise InvalidInput(f"files_change must be a list: {entries!r}")

    watches = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise InvalidInput(f"files_change entries must be mappings: {entry!r}")
        path = _absolute_path(entry.get("path"), "files_change.path")
        seconds = _int(entry, "seconds", 1)
        if seconds is None:
            raise InvalidInput(f"files_change entry for {path} needs seconds")
        watches.append(FileWatch(path, seconds))
    return tuple(watches)


def _repair(data: dict[str, Any]) -> RepairCommand | None:
    timeout = _int(data, "repair_timeout", 0)
    maximum = _int(data, "repair_maximum", 0)
    binary = data.get("repair_binary")
    if binary is None:
        if timeout is not None or maximum is not None:
            raise InvalidInput("repair_timeout and repair_maximum need repair_binary")
        return None
    return RepairCommand(_absolute_path(binary, "repair_binary"), timeout, maximum)


def parse_options(data: dict[str, Any]) -> WatchdogOptions:
    """
    Validate raw config data into WatchdogOptions.

    Raises:
        UnsupportedConfiguration: If type is not a known watchdog type
        InvalidInput: If any value is malformed or out of range
    """
    timeout = _int(data, "watchdog_timeout", 1)
    thresholds = MonitoringThresholds(
        load_per_core_1m=_int(data, "load_per_core_1m", 1),
        load_per_core_5m=_int(data, "load_per_core_5m", 1),
        load_per_core_15m=_int(data, "load_per_core_15m", 1),
        min_mem_percent=_int(data, "min_mem_percent", 1, 100),
        files_change=_files_change(data.get("files_change")),
        watchdog_timeout=timeout if timeout is not None else 300,
        repair=_repair(data),
    )

    defaults = WatchdogOptions()
    return WatchdogOptions(
        type=WatchdogType.parse(data.get("type", defaults.type)),
        thresholds=thresholds,
        package=str(data.get("package", defaults.package)),
        service=str(data.get("service", defaults.service)),
        config_path=_absolute_path(data.get("config_path", defaults.config_path), "config_path"),
        device=_absolute_path(data.get("device", defaults.device), "device"),
        disable_systemd_watchdog=_bool(
            data, "disable_systemd_watchdog", defaults.disable_systemd_watchdog
        ),
    )


def load_options(
    explicit: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> WatchdogOptions:
    """
    Load options with system -> user -> project -> explicit -> overrides precedence.

    Args:
        explicit: Config file given on the command line
        overrides: Values from command-line flags; None values are ignored

    Returns:
        Validated WatchdogOptions
    """
    data = load_layered_config(explicit)
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return parse_options(data)

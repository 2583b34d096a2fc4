"""Render configuration files for the watchdog daemon and kernel modules."""

from watchdogctl.core.model import WatchdogConfiguration

HEADER = "# Managed by watchdogctl. Local changes will be overwritten."
DEFAULT_DEVICE = "/dev/watchdog"


def _line(key: str, value: object) -> str:
    return f"{key} = {value}"


def render_watchdog_conf(config: WatchdogConfiguration, device: str = DEFAULT_DEVICE) -> str:
    """
    Render watchdog.conf for the watchdog daemon.

    Optional thresholds are omitted when unset. File watches keep their
    order, each file line directly followed by its change line.
    """
    thresholds = config.thresholds
    lines = [
        HEADER,
        "",
        _line("watchdog-device", device),
        _line("watchdog-timeout", thresholds.watchdog_timeout),
    ]

    for key, value in (
        ("max-load-1", config.max_load_1),
        ("max-load-5", config.max_load_5),
        ("max-load-15", config.max_load_15),
        ("min-memory", config.min_free_pages),
    ):
        if value is not None:
            lines.append(_line(key, value))

    for watch in thresholds.files_change:
        lines.append(_line("file", watch.path))
        lines.append(_line("change", watch.max_seconds_unchanged))

    repair = thresholds.repair
    if repair is not None:
        lines.append(_line("repair-binary", repair.path))
        if repair.timeout_seconds is not None:
            lines.append(_line("repair-timeout", repair.timeout_seconds))
        if repair.max_attempts is not None:
            lines.append(_line("repair-maximum", repair.max_attempts))

    lines.append(_line("realtime", "yes"))
    lines.append(_line("priority", 1))

    return "\n".join(lines) + "\n"


def render_modules_load(module: str) -> str:
    """Render a modules-load.d file loading one module."""
    return f"{HEADER}\n{module}\n"


def render_blacklist(module: str) -> str:
    """Render a modprobe.d file blacklisting one module."""
    return f"{HEADER}\nblacklist {module}\n"


def render_systemd_dropin() -> str:
    """Render a system.conf.d drop-in disabling the systemd runtime watchdog."""
    return f"{HEADER}\n[Manager]\nRuntimeWatchdogSec=0\n"

"""Apply a watchdog configuration to the host."""

from dataclasses import dataclass, field
from typing import Any

from watchdogctl.core.config import WatchdogOptions
from watchdogctl.core.context import Context
from watchdogctl.core.logging import RunLogger
from watchdogctl.core.model import TCO_MODULE, WatchdogConfiguration
from watchdogctl.core.render import (
    render_blacklist,
    render_modules_load,
    render_systemd_dropin,
    render_watchdog_conf,
)
from watchdogctl.lib.filesystem import file_exists, read_file, remove_file, write_file
from watchdogctl.lib.process import CommandError, check_tool, command_succeeds, run_command

MODULES_LOAD_PATH = "/etc/modules-load.d/watchdog.conf"
BLACKLIST_PATH = f"/etc/modprobe.d/blacklist-{TCO_MODULE}.conf"
SYSTEMD_DROPIN_PATH = "/etc/systemd/system.conf.d/watchdog.conf"
PROC_MODULES = "/proc/modules"


@dataclass
class Change:
    """One step of an apply run."""

    action: str
    target: str
    changed: bool


@dataclass
class ApplyResult:
    """Outcome of an apply run."""

    dry_run: bool = False
    changes: list[Change] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True if any step changed (or would change) the host."""
        return any(c.changed for c in self.changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "changed": self.changed,
            "changes": [
                {"action": c.action, "target": c.target, "changed": c.changed}
                for c in self.changes
            ],
        }


def loaded_modules(context: Context) -> set[str]:
    """Names of loaded kernel modules from /proc/modules."""
    content = read_file(PROC_MODULES, context=context, default="")
    return {line.split()[0] for line in content.splitlines() if line.strip()}


def persisted_modules(content: str) -> set[str]:
    """Module names listed in a modules-load.d file."""
    return {
        line.strip()
        for line in content.splitlines()
        if line.strip() and not line.lstrip().startswith(("#", ";"))
    }


class Applier:
    """Performs the ordered host changes for one configuration."""

    def __init__(
        self,
        options: WatchdogOptions,
        context: Context,
        logger: RunLogger | None = None,
        dry_run: bool = False,
    ):
        self.options = options
        self.context = context
        self.logger = logger
        self.result = ApplyResult(dry_run=dry_run)
        self._service_stopped = False
        self._unloaded: set[str] = set()

    @property
    def dry_run(self) -> bool:
        return self.result.dry_run

    def _record(self, action: str, target: str, changed: bool) -> bool:
        change = Change(action, target, changed)
        self.result.changes.append(change)
        if self.logger is not None:
            self.logger.step(change, dry_run=self.dry_run)
        return changed

    def _run(self, action: str, cmd: list[str]) -> None:
        if not self.dry_run:
            try:
                run_command(cmd, context=self.context)
            except CommandError as e:
                if self.logger is not None:
                    self.logger.error(str(e), action=action, cause=str(e.__cause__))
                raise
        self._record(action, " ".join(cmd), True)

    def ensure_file(self, action: str, path: str, content: str) -> bool:
        if self.dry_run:
            changed = not (
                file_exists(path, context=self.context)
                and read_file(path, context=self.context) == content
            )
        else:
            changed = write_file(path, content, context=self.context)
        return self._record(action, path, changed)

    def ensure_absent(self, action: str, path: str) -> bool:
        if self.dry_run:
            changed = file_exists(path, context=self.context)
        else:
            changed = remove_file(path, context=self.context)
        return self._record(action, path, changed)

    def ensure_package(self) -> bool:
        """Install the watchdog package if missing."""
        package = self.options.package
        if check_tool("dpkg", context=self.context):
            query = ["dpkg", "-s", package]
            install = ["apt-get", "install", "-y", package]
        elif check_tool("rpm", context=self.context):
            query = ["rpm", "-q", package]
            manager = "dnf" if check_tool("dnf", context=self.context) else "yum"
            install = [manager, "install", "-y", package]
        else:
            raise CommandError("No supported package manager found (dpkg or rpm)")

        if command_succeeds(query, context=self.context):
            self._record("install package", package, False)
            return False
        self._run("install package", install)
        return True

    def stop_service(self) -> None:
        """Stop the daemon so it releases /dev/watchdog; at most once per run."""
        if self._service_stopped:
            return
        service = self.options.service
        if command_succeeds(["systemctl", "is-active", service], context=self.context):
            self._run("stop service", ["systemctl", "stop", service])
            self._service_stopped = True

    def unload_module(self, action: str, module: str) -> bool:
        """Unload a loaded watchdog driver, stopping the daemon first."""
        if module in self._unloaded or module not in loaded_modules(self.context):
            return False
        self.stop_service()
        self._run(action, ["modprobe", "-r", module])
        self._unloaded.add(module)
        return True

    def ensure_blacklist(self, blacklist: bool) -> bool:
        """Blacklist Intel TCO before unloading it, or drop the blacklist."""
        if not blacklist:
            return self.ensure_absent("remove TCO blacklist", BLACKLIST_PATH)

        written = self.ensure_file("blacklist TCO", BLACKLIST_PATH, render_blacklist(TCO_MODULE))
        unloaded = self.unload_module("unload TCO", TCO_MODULE)
        return written or unloaded

    def ensure_module(self, module: str) -> bool:
        """Persist the selected module, unload the ones it replaces, and load it."""
        previous = persisted_modules(read_file(MODULES_LOAD_PATH, context=self.context, default=""))
        changed = self.ensure_file("persist module", MODULES_LOAD_PATH, render_modules_load(module))
        for stale in sorted(previous - {module}):
            if self.unload_module("unload previous module", stale):
                changed = True
        if module not in loaded_modules(self.context):
            self._run("load module", ["modprobe", module])
            changed = True
        return changed

    def ensure_systemd_watchdog_disabled(self) -> None:
        if self.ensure_file(
            "disable systemd watchdog", SYSTEMD_DROPIN_PATH, render_systemd_dropin()
        ):
            self._run("reexec systemd", ["systemctl", "daemon-reexec"])

    def ensure_service(self, restart: bool) -> None:
        """Enable the service and make sure it runs the current config."""
        service = self.options.service
        if command_succeeds(["systemctl", "is-enabled", service], context=self.context):
            self._record("enable service", service, False)
        else:
            self._run("enable service", ["systemctl", "enable", service])

        if restart or self._service_stopped:
            self._run("restart service", ["systemctl", "restart", service])
        elif command_succeeds(["systemctl", "is-active", service], context=self.context):
            self._record("start service", service, False)
        else:
            self._run("start service", ["systemctl", "start", service])

    def apply(self, config: WatchdogConfiguration) -> ApplyResult:
        installed = self.ensure_package()

        driver_changed = False
        module = config.module_to_load
        if module is not None:
            blacklist_changed = self.ensure_blacklist(config.blacklist_intel_tco)
            module_changed = self.ensure_module(module)
            driver_changed = blacklist_changed or module_changed

        if self.options.disable_systemd_watchdog:
            self.ensure_systemd_watchdog_disabled()

        conf_changed = self.ensure_file(
            "write config",
            self.options.config_path,
            render_watchdog_conf(config, device=self.options.device),
        )
        self.ensure_service(restart=installed or driver_changed or conf_changed)
        return self.result


def apply_configuration(
    config: WatchdogConfiguration,
    options: WatchdogOptions,
    context: Context | None = None,
    logger: RunLogger | None = None,
    dry_run: bool = False,
) -> ApplyResult:
    """
    Apply a watchdog configuration.

    Steps run in order: package, TCO blacklist, module, systemd watchdog,
    watchdog.conf, service. Files are only written when their content
    differs. A watchdog driver being replaced is unloaded with the
    daemon stopped, and the service restarts when the package, the
    loaded driver or the config changed.

    Args:
        config: Assembled watchdog configuration
        options: User options (package, service, paths)
        context: Execution context (for testing)
        logger: Optional run logger
        dry_run: Report changes without making them

    Returns:
        ApplyResult listing every step

    Raises:
        CommandError: If a host command fails
        FileError: If a file cannot be written or removed
    """
    if context is None:
        context = Context()

    if logger is not None:
        logger.info(
            "apply started",
            module=config.module_to_load,
            blacklist_intel_tco=config.blacklist_intel_tco,
            dry_run=dry_run,
        )

    result = Applier(options, context, logger=logger, dry_run=dry_run).apply(config)

    if logger is not None:
        logger.info("apply finished", changed=result.changed)
    return result

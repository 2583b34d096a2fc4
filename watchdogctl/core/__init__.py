"""Core watchdogctl functionality."""

from watchdogctl.core.apply import ApplyResult, apply_configuration
from watchdogctl.core.assembler import assemble
from watchdogctl.core.config import WatchdogOptions, load_options
from watchdogctl.core.context import Context
from watchdogctl.core.facts import gather_facts, load_facts
from watchdogctl.core.memory import min_free_pages
from watchdogctl.core.model import (
    HostFacts,
    InvalidInput,
    MonitoringThresholds,
    UnsupportedConfiguration,
    WatchdogConfiguration,
    WatchdogDecision,
    WatchdogType,
)
from watchdogctl.core.output import Output
from watchdogctl.core.selector import select_watchdog

__all__ = [
    "ApplyResult",
    "Context",
    "HostFacts",
    "InvalidInput",
    "MonitoringThresholds",
    "Output",
    "UnsupportedConfiguration",
    "WatchdogConfiguration",
    "WatchdogDecision",
    "WatchdogOptions",
    "WatchdogType",
    "apply_configuration",
    "assemble",
    "gather_facts",
    "load_facts",
    "load_options",
    "min_free_pages",
    "select_watchdog",
]

"""Watchdog kernel module selection."""

from dataclasses import dataclass
from typing import Callable

from watchdogctl.core.model import (
    IPMI_MODULE,
    SOFT_MODULE,
    TCO_MODULE,
    HostFacts,
    UnsupportedConfiguration,
    WatchdogDecision,
    WatchdogType,
)


@dataclass(frozen=True)
class Rule:
    """
    One row of the selection table.

    Exactly one of decision or error is set. When blacklist_if_intel is
    True the decision's blacklist flag is taken from the CPU vendor.
    """

    type: WatchdogType
    condition: Callable[[HostFacts], bool]
    decision: WatchdogDecision | None = None
    error: str | None = None
    blacklist_if_intel: bool = False


def _always(facts: HostFacts) -> bool:
    return True


# Evaluated in order; first match wins.
RULES: tuple[Rule, ...] = (
    Rule(WatchdogType.AUTO, _always, decision=WatchdogDecision(None, False)),
    Rule(
        WatchdogType.BEST,
        lambda f: f.has_ipmi_support,
        decision=WatchdogDecision(IPMI_MODULE),
        blacklist_if_intel=True,
    ),
    Rule(
        WatchdogType.BEST,
        lambda f: not f.is_virtual and f.is_intel,
        decision=WatchdogDecision(TCO_MODULE, False),
    ),
    Rule(WatchdogType.BEST, _always, decision=WatchdogDecision(SOFT_MODULE, False)),
    Rule(
        WatchdogType.TCO,
        lambda f: f.is_virtual,
        error="TCO unsupported on virtual machines",
    ),
    Rule(
        WatchdogType.TCO,
        lambda f: not f.is_intel,
        error="TCO unsupported on non-Intel CPU",
    ),
    Rule(WatchdogType.TCO, _always, decision=WatchdogDecision(TCO_MODULE, False)),
    Rule(
        WatchdogType.SOFT,
        lambda f: not f.is_virtual and f.is_intel,
        decision=WatchdogDecision(SOFT_MODULE, True),
    ),
    Rule(WatchdogType.SOFT, _always, decision=WatchdogDecision(SOFT_MODULE, False)),
    Rule(
        WatchdogType.IPMI,
        lambda f: not f.has_ipmi_support,
        error="IPMI unsupported on this host",
    ),
    Rule(
        WatchdogType.IPMI,
        _always,
        decision=WatchdogDecision(IPMI_MODULE),
        blacklist_if_intel=True,
    ),
)


def select_watchdog(
    watchdog_type: WatchdogType | str,
    facts: HostFacts,
    rules: tuple[Rule, ...] = RULES,
) -> WatchdogDecision:
    """
    Select the kernel watchdog module for a host.

    Args:
        watchdog_type: Requested watchdog type
        facts: Host facts snapshot
        rules: Ordered selection table

    Returns:
        WatchdogDecision for the first matching rule

    Raises:
        UnsupportedConfiguration: If the type is unknown or the matching
            rule rejects the host
    """
    watchdog_type = WatchdogType.parse(watchdog_type)

    for rule in rules:
        if rule.type is not watchdog_type or not rule.condition(facts):
            continue
        if rule.error is not None:
            raise UnsupportedConfiguration(rule.error)
        if rule.blacklist_if_intel:
            return WatchdogDecision(rule.decision.module_to_load, facts.is_intel)
        return rule.decision

    raise UnsupportedConfiguration(f"No watchdog rule matches type: {watchdog_type.value}")

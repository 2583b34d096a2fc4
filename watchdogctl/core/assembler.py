"""Combine selection and thresholds into a watchdog configuration."""

from watchdogctl.core.memory import min_free_pages
from watchdogctl.core.model import (
    HostFacts,
    MonitoringThresholds,
    WatchdogConfiguration,
    WatchdogType,
)
from watchdogctl.core.selector import select_watchdog


def _scale_load(per_core: int | None, processors: int) -> int | None:
    if per_core is None:
        return None
    return per_core * max(processors, 1)


def assemble(
    watchdog_type: WatchdogType | str,
    facts: HostFacts,
    thresholds: MonitoringThresholds,
) -> WatchdogConfiguration:
    """
    Build the complete watchdog configuration for a host.

    Args:
        watchdog_type: Requested watchdog type
        facts: Host facts snapshot
        thresholds: User-supplied monitoring thresholds

    Returns:
        WatchdogConfiguration ready for rendering

    Raises:
        UnsupportedConfiguration: From module selection
        InvalidInput: From the memory conversion
    """
    decision = select_watchdog(watchdog_type, facts)
    pages = min_free_pages(
        facts.total_memory_bytes,
        facts.page_size_bytes,
        thresholds.min_mem_percent,
    )

    return WatchdogConfiguration(
        decision=decision,
        thresholds=thresholds,
        min_free_pages=pages,
        max_load_1=_scale_load(thresholds.load_per_core_1m, facts.processor_count),
        max_load_5=_scale_load(thresholds.load_per_core_5m, facts.processor_count),
        max_load_15=_scale_load(thresholds.load_per_core_15m, facts.processor_count),
    )

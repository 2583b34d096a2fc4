"""Minimum free memory conversion."""

from watchdogctl.core.model import InvalidInput


def min_free_pages(
    total_memory_bytes: int,
    page_size_bytes: int,
    min_mem_percent: int | None,
) -> int | None:
    """
    Convert a percentage of total memory into a page count.

    Uses floor division twice: bytes first, then pages. Python integers
    do not overflow, so the intermediate product is exact.

    Args:
        total_memory_bytes: Total host memory in bytes
        page_size_bytes: Kernel page size in bytes
        min_mem_percent: Required free memory in percent (0-100), or None

    Returns:
        Minimum free pages, or None when no percentage is configured

    Raises:
        InvalidInput: On a non-positive page size, negative memory or a
            percentage outside 0-100
    """
    if min_mem_percent is None:
        return None

    if page_size_bytes <= 0:
        raise InvalidInput(f"Page size must be positive: {page_size_bytes}")
    if total_memory_bytes < 0:
        raise InvalidInput(f"Total memory must not be negative: {total_memory_bytes}")
    if not 0 <= min_mem_percent <= 100:
        raise InvalidInput(f"Minimum memory percent out of range: {min_mem_percent}")

    min_free_bytes = total_memory_bytes * min_mem_percent // 100
    return min_free_bytes // page_size_bytes

"""Filesystem utilities."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from watchdogctl.core.context import Context


class FileError(Exception):
    """Error accessing a file."""

    pass


def read_file(
    path: str,
    context: "Context | None" = None,
    default: str | None = None,
) -> str:
    """
    Read file contents.

    Args:
        path: Path to file
        context: Execution context (for testing)
        default: Default value if file doesn't exist

    Returns:
        File contents

    Raises:
        FileError: If file doesn't exist and no default provided
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    try:
        return context.read_file(path)
    except FileNotFoundError:
        if default is not None:
            return default
        raise FileError(f"File not found: {path}")
    except OSError as e:
        raise FileError(f"Cannot read {path}: {e}") from e


def file_exists(
    path: str,
    context: "Context | None" = None,
) -> bool:
    """
    Check if file exists.

    Args:
        path: Path to check
        context: Execution context (for testing)

    Returns:
        True if file exists
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    return context.file_exists(path)


def write_file(
    path: str,
    content: str,
    context: "Context | None" = None,
) -> bool:
    """
    Write file contents when they differ from what is on disk.

    Args:
        path: Path to file
        content: Desired content
        context: Execution context (for testing)

    Returns:
        True if the file was written

    Raises:
        FileError: If the file cannot be written
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    if context.file_exists(path) and read_file(path, context=context) == content:
        return False

    try:
        context.write_file(path, content)
    except OSError as e:
        raise FileError(f"Cannot write {path}: {e}") from e
    return True


def remove_file(
    path: str,
    context: "Context | None" = None,
) -> bool:
    """
    Remove a file if it exists.

    Args:
        path: Path to remove
        context: Execution context (for testing)

    Returns:
        True if a file was removed
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    if not context.file_exists(path):
        return False

    try:
        context.remove_file(path)
    except OSError as e:
        raise FileError(f"Cannot remove {path}: {e}") from e
    return True

"""Process utilities."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from watchdogctl.core.context import Context


class CommandError(Exception):
    """Error running a command."""

    pass


def run_command(
    cmd: list[str],
    context: "Context | None" = None,
    check: bool = True,
) -> str:
    """
    Run a command and return its output.

    Args:
        cmd: Command and arguments
        context: Execution context (for testing)
        check: Raise on non-zero exit

    Returns:
        Command stdout

    Raises:
        CommandError: If the command cannot be run, or check=True and it fails
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    try:
        result = context.run(cmd, check=check)
    except Exception as e:
        raise CommandError(f"Command failed: {' '.join(cmd)}") from e
    return result.stdout


def command_succeeds(
    cmd: list[str],
    context: "Context | None" = None,
) -> bool:
    """
    Run a check command and report whether it exited zero.

    Args:
        cmd: Command and arguments
        context: Execution context (for testing)

    Returns:
        True if the command exited with status 0
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    try:
        result = context.run(cmd, check=False)
    except OSError as e:
        raise CommandError(f"Command failed: {' '.join(cmd)}") from e
    return result.returncode == 0


def check_tool(
    name: str,
    context: "Context | None" = None,
    required: bool = False,
) -> bool:
    """
    Check if a tool exists in PATH.

    Args:
        name: Tool name to check
        context: Execution context (for testing)
        required: Raise if tool is missing

    Returns:
        True if tool exists

    Raises:
        CommandError: If required=True and tool is missing
    """
    if context is None:
        from watchdogctl.core.context import Context
        context = Context()

    exists = context.check_tool(name)

    if required and not exists:
        raise CommandError(f"Required tool not found: {name}")

    return exists

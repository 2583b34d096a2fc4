"""Shared utility library for watchdogctl."""

from watchdogctl.lib.filesystem import FileError, file_exists, read_file, remove_file, write_file
from watchdogctl.lib.process import CommandError, check_tool, command_succeeds, run_command

__all__ = [
    "CommandError",
    "FileError",
    "check_tool",
    "command_succeeds",
    "file_exists",
    "read_file",
    "remove_file",
    "run_command",
    "write_file",
]

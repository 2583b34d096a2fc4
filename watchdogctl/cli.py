"""Command-line interface for watchdogctl."""

import argparse
import sys
from datetime import date
from pathlib import Path

from watchdogctl import __version__
from watchdogctl.core.apply import apply_configuration
from watchdogctl.core.assembler import assemble
from watchdogctl.core.config import load_options
from watchdogctl.core.context import Context
from watchdogctl.core.facts import gather_facts, load_facts
from watchdogctl.core.logging import LOG_LEVELS, RunLogger, default_log_dir, journal_path, query_logs
from watchdogctl.core.model import HostFacts, InvalidInput, UnsupportedConfiguration, WatchdogType
from watchdogctl.core.output import Output
from watchdogctl.core.render import render_watchdog_conf
from watchdogctl.lib.filesystem import FileError
from watchdogctl.lib.process import CommandError

# Tools used while gathering facts and applying changes
REQUIRED_TOOLS = ["uname", "getconf", "modprobe", "systemctl"]
OPTIONAL_TOOLS = ["systemd-detect-virt", "dmidecode"]

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="watchdogctl",
        description="Install and configure the Linux watchdog daemon",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"watchdogctl {__version__}",
    )
    parser.add_argument(
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file (overrides system, user and project config)",
    )
    parser.add_argument(
        "--facts",
        type=Path,
        help="Load host facts from a YAML file instead of gathering them",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for run logs (default: ~/var/log/watchdogctl)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("facts", help="Show gathered host facts")

    for name, help_text in (
        ("plan", "Show the computed watchdog configuration"),
        ("render", "Print the rendered watchdog.conf"),
        ("apply", "Install and configure the watchdog"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--type",
            choices=[t.value for t in WatchdogType],
            help="Watchdog type (overrides config)",
        )
        sub.add_argument(
            "--timeout",
            type=int,
            dest="watchdog_timeout",
            help="Watchdog timeout in seconds (overrides config)",
        )
        if name == "apply":
            sub.add_argument(
                "--dry-run",
                action="store_true",
                help="Show what would change without changing anything",
            )

    subparsers.add_parser("doctor", help="Check tool availability")

    logs_parser = subparsers.add_parser("logs", help="Show apply run logs")
    logs_parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Date to query, YYYY-MM-DD (default: today)",
    )
    logs_parser.add_argument(
        "--level",
        choices=list(LOG_LEVELS),
        default="debug",
        help="Minimum log level (default: debug)",
    )
    logs_parser.add_argument(
        "--action",
        default=None,
        help="Only steps with this action (e.g. \"load module\")",
    )
    logs_parser.add_argument(
        "--changed",
        action="store_true",
        help="Only steps that changed the host",
    )
    logs_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of entries",
    )

    return parser


def _facts(args: argparse.Namespace, context: Context) -> HostFacts:
    if args.facts is not None:
        return load_facts(args.facts)
    return gather_facts(context)


def _overrides(args: argparse.Namespace) -> dict:
    return {
        "type": getattr(args, "type", None),
        "watchdog_timeout": getattr(args, "watchdog_timeout", None),
    }


def cmd_facts(args: argparse.Namespace, context: Context) -> int:
    """Show gathered host facts."""
    facts = _facts(args, context)

    output = Output()
    output.emit(facts.to_dict())
    output.emit({"is_intel": facts.is_intel})
    output.render(args.format, title="Host facts")
    return EXIT_OK


def cmd_plan(args: argparse.Namespace, context: Context) -> int:
    """Show the computed configuration."""
    options = load_options(args.config, _overrides(args))
    config = assemble(options.type, _facts(args, context), options.thresholds)

    output = Output()
    output.emit({"type": options.type.value})
    output.emit(config.to_dict())
    output.render(args.format, title="Watchdog plan")
    return EXIT_OK


def cmd_render(args: argparse.Namespace, context: Context) -> int:
    """Print the rendered watchdog.conf."""
    options = load_options(args.config, _overrides(args))
    config = assemble(options.type, _facts(args, context), options.thresholds)

    print(render_watchdog_conf(config, device=options.device), end="")
    return EXIT_OK


def cmd_apply(args: argparse.Namespace, context: Context) -> int:
    """Install and configure the watchdog."""
    options = load_options(args.config, _overrides(args))
    # Selection and conversion fail here, before any host change
    config = assemble(options.type, _facts(args, context), options.thresholds)

    result = apply_configuration(
        config,
        options,
        context=context,
        logger=RunLogger(journal_path(args.log_dir)),
        dry_run=args.dry_run,
    )

    output = Output()
    if args.dry_run:
        status = "dry-run"
    else:
        status = "changed" if result.changed else "unchanged"
    output.emit({"status": status, "module": config.module_to_load})
    output.emit(result.to_dict())
    output.render(args.format, title="Watchdog apply")
    return EXIT_OK


def cmd_doctor(args: argparse.Namespace, context: Context) -> int:
    """Check tool availability."""
    tool_status = {tool: context.check_tool(tool) for tool in REQUIRED_TOOLS + OPTIONAL_TOOLS}
    package_managers = {tool: context.check_tool(tool) for tool in ("dpkg", "rpm")}
    missing = [tool for tool in REQUIRED_TOOLS if not tool_status[tool]]
    if not any(package_managers.values()):
        missing.append("dpkg|rpm")

    output = Output()
    output.emit({
        "status": "ok" if not missing else "missing-tools",
        "tools": tool_status,
        "package_managers": package_managers,
        "missing_tools": missing,
    })
    for tool in OPTIONAL_TOOLS:
        if not tool_status[tool]:
            output.warning(f"{tool} not found, related facts fall back to defaults")
    output.render(args.format, title="watchdogctl doctor")
    return EXIT_FAILED if missing else EXIT_OK


def _format_entry(entry: dict) -> str:
    line = f"{entry.get('timestamp', '')} [{entry.get('level', '').upper()}] {entry.get('message', '')}"
    if "target" in entry:
        line += f": {entry['target']}"
        if entry.get("changed"):
            line += " (changed)"
    return line


def cmd_logs(args: argparse.Namespace, context: Context) -> int:
    """Show apply run logs."""
    entries = query_logs(
        args.log_dir or default_log_dir(),
        log_date=args.date,
        min_level=args.level,
        action=args.action,
        changed_only=args.changed,
        limit=args.limit,
    )

    if args.format == "json":
        import json
        print(json.dumps(entries, indent=2))
    elif not entries:
        print("No log entries found.")
    else:
        for entry in entries:
            print(_format_entry(entry))
    return EXIT_OK


COMMANDS = {
    "facts": cmd_facts,
    "plan": cmd_plan,
    "render": cmd_render,
    "apply": cmd_apply,
    "doctor": cmd_doctor,
    "logs": cmd_logs,
}


def main(argv: list[str] | None = None, context: Context | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    if context is None:
        context = Context()

    try:
        return COMMANDS[args.command](args, context)
    except (UnsupportedConfiguration, InvalidInput) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except (CommandError, FileError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())

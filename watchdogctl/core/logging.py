"""Apply journal.

Each day gets one JSONL file, ``{base}/{YYYY-MM-DD}/apply.jsonl``. Every
apply run appends a start entry, one entry per step and a finish entry,
all sharing the run's id. Step entries carry ``action``, ``target`` and
``changed`` as top-level fields so ``watchdogctl logs`` can filter on them.
"""

import json
import os
from datetime import date, datetime, timezone
from itertools import islice
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from watchdogctl.core.apply import Change

LOG_LEVELS = {"debug": 0, "info": 1, "warning": 2, "error": 3}
JOURNAL_NAME = "apply.jsonl"


def default_log_dir() -> Path:
    """Base log directory: ~/var/log/watchdogctl."""
    home = Path(os.environ.get("HOME", "/tmp"))
    return home / "var" / "log" / "watchdogctl"


def journal_path(base_path: Path | None = None, day: date | None = None) -> Path:
    """Journal file for a day (default: today under the default log dir)."""
    base = base_path if base_path is not None else default_log_dir()
    return base / (day or date.today()).isoformat() / JOURNAL_NAME


class RunLogger:
    """Appends the entries of one apply run to a journal file."""

    def __init__(self, log_path: Path, run_id: str | None = None):
        self.log_path = log_path
        self.run_id = run_id or datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S.%f")

    def _append(self, level: str, message: str, fields: dict[str, Any]) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "run_id": self.run_id,
            "level": level,
            "message": message,
            **fields,
        }
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")

    def info(self, message: str, **fields: Any) -> None:
        self._append("info", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._append("error", message, fields)

    def step(self, change: "Change", dry_run: bool = False) -> None:
        """Record one apply step."""
        self._append(
            "info",
            change.action,
            {
                "action": change.action,
                "target": change.target,
                "changed": change.changed,
                "dry_run": dry_run,
            },
        )


def read_journal(path: Path) -> Iterator[dict[str, Any]]:
    """Yield journal entries, skipping lines that are not JSON objects."""
    if not path.exists():
        return
    with open(path, encoding="utf-8") as f:
        for line in f:
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                # blank or cut short by an interrupted run
                continue
            if isinstance(entry, dict):
                yield entry


def query_logs(
    base_path: Path,
    log_date: date | None = None,
    min_level: str = "debug",
    action: str | None = None,
    changed_only: bool = False,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """
    Query a day's journal.

    Args:
        base_path: Base directory for logs
        log_date: Day to read (default: today)
        min_level: Minimum level to include
        action: Only step entries with this action
        changed_only: Only step entries that changed the host
        limit: Maximum number of entries

    Returns:
        Matching entries in journal order
    """
    threshold = LOG_LEVELS[min_level]

    def wanted(entry: dict[str, Any]) -> bool:
        if LOG_LEVELS.get(entry.get("level"), 0) < threshold:
            return False
        if action is not None and entry.get("action") != action:
            return False
        if changed_only and not ("action" in entry and entry.get("changed") is True):
            return False
        return True

    matches = filter(wanted, read_journal(journal_path(base_path, log_date)))
    return list(islice(matches, limit))

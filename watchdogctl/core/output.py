"""Structured output helper for CLI commands."""

import json
from typing import Any


class Output:
    """Helper for structured command output."""

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.warnings: list[str] = []
        self._printed: bool = False

    def emit(self, data: dict[str, Any]) -> None:
        """Store structured output data."""
        self.data.update(data)

    def warning(self, message: str) -> None:
        """Record a warning message."""
        self.warnings.append(message)

    def to_json(self) -> str:
        """Return data as JSON string."""
        return json.dumps(self.data, indent=2, default=str)

    def render(self, format: str = "plain", title: str | None = None) -> None:
        """Print output in the specified format.

        Args:
            format: Output format - "json" or "plain"
            title: Optional title for plain text output
        """
        if self._printed:
            return
        self._printed = True

        if not self.data:
            return

        if format == "json":
            print(self.to_json())
        else:
            self._render_plain(title)

    def _render_plain(self, title: str | None = None) -> None:
        """Render output as formatted plain text."""
        lines = []

        if title:
            lines.append(title)
            lines.append("=" * len(title))
            lines.append("")

        status = self.data.get("status")
        if status:
            status_upper = status.upper()
            if status in ("ok", "unchanged"):
                lines.append(f"[OK] Status: {status_upper}")
            elif status in ("changed", "dry-run"):
                lines.append(f"[CHANGED] Status: {status_upper}")
            else:
                lines.append(f"[FAILED] Status: {status_upper}")
            lines.append("")

        skip_keys = {"status", "warnings"}
        for key, value in self.data.items():
            if key in skip_keys:
                continue
            self._render_value(lines, key, value, indent=0)

        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  [WARNING] {warning}")

        print("\n".join(lines))

    def _render_value(self, lines: list, key: str | int, value: Any, indent: int = 0) -> None:
        """Recursively render a value with proper formatting."""
        prefix = "  " * indent

        if isinstance(key, int):
            display_key = str(key)
        else:
            display_key = str(key).replace("_", " ").title()

        if isinstance(value, dict):
            lines.append(f"{prefix}{display_key}:")
            for k, v in value.items():
                self._render_value(lines, k, v, indent + 1)
        elif isinstance(value, list):
            if not value:
                lines.append(f"{prefix}{display_key}: (none)")
                return
            lines.append(f"{prefix}{display_key}:")
            for item in value:
                if isinstance(item, dict):
                    summary = ", ".join(f"{k}={v}" for k, v in item.items())
                    lines.append(f"{prefix}  - {summary}")
                else:
                    lines.append(f"{prefix}  - {item}")
        elif isinstance(value, bool):
            lines.append(f"{prefix}{display_key}: {'yes' if value else 'no'}")
        elif value is None:
            lines.append(f"{prefix}{display_key}: -")
        else:
            lines.append(f"{prefix}{display_key}: {value}")

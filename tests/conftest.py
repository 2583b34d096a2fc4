"""Shared test fixtures."""

import subprocess
import sys
from pathlib import Path

import pytest

# Add project root to path for tests.conftest imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from watchdogctl.core.model import HostFacts  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MockContext:
    """Mock Context for testing without real system access."""

    def __init__(
        self,
        tools_available: list[str] | None = None,
        command_outputs: dict[tuple, str | tuple[int, str] | Exception] | None = None,
        file_contents: dict[str, str] | None = None,
        cpu_count: int = 1,
    ):
        self.tools_available = set(tools_available or [])
        self.command_outputs = command_outputs or {}
        self.file_contents = dict(file_contents or {})
        self._cpu_count = cpu_count
        self.commands_run: list[list[str]] = []
        self.files_written: dict[str, str] = {}
        self.files_removed: list[str] = []
        # Ordered log of writes, removals and commands
        self.events: list[tuple[str, str]] = []

    def check_tool(self, name: str) -> bool:
        """Check if tool is in mocked available list."""
        return name in self.tools_available

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """
        Return mocked command output.

        A (returncode, stdout) tuple mocks a non-zero exit; with check=True
        it raises CalledProcessError like subprocess.run does.
        """
        self.commands_run.append(cmd)
        self.events.append(("run", " ".join(cmd)))
        key = tuple(cmd)
        if key not in self.command_outputs:
            raise KeyError(f"No mock output for command: {cmd}")

        output = self.command_outputs[key]
        if isinstance(output, Exception):
            raise output

        returncode = 0
        if isinstance(output, tuple):
            returncode, output = output
        if check and returncode != 0:
            raise subprocess.CalledProcessError(returncode, cmd, output, "")

        return subprocess.CompletedProcess(
            cmd,
            returncode=returncode,
            stdout=output,
            stderr="",
        )

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        return self.file_contents[path]

    def write_file(self, path: str, content: str, mode: int = 0o644) -> None:
        """Record a write and update mocked file content."""
        self.file_contents[path] = content
        self.files_written[path] = content
        self.events.append(("write", path))

    def remove_file(self, path: str) -> None:
        """Record a removal."""
        self.file_contents.pop(path, None)
        self.files_removed.append(path)
        self.events.append(("remove", path))

    def file_exists(self, path: str) -> bool:
        """Check if path is in mocked files."""
        return path in self.file_contents

    def cpu_count(self) -> int:
        """Return mocked CPU count."""
        return self._cpu_count


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


def make_facts(**overrides) -> HostFacts:
    """HostFacts for a bare-metal Intel host without IPMI, with overrides."""
    values = {
        "is_virtual": False,
        "cpu_vendor": "GenuineIntel",
        "has_ipmi_support": False,
        "total_memory_bytes": 8_000_000_000,
        "page_size_bytes": 4096,
        "hardware_model": "x86_64",
        "processor_count": 4,
    }
    values.update(overrides)
    return HostFacts(**values)


@pytest.fixture
def facts():
    """Factory fixture for HostFacts."""
    return make_facts


def load_fixture(category: str, name: str) -> str:
    """Load a fixture file by category and name."""
    fixture_path = FIXTURES_DIR / category / name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return fixture_path.read_text()

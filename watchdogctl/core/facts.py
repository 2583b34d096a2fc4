"""Host fact gathering."""

import re
from pathlib import Path
from typing import Any

import yaml

from watchdogctl.core.context import Context
from watchdogctl.core.model import HostFacts, InvalidInput
from watchdogctl.lib.filesystem import read_file
from watchdogctl.lib.process import run_command

CPUINFO_PATH = "/proc/cpuinfo"
MEMINFO_PATH = "/proc/meminfo"

# dmidecode type 38 is the IPMI device information record
IPMI_DMI_TYPE = "38"
IPMI_MARKER = "IPMI Device Information"
IPMI_ARCHITECTURES = ("x86_64",)


def parse_cpu_vendor(cpuinfo: str) -> str:
    """Return the first vendor_id (or model name) from /proc/cpuinfo."""
    model_name = ""
    for line in cpuinfo.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if key == "vendor_id":
            return value.strip()
        if key == "model name" and not model_name:
            model_name = value.strip()
    return model_name


def has_hypervisor_flag(cpuinfo: str) -> bool:
    """Check the CPU flags for the hypervisor bit."""
    for line in cpuinfo.splitlines():
        if line.startswith("flags") and ":" in line:
            if "hypervisor" in line.split(":", 1)[1].split():
                return True
    return False


def parse_mem_total(meminfo: str) -> int:
    """
    Parse MemTotal from /proc/meminfo.

    Returns:
        Total memory in bytes

    Raises:
        InvalidInput: If MemTotal is missing or malformed
    """
    match = re.search(r"^MemTotal:\s+(\d+)\s*kB", meminfo, re.MULTILINE)
    if not match:
        raise InvalidInput("MemTotal not found in /proc/meminfo")
    return int(match.group(1)) * 1024


def parse_page_size(output: str) -> int:
    """Parse getconf PAGE_SIZE output."""
    value = output.strip()
    if not value.isdigit():
        raise InvalidInput(f"Malformed page size: {value!r}")
    return int(value)


def detect_virtual(context: Context, cpuinfo: str) -> bool:
    """Detect virtualization, preferring systemd-detect-virt."""
    if context.check_tool("systemd-detect-virt"):
        # Exits non-zero and prints "none" on bare metal
        virt = run_command(["systemd-detect-virt"], context=context, check=False).strip()
        return bool(virt) and virt != "none"
    return has_hypervisor_flag(cpuinfo)


def detect_ipmi(context: Context, is_virtual: bool, hardware_model: str) -> bool:
    """
    Detect an IPMI controller.

    Virtual machines and non-x86_64 hosts never report IPMI.
    """
    if is_virtual:
        return False
    if hardware_model not in IPMI_ARCHITECTURES:
        return False
    if not context.check_tool("dmidecode"):
        return False
    output = run_command(["dmidecode", "--type", IPMI_DMI_TYPE], context=context, check=False)
    return IPMI_MARKER in output


def gather_facts(context: Context | None = None) -> HostFacts:
    """
    Gather the host facts used for watchdog selection.

    Args:
        context: Execution context (for testing)

    Returns:
        HostFacts snapshot

    Raises:
        InvalidInput: If memory or page size cannot be parsed
        FileError: If /proc/meminfo cannot be read
        CommandError: If uname or getconf cannot be run
    """
    if context is None:
        context = Context()

    cpuinfo = read_file(CPUINFO_PATH, context=context, default="")
    hardware_model = run_command(["uname", "-m"], context=context).strip()
    is_virtual = detect_virtual(context, cpuinfo)

    return HostFacts(
        is_virtual=is_virtual,
        cpu_vendor=parse_cpu_vendor(cpuinfo),
        has_ipmi_support=detect_ipmi(context, is_virtual, hardware_model),
        total_memory_bytes=parse_mem_total(read_file(MEMINFO_PATH, context=context)),
        page_size_bytes=parse_page_size(
            run_command(["getconf", "PAGE_SIZE"], context=context)
        ),
        hardware_model=hardware_model,
        processor_count=context.cpu_count(),
    )


def _as_int(data: dict[str, Any], key: str, default: int | None = None) -> int:
    value = data.get(key, default)
    if value is None:
        raise InvalidInput(f"Missing fact: {key}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"Fact {key} must be an integer: {value!r}")
    return value


def _as_bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise InvalidInput(f"Fact {key} must be true or false: {value!r}")
    return value


def facts_from_dict(data: dict[str, Any]) -> HostFacts:
    """Build HostFacts from a mapping such as a YAML document."""
    return HostFacts(
        is_virtual=_as_bool(data, "is_virtual"),
        cpu_vendor=str(data.get("cpu_vendor", "")),
        has_ipmi_support=_as_bool(data, "has_ipmi_support"),
        total_memory_bytes=_as_int(data, "total_memory_bytes"),
        page_size_bytes=_as_int(data, "page_size_bytes"),
        hardware_model=str(data.get("hardware_model", "x86_64")),
        processor_count=_as_int(data, "processor_count", 1),
    )


def load_facts(path: Path) -> HostFacts:
    """
    Load facts from a YAML file.

    Raises:
        InvalidInput: If the file is missing, not YAML, or lacks required facts
    """
    if not path.exists():
        raise InvalidInput(f"Facts file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise InvalidInput(f"Invalid YAML in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidInput(f"Cannot read facts file {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidInput(f"Facts file must contain a mapping: {path}")
    return facts_from_dict(data)

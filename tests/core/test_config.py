"""Tests for watchdogctl.core.config module."""

import pytest
from pathlib import Path

import watchdogctl.core.config as config_module
from watchdogctl.core.config import (
    WatchdogOptions,
    load_config_file,
    load_layered_config,
    load_options,
    parse_options,
)
from watchdogctl.core.model import (
    FileWatch,
    InvalidInput,
    RepairCommand,
    UnsupportedConfiguration,
    WatchdogType,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Point every config layer into tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    monkeypatch.setattr(config_module, "SYSTEM_CONFIG", tmp_path / "etc" / "config.yaml")
    return tmp_path


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_returns_empty_dict_if_file_missing(self, tmp_path):
        """Returns empty dict when file doesn't exist."""
        assert load_config_file(tmp_path / "nonexistent.yaml") == {}

    def test_loads_yaml_file(self, tmp_path):
        """Loads and parses YAML config file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("type: soft\nwatchdog_timeout: 60\n")

        assert load_config_file(config_file) == {"type": "soft", "watchdog_timeout": 60}

    def test_returns_empty_dict_for_empty_file(self, tmp_path):
        """Returns empty dict for empty file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_config_file(config_file) == {}

    def test_raises_on_invalid_yaml(self, tmp_path):
        """Invalid YAML raises InvalidInput."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(InvalidInput, match="Invalid YAML"):
            load_config_file(config_file)

    def test_raises_on_non_mapping(self, tmp_path):
        """A YAML list at top level raises InvalidInput."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- soft\n- best\n")

        with pytest.raises(InvalidInput, match="mapping"):
            load_config_file(config_file)

    def test_raises_on_directory(self, tmp_path):
        """A directory given as config raises InvalidInput."""
        with pytest.raises(InvalidInput, match="Cannot read config file"):
            load_config_file(tmp_path)

    def test_raises_on_non_utf8(self, tmp_path):
        """Undecodable content raises InvalidInput."""
        config_file = tmp_path / "config.yaml"
        config_file.write_bytes(b"type: \xff\xfe\n")

        with pytest.raises(InvalidInput, match="Cannot read config file"):
            load_config_file(config_file)


class TestLayering:
    """Tests for layered config precedence."""

    def test_no_config_gives_defaults(self, isolated):
        """No files at all yields default options."""
        assert load_options() == WatchdogOptions()

    def test_project_overrides_user_and_system(self, isolated):
        """Project config beats user config, which beats system config."""
        (isolated / "etc").mkdir()
        (isolated / "etc" / "config.yaml").write_text("type: soft\nwatchdog_timeout: 10\npackage: wd\n")
        user_dir = isolated / ".config" / "watchdogctl"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text("type: tco\nwatchdog_timeout: 20\n")
        (isolated / ".watchdogctl.yaml").write_text("type: ipmi\n")

        data = load_layered_config()

        assert data == {"type": "ipmi", "watchdog_timeout": 20, "package": "wd"}

    def test_explicit_file_wins(self, isolated):
        """--config file overrides the project file."""
        (isolated / ".watchdogctl.yaml").write_text("type: ipmi\n")
        explicit = isolated / "custom.yaml"
        explicit.write_text("type: soft\n")

        assert load_options(explicit).type is WatchdogType.SOFT

    def test_explicit_file_missing(self, isolated):
        """A missing --config file is an error."""
        with pytest.raises(InvalidInput, match="not found"):
            load_options(isolated / "missing.yaml")

    def test_overrides_win_and_none_ignored(self, isolated):
        """Command-line overrides beat files; None means not given."""
        (isolated / ".watchdogctl.yaml").write_text("type: ipmi\nwatchdog_timeout: 45\n")

        options = load_options(overrides={"type": "auto", "watchdog_timeout": None})

        assert options.type is WatchdogType.AUTO
        assert options.thresholds.watchdog_timeout == 45


class TestParseOptions:
    """Tests for parse_options validation."""

    def test_full_options(self):
        """All keys are parsed into typed options."""
        options = parse_options({
            "type": "Best",
            "load_per_core_1m": 4,
            "load_per_core_5m": 3,
            "load_per_core_15m": 2,
            "min_mem_percent": 5,
            "files_change": [
                {"path": "/var/log/syslog", "seconds": 900},
                {"path": "/run/app/heartbeat", "seconds": 60},
            ],
            "watchdog_timeout": 120,
            "repair_binary": "/usr/sbin/repair",
            "repair_timeout": 0,
            "repair_maximum": 3,
            "service": "watchdog-custom",
        })

        assert options.type is WatchdogType.BEST
        thresholds = options.thresholds
        assert (thresholds.load_per_core_1m, thresholds.load_per_core_5m, thresholds.load_per_core_15m) == (4, 3, 2)
        assert thresholds.min_mem_percent == 5
        assert thresholds.files_change == (
            FileWatch("/var/log/syslog", 900),
            FileWatch("/run/app/heartbeat", 60),
        )
        assert thresholds.watchdog_timeout == 120
        assert thresholds.repair == RepairCommand("/usr/sbin/repair", 0, 3)
        assert options.service == "watchdog-custom"

    def test_default_timeout(self):
        """watchdog_timeout defaults to 300."""
        assert parse_options({}).thresholds.watchdog_timeout == 300

    def test_unknown_type(self):
        """Unknown type strings are unsupported."""
        with pytest.raises(UnsupportedConfiguration, match="Unknown watchdog type"):
            parse_options({"type": "hardware"})

    @pytest.mark.parametrize("key,value", [
        ("watchdog_timeout", 0),
        ("load_per_core_1m", 0),
        ("min_mem_percent", 0),
        ("min_mem_percent", 101),
        ("repair_timeout", -1),
        ("watchdog_timeout", "300"),
        ("watchdog_timeout", True),
    ])
    def test_rejects_out_of_range_numbers(self, key, value):
        """Numbers outside their allowed range raise InvalidInput."""
        data = {key: value}
        if key.startswith("repair"):
            data["repair_binary"] = "/usr/sbin/repair"

        with pytest.raises(InvalidInput, match=key):
            parse_options(data)

    def test_rejects_relative_repair_binary(self):
        """repair_binary must be absolute."""
        with pytest.raises(InvalidInput, match="absolute"):
            parse_options({"repair_binary": "repair.sh"})

    def test_repair_settings_need_binary(self):
        """repair_timeout without repair_binary is rejected."""
        with pytest.raises(InvalidInput, match="repair_binary"):
            parse_options({"repair_timeout": 10})

    @pytest.mark.parametrize("entries", [
        "/var/log/syslog",
        [{"path": "var/log/syslog", "seconds": 10}],
        [{"path": "/var/log/syslog", "seconds": 0}],
        [{"path": "/var/log/syslog"}],
        ["/var/log/syslog"],
    ])
    def test_rejects_bad_file_watches(self, entries):
        """Malformed files_change entries raise InvalidInput."""
        with pytest.raises(InvalidInput):
            parse_options({"files_change": entries})

    @pytest.mark.parametrize("value", ["false", "no", 0])
    def test_rejects_non_boolean_flag(self, value):
        """disable_systemd_watchdog must be a real boolean."""
        with pytest.raises(InvalidInput, match="disable_systemd_watchdog must be true or false"):
            parse_options({"disable_systemd_watchdog": value})

    def test_boolean_flag(self):
        """disable_systemd_watchdog accepts false."""
        assert parse_options({"disable_systemd_watchdog": False}).disable_systemd_watchdog is False

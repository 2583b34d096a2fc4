"""Tests for Output helper."""

import json

from watchdogctl.core.output import Output


class TestOutput:
    """Tests for structured output helper."""

    def test_emit_stores_data(self):
        """emit() merges data for later rendering."""
        output = Output()
        output.emit({"module": "softdog"})
        output.emit({"changed": True})

        assert output.data == {"module": "softdog", "changed": True}

    def test_warning_stores_message(self):
        """warning() records warning messages."""
        output = Output()
        output.warning("dmidecode not found")

        assert output.warnings == ["dmidecode not found"]

    def test_json_render(self, capsys):
        """render('json') prints the data as JSON once."""
        output = Output()
        output.emit({"module": "iTCO_wdt", "min_free_pages": None})

        output.render("json")
        output.render("json")

        data = json.loads(capsys.readouterr().out)
        assert data == {"module": "iTCO_wdt", "min_free_pages": None}

    def test_plain_render(self, capsys):
        """Plain output has a title, status and readable values."""
        output = Output()
        output.emit({
            "status": "changed",
            "decision": {"module_to_load": "softdog", "blacklist_intel_tco": True},
            "changes": [{"action": "load module", "changed": True}],
            "files_change": [],
        })
        output.warning("min_mem_percent is 0")

        output.render("plain", title="Watchdog apply")

        out = capsys.readouterr().out
        assert out.startswith("Watchdog apply\n==============")
        assert "[CHANGED] Status: CHANGED" in out
        assert "Module To Load: softdog" in out
        assert "Blacklist Intel Tco: yes" in out
        assert "- action=load module, changed=True" in out
        assert "Files Change: (none)" in out
        assert "[WARNING] min_mem_percent is 0" in out

"""Tests for the output formatting system.

Covers format resolution, NO_COLOR handling, the stdout/stderr split,
quiet and verbose modes, JSON and table rendering, output-file
redirection, and the global instance helpers.
"""

from __future__ import annotations

import json

import pytest

from specsync import output as output_module
from specsync.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("specsync.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True with colour allowed."""
    monkeypatch.setattr("specsync.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


def _plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# Format resolution and colour
# ------------------------------------------------------------------ #


class TestFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_tty(self, tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_no_color_flag_forces_plain_on_tty(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_kept(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON
        assert OutputManager(format=OutputFormat.RICH).format == OutputFormat.RICH


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_terminal(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr
# ------------------------------------------------------------------ #


class TestStreams:
    def test_data_goes_to_stdout(self, capfd, non_tty):
        _plain().print_data("GET /pets")
        captured = capfd.readouterr()
        assert captured.out == "GET /pets\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(_plain(), method)("message text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message text" in captured.err

    def test_prefixes_without_colour(self, capfd, non_tty):
        mgr = _plain(verbose=True)
        mgr.warning("w")
        mgr.error("e")
        mgr.debug("d")
        err = capfd.readouterr().err
        assert "Warning: w" in err
        assert "Error: e" in err
        assert "[debug] d" in err


class TestQuietAndVerbose:
    def test_quiet_suppresses_info_success_suggest(self, capfd, non_tty):
        mgr = _plain(quiet=True)
        mgr.info("a")
        mgr.success("b")
        mgr.suggest("c")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warnings_errors_and_data(self, capfd, non_tty):
        mgr = _plain(quiet=True)
        mgr.warning("careful")
        mgr.error("broken")
        mgr.print_data("payload")
        captured = capfd.readouterr()
        assert "careful" in captured.err
        assert "broken" in captured.err
        assert "payload" in captured.out

    def test_debug_needs_verbose(self, capfd, non_tty):
        _plain().debug("hidden")
        assert capfd.readouterr().err == ""
        assert _plain(verbose=True).is_verbose is True
        assert _plain(quiet=True).is_quiet is True


# ------------------------------------------------------------------ #
# Data rendering
# ------------------------------------------------------------------ #


class TestPrintJson:
    def test_plain_json_is_indented(self, capfd, non_tty):
        _plain().print_json({"summary": {"new": 1}})
        out = capfd.readouterr().out
        assert json.loads(out) == {"summary": {"new": 1}}
        assert '\n  "summary"' in out

    def test_non_ascii_kept(self, capfd, non_tty):
        _plain().print_json(["café"])
        assert "café" in capfd.readouterr().out


class TestPrintTable:
    HEADERS = ["Method", "Path"]
    ROWS = [["GET", "/pets"], ["POST", "/pets"]]

    def test_plain_is_tab_separated(self, capfd, non_tty):
        _plain().print_table(self.HEADERS, self.ROWS, title="Endpoints")
        lines = capfd.readouterr().out.splitlines()
        assert lines == ["# Endpoints", "Method\tPath", "GET\t/pets", "POST\t/pets"]

    def test_json_is_list_of_records(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(self.HEADERS, self.ROWS)
        assert json.loads(capfd.readouterr().out) == [
            {"Method": "GET", "Path": "/pets"},
            {"Method": "POST", "Path": "/pets"},
        ]

    def test_rich_renders_cells(self, capfd, tty):
        OutputManager(format=OutputFormat.RICH).print_table(self.HEADERS, self.ROWS, title="T")
        out = capfd.readouterr().out
        assert "Method" in out
        assert "POST" in out


class TestOutputFile:
    def test_data_appended_to_file(self, capfd, tmp_path, non_tty):
        target = tmp_path / "out.txt"
        mgr = OutputManager(format=OutputFormat.PLAIN, output_file=str(target))
        mgr.print_data("one")
        mgr.print_data("two\n")
        assert target.read_text() == "one\ntwo\n"
        assert capfd.readouterr().out == ""

    def test_rich_json_written_plain_to_file(self, tmp_path, tty):
        target = tmp_path / "out.json"
        OutputManager(format=OutputFormat.RICH, output_file=str(target)).print_json({"a": 1})
        assert json.loads(target.read_text()) == {"a": 1}


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_lazy_default(self, non_tty):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self, non_tty):
        mgr = _plain()
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert output_module._output is None

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(_plain(verbose=True))
        output_module.info("i")
        output_module.success("s")
        output_module.warning("w")
        output_module.error("e")
        output_module.suggest("n")
        output_module.debug("d")
        err = capfd.readouterr().err
        for text in ("i", "s", "Warning: w", "Error: e", "→ n", "[debug] d"):
            assert text in err

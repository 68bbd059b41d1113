"""Integration tests for the specsync CLI.

Every test runs the real root app through Typer's CliRunner with an
isolated config directory. Commands whose stdout is parsed write it to a
file with ``-o`` so that diagnostics on stderr never mix into the data.
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from specsync import __version__
from specsync.app import app

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

PETSTORE = str(FIXTURES_DIR / "petstore.json")
PETSTORE_V2 = str(FIXTURES_DIR / "petstore_v2.yaml")


def _run_json(runner: CliRunner, tmp_path: Path, args: list[str]) -> Any:
    """Invoke with ``--json -o`` and return the decoded data file."""
    out = tmp_path / "out.json"
    out.unlink(missing_ok=True)
    result = runner.invoke(app, ["--json", "-o", str(out), *args])
    assert result.exit_code == 0, result.output
    return json.loads(out.read_text(encoding="utf-8"))


@pytest.fixture
def baseline(cli_runner: CliRunner, isolated_config: Path) -> Path:
    """Snapshot of the petstore fixture, as a re-import would have stored it."""
    path = isolated_config / "baseline.json"
    result = cli_runner.invoke(app, ["--quiet", "-o", str(path), "snapshot", PETSTORE])
    assert result.exit_code == 0, result.output
    return path


class TestGlobalFlags:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specsync {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, [])
        assert "inspect" in result.output
        assert "diff" in result.output


class TestInspect:
    def test_plain_table(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "inspect", PETSTORE])
        assert result.exit_code == 0, result.output
        assert "listPets" in result.output
        assert "/pets/{{petId}}" in result.output
        assert "Skipped 1 unresolved $ref" in result.output

    def test_json_dump(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        data = _run_json(cli_runner, isolated_config, ["inspect", PETSTORE])
        assert data["info"]["title"] == "Petstore API"
        assert data["ref_skip_count"] == 1
        assert len(data["endpoints"]) == 5
        assert data["security_schemes"][1]["type"] == {
            "kind": "apiKey",
            "name": "X-API-Key",
            "location": "header",
        }

    def test_reads_stdin(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            ["--plain", "inspect", "-"],
            input=b"openapi: 3.1.0\ninfo:\n  title: Piped\npaths:\n  /ping:\n    get: {}\n",
        )
        assert result.exit_code == 0, result.output
        assert "GET /ping" in result.output

    def test_missing_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["inspect", str(isolated_config / "nope.yaml")])
        assert result.exit_code == 6
        assert "not found" in result.output

    def test_unsupported_version(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        spec = isolated_config / "swagger.json"
        spec.write_text('{"swagger": "2.0", "openapi": "2.0", "info": {"title": "Old"}}')
        result = cli_runner.invoke(app, ["inspect", str(spec)])
        assert result.exit_code == 7
        assert "Unsupported OpenAPI version" in result.output


class TestSnapshot:
    def test_deterministic_request_ids(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        first = _run_json(cli_runner, isolated_config, ["snapshot", PETSTORE])
        second = _run_json(cli_runner, isolated_config, ["snapshot", PETSTORE])

        assert first == second
        assert [s["id"] for s in first][:2] == ["GET /health", "GET /pets"]
        assert first[1]["request_id"] == str(
            uuid.uuid5(uuid.NAMESPACE_URL, "specsync:GET /pets")
        )
        assert first[1]["auth_description"] == "Bearer Token"

    def test_no_ids(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        data = _run_json(cli_runner, isolated_config, ["snapshot", "--no-ids", PETSTORE])
        assert all(s["request_id"] is None for s in data)

    def test_name_fallback_flag(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        data = _run_json(
            cli_runner, isolated_config, ["--name-fallback", "empty", "snapshot", PETSTORE]
        )
        names = {s["id"]: s["name"] for s in data}
        assert names["DELETE /pets/{{petId}}"] == ""


class TestDiff:
    def test_unchanged_spec(self, cli_runner: CliRunner, baseline: Path) -> None:
        data = _run_json(
            cli_runner, baseline.parent, ["diff", PETSTORE, "--against", str(baseline)]
        )
        assert data["summary"] == {"new": 0, "changed": 0, "removed": 0, "unchanged": 5}
        assert [d["action"] for d in data["plan"]] == ["keep"] * 5

    def test_next_revision(self, cli_runner: CliRunner, baseline: Path) -> None:
        data = _run_json(
            cli_runner, baseline.parent, ["diff", PETSTORE_V2, "--against", str(baseline)]
        )
        assert data["summary"] == {"new": 1, "changed": 1, "removed": 1, "unchanged": 3}
        assert data["new"][0]["name"] == "listOwners"
        assert data["changed"][0]["id"] == "GET /pets"
        assert data["changed"][0]["changed_fields"] == ["query_params"]
        assert data["removed"][0]["id"] == "DELETE /pets/{{petId}}"
        assert [d["action"] for d in data["plan"]] == [
            "add", "replace", "delete", "keep", "keep", "keep",
        ]

    def test_keep_flags(self, cli_runner: CliRunner, baseline: Path) -> None:
        data = _run_json(
            cli_runner,
            baseline.parent,
            ["diff", PETSTORE_V2, "-a", str(baseline), "--keep-changed", "--keep-removed"],
        )
        assert [d["action"] for d in data["plan"]] == ["add"] + ["keep"] * 5

    def test_plain_report(self, cli_runner: CliRunner, baseline: Path) -> None:
        result = cli_runner.invoke(
            app, ["--plain", "diff", PETSTORE_V2, "--against", str(baseline)]
        )
        assert result.exit_code == 0, result.output
        assert "query_params" in result.output
        assert "1 new, 1 changed, 1 removed, 3 unchanged" in result.output

    def test_fail_on_changes(self, cli_runner: CliRunner, baseline: Path) -> None:
        result = cli_runner.invoke(
            app, ["--quiet", "diff", PETSTORE_V2, "-a", str(baseline), "--fail-on-changes"]
        )
        assert result.exit_code == 1

    def test_user_created_records(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        records = isolated_config / "records.json"
        records.write_text(json.dumps({
            "snapshots": [{"name": "scratch", "method": "GET", "url": "/scratch"}]
        }))

        shown = _run_json(cli_runner, isolated_config, ["diff", PETSTORE, "-a", str(records)])
        assert [s["name"] for s in shown["removed"]] == ["scratch"]
        assert not any(d["action"] == "delete" for d in shown["plan"])

        hidden = _run_json(
            cli_runner,
            isolated_config,
            ["diff", PETSTORE, "-a", str(records), "--ignore-user-created"],
        )
        assert hidden["removed"] == []

    def test_ignore_user_created_from_config(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        (isolated_config / "specsync.json").write_text('{"diff": {"ignore_user_created": true}}')
        records = isolated_config / "records.json"
        records.write_text('[{"method": "GET", "path": "/scratch"}]')

        data = _run_json(cli_runner, isolated_config, ["diff", PETSTORE, "-a", str(records)])
        assert data["removed"] == []

    def test_bad_records_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        records = isolated_config / "records.json"
        records.write_text('[{"name": "no method", "path": "/x"}]')
        result = cli_runner.invoke(app, ["diff", PETSTORE, "-a", str(records)])
        assert result.exit_code == 8
        assert "no method" in result.output

    def test_missing_records_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["diff", PETSTORE, "-a", str(isolated_config / "missing.json")]
        )
        assert result.exit_code == 8


class TestConfigCommands:
    def test_set_and_show(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "parser.security_policy", "all"])
        assert result.exit_code == 0, result.output

        saved = isolated_config / "config" / "specsync" / "config.json"
        assert json.loads(saved.read_text())["parser"]["security_policy"] == "all"

        data = _run_json(cli_runner, isolated_config, ["config", "show"])
        assert data["parser"]["security_policy"] == "all"

    def test_set_bool(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "diff.ignore_user_created", "yes"])
        assert result.exit_code == 0, result.output
        data = _run_json(cli_runner, isolated_config, ["config", "show"])
        assert data["diff"]["ignore_user_created"] is True

    @pytest.mark.parametrize(
        "args",
        [
            ["parser.security_policy", "bogus"],
            ["parser.missing", "x"],
            ["nope.name_fallback", "empty"],
            ["diff.ignore_user_created", "maybe"],
        ],
    )
    def test_set_rejects_bad_input(
        self, cli_runner: CliRunner, isolated_config: Path, args: list[str]
    ) -> None:
        result = cli_runner.invoke(app, ["config", "set", *args])
        assert result.exit_code == 2

    def test_env_overrides_file(
        self, cli_runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        cli_runner.invoke(app, ["config", "set", "parser.name_fallback", "empty"])
        monkeypatch.setenv("SPECSYNC_NAME_FALLBACK", "method_path")
        data = _run_json(cli_runner, isolated_config, ["config", "show"])
        assert data["parser"]["name_fallback"] == "method_path"

    def test_invalid_env_value(
        self, cli_runner: CliRunner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SPECSYNC_SECURITY_POLICY", "some")
        result = cli_runner.invoke(app, ["inspect", PETSTORE])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_reset_recovers_broken_file(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        config_file = isolated_config / "config" / "specsync" / "config.json"
        config_file.parent.mkdir(parents=True)
        config_file.write_text("{not json")

        assert cli_runner.invoke(app, ["inspect", PETSTORE]).exit_code == 1

        result = cli_runner.invoke(app, ["--force", "config", "reset"])
        assert result.exit_code == 0, result.output
        assert json.loads(config_file.read_text())["parser"]["name_fallback"] == "method_path"

    def test_reset_cancelled(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert not (isolated_config / "config" / "specsync" / "config.json").exists()

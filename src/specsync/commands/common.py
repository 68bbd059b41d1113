"""Helpers shared by the spec-reading commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer

from specsync.diff import snapshot_from_record
from specsync.exceptions import SnapshotError, SpecsyncError
from specsync.models import EndpointSnapshot, GlobalConfig, Spec
from specsync.output import debug, error


def get_config(ctx: typer.Context) -> GlobalConfig:
    """Return the resolved config stored by the root callback."""
    if ctx.obj and isinstance(ctx.obj.get("config"), GlobalConfig):
        return ctx.obj["config"]
    return GlobalConfig()


def load_spec(source: str, config: GlobalConfig) -> Spec:
    """Read and parse *source*, exiting with the error's code on failure.

    Args:
        source: File path, ``http(s)://`` URL, or ``-`` for stdin.
        config: Effective configuration; its parser options are applied.

    Raises:
        typer.Exit: With the :class:`~specsync.exceptions.SpecsyncError`
            exit code when the source cannot be read or parsed.
    """
    from specsync.parser import parse_spec, read_source

    try:
        data = read_source(source)
        debug(f"Read {len(data)} bytes from {source}")
        return parse_spec(data, config.parser)
    except SpecsyncError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def load_snapshots(path: Path) -> list[EndpointSnapshot]:
    """Load stored request records from a JSON file.

    The file holds either a list of records or an object with a
    ``"snapshots"`` list, as written by ``specsync snapshot``.

    Raises:
        SnapshotError: If the file is unreadable, not JSON, not a list of
            objects, or any record lacks a method or path.
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SnapshotError(f"Cannot read snapshots from {path}: {exc}") from exc

    if isinstance(raw, dict):
        raw = raw.get("snapshots")
    if not isinstance(raw, list):
        raise SnapshotError(f"Expected a list of records in {path}")

    snapshots: list[EndpointSnapshot] = []
    for index, record in enumerate(raw):
        if not isinstance(record, dict):
            raise SnapshotError(f"Record #{index} in {path} is not an object")
        snapshots.append(snapshot_from_record(record))
    return snapshots

"""Snapshot command -- write the baseline a spec implies.

``specsync snapshot SOURCE`` converts every endpoint into an
:class:`~specsync.models.EndpointSnapshot` and prints the list as JSON.
Saved with ``-o``, the file is what ``specsync diff --against`` reads
back after the spec has moved on.

Each snapshot gets a deterministic ``request_id`` derived from its
identity, so re-running the command on an unchanged spec produces an
identical file and the diff treats every entry as spec-derived.
"""

from __future__ import annotations

import uuid

import typer

from specsync.commands.common import get_config, load_spec
from specsync.diff import snapshot_from_endpoint
from specsync.models import EndpointSnapshot
from specsync.output import get_output, info, suggest

_ID_NAMESPACE = uuid.NAMESPACE_URL


def request_id_for(identity: str) -> uuid.UUID:
    """Return the stable request id assigned to *identity*."""
    return uuid.uuid5(_ID_NAMESPACE, f"specsync:{identity}")


def snapshot_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
    no_ids: bool = typer.Option(
        False,
        "--no-ids",
        help="Leave request_id empty (snapshots then count as user-created).",
    ),
) -> None:
    """Print the endpoint snapshots of a spec as JSON.

    Example::

        specsync snapshot openapi.yaml -o baseline.json
    """
    spec = load_spec(source, get_config(ctx))

    snapshots: list[EndpointSnapshot] = []
    for endpoint in spec.endpoints:
        snapshot = snapshot_from_endpoint(endpoint, spec.security_schemes)
        if not no_ids:
            snapshot = snapshot.model_copy(update={"request_id": request_id_for(snapshot.id)})
        snapshots.append(snapshot)

    get_output().print_json([s.model_dump(mode="json") for s in snapshots])
    info(f"{len(snapshots)} snapshot(s) from {spec.info.title}")
    suggest("Compare later with: specsync diff NEW_SPEC --against SNAPSHOT_FILE")

"""Diff command -- reconcile a spec against stored snapshots.

``specsync diff SOURCE --against SNAPSHOTS.json`` parses the spec, loads
the stored records, runs :func:`~specsync.diff.diff_endpoints`, and prints
the four buckets followed by the import plan from
:func:`~specsync.diff.plan_decisions`.

The stored records are read with
:func:`~specsync.diff.snapshot_from_record`, so the file can be a previous
``specsync snapshot`` output or an export from another tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from specsync.commands.common import get_config, load_snapshots, load_spec
from specsync.diff import EndpointDecision, diff_endpoints, plan_decisions
from specsync.exceptions import SpecsyncError
from specsync.exit_codes import EXIT_GENERIC_FAILURE
from specsync.models import DiffResult
from specsync.output import OutputFormat, debug, error, get_output, info


def diff_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
    against: Path = typer.Option(
        ..., "--against", "-a", help="JSON file with the stored request records."
    ),
    keep_changed: bool = typer.Option(
        False, "--keep-changed", help="Plan to keep changed requests instead of replacing them."
    ),
    keep_removed: bool = typer.Option(
        False, "--keep-removed", help="Plan to keep removed requests instead of deleting them."
    ),
    ignore_user_created: Optional[bool] = typer.Option(
        None,
        "--ignore-user-created/--show-user-created",
        help="Hide removed requests that were not imported from a spec.",
    ),
    fail_on_changes: bool = typer.Option(
        False, "--fail-on-changes", help="Exit with status 1 when anything is new, changed, or removed."
    ),
) -> None:
    """Compare a spec with previously imported requests.

    Example::

        specsync diff openapi.yaml --against baseline.json
        specsync --json diff openapi.yaml -a baseline.json --keep-removed
    """
    config = get_config(ctx)
    spec = load_spec(source, config)

    try:
        existing = load_snapshots(against)
    except SpecsyncError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    debug(f"Loaded {len(existing)} stored record(s) from {against}")

    result = diff_endpoints(spec.endpoints, existing, spec.security_schemes)

    hide_user_created = (
        config.diff.ignore_user_created if ignore_user_created is None else ignore_user_created
    )
    if hide_user_created:
        kept = [s for s in result.removed_endpoints if s.request_id is not None]
        hidden = len(result.removed_endpoints) - len(kept)
        if hidden:
            info(f"Hiding {hidden} user-created request(s).")
        result = result.model_copy(update={"removed_endpoints": kept})

    plan = plan_decisions(
        result,
        accept_changes=not keep_changed,
        delete_removed=not keep_removed,
    )

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(_diff_to_json(result, plan))
    else:
        _print_buckets(result)
        _print_plan(result, plan)
        counts = result.summary()
        info(
            f"{counts['new']} new, {counts['changed']} changed, "
            f"{counts['removed']} removed, {counts['unchanged']} unchanged"
        )

    if fail_on_changes and result.has_changes:
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)


def _diff_to_json(result: DiffResult, plan: list[EndpointDecision]) -> dict[str, Any]:
    return {
        "summary": result.summary(),
        "new": [e.model_dump(mode="json") for e in result.new_endpoints],
        "changed": [
            {
                "id": change.id,
                "changed_fields": change.changed_fields,
                "existing": change.existing.model_dump(mode="json"),
                "incoming": change.incoming.model_dump(mode="json"),
            }
            for change in result.changed_endpoints
        ],
        "removed": [s.model_dump(mode="json") for s in result.removed_endpoints],
        "unchanged": [s.model_dump(mode="json") for s in result.unchanged_endpoints],
        "plan": [d.model_dump(mode="json") for d in plan],
    }


def _print_buckets(result: DiffResult) -> None:
    rows: list[list[str]] = []
    for endpoint in result.new_endpoints:
        rows.append(["new", endpoint.id, endpoint.name, ""])
    for change in result.changed_endpoints:
        rows.append(["changed", change.id, change.incoming.name, ", ".join(change.changed_fields)])
    for snapshot in result.removed_endpoints:
        origin = "spec-derived" if snapshot.is_spec_derived else "user-created"
        rows.append(["removed", snapshot.id, snapshot.name, origin])
    for snapshot in result.unchanged_endpoints:
        rows.append(["unchanged", snapshot.id, snapshot.name, ""])

    get_output().print_table(["Status", "Endpoint", "Name", "Details"], rows, title="Diff")


def _print_plan(result: DiffResult, plan: list[EndpointDecision]) -> None:
    # request_id -> identity, for readable rows
    identities = {
        s.request_id: s.id
        for s in [c.existing for c in result.changed_endpoints]
        + result.removed_endpoints
        + result.unchanged_endpoints
        if s.request_id is not None
    }

    rows: list[list[str]] = []
    for decision in plan:
        if decision.action == "add":
            rows.append([decision.action, "", decision.endpoint.id])
        else:
            rows.append([
                decision.action,
                str(decision.request_id),
                identities.get(decision.request_id, ""),
            ])
    get_output().print_table(["Action", "Request ID", "Endpoint"], rows, title="Plan")

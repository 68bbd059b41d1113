"""Turn a :class:`~specsync.models.DiffResult` into an import plan.

The diff engine only classifies endpoints. A persistence layer applying a
re-import needs one concrete action per item, addressed by the stored
request's id. :func:`plan_decisions` produces that plan from a few coarse
choices; interactive callers can instead build the
:data:`EndpointDecision` list themselves, one accepted or rejected item at a
time.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from specsync.models import DiffResult, Endpoint


class AddNew(BaseModel):
    """Create a request for an endpoint that was not imported before."""

    model_config = ConfigDict(frozen=True)

    action: Literal["add"] = "add"
    endpoint: Endpoint


class ReplaceExisting(BaseModel):
    """Overwrite a stored request with the incoming endpoint's fields."""

    model_config = ConfigDict(frozen=True)

    action: Literal["replace"] = "replace"
    request_id: UUID
    endpoint: Endpoint


class DeleteExisting(BaseModel):
    """Delete a stored request that the spec no longer declares."""

    model_config = ConfigDict(frozen=True)

    action: Literal["delete"] = "delete"
    request_id: UUID


class KeepExisting(BaseModel):
    """Leave a stored request untouched."""

    model_config = ConfigDict(frozen=True)

    action: Literal["keep"] = "keep"
    request_id: UUID


EndpointDecision = Annotated[
    Union[AddNew, ReplaceExisting, DeleteExisting, KeepExisting],
    Field(discriminator="action"),
]


def plan_decisions(
    result: DiffResult,
    accept_changes: bool = True,
    delete_removed: bool = True,
) -> list[EndpointDecision]:
    """Build one decision per actionable item of *result*.

    Args:
        result: The diff to act on.
        accept_changes: Replace changed requests (``True``) or keep them.
        delete_removed: Delete spec-derived requests the spec dropped
            (``True``) or keep them. Removed snapshots without a
            ``request_id`` are user-created and never get a decision.

    Returns:
        Decisions in bucket order: additions, changes, removals, unchanged.
    """
    decisions: list[EndpointDecision] = [AddNew(endpoint=e) for e in result.new_endpoints]

    for change in result.changed_endpoints:
        request_id = change.existing.request_id
        if request_id is None:
            continue
        if accept_changes:
            decisions.append(
                ReplaceExisting(request_id=request_id, endpoint=change.incoming_endpoint)
            )
        else:
            decisions.append(KeepExisting(request_id=request_id))

    for snapshot in result.removed_endpoints:
        if snapshot.request_id is None:
            continue
        if delete_removed:
            decisions.append(DeleteExisting(request_id=snapshot.request_id))
        else:
            decisions.append(KeepExisting(request_id=snapshot.request_id))

    decisions.extend(
        KeepExisting(request_id=s.request_id)
        for s in result.unchanged_endpoints
        if s.request_id is not None
    )
    return decisions

"""Reconcile freshly parsed endpoints against previously imported ones.

:func:`diff_endpoints` partitions its inputs into four buckets:

* **new** -- incoming endpoints with no spec-derived snapshot of the same
  identity;
* **changed** -- matched endpoints whose synthesised snapshot differs from
  the stored one in any compared field;
* **unchanged** -- matched endpoints with identical derived fields;
* **removed** -- stored snapshots left unmatched, which always includes every
  snapshot with ``request_id is None``. The caller decides whether those
  user-created requests are really deleted.

Identity is ``"{METHOD} {path}"`` with the method compared
case-insensitively. Both sides use the template-converted path. The
function is pure and never raises.
"""

from __future__ import annotations

import logging
from typing import Sequence

from specsync.diff.snapshot import snapshot_from_endpoint
from specsync.models import (
    DiffResult,
    Endpoint,
    EndpointChange,
    EndpointSnapshot,
    SecurityScheme,
    endpoint_identity,
)

logger = logging.getLogger(__name__)

COMPARED_FIELDS = (
    "name",
    "method",
    "path",
    "headers",
    "query_params",
    "body_type",
    "body_content_type",
    "auth_description",
    "tags",
)
"""Snapshot fields whose difference marks a matched endpoint as changed."""


def diff_endpoints(
    incoming: Sequence[Endpoint],
    existing: Sequence[EndpointSnapshot],
    security_schemes: Sequence[SecurityScheme] = (),
) -> DiffResult:
    """Classify every incoming endpoint and existing snapshot.

    Args:
        incoming: Endpoints selected for (re-)import, usually
            ``spec.endpoints``.
        existing: Snapshots of what is currently stored.
        security_schemes: The incoming spec's schemes, used to derive auth
            labels for the synthesised snapshots.

    Returns:
        A :class:`~specsync.models.DiffResult`. New, changed and unchanged
        buckets follow the order of *incoming*; removed follows *existing*.
    """
    # identity -> index into existing; first spec-derived snapshot wins
    unmatched: dict[str, int] = {}
    for index, snapshot in enumerate(existing):
        if snapshot.request_id is None:
            continue
        unmatched.setdefault(_normalize_identity(snapshot.id), index)

    new: list[Endpoint] = []
    changed: list[EndpointChange] = []
    unchanged: list[EndpointSnapshot] = []
    matched: set[int] = set()

    for endpoint in incoming:
        key = endpoint_identity(endpoint.method.value, endpoint.path)
        index = unmatched.pop(key, None)
        if index is None:
            new.append(endpoint)
            continue

        matched.add(index)
        stored = existing[index]
        candidate = snapshot_from_endpoint(endpoint, security_schemes)
        differences = changed_fields(stored, candidate)
        if differences:
            changed.append(
                EndpointChange(
                    id=key,
                    existing=stored,
                    incoming=candidate,
                    incoming_endpoint=endpoint,
                    changed_fields=differences,
                )
            )
        else:
            unchanged.append(stored)

    removed = [s for i, s in enumerate(existing) if i not in matched]

    result = DiffResult(
        new_endpoints=new,
        changed_endpoints=changed,
        removed_endpoints=removed,
        unchanged_endpoints=unchanged,
    )
    logger.debug("Diff summary: %s", result.summary())
    return result


def changed_fields(existing: EndpointSnapshot, incoming: EndpointSnapshot) -> list[str]:
    """Return the names of compared fields that differ, in a fixed order.

    A stored ``body_content_type`` of ``None`` means the persistence layer
    never recorded it, so it is not reported as a difference.
    """
    differences: list[str] = []
    for field in COMPARED_FIELDS:
        old = getattr(existing, field)
        if field == "body_content_type" and old is None:
            continue
        if old != getattr(incoming, field):
            differences.append(field)
    return differences


def _normalize_identity(identity: str) -> str:
    method, _, path = identity.partition(" ")
    return endpoint_identity(method, path)

"""Reconciliation of parsed endpoints against previously imported ones.

Typical usage::

    from specsync.diff import diff_endpoints, snapshot_from_record

    existing = [snapshot_from_record(r) for r in stored_records]
    result = diff_endpoints(spec.endpoints, existing, spec.security_schemes)
    print(result.summary())

Sub-modules:

* :mod:`~specsync.diff.snapshot` -- builds comparable snapshots from parsed
  endpoints and from external records.
* :mod:`~specsync.diff.engine` -- partitions endpoints into new, changed,
  removed and unchanged.
* :mod:`~specsync.diff.decisions` -- turns a diff into an import plan.
"""

from specsync.diff.decisions import (
    AddNew,
    DeleteExisting,
    EndpointDecision,
    KeepExisting,
    ReplaceExisting,
    plan_decisions,
)
from specsync.diff.engine import changed_fields, diff_endpoints
from specsync.diff.snapshot import snapshot_from_endpoint, snapshot_from_record

__all__ = [
    "diff_endpoints",
    "changed_fields",
    "snapshot_from_endpoint",
    "snapshot_from_record",
    "plan_decisions",
    "EndpointDecision",
    "AddNew",
    "ReplaceExisting",
    "DeleteExisting",
    "KeepExisting",
]

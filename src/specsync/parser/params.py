"""Merge path-level and operation-level OpenAPI parameters.

OpenAPI lets a path item declare parameters shared by all of its operations,
and lets each operation override them. A parameter is identified by its
``(name, in)`` pair; on a collision the operation-level entry wins.

Parameters written as ``{"$ref": "#/components/parameters/..."}`` are not
resolved here. They are skipped and counted so the caller can warn about
them.
"""

from __future__ import annotations

from typing import Any, Iterable

from specsync.models import Parameter, ParameterLocation

_LOCATIONS = frozenset(loc.value for loc in ParameterLocation)


def merge_parameters(
    path_level: Iterable[Any],
    operation_level: Iterable[Any],
) -> tuple[list[Parameter], int]:
    """Merge two raw parameter lists with operation-level precedence.

    Args:
        path_level: Raw parameter entries from the path item.
        operation_level: Raw parameter entries from the operation.

    Returns:
        ``(merged, skipped)`` where *merged* holds at most one
        :class:`~specsync.models.Parameter` per ``(name, location)`` and
        *skipped* is the number of unresolved ``$ref`` entries dropped from
        either list.
    """
    merged: dict[tuple[str, str], Parameter] = {}
    skipped = 0

    for raw in (*path_level, *operation_level):
        if _is_reference(raw):
            skipped += 1
            continue
        param = _to_parameter(raw)
        if param is not None:
            merged[param.key] = param

    return list(merged.values()), skipped


def _is_reference(raw: Any) -> bool:
    return isinstance(raw, dict) and "$ref" in raw


def _to_parameter(raw: Any) -> Parameter | None:
    """Build a Parameter from an inline entry, or ``None`` if it is unusable."""
    if not isinstance(raw, dict):
        return None
    name = raw.get("name")
    location = raw.get("in")
    if not isinstance(name, str) or location not in _LOCATIONS:
        return None
    return Parameter(name=name, location=ParameterLocation(location))

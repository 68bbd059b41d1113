"""Compute the effective security scheme names for one operation.

OpenAPI security declarations are not merged. An operation-level
``security`` field, when present at all, completely replaces the global one:
``security: []`` on an operation means "no authentication" for that
operation, while an absent field means "inherit the global declaration".

Each declaration is a list of *Security Requirement Objects*; each object
maps scheme names to scopes. The objects are alternatives (OR) and the
names inside one object are all required together (AND).
"""

from __future__ import annotations

from typing import Any, Optional

from specsync.models import SecurityPolicy


def resolve_security(
    global_security: Any,
    operation_security: Any,
    policy: SecurityPolicy = SecurityPolicy.FIRST,
) -> Optional[list[str]]:
    """Return the ordered scheme names that apply to an operation.

    Args:
        global_security: The document's top-level ``security`` value, or
            ``None`` when absent.
        operation_security: The operation's ``security`` value, or ``None``
            when absent.
        policy: How to flatten the chosen requirement list. With
            :attr:`~specsync.models.SecurityPolicy.FIRST` the first
            requirement naming at least one scheme is used; with
            :attr:`~specsync.models.SecurityPolicy.ALL` every requirement
            contributes its names once.

    Returns:
        ``None`` when neither level declares security, ``[]`` when the
        applicable declaration names no scheme (explicit "no auth"), and the
        scheme names otherwise.
    """
    declared = operation_security if operation_security is not None else global_security
    if declared is None:
        return None

    requirements = [_scheme_names(r) for r in declared] if isinstance(declared, list) else []
    requirements = [names for names in requirements if names]
    if not requirements:
        return []

    if policy == SecurityPolicy.FIRST:
        return requirements[0]

    flattened: list[str] = []
    for names in requirements:
        for name in names:
            if name not in flattened:
                flattened.append(name)
    return flattened


def _scheme_names(requirement: Any) -> list[str]:
    if not isinstance(requirement, dict):
        return []
    return [name for name in requirement if isinstance(name, str)]

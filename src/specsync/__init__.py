"""specsync -- Parse OpenAPI 3.x specs and reconcile them with earlier imports.

This package turns an OpenAPI document (JSON or YAML) into a typed
:class:`~specsync.models.Spec`, then compares its endpoints against snapshots
of a previous import so that re-importing an updated spec can add, update and
remove requests without destroying user customisations.

Typical workflow::

    specsync snapshot openapi.yaml > baseline.json   # record an import
    specsync diff openapi-v2.yaml --against baseline.json

Nothing in the parser or diff engine performs I/O or keeps state; both are
safe to call from multiple threads.

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

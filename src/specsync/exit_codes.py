"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specsync.exceptions.SpecsyncError` subclass.
CI scripts wrapping ``specsync diff`` can inspect the exit code to tell a
broken spec apart from an unreadable snapshot file without parsing stderr.

Example::

    $ specsync inspect swagger2.json
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- not an OpenAPI 3.x document
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SOURCE_ERROR = 6
"""The spec source (file, URL, stdin) could not be read."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be parsed or validated."""

EXIT_SNAPSHOT_ERROR = 8
"""The existing-endpoint snapshot file could not be read or decoded."""

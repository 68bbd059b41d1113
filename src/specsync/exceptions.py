"""Exception hierarchy for specsync.

All exceptions inherit from :class:`SpecsyncError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specsync.exit_codes`.
The top-level error handler in :func:`specsync.app.main` catches
``SpecsyncError`` and exits with the appropriate code.

Parsing is fail-fast: the first violated precondition raises one of the
:class:`SpecParseError` subclasses and no partial result is produced.
Diffing never raises.

Subclass hierarchy::

    SpecsyncError (exit 1)
    +-- SpecParseError          (exit 7)
    |   +-- InvalidFormatError
    |   +-- UnsupportedVersionError
    |   +-- MissingInfoError
    |   +-- MissingTitleError
    +-- SourceError             (exit 6)
    +-- SnapshotError           (exit 8)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from typing import Optional

from specsync.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_SNAPSHOT_ERROR,
    EXIT_SOURCE_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecsyncError(Exception):
    """Base exception for all specsync errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specsync.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class SpecParseError(SpecsyncError):
    """Raised when the OpenAPI spec cannot be parsed or fails validation.

    Subclasses carry a fixed, user-facing ``summary``. An optional *detail*
    (for example the underlying decoder message) is appended after a colon.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR
    summary: str = "Invalid OpenAPI document"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = self.summary if not detail else f"{self.summary}: {detail}"
        super().__init__(message)


class InvalidFormatError(SpecParseError):
    """The bytes are neither a JSON object nor a YAML mapping, or ``openapi`` is missing."""

    summary = "Invalid OpenAPI format"


class UnsupportedVersionError(SpecParseError):
    """The ``openapi`` field is present but does not start with ``3.``."""

    summary = "Unsupported OpenAPI version"


class MissingInfoError(SpecParseError):
    """The document has no ``info`` object."""

    summary = "Missing required info section"


class MissingTitleError(SpecParseError):
    """The ``info`` object has no title, or the title is empty."""

    summary = "Missing required info.title"


class SourceError(SpecsyncError):
    """Raised when a spec source (file, URL, stdin) cannot be read."""

    exit_code = EXIT_SOURCE_ERROR


class SnapshotError(SpecsyncError):
    """Raised when a file of existing endpoint records cannot be loaded."""

    exit_code = EXIT_SNAPSHOT_ERROR


class ConfigError(SpecsyncError):
    """Raised for configuration problems (invalid JSON, unknown policy values)."""

    exit_code = EXIT_GENERIC_FAILURE

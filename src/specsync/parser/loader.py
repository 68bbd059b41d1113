"""Decode OpenAPI documents and read them from a URL, local file, or stdin.

The pure half of this module is :func:`decode_document`, which turns a raw
byte buffer into a loosely-typed ``dict`` tree. It tries JSON first and falls
back to YAML, because valid JSON is also valid YAML but JSON parsing is
stricter and faster. :func:`normalize_openapi_version` then reads the
``openapi`` field tolerant of type: unquoted YAML such as ``openapi: 3.0``
decodes as a float, and is normalised back to a string.

The I/O half, :func:`read_source`, is only used by the CLI. It fetches the
raw bytes and leaves all interpretation to the parser.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from specsync.exceptions import InvalidFormatError, SourceError

logger = logging.getLogger(__name__)


def decode_document(data: bytes) -> dict[str, Any]:
    """Decode *data* as a JSON object, falling back to a YAML mapping.

    Args:
        data: The raw document bytes (UTF-8 text).

    Returns:
        The decoded top-level mapping.

    Raises:
        InvalidFormatError: If the bytes are neither a JSON object nor a
            YAML mapping.
    """
    try:
        result = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.debug("Document is not JSON (%s), trying YAML", exc)
    else:
        if isinstance(result, dict):
            return result
        logger.debug("JSON document is a %s, trying YAML", type(result).__name__)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidFormatError(f"document is not UTF-8 text ({exc.reason})") from exc

    try:
        result = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidFormatError("document is neither JSON nor YAML") from exc

    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise InvalidFormatError(f"expected a JSON/YAML object (got {got})")
    return result


def normalize_openapi_version(document: dict[str, Any]) -> Optional[str]:
    """Return the ``openapi`` field as a string, or ``None`` if unusable.

    Strings pass through unchanged. Numbers (``openapi: 3.0`` in unquoted
    YAML) are converted with ``str``. Booleans, mappings, lists and a
    missing field all yield ``None``.
    """
    value = document.get("openapi")
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


# --- Source I/O (CLI only) ---


def read_source(source: str) -> bytes:
    """Read raw spec bytes from URL, file path, or stdin (``-``).

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The unparsed document bytes.

    Raises:
        SourceError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _read_stdin()
    elif source.startswith(("http://", "https://")):
        return _read_url(source)
    else:
        return _read_file(source)


def _read_stdin() -> bytes:
    """Read all of stdin as bytes."""
    try:
        content = sys.stdin.buffer.read()
    except (OSError, AttributeError) as exc:
        raise SourceError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SourceError("No input received from stdin")
    return content


def _read_url(url: str) -> bytes:
    """Fetch spec bytes over HTTP(S).

    Raises:
        SourceError: On a non-2xx status or a network failure.
    """
    logger.debug("Fetching spec from %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceError(f"Failed to fetch spec from {url}: {exc}") from exc

    return response.content


def _read_file(path: str) -> bytes:
    """Read spec bytes from a local file."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceError(f"Spec file not found: {path}")

    try:
        content = file_path.read_bytes()
    except OSError as exc:
        raise SourceError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SourceError(f"Spec file is empty: {path}")
    return content

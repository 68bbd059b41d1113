"""Build comparable :class:`~specsync.models.EndpointSnapshot` values.

Two sources feed the diff engine:

* :func:`snapshot_from_endpoint` -- what a freshly parsed endpoint *would*
  look like once imported (headers and query parameters with empty values,
  a coarse body type, a human-readable auth label).
* :func:`snapshot_from_record` -- what an external persistence layer
  currently stores. The record is a plain mapping; only the resulting
  snapshot shape is fixed.

Both sides must derive fields the same way, otherwise every re-import would
report spurious changes.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence
from uuid import UUID

from specsync.exceptions import SnapshotError
from specsync.models import (
    ApiKeySchemeType,
    BodyType,
    Endpoint,
    EndpointSnapshot,
    HTTPMethod,
    HttpSchemeType,
    KeyValue,
    ParameterLocation,
    SecurityScheme,
    endpoint_identity,
)

BEARER_LABEL = "Bearer Token"
BASIC_LABEL = "Basic Auth"
API_KEY_LABEL = "API Key"

# Display names for the auth types a stored request can carry
_AUTH_TYPE_LABELS = {
    "bearer": BEARER_LABEL,
    "basic": BASIC_LABEL,
    "api-key": API_KEY_LABEL,
}


def snapshot_from_endpoint(
    endpoint: Endpoint,
    security_schemes: Sequence[SecurityScheme],
) -> EndpointSnapshot:
    """Synthesise the snapshot an import of *endpoint* would produce.

    Args:
        endpoint: A parsed endpoint.
        security_schemes: The spec's declared schemes, used to label the
            first scheme named in ``endpoint.security``.

    Returns:
        A snapshot with ``request_id=None``.
    """
    content_type = endpoint.request_body.content_type if endpoint.request_body else None
    return EndpointSnapshot(
        id=endpoint.id,
        request_id=None,
        name=endpoint.name,
        method=endpoint.method,
        path=endpoint.path,
        headers=_key_values(endpoint, ParameterLocation.HEADER),
        query_params=_key_values(endpoint, ParameterLocation.QUERY),
        body_type=body_type_for(content_type),
        body_content_type=content_type,
        auth_description=auth_description_for(endpoint.security, security_schemes),
        tags=list(endpoint.tags),
    )


def _key_values(endpoint: Endpoint, location: ParameterLocation) -> list[KeyValue]:
    return [KeyValue(key=p.name) for p in endpoint.parameters if p.location == location]


def body_type_for(content_type: Optional[str]) -> BodyType:
    """Map a MIME type to the coarse :class:`~specsync.models.BodyType`."""
    if content_type is None:
        return BodyType.NONE
    if "json" in content_type:
        return BodyType.JSON
    if "xml" in content_type:
        return BodyType.XML
    if "form-urlencoded" in content_type:
        return BodyType.URL_ENCODED
    if "form-data" in content_type:
        return BodyType.FORM_DATA
    return BodyType.RAW


def auth_description_for(
    security: Optional[Sequence[str]],
    security_schemes: Sequence[SecurityScheme],
) -> Optional[str]:
    """Label the first resolved scheme name, or ``None`` when no auth applies.

    ``http`` bearer and basic schemes map to ``"Bearer Token"`` and
    ``"Basic Auth"``; an ``apiKey`` scheme maps to ``"API Key (<name>)"``.
    Other ``http`` schemes, unsupported types and undeclared names yield
    ``None`` because an import cannot configure them either.
    """
    if not security:
        return None
    scheme = next((s for s in security_schemes if s.name == security[0]), None)
    if scheme is None:
        return None

    variant = scheme.type
    if isinstance(variant, HttpSchemeType):
        return {"bearer": BEARER_LABEL, "basic": BASIC_LABEL}.get(variant.scheme.lower())
    if isinstance(variant, ApiKeySchemeType):
        return f"{API_KEY_LABEL} ({variant.name})" if variant.name else API_KEY_LABEL
    return None


def snapshot_from_record(record: Mapping[str, Any]) -> EndpointSnapshot:
    """Build a snapshot from an externally persisted request record.

    Recognised keys (all optional except a method and a path/URL):

    * ``request_id`` (or ``id`` when it parses as a UUID) -- the stored
      request's identifier; ``None``/absent marks a user-created request.
    * ``openapi_method`` / ``method`` and ``openapi_path`` / ``path`` /
      ``url_template`` / ``url`` -- identity. The ``openapi_*`` values win
      because users may edit the visible URL after importing.
    * ``name``, ``tags``, ``body_type``, ``body_content_type``.
    * ``headers`` / ``query_params`` -- lists of ``{"key", "value",
      "enabled"}`` objects or ``[key, value]`` pairs.
    * ``auth_description``, or ``auth_type`` (``none``, ``bearer``,
      ``basic``, ``api-key``) plus optional ``api_key_name``.

    Raises:
        SnapshotError: If the record has no usable method or path.
    """
    method = _record_method(record)
    path = _first_str(record, "openapi_path", "path", "url_template", "url")
    if path is None:
        raise SnapshotError(f"Record {record.get('name', '<unnamed>')!r} has no path or URL")

    return EndpointSnapshot(
        id=endpoint_identity(method.value, path),
        request_id=_record_request_id(record),
        name=_first_str(record, "name") or "",
        method=method,
        path=path,
        headers=_decode_key_values(record.get("headers")),
        query_params=_decode_key_values(record.get("query_params")),
        body_type=_record_body_type(record.get("body_type")),
        body_content_type=_first_str(record, "body_content_type"),
        auth_description=_record_auth_description(record),
        tags=_decode_tags(record.get("tags")),
    )


def _record_method(record: Mapping[str, Any]) -> HTTPMethod:
    raw = _first_str(record, "openapi_method", "method")
    if raw is None:
        raise SnapshotError(f"Record {record.get('name', '<unnamed>')!r} has no method")
    try:
        return HTTPMethod(raw.upper())
    except ValueError as exc:
        raise SnapshotError(f"Unsupported HTTP method in record: {raw}") from exc


def _record_request_id(record: Mapping[str, Any]) -> Optional[UUID]:
    if "request_id" in record:
        return _parse_uuid(record["request_id"], strict=True)
    return _parse_uuid(record.get("id"), strict=False)


def _parse_uuid(value: Any, strict: bool) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        if strict:
            raise SnapshotError(f"Invalid request_id: {value!r}") from exc
        return None


def _record_body_type(value: Any) -> BodyType:
    try:
        return BodyType(value) if value is not None else BodyType.NONE
    except ValueError:
        return BodyType.RAW


def _record_auth_description(record: Mapping[str, Any]) -> Optional[str]:
    if "auth_description" in record:
        value = record["auth_description"]
        return value if isinstance(value, str) else None

    label = _AUTH_TYPE_LABELS.get(str(record.get("auth_type", "none")))
    key_name = record.get("api_key_name")
    if label == API_KEY_LABEL and isinstance(key_name, str) and key_name:
        return f"{API_KEY_LABEL} ({key_name})"
    return label


def _decode_tags(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [t for t in raw if isinstance(t, str)]


def _decode_key_values(raw: Any) -> list[KeyValue]:
    """Decode stored header/query rows; anything malformed decodes as ``[]``."""
    if not isinstance(raw, list):
        return []

    rows: list[KeyValue] = []
    for item in raw:
        if isinstance(item, dict) and isinstance(item.get("key"), str):
            rows.append(
                KeyValue(
                    key=item["key"],
                    value=str(item.get("value") or ""),
                    enabled=bool(item.get("enabled", item.get("isEnabled", True))),
                )
            )
        elif isinstance(item, (list, tuple)) and len(item) == 2 and isinstance(item[0], str):
            rows.append(KeyValue(key=item[0], value=str(item[1] or "")))
        else:
            return []
    return rows


def _first_str(record: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value:
            return value
    return None

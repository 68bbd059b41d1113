"""Parse an OpenAPI 3.x document into a typed :class:`~specsync.models.Spec`.

This module walks the decoded document tree and builds the info, servers,
security schemes and endpoints declared in it. The single public entry point
is :func:`parse_spec`. Internally it delegates to private helpers that each
handle one section of the OpenAPI structure:

* ``_validate`` -- the fail-fast preconditions (version, ``info``, title).
* ``_extract_info`` -- the ``info`` object.
* ``_extract_servers`` -- the ``servers`` array and its variables.
* ``_extract_security_schemes`` -- the ``components/securitySchemes`` map.
* ``_extract_endpoints`` -- the ``paths`` object, iterating over every
  path + HTTP method combination.

Parameter merging, path templating and security resolution are delegated to
:mod:`~specsync.parser.params`, :mod:`~specsync.parser.templating` and
:mod:`~specsync.parser.security`. ``$ref`` pointers are never resolved;
unresolved parameter references are dropped and counted in
``Spec.ref_skip_count``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specsync.exceptions import (
    InvalidFormatError,
    MissingInfoError,
    MissingTitleError,
    UnsupportedVersionError,
)
from specsync.models import (
    ApiKeySchemeType,
    Endpoint,
    HTTPMethod,
    HttpSchemeType,
    Info,
    NameFallback,
    ParserOptions,
    RequestBody,
    SecurityScheme,
    Server,
    ServerVariable,
    Spec,
    UnsupportedSchemeType,
)
from specsync.parser.loader import decode_document, normalize_openapi_version
from specsync.parser.params import merge_parameters
from specsync.parser.security import resolve_security
from specsync.parser.templating import convert_path_template

logger = logging.getLogger(__name__)

# Path-item keys that are operations; everything else is a structural sibling
_HTTP_METHODS = {m.value.lower(): m for m in HTTPMethod}

# Request body content types checked in this order before falling back
_PREFERRED_CONTENT_TYPES = (
    "application/json",
    "application/xml",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
)


def parse_spec(data: bytes, options: Optional[ParserOptions] = None) -> Spec:
    """Parse raw OpenAPI bytes into a :class:`~specsync.models.Spec`.

    Validation is fail-fast; the first violated precondition raises and no
    partial result is returned.

    Args:
        data: JSON or YAML text of an OpenAPI 3.x document.
        options: Naming and security policies. Defaults to
            :class:`~specsync.models.ParserOptions` ``()``.

    Returns:
        The parsed spec. Endpoints are sorted by ``(path, method)`` so two
        parses of the same bytes always yield the same order.

    Raises:
        InvalidFormatError: The bytes do not decode to a mapping, or the
            ``openapi`` field is missing or not a string/number.
        UnsupportedVersionError: ``openapi`` does not start with ``3.``.
        MissingInfoError: There is no ``info`` object.
        MissingTitleError: ``info.title`` is absent or empty.

    Example::

        spec = parse_spec(Path("petstore.yaml").read_bytes())
        for endpoint in spec.endpoints:
            print(endpoint.id)
    """
    options = options or ParserOptions()
    document = decode_document(data)
    version = _validate(document)

    endpoints, ref_skips = _extract_endpoints(document, options)
    if ref_skips:
        logger.warning("Skipped %d unresolved parameter $ref(s)", ref_skips)

    return Spec(
        info=_extract_info(document["info"]),
        servers=_extract_servers(document.get("servers")),
        endpoints=endpoints,
        security_schemes=_extract_security_schemes(document.get("components")),
        ref_skip_count=ref_skips,
        openapi_version=version,
    )


def _validate(document: dict[str, Any]) -> str:
    """Check the document preconditions in order and return the version string."""
    version = normalize_openapi_version(document)
    if version is None:
        raise InvalidFormatError("missing 'openapi' field. Is this an OpenAPI 3.x document?")
    if not version.startswith("3."):
        raise UnsupportedVersionError(f"{version} (only 3.x is supported)")

    info = document.get("info")
    if not isinstance(info, dict):
        raise MissingInfoError()

    title = info.get("title")
    if not isinstance(title, str) or not title:
        raise MissingTitleError()
    return version


def _extract_info(info: dict[str, Any]) -> Info:
    """Build :class:`~specsync.models.Info`; ``version`` defaults to ``"1.0"``."""
    return Info(
        title=info["title"],
        version=_scalar_str(info.get("version")) or "1.0",
        description=_str_or_none(info.get("description")),
    )


def _extract_servers(servers: Any) -> list[Server]:
    """Extract server entries; entries without a string ``url`` are skipped."""
    if not isinstance(servers, list):
        return []

    result: list[Server] = []
    for server in servers:
        if not isinstance(server, dict) or not isinstance(server.get("url"), str):
            continue
        result.append(
            Server(
                url=server["url"],
                description=_str_or_none(server.get("description")),
                variables=_extract_server_variables(server.get("variables")),
            )
        )
    return result


def _extract_server_variables(variables: Any) -> list[ServerVariable]:
    if not isinstance(variables, dict):
        return []

    result: list[ServerVariable] = []
    for name, var in variables.items():
        if not isinstance(var, dict):
            continue
        enum_values = var.get("enum")
        result.append(
            ServerVariable(
                name=str(name),
                default_value=_scalar_str(var.get("default")) or "",
                enum_values=(
                    [str(v) for v in enum_values] if isinstance(enum_values, list) else None
                ),
                description=_str_or_none(var.get("description")),
            )
        )
    return result


def _extract_security_schemes(components: Any) -> list[SecurityScheme]:
    """Extract ``components.securitySchemes`` in declaration order.

    ``http`` and ``apiKey`` schemes are modelled; every other type
    (``oauth2``, ``openIdConnect``, ``mutualTLS``) is kept as
    :class:`~specsync.models.UnsupportedSchemeType`.
    """
    if not isinstance(components, dict):
        return []
    schemes_raw = components.get("securitySchemes")
    if not isinstance(schemes_raw, dict):
        return []

    schemes: list[SecurityScheme] = []
    for name, scheme in schemes_raw.items():
        if not isinstance(scheme, dict) or not isinstance(scheme.get("type"), str):
            continue

        scheme_type = scheme["type"]
        if scheme_type == "http":
            variant = HttpSchemeType(scheme=_str_or_none(scheme.get("scheme")) or "bearer")
        elif scheme_type == "apiKey":
            variant = ApiKeySchemeType(
                name=_str_or_none(scheme.get("name")) or "",
                location=_str_or_none(scheme.get("in")) or "header",
            )
        else:
            variant = UnsupportedSchemeType(raw_type=scheme_type)

        schemes.append(SecurityScheme(name=str(name), type=variant))
    return schemes


def _extract_endpoints(
    document: dict[str, Any], options: ParserOptions
) -> tuple[list[Endpoint], int]:
    """Extract every operation from ``paths``.

    Only keys matching the HTTP method whitelist case-insensitively are
    operations; ``summary``, ``parameters``, ``servers``, ``$ref`` and
    vendor extensions on a path item are ignored.

    Returns:
        The endpoints sorted by ``(path, method)`` and the number of
        unresolved parameter references that were skipped.
    """
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return [], 0

    global_security = document.get("security")
    endpoints: list[Endpoint] = []
    ref_skips = 0

    for path, path_item in paths.items():
        if not isinstance(path, str) or not isinstance(path_item, dict):
            continue

        path_params = _as_list(path_item.get("parameters"))
        converted_path = convert_path_template(path)
        seen: set[HTTPMethod] = set()

        for key, operation in path_item.items():
            method = _HTTP_METHODS.get(key.lower()) if isinstance(key, str) else None
            if method is None or not isinstance(operation, dict):
                continue
            if method in seen:
                logger.warning("Duplicate %s operation under %s ignored", method.value, path)
                continue
            seen.add(method)

            parameters, skipped = merge_parameters(
                path_params, _as_list(operation.get("parameters"))
            )
            ref_skips += skipped

            operation_id = _str_or_none(operation.get("operationId")) or None
            endpoints.append(
                Endpoint(
                    name=_endpoint_name(operation, method, path, options.name_fallback),
                    method=method,
                    path=converted_path,
                    parameters=sorted(parameters, key=lambda p: (p.location.value, p.name)),
                    request_body=_extract_request_body(operation.get("requestBody")),
                    tags=[t for t in _as_list(operation.get("tags")) if isinstance(t, str)],
                    operation_id=operation_id,
                    description=_str_or_none(operation.get("description")),
                    security=resolve_security(
                        global_security,
                        operation.get("security"),
                        options.security_policy,
                    ),
                )
            )

    endpoints.sort(key=lambda e: (e.path, e.method.value))
    return endpoints, ref_skips


def _endpoint_name(
    operation: dict[str, Any],
    method: HTTPMethod,
    path: str,
    fallback: NameFallback,
) -> str:
    """``operationId``, else ``summary``, else the configured fallback."""
    for key in ("operationId", "summary"):
        value = operation.get(key)
        if isinstance(value, str) and value:
            return value
    if fallback == NameFallback.EMPTY:
        return ""
    return f"{method.value} {path}"


def _extract_request_body(body: Any) -> Optional[RequestBody]:
    """Pick the request body content type.

    Well-known types are preferred in a fixed order; otherwise the first
    declared type is used. A body without a content map yields ``None``.
    """
    if not isinstance(body, dict):
        return None
    content = body.get("content")
    if not isinstance(content, dict) or not content:
        return None

    for content_type in _PREFERRED_CONTENT_TYPES:
        if content_type in content:
            return RequestBody(content_type=content_type)
    return RequestBody(content_type=str(next(iter(content))))


# --- Typed accessors ---


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _scalar_str(value: Any) -> Optional[str]:
    """Return strings and numbers as strings (unquoted YAML ``version: 1.0``)."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None

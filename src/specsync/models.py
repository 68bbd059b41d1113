"""Canonical Pydantic models shared across all specsync modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`NameFallback`, :class:`SecurityPolicy`, :class:`ParserOptions`,
    :class:`DiffOptions`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Parser output models** -- produced by :func:`~specsync.parser.parse_spec`:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`RequestBody`, :class:`SecurityScheme` (with the closed
    :data:`SecuritySchemeType` union), :class:`Endpoint`, :class:`Info`,
    :class:`Server`, :class:`ServerVariable`, and :class:`Spec`.

**Reconciliation models** -- produced and consumed by the diff engine:
    :class:`BodyType`, :class:`KeyValue`, :class:`EndpointSnapshot`,
    :class:`EndpointChange`, and :class:`DiffResult`.

Every model is frozen. A parse or diff call builds fresh instances and
nothing mutates them afterwards, so results can be shared between threads
and handed to a persistence layer as-is.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


_FROZEN = ConfigDict(frozen=True)


# --- Configuration ---


class NameFallback(str, enum.Enum):
    """Endpoint name used when an operation has neither ``operationId`` nor ``summary``."""

    METHOD_PATH = "method_path"
    EMPTY = "empty"


class SecurityPolicy(str, enum.Enum):
    """How the effective security requirement list is flattened into scheme names.

    ``FIRST`` picks the first requirement object that names at least one
    scheme. ``ALL`` flattens every requirement, dropping duplicates.
    """

    FIRST = "first"
    ALL = "all"


class ParserOptions(BaseModel):
    """Policy knobs for :func:`~specsync.parser.parse_spec`."""

    name_fallback: NameFallback = Field(
        default=NameFallback.METHOD_PATH,
        description="Name for operations without operationId or summary",
    )
    security_policy: SecurityPolicy = Field(
        default=SecurityPolicy.FIRST,
        description="Requirement selection: first, all",
    )


class DiffOptions(BaseModel):
    """Presentation settings applied by the CLI after diffing."""

    ignore_user_created: bool = Field(
        default=False,
        description="Hide removed snapshots that were not spec-derived",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specsync/config.json``.

    Loaded by :func:`~specsync.config.load_global_config`. See
    :func:`~specsync.config.resolve_config` for the full precedence chain.
    """

    parser: ParserOptions = Field(default_factory=ParserOptions)
    diff: DiffOptions = Field(default_factory=DiffOptions)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Enums ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods imported from OpenAPI path items.

    Values are the canonical upper-case short form, which is also the form
    used in endpoint identities and for deterministic ordering.
    """

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    PATCH = "PATCH"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class BodyType(str, enum.Enum):
    """Coarse request body kind stored alongside an imported request."""

    NONE = "none"
    JSON = "json"
    XML = "xml"
    URL_ENCODED = "x-www-form-urlencoded"
    FORM_DATA = "form-data"
    RAW = "raw"


# --- Parser Output Models ---


class ServerVariable(BaseModel):
    """A substitution variable declared on a server URL template."""

    model_config = _FROZEN

    name: str
    default_value: str = ""
    enum_values: Optional[list[str]] = None
    description: Optional[str] = None


class Server(BaseModel):
    """A server entry from the spec's ``servers`` array."""

    model_config = _FROZEN

    url: str
    description: Optional[str] = None
    variables: list[ServerVariable] = Field(default_factory=list)


class HttpSchemeType(BaseModel):
    """``type: http`` security scheme (``bearer``, ``basic``, ...)."""

    model_config = _FROZEN

    kind: Literal["http"] = "http"
    scheme: str = "bearer"


class ApiKeySchemeType(BaseModel):
    """``type: apiKey`` security scheme sent in a header or query parameter."""

    model_config = _FROZEN

    kind: Literal["apiKey"] = "apiKey"
    name: str = ""
    location: str = "header"


class UnsupportedSchemeType(BaseModel):
    """Any other scheme type (``oauth2``, ``openIdConnect``, ...), kept opaque."""

    model_config = _FROZEN

    kind: Literal["unsupported"] = "unsupported"
    raw_type: str


SecuritySchemeType = Annotated[
    Union[HttpSchemeType, ApiKeySchemeType, UnsupportedSchemeType],
    Field(discriminator="kind"),
]
"""Closed union of the security scheme variants, discriminated on ``kind``."""


class SecurityScheme(BaseModel):
    """A named entry of ``components.securitySchemes``."""

    model_config = _FROZEN

    name: str
    type: SecuritySchemeType


class Parameter(BaseModel):
    """An inline OpenAPI parameter, identified by ``(name, location)``."""

    model_config = _FROZEN

    name: str
    location: ParameterLocation

    @property
    def key(self) -> tuple[str, str]:
        """Uniqueness key used when merging path- and operation-level lists."""
        return (self.name, self.location.value)


class RequestBody(BaseModel):
    """The content type chosen from an operation's ``requestBody.content`` map."""

    model_config = _FROZEN

    content_type: str


class Endpoint(BaseModel):
    """One HTTP operation (method + path) extracted from a spec.

    ``path`` is already converted to the ``{{var}}`` interpolation syntax.
    ``security`` is ``None`` when no security applies at all and ``[]`` when
    the operation explicitly opts out of authentication.
    """

    model_config = _FROZEN

    name: str
    method: HTTPMethod
    path: str
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = None
    tags: list[str] = Field(default_factory=list)
    operation_id: Optional[str] = None
    description: Optional[str] = None
    security: Optional[list[str]] = None

    @property
    def id(self) -> str:
        """Identity used to match the endpoint across re-imports."""
        return endpoint_identity(self.method.value, self.path)


class Info(BaseModel):
    """API metadata extracted from the spec's *Info Object*."""

    model_config = _FROZEN

    title: str = Field(min_length=1)
    version: str = "1.0"
    description: Optional[str] = None


class Spec(BaseModel):
    """Complete parsed representation of one OpenAPI document.

    ``ref_skip_count`` counts parameter entries that were unresolved
    ``$ref`` pointers and were therefore dropped. Callers should warn about
    it; it is never an error.
    """

    model_config = _FROZEN

    info: Info
    servers: list[Server] = Field(default_factory=list)
    endpoints: list[Endpoint] = Field(default_factory=list)
    security_schemes: list[SecurityScheme] = Field(default_factory=list)
    ref_skip_count: int = 0
    openapi_version: str = "3.0.0"


# --- Reconciliation Models ---


class KeyValue(BaseModel):
    """A header or query parameter row as stored on an imported request."""

    model_config = _FROZEN

    key: str
    value: str = ""
    enabled: bool = True


class EndpointSnapshot(BaseModel):
    """A flattened, comparable view of an endpoint.

    Built either from a parsed :class:`Endpoint` ("what the spec implies")
    or from an externally persisted record ("what is currently stored").
    ``request_id`` is ``None`` for snapshots that were not derived from a
    spec import; those never match an incoming endpoint.
    """

    model_config = _FROZEN

    id: str
    request_id: Optional[UUID] = None
    name: str
    method: HTTPMethod
    path: str
    headers: list[KeyValue] = Field(default_factory=list)
    query_params: list[KeyValue] = Field(default_factory=list)
    body_type: BodyType = BodyType.NONE
    body_content_type: Optional[str] = None
    auth_description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @property
    def is_spec_derived(self) -> bool:
        return self.request_id is not None


class EndpointChange(BaseModel):
    """A matched endpoint whose derived fields differ from what is stored."""

    model_config = _FROZEN

    id: str
    existing: EndpointSnapshot
    incoming: EndpointSnapshot
    incoming_endpoint: Endpoint
    changed_fields: list[str] = Field(default_factory=list)


class DiffResult(BaseModel):
    """Partition of incoming endpoints and existing snapshots into four buckets.

    Every incoming endpoint and every existing snapshot appears in exactly
    one bucket.
    """

    model_config = _FROZEN

    new_endpoints: list[Endpoint] = Field(default_factory=list)
    changed_endpoints: list[EndpointChange] = Field(default_factory=list)
    removed_endpoints: list[EndpointSnapshot] = Field(default_factory=list)
    unchanged_endpoints: list[EndpointSnapshot] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.new_endpoints or self.changed_endpoints or self.removed_endpoints)

    def summary(self) -> dict[str, int]:
        """Return the size of each bucket, keyed by bucket name."""
        return {
            "new": len(self.new_endpoints),
            "changed": len(self.changed_endpoints),
            "removed": len(self.removed_endpoints),
            "unchanged": len(self.unchanged_endpoints),
        }


def endpoint_identity(method: str, path: str) -> str:
    """Build the ``"{METHOD} {path}"`` identity, upper-casing *method*."""
    return f"{method.upper()} {path}"

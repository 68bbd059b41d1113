"""Inspect command -- summarise what a spec would import.

``specsync inspect SOURCE`` parses the spec and prints its info block,
servers, security schemes, and the sorted endpoint list. In ``--json``
mode the whole :class:`~specsync.models.Spec` is dumped instead so
scripts can consume exactly what the parser produced.
"""

from __future__ import annotations

import typer

from specsync.commands.common import get_config, load_spec
from specsync.models import ApiKeySchemeType, HttpSchemeType, SecurityScheme, Spec
from specsync.output import OutputFormat, get_output, info, warning


def inspect_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Spec file path, URL, or '-' for stdin."),
) -> None:
    """Show the info, servers, security schemes, and endpoints of a spec.

    Example::

        specsync inspect openapi.yaml
        specsync --json inspect https://example.com/openapi.json
    """
    spec = load_spec(source, get_config(ctx))
    output = get_output()

    if spec.ref_skip_count:
        warning(f"Skipped {spec.ref_skip_count} unresolved $ref parameter(s)")

    if output.format == OutputFormat.JSON:
        output.print_json(spec.model_dump(mode="json"))
        return

    info(f"{spec.info.title} {spec.info.version} (OpenAPI {spec.openapi_version})")
    if spec.info.description:
        info(spec.info.description)

    _print_servers(spec)
    _print_security_schemes(spec)
    _print_endpoints(spec)


def _print_servers(spec: Spec) -> None:
    if not spec.servers:
        return
    rows = []
    for server in spec.servers:
        variables = ", ".join(f"{v.name}={v.default_value}" for v in server.variables)
        rows.append([server.url, server.description or "", variables])
    get_output().print_table(["URL", "Description", "Variables"], rows, title="Servers")


def _print_security_schemes(spec: Spec) -> None:
    if not spec.security_schemes:
        return
    rows = [[scheme.name, _describe_scheme(scheme)] for scheme in spec.security_schemes]
    get_output().print_table(["Name", "Type"], rows, title="Security Schemes")


def _describe_scheme(scheme: SecurityScheme) -> str:
    variant = scheme.type
    if isinstance(variant, HttpSchemeType):
        return f"http ({variant.scheme})"
    if isinstance(variant, ApiKeySchemeType):
        return f"apiKey ({variant.name} in {variant.location})"
    return f"unsupported ({variant.raw_type})"


def _print_endpoints(spec: Spec) -> None:
    rows = []
    for endpoint in spec.endpoints:
        params = ", ".join(f"{p.location.value}:{p.name}" for p in endpoint.parameters)
        body = endpoint.request_body.content_type if endpoint.request_body else ""
        security = "" if endpoint.security is None else ", ".join(endpoint.security) or "none"
        rows.append([
            endpoint.method.value,
            endpoint.path,
            endpoint.name,
            params,
            body,
            security,
        ])
    get_output().print_table(
        ["Method", "Path", "Name", "Parameters", "Body", "Security"],
        rows,
        title=f"{spec.info.title} -- Endpoints ({len(rows)})",
    )

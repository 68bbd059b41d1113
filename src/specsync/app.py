"""Typer application and CLI entry point for specsync.

This module wires together the top-level Typer application and registers the
built-in commands (``inspect``, ``snapshot``, ``diff``, and the ``config``
group). The root callback turns the global flags into an
:class:`~specsync.output.OutputManager` and a resolved
:class:`~specsync.models.GlobalConfig` stored on ``ctx.obj``.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app, maps
:class:`~specsync.exceptions.SpecsyncError` to its exit code, and writes a
crash log for anything unexpected.

See Also:
    :mod:`specsync.config`: Configuration precedence resolution.
    :mod:`specsync.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specsync import __version__
from specsync.commands.config import config_app
from specsync.commands.diff import diff_command
from specsync.commands.inspect import inspect_command
from specsync.commands.snapshot import snapshot_command
from specsync.exit_codes import EXIT_GENERIC_FAILURE
from specsync.models import NameFallback, SecurityPolicy


app = typer.Typer(
    name="specsync",
    help="Parse OpenAPI 3.x specs and reconcile them with earlier imports.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("inspect")(inspect_command)
app.command("snapshot")(snapshot_command)
app.command("diff")(diff_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specsync {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
    name_fallback: Optional[NameFallback] = typer.Option(
        None,
        "--name-fallback",
        help="Name for operations without operationId or summary.",
    ),
    security_policy: Optional[SecurityPolicy] = typer.Option(
        None,
        "--security-policy",
        help="Which security requirements to keep: first or all.",
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective configuration, initialises the global
    :class:`~specsync.output.OutputManager`, and stores the config and
    shared flags in ``ctx.obj``.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output and library logging.
        force: Skip interactive confirmations.
        output_file: Redirect primary data output to a file path.
        name_fallback: Parser name fallback override.
        security_policy: Parser security policy override.
    """
    from specsync.config import resolve_config
    from specsync.exceptions import ConfigError
    from specsync.models import GlobalConfig
    from specsync.output import OutputFormat, OutputManager, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    config_error: Optional[ConfigError] = None
    try:
        config = resolve_config(
            cli_name_fallback=name_fallback.value if name_fallback else None,
            cli_security_policy=security_policy.value if security_policy else None,
            cli_format=cli_format,
        )
    except ConfigError as exc:
        config_error = exc
        config = GlobalConfig()

    try:
        fmt = OutputFormat(cli_format or config.output.format)
    except ValueError:
        fmt = OutputFormat.AUTO

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if config_error is not None:
        # The config group must stay usable so a broken file can be reset.
        if ctx.invoked_subcommand != "config":
            output.error(str(config_error))
            raise typer.Exit(code=config_error.exit_code)
        output.warning(f"{config_error}; using defaults")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback to disk and return the log file path."""
    from specsync.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specsync`` console script.

    Unhandled :class:`~specsync.exceptions.SpecsyncError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specsync.exceptions import SpecsyncError
        from specsync.output import error

        if isinstance(exc, SpecsyncError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

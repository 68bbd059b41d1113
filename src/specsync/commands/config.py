"""Config commands -- view and modify the global configuration.

``specsync config show`` prints the effective settings, ``config set``
updates one dotted key in the user's config file, and ``config reset``
restores the defaults. Project-local ``specsync.json`` files are never
written; edit them by hand.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from specsync.exit_codes import EXIT_INVALID_USAGE
from specsync.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    The printed values already include project config, environment
    variables, and CLI flags.

    Example::

        specsync config show
        specsync --json config show
    """
    from specsync.commands.common import get_config
    from specsync.config import get_config_dir

    info(f"Config directory: {get_config_dir()}")
    get_output().print_json(get_config(ctx).model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key in dot notation, e.g. 'parser.security_policy'."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a value in the global configuration file.

    Booleans accept ``true``/``false``, ``yes``/``no``, ``1``/``0``. The
    result is validated against :class:`~specsync.models.GlobalConfig`
    before it is saved.

    Example::

        specsync config set parser.name_fallback empty
        specsync config set diff.ignore_user_created true
    """
    from specsync.config import load_global_config, save_global_config
    from specsync.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    *parents, final_key = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]

    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    if isinstance(target[final_key], bool):
        lowered = value.lower()
        if lowered not in _TRUE_VALUES + _FALSE_VALUES:
            error(f"Expected true or false for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target[final_key] = lowered in _TRUE_VALUES
    else:
        target[final_key] = value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    path = save_global_config(new_config)
    success(f"Set {key} = {target[final_key]}")
    info(f"Saved to {path}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset the global configuration to defaults.

    Asks for confirmation unless ``--force`` is given on the root command.

    Example::

        specsync --force config reset
    """
    from specsync.config import save_global_config
    from specsync.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")

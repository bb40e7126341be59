"""Config commands -- view and modify the user configuration.

Provides the ``gistdrop config`` sub-command group for reading and updating
the :class:`~gistdrop.models.AppConfig` file.  Settings control the OAuth
client id, endpoints, default gist visibility and log level.
"""

from __future__ import annotations

import typer

from gistdrop.output import format_response, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Includes ``GISTDROP_*`` environment overrides, so the output is what
    the other commands actually use.

    Example::

        gistdrop config show
        gistdrop --json config show
    """
    from gistdrop.config import config_path

    info(f"Config file: {config_path()}")
    format_response(ctx.obj["config"].model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'client_id' or 'public_by_default'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the field's type and validated before saving.
    Works on a config file that holds an invalid value, so a bad setting
    can be corrected in place.

    Raises:
        ConfigError: Unknown key or invalid value.

    Example::

        gistdrop config set client_id Iv1.0123456789abcdef
        gistdrop config set public_by_default true
    """
    from gistdrop.config import read_config_data, save_config, update_config

    config = update_config(read_config_data(), key, value)
    save_config(config)
    success(f"Set {key} = {getattr(config, key)}")


@config_app.command("path")
def config_path_command() -> None:
    """Print the config file path.

    Example::

        gistdrop config path
    """
    from gistdrop.config import config_path

    print_data(str(config_path()))

"""Configuration commands."""

from pathlib import Path
from typing import Optional

import click

from fftsweep.cli.context import ConfigContext, pass_config


@click.group()
def config() -> None:
    """Configuration file management."""
    pass


@config.command("init")
@click.argument("path", required=False, default="fftsweep.toml")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path: Optional[str], force: bool) -> None:
    """Write the default configuration to PATH (default: ./fftsweep.toml)."""
    from fftsweep.cli.service_helpers import exit_with_error
    from fftsweep.core.config import create_default_config_file

    if Path(path).exists() and not force:
        exit_with_error(f"{path} already exists (use --force to overwrite)")

    written = create_default_config_file(path)
    click.echo(f"Configuration written to {written}")


@config.command("show")
@pass_config
def config_show(ctx: ConfigContext) -> None:
    """Show the active configuration."""
    from fftsweep.core.config import format_toml

    source = ctx.config._source or "built-in defaults"
    click.echo(f"# Source: {source}")
    click.echo(format_toml(ctx.config.to_dict()))

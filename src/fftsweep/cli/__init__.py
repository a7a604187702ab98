"""Command line interface for fftsweep."""

import logging
from typing import Optional

import click

from fftsweep.cli.commands import config, plots, sweep
from fftsweep.cli.context import ConfigContext
from fftsweep.core.config import load_config
from fftsweep.core.logger import set_level


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True),
              help="Path to TOML configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="fftsweep")
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """fftsweep - FFT parametrisation sweeps for acoustic-index ordination

    Configuration can be provided via:
    - --config option pointing to a TOML file
    - ./fftsweep.toml in current directory
    - ~/.config/fftsweep/config.toml
    """
    ctx.ensure_object(ConfigContext)
    ctx.obj.config = load_config(config_path)
    set_level(logging.DEBUG if verbose else ctx.obj.config.get("logging", "level", "INFO"))


cli.add_command(sweep)
cli.add_command(config)
cli.add_command(plots)


if __name__ == "__main__":
    cli()

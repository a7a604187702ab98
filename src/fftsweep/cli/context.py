"""Shared click context for fftsweep commands."""

import click


class ConfigContext:
    """Context object to hold configuration."""

    def __init__(self):
        self.config = None


pass_config = click.make_pass_decorator(ConfigContext, ensure=True)

"""
CLI Service Helpers
===================

Utilities for CLI commands working with services:
1. Build services from the active configuration
2. Handle service result errors consistently

Usage:
    from fftsweep.cli.service_helpers import handle_result, sweep_service

    result = sweep_service(config).run("indices.csv")
    summary = handle_result(result)  # Exits with error message if failed
"""

from typing import TYPE_CHECKING, TypeVar

import click

if TYPE_CHECKING:
    from fftsweep.core.config import Config
    from fftsweep.services.base import ServiceResult
    from fftsweep.services.sweep import SweepService

T = TypeVar("T")


def sweep_service(config: "Config", plots: bool = True) -> "SweepService":
    """
    Create a SweepService for the given configuration.

    Args:
        config: Active configuration
        plots: Attach the NMDS plot renderer
    """
    from fftsweep.core.visualize import render_ordination
    from fftsweep.services.sweep import SweepService

    return SweepService(config, renderer=render_ordination if plots else None)


def handle_result(result: "ServiceResult[T]") -> T:
    """
    Handle a service result, exiting with error if failed.

    Args:
        result: Service result to handle

    Returns:
        The result data if successful

    Raises:
        SystemExit: If result indicates failure (exits with code 1)
    """
    if not result.success:
        exit_with_error(result.error or "Unknown error")
    return result.data


def exit_with_error(message: str, code: int = 1) -> None:
    """
    Print error message and exit.

    Args:
        message: Error message to display
        code: Exit code (default: 1)

    Raises:
        SystemExit: Always exits with specified code
    """
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(code)

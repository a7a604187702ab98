"""NMDS plot lookup commands."""

from typing import Optional

import click

from fftsweep.cli.context import ConfigContext, pass_config


@click.group()
def plots() -> None:
    """NMDS plot lookup."""
    pass


@plots.command("path")
@click.option("--group", "-g", required=True, help="Grouping key (night or chorus)")
@click.option("--fs", required=True, type=float, help="Sampling rate (Hz)")
@click.option("--nfft", required=True, type=int, help="FFT length")
@click.option("--overlap", required=True, type=float, help="Window overlap fraction")
@click.option("--output-dir", "-o", type=click.Path(), default=None, help="Sweep output directory")
@pass_config
def plots_path(
    ctx: ConfigContext,
    group: str,
    fs: float,
    nfft: int,
    overlap: float,
    output_dir: Optional[str],
) -> None:
    """Print the plot path for a grid point; exit 1 if the plot does not exist."""
    from fftsweep.core.visualize import find_plot, plot_path

    output_dir = output_dir or ctx.config.get("output", "dir", "results")
    path = plot_path(output_dir, group, fs, nfft, overlap)
    click.echo(str(path))
    if find_plot(output_dir, group, fs, nfft, overlap) is None:
        click.echo("Plot not found", err=True)
        raise SystemExit(1)

"""Descriptor sweep commands."""

from typing import Optional

import click

from fftsweep.cli.context import ConfigContext, pass_config


@click.group()
def sweep() -> None:
    """Descriptor sweeps over FFT parametrisations."""
    pass


def _apply_overrides(ctx: ConfigContext, domain: Optional[str], kde_extent: Optional[str] = None):
    config = ctx.config.copy()
    if domain:
        config.set("data", "domain", domain)
    if kde_extent:
        config.set("kde", "extent", kde_extent)
    return config


@sweep.command("run")
@click.argument("input_csv", type=click.Path(exists=True))
@click.option(
    "--domain",
    type=click.Choice(["underwater", "terrestrial"]),
    default=None,
    help="Recording domain (default: [data] domain)",
)
@click.option("--output-dir", "-o", type=click.Path(), default=None, help="Output directory")
@click.option("--workers", "-w", type=int, default=None, help="Worker processes")
@click.option("--no-plots", is_flag=True, help="Do not render NMDS plots")
@click.option(
    "--kde-extent",
    type=click.Choice(["shared", "per_cohort"]),
    default=None,
    help="KDE grid extent (default: [kde] extent)",
)
@click.option("--diagnostics", is_flag=True, help="Add NMDS stress and convergence columns")
@click.option("--quiet", "-q", is_flag=True, help="Suppress progress output")
@pass_config
def sweep_run(
    ctx: ConfigContext,
    input_csv: str,
    domain: Optional[str],
    output_dir: Optional[str],
    workers: Optional[int],
    no_plots: bool,
    kde_extent: Optional[str],
    diagnostics: bool,
    quiet: bool,
) -> None:
    """Run the descriptor sweep over every grid point of INPUT_CSV."""
    from fftsweep.cli.progress import ProgressBar, print_success, print_summary, print_warning
    from fftsweep.cli.service_helpers import handle_result, sweep_service

    config = _apply_overrides(ctx, domain, kde_extent)
    if diagnostics:
        config.set("output", "include_diagnostics", True)

    service = sweep_service(config, plots=not no_plots)
    with ProgressBar(description="Sweeping grid", disable=quiet) as progress:
        service.set_progress_callback(progress.callback)
        result = service.run(
            input_csv,
            output_dir=output_dir,
            workers=workers,
            plots=False if no_plots else None,
        )
    summary = handle_result(result)

    if summary.empty:
        print_warning("No valid results: every grid point was skipped; nothing written")
        return

    if not quiet:
        stats = {
            "Domain": summary.domain,
            "Grid points": summary.total_points,
            "Evaluated": summary.evaluated_points,
            "Rows": summary.valid_rows,
            "Skipped": summary.skipped,
            "Plots": len(summary.plot_paths),
            "Duration (s)": summary.duration_seconds,
        }
        for reason, count in sorted(summary.skip_counts.items()):
            stats[f"  {reason}"] = count
        print_summary("Sweep summary", stats)

    for warning in result.warnings:
        print_warning(warning)
    print_success(result.message)


@sweep.command("grid")
@click.argument("input_csv", type=click.Path(exists=True))
@click.option(
    "--domain",
    type=click.Choice(["underwater", "terrestrial"]),
    default=None,
    help="Recording domain (default: [data] domain)",
)
@click.option("--only-matching", is_flag=True, help="List only grid points with observations")
@pass_config
def sweep_grid(ctx: ConfigContext, input_csv: str, domain: Optional[str], only_matching: bool) -> None:
    """List grid points of INPUT_CSV with their observation counts."""
    from fftsweep.cli.progress import print_table
    from fftsweep.cli.service_helpers import handle_result, sweep_service

    config = _apply_overrides(ctx, domain)
    preview = handle_result(sweep_service(config, plots=False).preview_grid(input_csv))

    entries = preview.matching if only_matching else preview.entries
    habitats = list(entries[0].habitat_counts) if entries else []
    rows = [
        [e.group, e.fs, e.nfft, f"{e.overlap:.2f}", e.n_observations,
         *[e.habitat_counts.get(h, 0) for h in habitats]]
        for e in entries
    ]
    print_table(
        f"Grid ({preview.domain})",
        ["Group", "FS", "NFFT", "Overlap", "N", *habitats],
        rows,
    )
    click.echo(f"{len(preview.matching)} of {preview.total} grid points have observations")

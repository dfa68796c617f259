"""CLI entry point: fanplot demo / bands / quantiles / plot."""
from __future__ import annotations

import functools
import logging
import time
from pathlib import Path

import click

from .errors import FanplotError


def _parse_floats(ctx, param, value: str | None) -> list[float] | None:
    if value is None:
        return None
    try:
        return [float(v) for v in value.split(",") if v.strip()]
    except ValueError:
        raise click.BadParameter(f"expected comma-separated numbers, got {value!r}") from None


def _fail_cleanly(fn):
    """Turn library errors into a one-line click error instead of a traceback."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (FanplotError, FileNotFoundError) as e:
            raise click.ClickException(str(e)) from e
    return wrapper


def _columns(fn):
    fn = click.option("--group", "group", multiple=True, help="Grouping column (repeatable).")(fn)
    fn = click.option("--y", "y", default="y", show_default=True, help="Response column.")(fn)
    fn = click.option("--x", "x", default="x", show_default=True, help="Covariate column.")(fn)
    return fn


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def cli(verbose: bool):
    """Quantile fan charts from long-form sampled data."""
    from .logger import configure_logging

    configure_logging(logging.DEBUG if verbose else logging.INFO)


@cli.command()
@click.option("--out", "out_path", type=click.Path(path_type=Path), default=Path("samples.parquet"),
              show_default=True, help="Output .csv or .parquet.")
@click.option("--n-x", default=30, type=int, show_default=True)
@click.option("--n-samples", default=200, type=int, show_default=True)
@click.option("--groups", default=None, help="Comma-separated group names, e.g. 'control,treated'.")
@click.option("--seed", default=42, type=int, show_default=True)
@_fail_cleanly
def demo(out_path: Path, n_x: int, n_samples: int, groups: str | None, seed: int):
    """Write synthetic random-walk samples to try the other commands on."""
    from .io import write_table
    from .synthetic import random_walk_samples

    names = [g.strip() for g in groups.split(",") if g.strip()] if groups else None
    df = random_walk_samples(n_x, n_samples, groups=names, seed=seed)
    write_table(df, out_path)
    click.echo(f"Saved {out_path} ({len(df):,d} rows)")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@_columns
@click.option("--intervals", default="0.5,0.8,0.95,0.99", show_default=True, callback=_parse_floats,
              help="Comma-separated interval widths in [0, 1].")
@click.option("--out", "out_path", type=click.Path(path_type=Path), default=None,
              help="Output parquet (default outputs/aggregates/bands.parquet).")
@click.option("--base-path", default=".", help="Base path for default outputs.")
@_fail_cleanly
def bands(input_path: Path, x: str, y: str, group: tuple[str, ...], intervals: list[float],
          out_path: Path | None, base_path: str):
    """Long-form samples → interval bands (x, interval, lower, upper)."""
    from .compute import compute_bands
    from .config import aggregates_dir
    from .io import read_samples
    from .store import save_bands

    t0 = time.time()
    df = read_samples(input_path)
    click.echo(f"Read {len(df):,d} rows from {input_path}")
    result = compute_bands(df, intervals, x=x, y=y, group=list(group))
    out = out_path or aggregates_dir(base_path) / "bands.parquet"
    save_bands(result, out)
    click.echo(f"Saved {out} ({len(result)} rows)")
    click.echo(f"Done in {time.time() - t0:.1f}s.")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@_columns
@click.option("--intervals", default="0.5,0.8,0.95,0.99", show_default=True, callback=_parse_floats,
              help="Comma-separated interval widths in [0, 1].")
@click.option("--labels/--no-labels", default=True, show_default=True,
              help="Write 'q25'-style labels instead of probabilities.")
@click.option("--out", "out_path", type=click.Path(path_type=Path), default=None,
              help="Output parquet (default outputs/aggregates/quantiles.parquet).")
@click.option("--base-path", default=".", help="Base path for default outputs.")
@_fail_cleanly
def quantiles(input_path: Path, x: str, y: str, group: tuple[str, ...], intervals: list[float],
              labels: bool, out_path: Path | None, base_path: str):
    """Long-form samples → per-quantile rows (x, quantile, value)."""
    from .compute import calc_quantiles
    from .config import aggregates_dir
    from .io import read_samples
    from .store import save_quantiles

    df = read_samples(input_path)
    result = calc_quantiles(df, intervals, x=x, y=y, group=list(group), labels=labels)
    out = out_path or aggregates_dir(base_path) / "quantiles.parquet"
    save_quantiles(result, out)
    click.echo(f"Saved {out} ({len(result)} rows)")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@_columns
@click.option("--sample", "sample", default="sample", show_default=True, help="Sample id column.")
@click.option("--intervals", default=None, callback=_parse_floats,
              help="Comma-separated interval widths (default 0.5,0.8,0.95,0.99).")
@click.option("--from-quantiles", is_flag=True,
              help="INPUT_PATH holds quantile rows (x, quantile, value) from `fanplot quantiles`; "
                   "lines are drawn at every width in the table.")
@click.option("--gradient", is_flag=True, help="Use the fine 0.02..0.98 ladder for a smooth fan.")
@click.option("--no-fill", is_flag=True, help="Skip the filled bands.")
@click.option("--lines", is_flag=True, help="Overlay interval boundary lines.")
@click.option("--line-intervals", default="0,0.5,0.9", show_default=True, callback=_parse_floats)
@click.option("--n-samples", default=0, type=int, show_default=True, help="Raw trajectories to overlay.")
@click.option("--seed", default=42, type=int, show_default=True)
@click.option("--layout", default="overlay", type=click.Choice(["overlay", "facet"]), show_default=True)
@click.option("--title", default=None)
@click.option("--name", default="fan", show_default=True, help="Output file stem.")
@click.option("--format", "fmt", default="png", type=click.Choice(["png", "svg", "pdf"]))
@click.option("--dpi", default=200, type=int)
@click.option("--base-path", default=".", help="Base path (plots go to outputs/plots/).")
@_fail_cleanly
def plot(input_path: Path, x: str, y: str, group: tuple[str, ...], sample: str,
         intervals: list[float] | None, from_quantiles: bool, gradient: bool, no_fill: bool,
         lines: bool, line_intervals: list[float], n_samples: int, seed: int, layout: str,
         title: str | None, name: str, fmt: str, dpi: int, base_path: str):
    """Long-form samples (or pre-computed quantile rows) → fan chart PNG/SVG/PDF."""
    import matplotlib
    matplotlib.use("Agg")

    from .compute import bands_from_quantiles
    from .config import DEFAULT_INTERVALS, FAN_INTERVALS, plots_dir
    from .io import read_samples
    from .plots.fan import plot_bands, plot_fan

    t0 = time.time()
    if from_quantiles:
        if intervals is not None or gradient or n_samples:
            raise click.UsageError(
                "--intervals, --gradient and --n-samples need raw samples, not --from-quantiles"
            )
        table = read_samples(input_path)
        bands = bands_from_quantiles(table, x=x, group=list(group))
        click.echo(f"Rebuilt {len(bands)} band row(s) from {input_path}")
        path = plot_bands(
            bands, plots_dir(base_path),
            x=x, y_label=y, group=list(group), fill=not no_fill, lines=lines,
            layout=layout, title=title, name=name, dpi=dpi, fmt=fmt,
        )
    else:
        if intervals is None:
            intervals = list(FAN_INTERVALS if gradient else DEFAULT_INTERVALS)
        df = read_samples(input_path)
        path = plot_fan(
            df, plots_dir(base_path),
            x=x, y=y, sample=sample, group=list(group),
            intervals=intervals, fill=not no_fill, lines=lines, line_intervals=line_intervals,
            n_samples=n_samples, seed=seed, layout=layout, title=title,
            name=name, dpi=dpi, fmt=fmt,
        )
    click.echo(f"  {path}")
    click.echo(f"Done in {time.time() - t0:.1f}s.")


if __name__ == "__main__":
    cli()

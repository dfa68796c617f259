"""Band rows and sampled paths -> drawable primitives.

Every primitive carries its group key and the attribute a renderer maps to a
visual channel (fill depth, line category, path id). Nothing here knows about
colours or line patterns.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal, Union

import pandas as pd

from .compute import (
    as_pandas,
    compute_bands,
    group_columns,
    iter_groups,
    require_columns,
    validate_intervals,
)
from .config import (
    DEFAULT_INTERVALS,
    DEFAULT_LINE_INTERVALS,
    INTERVAL_COL,
    LOWER_COL,
    SAMPLE_COL,
    UPPER_COL,
    X_COL,
    Y_COL,
    fmt_interval,
)
from .logger import get_logger
from .sampling import Seed, sample_trajectories, validate_n_samples

logger = get_logger(__name__)


@dataclass(frozen=True)
class FilledBand:
    """Polygon: (x, lower) forward then (x, upper) backward."""

    group: tuple
    interval: float
    xs: tuple
    ys: tuple[float, ...]
    fill_value: float
    kind: Literal["band"] = "band"


@dataclass(frozen=True)
class BoundaryLine:
    group: tuple
    interval: float
    side: Literal["lower", "upper", "median"]
    xs: tuple
    ys: tuple[float, ...]
    line_key: str
    kind: Literal["line"] = "line"


@dataclass(frozen=True)
class PathSegment:
    group: tuple
    sample_id: object
    xs: tuple
    ys: tuple[float, ...]
    kind: Literal["path"] = "path"


DrawPrimitive = Union[FilledBand, BoundaryLine, PathSegment]


def _iter_cells(df: pd.DataFrame, group_cols: list[str], by: str):
    """Yield (group_key, value_of_by, rows) in sorted key order."""
    for key, part in df.groupby([*group_cols, by], sort=True, observed=True):
        key = key if isinstance(key, tuple) else (key,)
        yield key[:-1], key[-1], part


def fan_polygons(
    bands,
    *,
    x: str = X_COL,
    group: str | Iterable[str] | None = None,
) -> list[FilledBand]:
    """One FilledBand per (group, interval), widest first within each group."""
    df = as_pandas(bands)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, INTERVAL_COL, LOWER_COL, UPPER_COL])

    out: list[FilledBand] = []
    for gkey, part in iter_groups(df, group_cols):
        for w in sorted(part[INTERVAL_COL].unique(), reverse=True):
            cell = part[part[INTERVAL_COL] == w].sort_values(x, kind="stable")
            xs = tuple(cell[x].tolist())
            lower = cell[LOWER_COL].astype(float).tolist()
            upper = cell[UPPER_COL].astype(float).tolist()
            out.append(FilledBand(
                group=gkey,
                interval=float(w),
                xs=xs + xs[::-1],
                ys=tuple(lower + upper[::-1]),
                fill_value=float(w),
            ))
    return out


def interval_lines(
    bands,
    *,
    x: str = X_COL,
    group: str | Iterable[str] | None = None,
    intervals: Iterable[float] | None = None,
) -> list[BoundaryLine]:
    """Lower and upper boundary lines per (group, interval); a single median line for width 0.

    ``intervals`` restricts which widths get lines (all widths present by default).
    """
    df = as_pandas(bands)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, INTERVAL_COL, LOWER_COL, UPPER_COL])
    wanted = set(validate_intervals(intervals)) if intervals is not None else None

    out: list[BoundaryLine] = []
    for gkey, w, part in _iter_cells(df, group_cols, INTERVAL_COL):
        w = float(w)
        if wanted is not None and w not in wanted:
            continue
        part = part.sort_values(x, kind="stable")
        xs = tuple(part[x].tolist())
        lower = tuple(part[LOWER_COL].astype(float).tolist())
        upper = tuple(part[UPPER_COL].astype(float).tolist())
        key = fmt_interval(w)
        if w == 0:
            out.append(BoundaryLine(gkey, w, "median", xs, lower, key))
            continue
        out.append(BoundaryLine(gkey, w, "lower", xs, lower, key))
        out.append(BoundaryLine(gkey, w, "upper", xs, upper, key))
    return out


def sample_paths(
    samples,
    *,
    x: str = X_COL,
    y: str = Y_COL,
    sample: str = SAMPLE_COL,
    group: str | Iterable[str] | None = None,
) -> list[PathSegment]:
    """One PathSegment per (group, sample id), points ordered by x, values untouched."""
    df = as_pandas(samples)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, y, sample])

    out: list[PathSegment] = []
    keys = [*group_cols, sample]
    # sort=False keeps the order the trajectories were drawn in
    for key, part in df.groupby(keys, sort=False, observed=True):
        key = key if isinstance(key, tuple) else (key,)
        part = part.sort_values(x, kind="stable")
        out.append(PathSegment(
            group=key[:-1],
            sample_id=key[-1],
            xs=tuple(part[x].tolist()),
            ys=tuple(part[y].astype(float).tolist()),
        ))
    return out


def fan_transform(
    data,
    *,
    x: str = X_COL,
    y: str = Y_COL,
    sample: str = SAMPLE_COL,
    group: str | Iterable[str] | None = None,
    intervals: Iterable[float] | float = DEFAULT_INTERVALS,
    fill: bool = True,
    lines: bool = False,
    line_intervals: Iterable[float] | float | None = DEFAULT_LINE_INTERVALS,
    n_samples: int = 0,
    seed: Seed = None,
) -> list[DrawPrimitive]:
    """Raw long-form samples -> ordered primitives: fills, then lines, then paths.

    All arguments are validated before any quantile is computed. Boundary lines
    are computed at ``line_intervals`` (independent of the fill ladder); pass
    None to draw lines at the fill intervals.
    """
    fill_widths = validate_intervals(intervals)
    line_widths = validate_intervals(line_intervals) if line_intervals is not None else fill_widths
    df = as_pandas(data)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, y])
    if n_samples:
        validate_n_samples(df, n_samples, sample=sample, group=group_cols)

    prims: list[DrawPrimitive] = []
    if fill:
        bands = compute_bands(df, fill_widths, x=x, y=y, group=group_cols)
        prims.extend(fan_polygons(bands, x=x, group=group_cols))
    if lines:
        bands = compute_bands(df, line_widths, x=x, y=y, group=group_cols)
        prims.extend(interval_lines(bands, x=x, group=group_cols))
    if n_samples:
        picked = sample_trajectories(df, n_samples, x=x, sample=sample, group=group_cols, seed=seed)
        prims.extend(sample_paths(picked, x=x, y=y, sample=sample, group=group_cols))

    logger.debug("Built %d primitive(s)", len(prims))
    return prims

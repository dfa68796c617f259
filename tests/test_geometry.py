"""Tests for band/line/path geometry."""
from __future__ import annotations

import dataclasses

import pandas as pd
import pytest

from fanplot.compute import compute_bands
from fanplot.errors import InvalidArgument
from fanplot.geometry import (
    BoundaryLine,
    FilledBand,
    PathSegment,
    fan_polygons,
    fan_transform,
    interval_lines,
    sample_paths,
)


def test_polygon_outline(scenario_df: pd.DataFrame):
    bands = compute_bands(scenario_df, [0.5])
    (band,) = fan_polygons(bands)
    assert isinstance(band, FilledBand)
    assert band.kind == "band"
    assert band.group == ()
    assert band.xs == (1, 2, 2, 1)
    # lower forward, upper backward
    assert band.ys == (2.0, 20.0, 40.0, 4.0)
    assert band.fill_value == 0.5


def test_polygons_widest_first(walk_df: pd.DataFrame):
    bands = compute_bands(walk_df, [0.5, 0.8, 0.95])
    widths = [b.interval for b in fan_polygons(bands)]
    assert widths == [0.95, 0.8, 0.5]


def test_polygons_sorted_by_x_regardless_of_row_order(walk_df: pd.DataFrame, shuffled):
    bands = shuffled(compute_bands(walk_df, [0.5]))
    (band,) = fan_polygons(bands)
    n = walk_df["x"].nunique()
    assert list(band.xs[:n]) == sorted(walk_df["x"].unique())


def test_polygons_keep_groups_apart(grouped_walk_df: pd.DataFrame):
    bands = compute_bands(grouped_walk_df, [0.5, 0.9], group="group")
    polys = fan_polygons(bands, group="group")
    assert [(b.group, b.interval) for b in polys] == [
        (("control",), 0.9), (("control",), 0.5),
        (("treated",), 0.9), (("treated",), 0.5),
    ]
    treated = bands[(bands["group"] == "treated") & (bands["interval"] == 0.5)]
    band = polys[3]
    n = len(treated)
    assert list(band.ys[:n]) == treated["lower"].tolist()


def test_interval_lines(scenario_df: pd.DataFrame):
    bands = compute_bands(scenario_df, [0.0, 0.5])
    lines = interval_lines(bands)
    assert [(ln.interval, ln.side) for ln in lines] == [(0.0, "median"), (0.5, "lower"), (0.5, "upper")]
    assert all(isinstance(ln, BoundaryLine) and ln.kind == "line" for ln in lines)
    median, lower, upper = lines
    assert median.ys == (3.0, 30.0)
    assert lower.ys == (2.0, 20.0)
    assert upper.ys == (4.0, 40.0)
    assert lower.line_key == upper.line_key == "50%"
    assert median.line_key == "0%"


def test_interval_lines_subset(scenario_df: pd.DataFrame):
    bands = compute_bands(scenario_df, [0.0, 0.5, 0.9])
    lines = interval_lines(bands, intervals=[0.9])
    assert {ln.interval for ln in lines} == {0.9}


def test_sample_paths_ordered_by_x(walk_df: pd.DataFrame, shuffled):
    subset = shuffled(walk_df[walk_df["sample"].isin([3, 8])])
    paths = sample_paths(subset)
    assert len(paths) == 2
    for path in paths:
        assert isinstance(path, PathSegment)
        assert list(path.xs) == sorted(path.xs)
        original = walk_df[walk_df["sample"] == path.sample_id].sort_values("x")
        assert list(path.ys) == original["y"].tolist()


def test_fan_transform_layers_in_order(grouped_walk_df: pd.DataFrame):
    prims = fan_transform(
        grouped_walk_df, group="group", intervals=[0.5, 0.9],
        lines=True, line_intervals=[0.0, 0.5], n_samples=2, seed=0,
    )
    kinds = [p.kind for p in prims]
    assert kinds == sorted(kinds, key=["band", "line", "path"].index)
    assert kinds.count("band") == 4
    assert kinds.count("line") == 2 * 3
    assert kinds.count("path") == 2 * 2
    assert {p.group for p in prims} == {("control",), ("treated",)}


def test_fan_transform_idempotent(grouped_walk_df: pd.DataFrame):
    kwargs = dict(group="group", lines=True, n_samples=3, seed=11)
    assert fan_transform(grouped_walk_df, **kwargs) == fan_transform(grouped_walk_df, **kwargs)


def test_fan_transform_fill_only_by_default(walk_df: pd.DataFrame):
    prims = fan_transform(walk_df)
    assert {p.kind for p in prims} == {"band"}
    assert len(prims) == 4


def test_fan_transform_rejects_bad_interval(walk_df: pd.DataFrame):
    with pytest.raises(InvalidArgument):
        fan_transform(walk_df, intervals=[0.5, 1.2])


def test_fan_transform_rejects_too_many_samples(scenario_df: pd.DataFrame):
    with pytest.raises(InvalidArgument, match="n_samples"):
        fan_transform(scenario_df, n_samples=10)


def test_primitives_are_frozen(scenario_df: pd.DataFrame):
    (band,) = fan_polygons(compute_bands(scenario_df, [0.5]))
    with pytest.raises(dataclasses.FrozenInstanceError):
        band.interval = 0.9
    assert hash(band) == hash(dataclasses.replace(band))

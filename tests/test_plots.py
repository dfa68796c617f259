"""Tests for the matplotlib renderer and plot styling."""
from __future__ import annotations

from pathlib import Path

import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
import pandas as pd
import pytest

from fanplot.compute import compute_bands
from fanplot.errors import InvalidArgument
from fanplot.geometry import fan_transform
from fanplot.plots.fan import band_zorder, build_scales, draw_primitives, plot_bands, plot_fan
from fanplot.plots.spec import NO_LEGEND, PLOT_SPECS, default_spec
from fanplot.plots.style import (
    FAN_CMAP,
    FanStyle,
    interval_linestyle,
    make_norm,
    save_fig,
    theme_context,
)


def _luminance(rgba) -> float:
    r, g, b, _a = rgba
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------

def test_cmap_type():
    assert isinstance(FAN_CMAP, mcolors.LinearSegmentedColormap)


def test_cmap_darkest_at_centre():
    assert _luminance(FAN_CMAP(0.0)) < _luminance(FAN_CMAP(0.5)) < _luminance(FAN_CMAP(1.0))


def test_make_norm_range():
    norm = make_norm([0.5, 0.8, 0.95])
    assert norm(0.5) == pytest.approx(0.0)
    assert norm(0.95) == pytest.approx(1.0)


def test_make_norm_single_width_maps_dark():
    norm = make_norm([0.8])
    assert norm(0.8) == pytest.approx(0.0)


def test_linestyles_cycle():
    style = FanStyle(linestyles=("-", "--"))
    keys = ["0%", "50%", "90%"]
    assert [interval_linestyle(k, keys, style) for k in keys] == ["-", "--", "-"]


def test_theme_context_restores_rcparams():
    before = plt.rcParams["axes.facecolor"]
    with theme_context(FanStyle(theme="darkgrid")):
        assert str(plt.rcParams["axes.facecolor"]).lower() == "#eaeaf2"
    assert plt.rcParams["axes.facecolor"] == before


def test_save_fig_creates_file(tmp_path: Path):
    fig, ax = plt.subplots()
    ax.plot([0, 1], [0, 1])
    path = save_fig(fig, tmp_path / "nested", "test_plot")
    assert path.exists()
    assert path.suffix == ".png"


def test_default_spec():
    assert default_spec(fill=True, lines=False, facet=False) is PLOT_SPECS["fan"]
    assert default_spec(fill=True, lines=True, facet=False) is PLOT_SPECS["fan_lines"]
    assert default_spec(fill=False, lines=True, facet=False) is PLOT_SPECS["interval"]
    assert default_spec(fill=True, lines=False, facet=True) is PLOT_SPECS["fan_facet"]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def test_draw_primitives_on_axes(walk_df: pd.DataFrame):
    prims = fan_transform(walk_df, intervals=[0.5, 0.9], lines=True, line_intervals=[0.0], n_samples=3, seed=0)
    fig, ax = plt.subplots()
    draw_primitives(ax, prims)
    assert len(ax.patches) == 2
    assert len(ax.lines) == 1 + 3
    plt.close(fig)


def test_narrow_band_darker(walk_df: pd.DataFrame):
    prims = fan_transform(walk_df, intervals=[0.5, 0.9])
    fig, ax = plt.subplots()
    draw_primitives(ax, prims)
    wide, narrow = ax.patches
    assert _luminance(narrow.get_facecolor()) < _luminance(wide.get_facecolor())
    plt.close(fig)


def test_overlay_groups_use_distinct_colours(grouped_walk_df: pd.DataFrame):
    prims = fan_transform(grouped_walk_df, group="group", intervals=[0.5])
    fig, ax = plt.subplots()
    draw_primitives(ax, prims)
    first, second = ax.patches
    assert first.get_facecolor() != second.get_facecolor()
    plt.close(fig)


def test_overlay_stacks_bands_by_width_across_groups(grouped_walk_df: pd.DataFrame):
    prims = fan_transform(grouped_walk_df, group="group", intervals=[0.5, 0.9], lines=True)
    fig, ax = plt.subplots()
    draw_primitives(ax, prims)
    bands = [p for p in prims if p.kind == "band"]
    # matplotlib draws in stable zorder order
    drawn = sorted(zip(bands, ax.patches), key=lambda pair: pair[1].get_zorder())
    assert [(b.group, b.interval) for b, _ in drawn] == [
        (("control",), 0.9), (("treated",), 0.9),
        (("control",), 0.5), (("treated",), 0.5),
    ]
    assert max(p.get_zorder() for p in ax.patches) < min(ln.get_zorder() for ln in ax.lines)
    plt.close(fig)


def test_band_zorder_ranks_narrow_above_wide():
    assert band_zorder(0.0) > band_zorder(0.5) > band_zorder(1.0) >= 1.0
    assert band_zorder(0.0) < 2.0


def test_build_scales(grouped_walk_df: pd.DataFrame):
    prims = fan_transform(grouped_walk_df, group="group", intervals=[0.5, 0.9], lines=True)
    scales = build_scales(prims)
    assert list(scales.groups) == [("control",), ("treated",)]
    assert scales.line_keys == ["0%", "50%", "90%"]
    assert scales.has_bands


def test_draw_rejects_unknown_primitive():
    fig, ax = plt.subplots()
    with pytest.raises(TypeError):
        draw_primitives(ax, [object()])
    plt.close(fig)


def test_plot_fan_writes_file(walk_df: pd.DataFrame, tmp_path: Path):
    path = plot_fan(walk_df, tmp_path, lines=True, n_samples=3, seed=1, title="Walks")
    assert path == tmp_path / "fan.png"
    assert path.exists()


def test_plot_fan_facet(grouped_walk_df: pd.DataFrame, tmp_path: Path):
    path = plot_fan(
        grouped_walk_df, tmp_path, group="group", layout="facet",
        n_samples=2, seed=0, name="facet", fmt="svg",
    )
    assert path.name == "facet.svg"
    assert path.exists()


def test_plot_fan_on_existing_axes(walk_df: pd.DataFrame):
    fig, ax = plt.subplots()
    result = plot_fan(walk_df, ax=ax, intervals=[0.5, 0.8], spec=NO_LEGEND)
    assert result is None
    assert len(ax.patches) == 2
    assert ax.get_legend() is None
    plt.close(fig)


def test_plot_fan_rejects_unknown_layout(walk_df: pd.DataFrame, tmp_path: Path):
    with pytest.raises(InvalidArgument, match="layout"):
        plot_fan(walk_df, tmp_path, layout="grid")


def test_plot_fan_facet_rejects_axes(walk_df: pd.DataFrame):
    fig, ax = plt.subplots()
    with pytest.raises(InvalidArgument):
        plot_fan(walk_df, layout="facet", ax=ax)
    plt.close(fig)


def test_plot_fan_needs_something_to_draw(walk_df: pd.DataFrame, tmp_path: Path):
    with pytest.raises(InvalidArgument, match="Nothing to draw"):
        plot_fan(walk_df, tmp_path, fill=False)


def test_plot_fan_needs_destination(walk_df: pd.DataFrame):
    with pytest.raises(InvalidArgument, match="out_dir"):
        plot_fan(walk_df)


def test_plot_bands_from_table(scenario_df: pd.DataFrame, tmp_path: Path):
    bands = compute_bands(scenario_df, [0.0, 0.5, 1.0])
    path = plot_bands(bands, tmp_path, lines=True, name="bands")
    assert path.exists()

"""Fan chart renderer: draws geometry primitives on matplotlib axes."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.patches import Patch

from ..config import DEFAULT_INTERVALS, DEFAULT_LINE_INTERVALS, SAMPLE_COL, X_COL, Y_COL
from ..errors import InvalidArgument
from ..geometry import (
    BoundaryLine,
    DrawPrimitive,
    FilledBand,
    PathSegment,
    fan_polygons,
    fan_transform,
    interval_lines,
)
from ..logger import get_logger
from ..sampling import Seed
from .spec import PlotSpec, default_spec
from .style import (
    DEFAULT_STYLE,
    FONT_AXIS_LABEL,
    FONT_LEGEND,
    FONT_SUPTITLE,
    FONT_TITLE,
    GRID_ALPHA,
    FanStyle,
    fmt_group,
    group_cmap,
    interval_color,
    interval_linestyle,
    make_norm,
    save_fig,
    theme_context,
)

logger = get_logger(__name__)

LAYOUTS = ("overlay", "facet")


@dataclass
class Scales:
    """Mappings from primitive attributes to visuals, shared by every panel of a figure."""

    style: FanStyle
    norm: mcolors.Normalize
    groups: dict[tuple, int]
    line_keys: list[str]
    has_bands: bool
    shared_cmap: bool = False

    def cmap(self, group: tuple) -> mcolors.Colormap:
        if self.shared_cmap:
            return group_cmap(self.style, 0)
        return group_cmap(self.style, self.groups.get(group, 0))

    def dark(self, group: tuple):
        return self.cmap(group)(0.0)


def build_scales(
    prims: Sequence[DrawPrimitive],
    style: FanStyle = DEFAULT_STYLE,
    *,
    shared_cmap: bool = False,
) -> Scales:
    widths = sorted({p.fill_value for p in prims if p.kind == "band"})
    groups: dict[tuple, int] = {}
    for p in prims:
        groups.setdefault(p.group, len(groups))
    lines = sorted({(p.interval, p.line_key) for p in prims if p.kind == "line"})
    return Scales(
        style=style,
        norm=make_norm(widths or [0.0]),
        groups=groups,
        line_keys=[key for _, key in lines],
        has_bands=bool(widths),
        shared_cmap=shared_cmap,
    )


# ---------------------------------------------------------------------------
# Primitive handlers
# ---------------------------------------------------------------------------

def band_zorder(width: float) -> float:
    """Narrower bands stack higher, across all groups, and always below lines (zorder 2)."""
    return 1.0 + 0.5 * (1.0 - width)


def _draw_band(ax, prim: FilledBand, scales: Scales) -> None:
    color = interval_color(prim.fill_value, scales.norm, scales.cmap(prim.group))
    ax.fill(
        prim.xs, prim.ys, color=color, alpha=scales.style.band_alpha, linewidth=0,
        zorder=band_zorder(prim.interval),
    )


def _draw_line(ax, prim: BoundaryLine, scales: Scales) -> None:
    style = scales.style
    ax.plot(
        prim.xs, prim.ys,
        color=style.line_color or scales.dark(prim.group),
        linestyle=interval_linestyle(prim.line_key, scales.line_keys, style),
        linewidth=style.line_width, zorder=2,
    )


def _draw_path(ax, prim: PathSegment, scales: Scales) -> None:
    style = scales.style
    ax.plot(
        prim.xs, prim.ys,
        color=style.sample_color or scales.dark(prim.group),
        alpha=style.sample_alpha, linewidth=style.sample_width, zorder=3,
    )


_HANDLERS = {
    "band": _draw_band,
    "line": _draw_line,
    "path": _draw_path,
}


def draw_primitives(
    ax,
    prims: Iterable[DrawPrimitive],
    style: FanStyle = DEFAULT_STYLE,
    scales: Scales | None = None,
) -> Scales:
    """Draw primitives in order on ``ax``. Returns the scales used."""
    prims = list(prims)
    handlers = []
    for prim in prims:
        handler = _HANDLERS.get(getattr(prim, "kind", None))
        if handler is None:
            raise TypeError(f"Not a draw primitive: {prim!r}")
        handlers.append(handler)
    if scales is None:
        scales = build_scales(prims, style)
    for handler, prim in zip(handlers, prims):
        handler(ax, prim, scales)
    return scales


def apply_legends(ax, scales: Scales, spec: PlotSpec) -> None:
    """Colorbar for fill depth, legend for line patterns and overlaid groups."""
    axes = list(ax) if isinstance(ax, (list, tuple)) else [ax]
    style = scales.style

    if spec.legend in ("colorbar", "both") and scales.has_bands:
        first = next(iter(scales.groups), ())
        sm = plt.cm.ScalarMappable(cmap=scales.cmap(first), norm=scales.norm)
        sm.set_array([])
        cbar = plt.colorbar(sm, ax=axes, pad=0.02, aspect=30)
        cbar.set_label("Interval width", fontsize=FONT_AXIS_LABEL)

    handles = []
    if spec.legend in ("legend", "both"):
        for key in scales.line_keys:
            handles.append(Line2D(
                [0], [0], color=style.line_color or "black",
                linestyle=interval_linestyle(key, scales.line_keys, style),
                linewidth=style.line_width, label=key,
            ))
    if spec.legend != "none" and len(scales.groups) > 1 and not scales.shared_cmap:
        for gkey, i in scales.groups.items():
            handles.append(Patch(color=group_cmap(style, i)(0.3), label=fmt_group(gkey)))
    if handles:
        axes[-1].legend(handles=handles, loc="upper left", fontsize=FONT_LEGEND, framealpha=0.9)


# ---------------------------------------------------------------------------
# Figures
# ---------------------------------------------------------------------------

def _check_layout(layout: str, ax) -> None:
    if layout not in LAYOUTS:
        raise InvalidArgument(f"Unknown layout {layout!r}; expected one of {LAYOUTS}")
    if layout == "facet" and ax is not None:
        raise InvalidArgument("The facet layout creates its own figure; ax must be None")


def plot_primitives(
    prims: Sequence[DrawPrimitive],
    out_dir: Path | None = None,
    *,
    layout: str = "overlay",
    style: FanStyle = DEFAULT_STYLE,
    spec: PlotSpec | None = None,
    ax=None,
    title: str | None = None,
    xlabel: str = X_COL,
    ylabel: str = Y_COL,
    name: str = "fan",
    dpi: int = 200,
    fmt: str = "png",
) -> Path | None:
    """Render primitives. Saves and returns the figure path unless drawing onto ``ax``."""
    _check_layout(layout, ax)
    if not prims:
        raise InvalidArgument("Nothing to draw: enable fill, lines, or n_samples")
    if ax is None and out_dir is None:
        raise InvalidArgument("out_dir is required when no ax is given")
    facet = layout == "facet"
    kinds = {p.kind for p in prims}
    spec = spec or default_spec(fill="band" in kinds, lines="line" in kinds, facet=facet)

    with theme_context(style):
        scales = build_scales(prims, style, shared_cmap=facet)

        if facet:
            groups = list(scales.groups)
            w, h = style.panel_size
            fig, grid = plt.subplots(
                1, len(groups), figsize=(w * len(groups), h), sharey=True, squeeze=False,
            )
            axes = list(grid[0])
            for panel, gkey in zip(axes, groups):
                draw_primitives(panel, [p for p in prims if p.group == gkey], style, scales)
                panel.set_title(fmt_group(gkey), fontsize=FONT_TITLE, fontweight="bold")
                panel.set_xlabel(xlabel, fontsize=FONT_AXIS_LABEL)
                panel.grid(True, alpha=GRID_ALPHA)
            axes[0].set_ylabel(ylabel, fontsize=FONT_AXIS_LABEL)
            apply_legends(axes, scales, spec)
            if title:
                fig.suptitle(title, fontsize=FONT_SUPTITLE, fontweight="bold")
            return save_fig(fig, out_dir, name, dpi=dpi, fmt=fmt)

        standalone = ax is None
        if standalone:
            fig, ax = plt.subplots(figsize=style.figsize)
        draw_primitives(ax, prims, style, scales)
        ax.set_xlabel(xlabel, fontsize=FONT_AXIS_LABEL)
        ax.set_ylabel(ylabel, fontsize=FONT_AXIS_LABEL)
        if title:
            ax.set_title(title, fontsize=FONT_TITLE, fontweight="bold")
        ax.grid(True, alpha=GRID_ALPHA)
        apply_legends(ax, scales, spec)

        if standalone:
            return save_fig(fig, out_dir, name, dpi=dpi, fmt=fmt)
    return None


def plot_fan(
    data,
    out_dir: Path | None = None,
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
    layout: str = "overlay",
    style: FanStyle = DEFAULT_STYLE,
    spec: PlotSpec | None = None,
    ax=None,
    title: str | None = None,
    name: str = "fan",
    dpi: int = 200,
    fmt: str = "png",
) -> Path | None:
    """Long-form samples -> fan chart (bands, optional boundary lines and trajectories)."""
    _check_layout(layout, ax)
    prims = fan_transform(
        data, x=x, y=y, sample=sample, group=group,
        intervals=intervals, fill=fill, lines=lines, line_intervals=line_intervals,
        n_samples=n_samples, seed=seed,
    )
    logger.info("Drawing %d primitive(s) (%s layout)", len(prims), layout)
    return plot_primitives(
        prims, out_dir, layout=layout, style=style, spec=spec, ax=ax,
        title=title, xlabel=x, ylabel=y, name=name, dpi=dpi, fmt=fmt,
    )


def plot_bands(
    bands,
    out_dir: Path | None = None,
    *,
    x: str = X_COL,
    y_label: str = Y_COL,
    group: str | Iterable[str] | None = None,
    fill: bool = True,
    lines: bool = False,
    line_intervals: Iterable[float] | None = None,
    layout: str = "overlay",
    style: FanStyle = DEFAULT_STYLE,
    spec: PlotSpec | None = None,
    ax=None,
    title: str | None = None,
    name: str = "fan",
    dpi: int = 200,
    fmt: str = "png",
) -> Path | None:
    """Render already-computed band rows (from compute_bands or bands_from_quantiles)."""
    _check_layout(layout, ax)
    prims: list[DrawPrimitive] = []
    if fill:
        prims.extend(fan_polygons(bands, x=x, group=group))
    if lines:
        prims.extend(interval_lines(bands, x=x, group=group, intervals=line_intervals))
    return plot_primitives(
        prims, out_dir, layout=layout, style=style, spec=spec, ax=ax,
        title=title, xlabel=x, ylabel=y_label, name=name, dpi=dpi, fmt=fmt,
    )

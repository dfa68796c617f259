"""Shared plot styling: fan colormaps, interval colours/line patterns, seaborn theme."""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
import seaborn as sns

# ---------------------------------------------------------------------------
# Typography
# ---------------------------------------------------------------------------
FONT_TITLE = 14
FONT_SUPTITLE = 16
FONT_AXIS_LABEL = 12
FONT_LEGEND = 9

# ---------------------------------------------------------------------------
# Figure sizes
# ---------------------------------------------------------------------------
FIG_WIDE = (12, 6)
FIG_PANEL = (6, 5)

GRID_ALPHA = 0.3

# ---------------------------------------------------------------------------
# Fan colormaps: dark at width 0 (centre), light at the widest interval.
# One per group so overlaid groups stay chromatically separate.
# ---------------------------------------------------------------------------
FAN_CMAP = mcolors.LinearSegmentedColormap.from_list(
    "fan_blue", ["#08306b", "#2171b5", "#6baed6", "#c6dbef"],
)
FAN_CMAP_RED = mcolors.LinearSegmentedColormap.from_list(
    "fan_red", ["#67000d", "#cb181d", "#fb6a4a", "#fcbba1"],
)
FAN_CMAP_GREEN = mcolors.LinearSegmentedColormap.from_list(
    "fan_green", ["#00441b", "#238b45", "#74c476", "#c7e9c0"],
)
FAN_CMAP_PURPLE = mcolors.LinearSegmentedColormap.from_list(
    "fan_purple", ["#3f007d", "#6a51a3", "#9e9ac8", "#dadaeb"],
)
GROUP_CMAPS = (FAN_CMAP, FAN_CMAP_RED, FAN_CMAP_GREEN, FAN_CMAP_PURPLE)

LINESTYLES = ("-", "--", "-.", ":", (0, (5, 1)), (0, (3, 1, 1, 1, 1, 1)))


@dataclass(frozen=True)
class FanStyle:
    """Everything visual, passed explicitly to each draw call."""

    cmaps: tuple[mcolors.Colormap, ...] = GROUP_CMAPS
    band_alpha: float = 0.9
    line_color: str | None = None  # None: darkest colour of the group's cmap
    line_width: float = 1.2
    linestyles: tuple = LINESTYLES
    sample_color: str | None = None  # None: group colour
    sample_alpha: float = 0.7
    sample_width: float = 0.8
    theme: str = "whitegrid"
    font_scale: float = 1.1
    figsize: tuple[float, float] = FIG_WIDE
    panel_size: tuple[float, float] = FIG_PANEL


DEFAULT_STYLE = FanStyle()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def save_fig(fig, out_dir: Path, name: str, *, dpi: int = 200, fmt: str = "png") -> Path:
    """Save + close with consistent bbox_inches='tight'."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}.{fmt}"
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path


@contextmanager
def theme_context(style: FanStyle = DEFAULT_STYLE) -> Iterator[None]:
    """Apply the seaborn theme only for figures created inside the block."""
    with sns.axes_style(style.theme), sns.plotting_context("notebook", font_scale=style.font_scale):
        yield


def make_norm(intervals: Sequence[float]) -> mcolors.Normalize:
    """Linear norm over the interval widths present; a lone width maps to the dark end."""
    vmin, vmax = min(intervals), max(intervals)
    if vmin == vmax:
        return mcolors.Normalize(vmin=vmin, vmax=vmin + 1.0)
    return mcolors.Normalize(vmin=vmin, vmax=vmax)


def group_cmap(style: FanStyle, index: int) -> mcolors.Colormap:
    return style.cmaps[index % len(style.cmaps)]


def interval_color(w: float, norm: mcolors.Normalize, cmap: mcolors.Colormap = FAN_CMAP):
    return cmap(norm(w))


def interval_linestyle(key: str, keys: Sequence[str], style: FanStyle = DEFAULT_STYLE):
    """Line pattern for a categorical interval key, cycling through style.linestyles."""
    return style.linestyles[list(keys).index(key) % len(style.linestyles)]


def fmt_group(key: tuple) -> str:
    return ", ".join(str(k) for k in key) if key else ""

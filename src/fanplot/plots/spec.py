"""Plot specifications: purpose, design, and interval-legend rendering mode."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlotSpec:
    name: str  # e.g. "fan"
    purpose: str  # Human: what are we communicating?
    design: str  # Human: what design decisions did we make?
    legend: str  # "colorbar" | "legend" | "both" | "none"


# Sentinel spec that suppresses all legends (used when embedding in a caller's figure).
NO_LEGEND = PlotSpec(name="_no_legend", purpose="", design="", legend="none")

PLOT_SPECS: dict[str, PlotSpec] = {
    "fan": PlotSpec(
        name="fan",
        purpose="Show how the spread of y evolves along x",
        design="Nested filled bands, widest first. Colour darkens toward the median. Colorbar keyed to width.",
        legend="colorbar",
    ),
    "fan_lines": PlotSpec(
        name="fan_lines",
        purpose="Fan plus exact interval boundaries",
        design="Filled bands under boundary lines; line pattern encodes interval width.",
        legend="both",
    ),
    "interval": PlotSpec(
        name="interval",
        purpose="Compare a few interval boundaries without fill",
        design="Lower/upper line per width, one line pattern per width, single median line.",
        legend="legend",
    ),
    "fan_facet": PlotSpec(
        name="fan_facet",
        purpose="Compare groups side by side",
        design="One panel per group with shared y axis. Same colour scale in every panel.",
        legend="both",
    ),
}


def default_spec(*, fill: bool, lines: bool, facet: bool) -> PlotSpec:
    if facet:
        return PLOT_SPECS["fan_facet"]
    if fill and lines:
        return PLOT_SPECS["fan_lines"]
    if lines:
        return PLOT_SPECS["interval"]
    return PLOT_SPECS["fan"]

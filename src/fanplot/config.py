"""Single source of truth for interval ladders, sampling defaults, and output paths."""
from __future__ import annotations

from pathlib import Path

import numpy as np

# ── Interval ladders ────────────────────────────────────────────────────────
# Widths of central probability intervals, e.g. 0.5 = middle 50%.
DEFAULT_INTERVALS: tuple[float, ...] = (0.5, 0.8, 0.95, 0.99)

# Fine ladder for a smooth gradient fan: 0.02, 0.04, ..., 0.98.
FAN_INTERVALS: tuple[float, ...] = tuple(i / 50 for i in range(1, 50))

# Boundary lines: median plus two central intervals.
DEFAULT_LINE_INTERVALS: tuple[float, ...] = (0.0, 0.5, 0.9)

# ── Quantile estimator ──────────────────────────────────────────────────────
# Hyndman & Fan type 7: linear interpolation between order statistics.
QUANTILE_METHOD = "linear"

# ── Trajectory sampling ─────────────────────────────────────────────────────
DEFAULT_N_SAMPLES = 5
DEFAULT_SEED = 42

# ── Column names ────────────────────────────────────────────────────────────
X_COL = "x"
Y_COL = "y"
SAMPLE_COL = "sample"
INTERVAL_COL = "interval"
LOWER_COL = "lower"
UPPER_COL = "upper"
QUANTILE_COL = "quantile"
VALUE_COL = "value"

# Decimal places used when comparing interval widths. Probabilities 0.5 +- w/2
# need one more so every width keeps an exact, mirrored pair of bounds.
INTERVAL_DECIMALS = 10
PROBABILITY_DECIMALS = INTERVAL_DECIMALS + 1


# ── Path resolution ─────────────────────────────────────────────────────────
# Layout (base_path defaults to ".")
#   outputs/aggregates/  (bands.parquet, quantiles.parquet)
#   outputs/plots/       (fan.png, ...)


def outputs_dir(base_path: str = ".") -> Path:
    return Path(base_path) / "outputs"


def aggregates_dir(base_path: str = ".") -> Path:
    return outputs_dir(base_path) / "aggregates"


def plots_dir(base_path: str = ".") -> Path:
    return outputs_dir(base_path) / "plots"


def fmt_interval(w: float) -> str:
    """Display formatting for interval widths (0.5 -> '50%', 0.995 -> '99.5%')."""
    pct = round(w * 100, INTERVAL_DECIMALS - 2)
    return np.format_float_positional(pct, trim="-") + "%"

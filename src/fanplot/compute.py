"""Empirical quantile bands: raw samples -> interval bounds, quantile rows, and back.

Quantiles use the Hyndman & Fan type 7 estimator (linear interpolation between
order statistics, numpy's ``method="linear"``). It is also the numpy, pandas and
R default; other conventions differ at small sample sizes.
"""
from __future__ import annotations

import math
import re
import warnings
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .config import (
    DEFAULT_INTERVALS,
    INTERVAL_COL,
    INTERVAL_DECIMALS,
    LOWER_COL,
    PROBABILITY_DECIMALS,
    QUANTILE_COL,
    QUANTILE_METHOD,
    UPPER_COL,
    VALUE_COL,
    X_COL,
    Y_COL,
)
from .errors import DataQualityWarning, EmptyInputError, InvalidArgument
from .logger import get_logger

logger = get_logger(__name__)

# "q25", "q2.5", "Q97.5", "25%", "2.5 %"
_LABEL_RE = re.compile(
    r"^\s*(?:[qQ]\s*(?P<q>\d+(?:\.\d*)?|\.\d+)|(?P<pct>\d+(?:\.\d*)?|\.\d+)\s*%)\s*$"
)


@dataclass(frozen=True, order=True)
class QuantileLevel:
    """A probability in [0, 1], parsed once from a label or number."""

    probability: float

    def __post_init__(self) -> None:
        p = self.probability
        if not math.isfinite(p) or not 0.0 <= p <= 1.0:
            raise InvalidArgument(f"Quantile probability must be in [0, 1], got {p!r}")

    @classmethod
    def parse(cls, raw: object) -> QuantileLevel:
        """Accept 'q25', '25%', or a numeric probability such as 0.25."""
        if isinstance(raw, QuantileLevel):
            return raw
        if isinstance(raw, str):
            m = _LABEL_RE.match(raw)
            if m is None:
                raise InvalidArgument(f"Unparsable quantile label: {raw!r}")
            pct = float(m.group("q") or m.group("pct"))
            if pct > 100:
                raise InvalidArgument(f"Quantile label above 100%: {raw!r}")
            return cls(round(pct / 100, PROBABILITY_DECIMALS))
        if isinstance(raw, (bool, np.bool_)):
            raise InvalidArgument(f"Unparsable quantile label: {raw!r}")
        try:
            p = float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise InvalidArgument(f"Unparsable quantile label: {raw!r}") from None
        if not math.isfinite(p):
            raise InvalidArgument(f"Unparsable quantile label: {raw!r}")
        return cls(round(p, PROBABILITY_DECIMALS))

    @property
    def percent(self) -> float:
        return round(self.probability * 100, PROBABILITY_DECIMALS - 2)

    @property
    def label(self) -> str:
        return "q" + np.format_float_positional(self.percent, trim="-")

    def mirror(self) -> QuantileLevel:
        return QuantileLevel(round(1.0 - self.probability, PROBABILITY_DECIMALS))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_intervals(intervals: Iterable[float] | float) -> tuple[float, ...]:
    """Return the sorted, de-duplicated interval widths or raise InvalidArgument."""
    if isinstance(intervals, (int, float)) and not isinstance(intervals, bool):
        intervals = [intervals]
    if isinstance(intervals, (str, bytes)):
        raise InvalidArgument(f"Intervals must be numbers, got {intervals!r}")
    try:
        raw = list(intervals)
    except TypeError:
        raise InvalidArgument(f"Intervals must be an iterable of numbers, got {intervals!r}") from None
    if not raw:
        raise InvalidArgument("Interval set is empty; nothing to compute")

    widths = set()
    for w in raw:
        if isinstance(w, (bool, np.bool_, str, bytes)):
            raise InvalidArgument(f"Interval width must be a number, got {w!r}")
        try:
            wf = float(w)
        except (TypeError, ValueError):
            raise InvalidArgument(f"Interval width must be a number, got {w!r}") from None
        if not math.isfinite(wf) or not 0.0 <= wf <= 1.0:
            raise InvalidArgument(f"Interval width must be in [0, 1], got {w!r}")
        widths.add(round(wf, INTERVAL_DECIMALS))
    return tuple(sorted(widths))


def interval_bounds(w: float) -> tuple[float, float]:
    """Probabilities (0.5 - w/2, 0.5 + w/2) of a central interval of width w."""
    return (
        round(0.5 - w / 2, PROBABILITY_DECIMALS),
        round(0.5 + w / 2, PROBABILITY_DECIMALS),
    )


def as_pandas(data) -> pd.DataFrame:
    """Accept pandas or polars frames; everything downstream is pandas."""
    if isinstance(data, pd.DataFrame):
        return data
    if hasattr(data, "to_pandas"):
        return data.to_pandas()
    raise InvalidArgument(f"Expected a pandas or polars DataFrame, got {type(data).__name__}")


def group_columns(group: str | Iterable[str] | None) -> list[str]:
    if group is None:
        return []
    if isinstance(group, str):
        return [group]
    return list(group)


def require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise InvalidArgument(f"Missing column(s) {missing}; available: {list(df.columns)}")


def iter_groups(df: pd.DataFrame, group_cols: list[str]):
    """Yield (group_key_tuple, rows) in sorted group order; one () group when ungrouped."""
    if not group_cols:
        yield (), df
        return
    for key, part in df.groupby(group_cols, sort=True, observed=True):
        yield (key if isinstance(key, tuple) else (key,)), part


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def _finite_rows(df: pd.DataFrame, y: str, keys: list[str]) -> pd.DataFrame:
    """Drop rows with missing keys or non-finite y, warning about what was lost."""
    if not pd.api.types.is_numeric_dtype(df[y]):
        raise InvalidArgument(f"Column {y!r} must be numeric, got dtype {df[y].dtype}")

    key_ok = df[keys].notna().all(axis=1).to_numpy()
    n_bad_keys = int((~key_ok).sum())
    if n_bad_keys:
        msg = f"Dropped {n_bad_keys} row(s) with missing {keys} values"
        logger.warning(msg)
        warnings.warn(msg, DataQualityWarning, stacklevel=4)

    keyed = df.loc[key_ok, [*keys, y]]
    finite = np.isfinite(keyed[y].to_numpy(dtype=np.float64, na_value=np.nan))
    n_bad_y = int((~finite).sum())
    if n_bad_y:
        msg = f"Dropped {n_bad_y} non-finite {y!r} value(s)"
        logger.warning(msg)
        warnings.warn(msg, DataQualityWarning, stacklevel=4)

    kept = keyed.loc[finite]
    if n_bad_y:
        n_cells_before = len(keyed[keys].drop_duplicates())
        n_cells_after = len(kept[keys].drop_duplicates())
        if n_cells_after < n_cells_before:
            msg = (
                f"Dropped {n_cells_before - n_cells_after} {keys} cell(s) "
                "with no finite values"
            )
            logger.warning(msg)
            warnings.warn(msg, DataQualityWarning, stacklevel=4)

    if kept.empty:
        raise EmptyInputError("No finite observations left to compute quantiles on")
    return kept


def _grouped_quantiles(
    df: pd.DataFrame,
    probs: list[float],
    *,
    x: str,
    y: str,
    group_cols: list[str],
) -> tuple[list[tuple], np.ndarray]:
    """Quantiles at ``probs`` for every (group..., x) cell.

    Returns (keys, table) where table[i, j] is the probs[j] quantile of cell keys[i].
    """
    if df.empty:
        raise EmptyInputError("Input has no rows")
    keys = [*group_cols, x]
    kept = _finite_rows(df, y, keys)

    cell_keys: list[tuple] = []
    rows: list[np.ndarray] = []
    for key, cell in kept.groupby(keys, sort=True, observed=True):
        values = cell[y].to_numpy(dtype=np.float64)
        rows.append(np.quantile(values, probs, method=QUANTILE_METHOD))
        cell_keys.append(key if isinstance(key, tuple) else (key,))

    logger.debug("Computed %d quantile(s) over %d cell(s)", len(probs), len(cell_keys))
    return cell_keys, np.vstack(rows)


def compute_bands(
    data,
    intervals: Iterable[float] | float = DEFAULT_INTERVALS,
    *,
    x: str = X_COL,
    y: str = Y_COL,
    group: str | Iterable[str] | None = None,
) -> pd.DataFrame:
    """Lower/upper bounds of each central interval at every distinct x.

    Returns DataFrame with columns: *group, x, interval, lower, upper, sorted by
    group, x, then ascending interval width.
    """
    widths = validate_intervals(intervals)
    df = as_pandas(data)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, y])

    bounds = {w: interval_bounds(w) for w in widths}
    probs = sorted({p for pair in bounds.values() for p in pair})
    pos = {p: i for i, p in enumerate(probs)}

    cell_keys, table = _grouped_quantiles(df, probs, x=x, y=y, group_cols=group_cols)
    rows = []
    for key, qs in zip(cell_keys, table):
        for w in widths:
            lo, hi = bounds[w]
            rows.append((*key, w, float(qs[pos[lo]]), float(qs[pos[hi]])))
    return pd.DataFrame(rows, columns=[*group_cols, x, INTERVAL_COL, LOWER_COL, UPPER_COL])


def calc_quantiles(
    data,
    intervals: Iterable[float] | float = DEFAULT_INTERVALS,
    *,
    x: str = X_COL,
    y: str = Y_COL,
    group: str | Iterable[str] | None = None,
    labels: bool = False,
) -> pd.DataFrame:
    """Same aggregation as compute_bands, one row per quantile instead of per interval.

    The ``quantile`` column holds the probability, or a 'q<percent>' label when
    ``labels`` is set (e.g. 'q2.5', 'q50').
    """
    widths = validate_intervals(intervals)
    df = as_pandas(data)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, y])

    probs = sorted({p for w in widths for p in interval_bounds(w)})
    names = [QuantileLevel(p).label for p in probs] if labels else probs

    cell_keys, table = _grouped_quantiles(df, probs, x=x, y=y, group_cols=group_cols)
    rows = [
        (*key, name, float(v))
        for key, qs in zip(cell_keys, table)
        for name, v in zip(names, qs)
    ]
    return pd.DataFrame(rows, columns=[*group_cols, x, QUANTILE_COL, VALUE_COL])


# ---------------------------------------------------------------------------
# Pre-computed quantiles
# ---------------------------------------------------------------------------


def pair_levels(levels: Iterable[QuantileLevel]) -> list[tuple[float, float, float]]:
    """Pair symmetric levels around the median into (width, lower_p, upper_p).

    'q25' and 'q75' give width 0.5; 'q50' pairs with itself to give width 0.
    Sorted by ascending width. Any level without its mirror raises InvalidArgument.
    """
    probs = {lv.probability for lv in levels}
    unpaired = sorted(p for p in probs if round(1.0 - p, PROBABILITY_DECIMALS) not in probs)
    if unpaired:
        names = [QuantileLevel(p).label for p in unpaired]
        raise InvalidArgument(f"Unpaired quantile level(s) {names}; each needs its mirror around q50")
    pairs = [
        (round(1.0 - 2 * p, INTERVAL_DECIMALS), p, round(1.0 - p, PROBABILITY_DECIMALS))
        for p in sorted(probs)
        if p <= 0.5
    ]
    return sorted(pairs)


def bands_from_quantiles(
    quantiles,
    *,
    x: str = X_COL,
    quantile: str = QUANTILE_COL,
    value: str = VALUE_COL,
    group: str | Iterable[str] | None = None,
) -> pd.DataFrame:
    """Re-derive band rows from pre-computed (x, quantile, value) rows.

    Quantile entries may be labels ('q25', '25%') or probabilities; each distinct
    entry is parsed once. Output matches compute_bands.
    """
    df = as_pandas(quantiles)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, x, quantile, value])
    if df.empty:
        raise EmptyInputError("Input has no rows")
    if not pd.api.types.is_numeric_dtype(df[value]) or pd.api.types.is_bool_dtype(df[value]):
        raise InvalidArgument(f"Column {value!r} must be numeric, got dtype {df[value].dtype}")

    parsed = {raw: QuantileLevel.parse(raw) for raw in pd.unique(df[quantile])}
    pairs = pair_levels(parsed.values())

    keys = [*group_cols, x]
    probs = df[quantile].map(lambda raw: parsed[raw].probability)
    work = df[keys].assign(_p=probs.to_numpy(), _v=df[value].to_numpy())

    rows = []
    n_dropped = 0
    for key, cell in work.groupby(keys, sort=True, observed=True):
        if cell["_p"].duplicated().any():
            raise InvalidArgument(f"Duplicate quantile level at {keys}={key}")
        lookup = dict(zip(cell["_p"], cell["_v"].to_numpy(dtype=np.float64, na_value=np.nan)))
        key = key if isinstance(key, tuple) else (key,)
        for w, lo, hi in pairs:
            lower, upper = lookup.get(lo, np.nan), lookup.get(hi, np.nan)
            if not (np.isfinite(lower) and np.isfinite(upper)):
                n_dropped += 1
                continue
            rows.append((*key, w, float(lower), float(upper)))

    if n_dropped:
        msg = f"Dropped {n_dropped} band row(s) with a missing or non-finite bound"
        logger.warning(msg)
        warnings.warn(msg, DataQualityWarning, stacklevel=2)
    if not rows:
        raise EmptyInputError("No complete quantile pairs to build bands from")
    return pd.DataFrame(rows, columns=[*group_cols, x, INTERVAL_COL, LOWER_COL, UPPER_COL])

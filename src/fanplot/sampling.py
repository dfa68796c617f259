"""Seeded selection of raw per-sample trajectories for path overlays."""
from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import pandas as pd

from .compute import as_pandas, group_columns, iter_groups, require_columns
from .config import DEFAULT_N_SAMPLES, SAMPLE_COL, X_COL
from .errors import EmptyInputError, InvalidArgument
from .logger import get_logger

logger = get_logger(__name__)

Seed = int | np.random.Generator | None


def validate_n_samples(
    data,
    n_samples: int,
    *,
    sample: str = SAMPLE_COL,
    group: str | Iterable[str] | None = None,
) -> None:
    """Raise InvalidArgument unless every group has at least n_samples distinct ids."""
    if isinstance(n_samples, bool) or not isinstance(n_samples, (int, np.integer)):
        raise InvalidArgument(f"n_samples must be an integer, got {n_samples!r}")
    if n_samples < 0:
        raise InvalidArgument(f"n_samples must be >= 0, got {n_samples}")
    df = as_pandas(data)
    group_cols = group_columns(group)
    require_columns(df, [*group_cols, sample])
    for key, part in iter_groups(df, group_cols):
        available = part[sample].nunique()
        if n_samples > available:
            where = f" in group {key}" if key else ""
            raise InvalidArgument(
                f"n_samples={n_samples} exceeds the {available} distinct {sample!r} id(s){where}"
            )


def sample_trajectories(
    data,
    n_samples: int = DEFAULT_N_SAMPLES,
    *,
    x: str = X_COL,
    sample: str = SAMPLE_COL,
    group: str | Iterable[str] | None = None,
    seed: Seed = None,
) -> pd.DataFrame:
    """Pick n_samples sample ids per group uniformly without replacement.

    Rows of the selected ids are returned unmodified, ordered by group, then by
    the order the ids were drawn, then by x. ``seed`` may be an int or a
    ``numpy.random.Generator``; the same seed gives the same selection.
    """
    validate_n_samples(data, n_samples, sample=sample, group=group)
    df = as_pandas(data)
    group_cols = group_columns(group)
    require_columns(df, [x])
    if df.empty:
        raise EmptyInputError("Input has no rows")

    rng = np.random.default_rng(seed)
    parts = []
    for key, part in iter_groups(df, group_cols):
        ids = pd.unique(part[sample].dropna())
        picked = ids[rng.choice(len(ids), size=n_samples, replace=False)] if n_samples else ids[:0]
        order = {sid: i for i, sid in enumerate(picked)}
        chosen = part[part[sample].isin(picked)]
        chosen = chosen.assign(_draw=chosen[sample].map(order))
        parts.append(chosen.sort_values(["_draw", x], kind="stable").drop(columns="_draw"))
        logger.debug("Sampled %d of %d trajectories for group %s", n_samples, len(ids), key)

    return pd.concat(parts, ignore_index=True)

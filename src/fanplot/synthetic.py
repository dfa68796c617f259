"""Synthetic long-form draws for demos and tests."""
from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from .config import DEFAULT_SEED, SAMPLE_COL, X_COL, Y_COL


def random_walk_samples(
    n_x: int = 30,
    n_samples: int = 200,
    *,
    groups: Sequence[str] | None = None,
    drift: float = 0.1,
    scale: float = 1.0,
    group_col: str = "group",
    seed: int | np.random.Generator | None = DEFAULT_SEED,
) -> pd.DataFrame:
    """Gaussian random walks, one per sample id, spreading out as x grows.

    Returns long-form DataFrame with columns x, sample, y (plus ``group_col``
    when ``groups`` is given). Each group gets its own drift multiple so the
    fans are distinguishable.
    """
    rng = np.random.default_rng(seed)
    parts = []
    for gi, name in enumerate(groups or [None]):
        steps = rng.normal(drift * (gi + 1), scale, size=(n_samples, n_x))
        walks = np.cumsum(steps, axis=1)
        part = pd.DataFrame({
            X_COL: np.tile(np.arange(n_x), n_samples),
            SAMPLE_COL: np.repeat(np.arange(n_samples), n_x),
            Y_COL: walks.reshape(-1),
        })
        if name is not None:
            part.insert(0, group_col, name)
        parts.append(part)
    return pd.concat(parts, ignore_index=True)

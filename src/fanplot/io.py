"""Read and write long-form sample tables (CSV / Parquet via polars)."""
from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pandas as pd
import polars as pl
from numpy.typing import NDArray

from .config import SAMPLE_COL, X_COL, Y_COL
from .errors import InvalidArgument

SUPPORTED_SUFFIXES = (".csv", ".parquet", ".pq")


def read_samples(path: Path) -> pd.DataFrame:
    """Load a long-form table from .csv or .parquet into pandas.

    Args:
        path: File with one observation per row.

    Returns:
        pandas DataFrame with the file's columns unchanged.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pl.read_csv(path)
    elif suffix in (".parquet", ".pq"):
        df = pl.read_parquet(path)
    else:
        raise InvalidArgument(f"Unsupported file type {suffix!r}; expected one of {SUPPORTED_SUFFIXES}")
    return df.to_pandas()


def write_table(df: pd.DataFrame, path: Path) -> Path:
    """Write a pandas table as .csv or .parquet, creating parent dirs."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InvalidArgument(f"Unsupported file type {suffix!r}; expected one of {SUPPORTED_SUFFIXES}")
    path.parent.mkdir(parents=True, exist_ok=True)
    out = pl.from_pandas(df)
    if suffix == ".csv":
        out.write_csv(path)
    else:
        out.write_parquet(path)
    return path


def from_matrix(
    xs: Sequence,
    ys: NDArray[np.float64],
    *,
    x: str = X_COL,
    y: str = Y_COL,
    sample: str = SAMPLE_COL,
) -> pd.DataFrame:
    """Convert an [N, M] matrix of draws (row i at xs[i], one column per sample) to long form.

    Returns DataFrame with columns x, sample, y sorted by sample then x.
    """
    ys = np.asarray(ys, dtype=np.float64)
    if ys.ndim == 1:
        ys = ys[:, None]
    if ys.ndim != 2 or ys.shape[0] != len(xs):
        raise InvalidArgument(f"ys must have shape [len(xs), n_samples], got {ys.shape} for {len(xs)} x values")
    n_x, n_samples = ys.shape
    return pd.DataFrame({
        x: np.tile(np.asarray(xs), n_samples),
        sample: np.repeat(np.arange(n_samples), n_x),
        y: ys.T.reshape(-1),
    })

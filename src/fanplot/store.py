"""Save/load band and quantile tables as Parquet intermediates."""
from __future__ import annotations

from pathlib import Path

import pandas as pd
import polars as pl

from .config import INTERVAL_COL, INTERVAL_DECIMALS, PROBABILITY_DECIMALS, QUANTILE_COL


def save_bands(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    pl.from_pandas(df).write_parquet(path)


def load_bands(path: Path) -> pd.DataFrame:
    """Load bands parquet; interval widths are re-rounded so they compare exactly."""
    df = pl.read_parquet(path)
    if INTERVAL_COL in df.columns:
        df = df.with_columns(pl.col(INTERVAL_COL).round(INTERVAL_DECIMALS))
    return df.to_pandas()


def save_quantiles(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    pl.from_pandas(df).write_parquet(path)


def load_quantiles(path: Path) -> pd.DataFrame:
    df = pl.read_parquet(path)
    if QUANTILE_COL in df.columns and df[QUANTILE_COL].dtype.is_float():
        df = df.with_columns(pl.col(QUANTILE_COL).round(PROBABILITY_DECIMALS))
    return df.to_pandas()

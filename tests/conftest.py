"""Shared fixtures for fanplot tests."""
from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from fanplot.synthetic import random_walk_samples


@pytest.fixture
def scenario_df() -> pd.DataFrame:
    """x in {1, 2}, five draws each: y = 1..5 and 10..50."""
    return pd.DataFrame({
        "x": [1] * 5 + [2] * 5,
        "sample": list(range(5)) * 2,
        "y": [1.0, 2.0, 3.0, 4.0, 5.0, 10.0, 20.0, 30.0, 40.0, 50.0],
    })


@pytest.fixture
def single_obs_df() -> pd.DataFrame:
    """One observation per x, all equal to 7."""
    return pd.DataFrame({"x": [0, 1, 2], "sample": [0, 0, 0], "y": [7.0, 7.0, 7.0]})


@pytest.fixture
def walk_df() -> pd.DataFrame:
    """200 random walks over 20 x values, no grouping."""
    return random_walk_samples(20, 200, seed=42)


@pytest.fixture
def grouped_walk_df() -> pd.DataFrame:
    """Two cohorts of 50 random walks over 10 x values."""
    return random_walk_samples(10, 50, groups=["control", "treated"], seed=7)


@pytest.fixture
def shuffled():
    """Return a helper that permutes rows deterministically."""
    def _shuffle(df: pd.DataFrame, seed: int = 0) -> pd.DataFrame:
        rng = np.random.default_rng(seed)
        return df.iloc[rng.permutation(len(df))].reset_index(drop=True)
    return _shuffle

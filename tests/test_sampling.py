"""Tests for trajectory sampling."""
from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from fanplot.errors import InvalidArgument
from fanplot.sampling import sample_trajectories, validate_n_samples


def test_picks_requested_number_of_ids(walk_df: pd.DataFrame):
    picked = sample_trajectories(walk_df, 5, seed=1)
    assert picked["sample"].nunique() == 5
    # every selected trajectory keeps all of its points
    assert len(picked) == 5 * walk_df["x"].nunique()


def test_paths_forwarded_unmodified(walk_df: pd.DataFrame, shuffled):
    picked = sample_trajectories(shuffled(walk_df), 3, seed=2)
    for sid, path in picked.groupby("sample"):
        original = walk_df[walk_df["sample"] == sid].sort_values("x")
        np.testing.assert_array_equal(path["x"].to_numpy(), original["x"].to_numpy())
        np.testing.assert_array_equal(path["y"].to_numpy(), original["y"].to_numpy())


def test_same_seed_same_selection(walk_df: pd.DataFrame):
    a = sample_trajectories(walk_df, 4, seed=123)
    b = sample_trajectories(walk_df, 4, seed=123)
    pd.testing.assert_frame_equal(a, b)


def test_generator_seed(walk_df: pd.DataFrame):
    a = sample_trajectories(walk_df, 4, seed=np.random.default_rng(9))
    b = sample_trajectories(walk_df, 4, seed=9)
    pd.testing.assert_frame_equal(a, b)


def test_different_seeds_differ(walk_df: pd.DataFrame):
    a = set(sample_trajectories(walk_df, 10, seed=1)["sample"])
    b = set(sample_trajectories(walk_df, 10, seed=2)["sample"])
    assert a != b


def test_all_ids_when_n_equals_available(scenario_df: pd.DataFrame):
    picked = sample_trajectories(scenario_df, 5, seed=0)
    assert sorted(picked["sample"].unique()) == [0, 1, 2, 3, 4]


def test_too_many_samples_rejected(scenario_df: pd.DataFrame):
    with pytest.raises(InvalidArgument, match="exceeds"):
        sample_trajectories(scenario_df, 6, seed=0)


@pytest.mark.parametrize("n", [-1, 2.5, True])
def test_bad_n_samples_rejected(scenario_df: pd.DataFrame, n):
    with pytest.raises(InvalidArgument):
        validate_n_samples(scenario_df, n)


def test_zero_samples_is_empty(scenario_df: pd.DataFrame):
    picked = sample_trajectories(scenario_df, 0, seed=0)
    assert picked.empty
    assert list(picked.columns) == list(scenario_df.columns)


def test_samples_per_group(grouped_walk_df: pd.DataFrame):
    picked = sample_trajectories(grouped_walk_df, 3, group="group", seed=0)
    counts = picked.groupby("group")["sample"].nunique()
    assert counts.to_dict() == {"control": 3, "treated": 3}


def test_smallest_group_bounds_n_samples(grouped_walk_df: pd.DataFrame):
    small = grouped_walk_df[
        (grouped_walk_df["group"] == "control") | (grouped_walk_df["sample"] < 2)
    ]
    with pytest.raises(InvalidArgument, match="treated"):
        sample_trajectories(small, 3, group="group", seed=0)

"""Unit tests for sliding-window construction."""

import pytest
import pandas as pd
import numpy as np

from seqprep.data.windowing import SequenceWindower, count_windows, make_windows
from seqprep.utils.error_handling import (
    InsufficientDataError,
    InvalidSeqLengthError,
    InvalidSeriesError,
)


def test_ten_step_example(ten_step_series):
    windows = make_windows(ten_step_series, seq_length=3)

    assert len(windows) == 7
    np.testing.assert_array_equal(windows.inputs[0], [1, 2, 3])
    assert windows.targets[0] == 4
    np.testing.assert_array_equal(windows.inputs[-1], [7, 8, 9])
    assert windows.targets[-1] == 10


def test_target_follows_each_window():
    series = np.arange(50, dtype=float) ** 2
    seq_length = 6
    windows = make_windows(series, seq_length)

    for k in range(len(windows)):
        np.testing.assert_array_equal(windows.inputs[k], series[k:k + seq_length])
        assert windows.targets[k] == series[k + seq_length]


def test_unpacks_as_inputs_and_targets(ten_step_series):
    inputs, targets = make_windows(ten_step_series, 3)
    assert inputs.shape == (7, 3)
    assert targets.shape == (7,)


def test_multivariate_shapes():
    data = np.arange(40, dtype=float).reshape(20, 2)
    windows = make_windows(data, seq_length=5)

    assert windows.inputs.shape == (15, 5, 2)
    assert windows.targets.shape == (15, 2)
    np.testing.assert_array_equal(windows.targets[0], data[5])


def test_target_column_by_name(sample_prices_df):
    frame = sample_prices_df[["open", "close"]]
    windows = make_windows(frame, seq_length=10, target_column="close")

    assert windows.inputs.shape == (110, 10, 2)
    assert windows.targets.shape == (110,)
    assert windows.targets[0] == frame["close"].iloc[10]
    assert windows.feature_names == ["open", "close"]


def test_target_column_by_position():
    data = np.arange(30, dtype=float).reshape(10, 3)
    windows = make_windows(data, seq_length=2, target_column=-1)
    np.testing.assert_array_equal(windows.targets, data[2:, 2])


def test_target_column_requires_2d():
    with pytest.raises(InvalidSeriesError):
        make_windows([1.0, 2.0, 3.0], 1, target_column=0)


def test_unknown_target_column(sample_prices_df):
    with pytest.raises(KeyError):
        make_windows(sample_prices_df, 5, target_column="adj_close")


def test_target_index_tracks_timestamps(sample_prices_df):
    series = sample_prices_df["close"]
    windows = make_windows(series, seq_length=30)

    assert windows.target_index[0] == series.index[30]
    assert windows.target_index[-1] == series.index[-1]


@pytest.mark.parametrize("n", [0, 1, 3])
def test_too_short_series_raises(n):
    with pytest.raises(InsufficientDataError):
        make_windows(list(range(n)), seq_length=3)


@pytest.mark.parametrize("seq_length", [0, -1, 2.5, "3", True])
def test_invalid_seq_length_raises(seq_length):
    with pytest.raises(InvalidSeqLengthError):
        make_windows([1, 2, 3, 4], seq_length)


def test_seq_length_checked_before_data_length():
    with pytest.raises(InvalidSeqLengthError):
        make_windows([], 0)


def test_unsorted_index_raises():
    series = pd.Series([1.0, 2.0, 3.0, 4.0], index=pd.to_datetime(
        ["2023-01-02", "2023-01-01", "2023-01-03", "2023-01-04"]
    ))
    with pytest.raises(InvalidSeriesError):
        make_windows(series, 2)


def test_duplicate_index_raises():
    series = pd.Series([1.0, 2.0, 3.0], index=[0, 1, 1])
    with pytest.raises(InvalidSeriesError):
        make_windows(series, 1)


def test_repeated_calls_are_identical():
    series = np.random.default_rng(0).normal(size=100)
    first = make_windows(series, 7)
    second = make_windows(series, 7)
    np.testing.assert_array_equal(first.inputs, second.inputs)
    np.testing.assert_array_equal(first.targets, second.targets)


def test_slicing_keeps_alignment(sample_prices_df):
    windows = make_windows(sample_prices_df["close"], 5)
    part = windows[10:20]
    assert len(part) == 10
    np.testing.assert_array_equal(part.inputs, windows.inputs[10:20])
    assert part.target_index.equals(windows.target_index[10:20])
    assert part.seq_length == 5


def test_count_windows():
    assert count_windows(10, 3) == 7
    with pytest.raises(InsufficientDataError):
        count_windows(3, 3)


class TestSequenceWindower:
    """Tests for the class wrapper."""

    def test_uses_configured_length(self, ten_step_series):
        windower = SequenceWindower(seq_length=4)
        assert len(windower.make_windows(ten_step_series)) == 6

    def test_length_override(self, ten_step_series):
        windower = SequenceWindower(seq_length=4)
        assert len(windower.make_windows(ten_step_series, seq_length=2)) == 8

    def test_rejects_invalid_length(self):
        with pytest.raises(InvalidSeqLengthError):
            SequenceWindower(seq_length=0)

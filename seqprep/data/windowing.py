"""Sliding-window construction for sequence-to-one forecasting."""

from numbers import Integral
from typing import List, Optional, Sequence, Union
import logging

import numpy as np
import pandas as pd

from .structs import WindowedDataset
from ..utils.error_handling import (
    InsufficientDataError,
    InvalidSeqLengthError,
    InvalidSeriesError,
)

logger = logging.getLogger(__name__)

SeriesLike = Union[Sequence[float], np.ndarray, pd.Series, pd.DataFrame]


def _validate_seq_length(seq_length) -> int:
    if isinstance(seq_length, bool) or not isinstance(seq_length, Integral):
        raise InvalidSeqLengthError(
            f"seq_length must be a positive integer, got {seq_length!r}"
        )
    if seq_length < 1:
        raise InvalidSeqLengthError(f"seq_length must be >= 1, got {seq_length}")
    return int(seq_length)


def count_windows(n_observations: int, seq_length: int) -> int:
    """
    Number of windows a series of n_observations yields.

    Raises:
        InvalidSeqLengthError: If seq_length is not an integer >= 1
        InsufficientDataError: If n_observations <= seq_length
    """
    seq_length = _validate_seq_length(seq_length)
    if n_observations <= seq_length:
        raise InsufficientDataError(
            f"Input data length ({n_observations}) must be greater than "
            f"sequence length ({seq_length})"
        )
    return n_observations - seq_length


def _resolve_target_column(
    target_column: Union[int, str],
    n_fields: int,
    feature_names: Optional[List[str]],
) -> int:
    if isinstance(target_column, str):
        if feature_names is None or target_column not in feature_names:
            raise KeyError(f"Target column not found: {target_column}")
        return feature_names.index(target_column)
    if not -n_fields <= target_column < n_fields:
        raise KeyError(f"Target column position out of range: {target_column}")
    return target_column % n_fields


def make_windows(
    series: SeriesLike,
    seq_length: int,
    target_column: Optional[Union[int, str]] = None,
) -> WindowedDataset:
    """
    Build (window, next-step target) pairs from an ordered series.

    For each start index i in [0, N - seq_length):
      inputs[i]  = series[i : i + seq_length]
      targets[i] = series[i + seq_length]

    Args:
        series: Ordered observations, 1-D (one field) or 2-D (rows x fields).
            pandas inputs must have a strictly increasing index.
        seq_length: Observations per window
        target_column: For 2-D input, the field (position or name) to use as
            a scalar target. Defaults to the whole next observation.

    Returns:
        WindowedDataset with exactly N - seq_length windows in ascending order

    Raises:
        InvalidSeqLengthError: If seq_length is not an integer >= 1
        InsufficientDataError: If N <= seq_length
        InvalidSeriesError: If a pandas index is not strictly increasing
    """
    seq_length = _validate_seq_length(seq_length)

    index: Optional[pd.Index] = None
    feature_names: Optional[List[str]] = None
    if isinstance(series, (pd.Series, pd.DataFrame)):
        index = series.index
        if not (index.is_monotonic_increasing and index.is_unique):
            raise InvalidSeriesError("Series index must be strictly increasing")
        if isinstance(series, pd.DataFrame):
            feature_names = [str(c) for c in series.columns]
        elif series.name is not None:
            feature_names = [str(series.name)]
        values = series.to_numpy()
    else:
        values = np.asarray(series)

    if values.ndim not in (1, 2):
        raise InvalidSeriesError(f"Series must be 1-D or 2-D, got {values.ndim}-D")

    col = None
    if target_column is not None:
        if values.ndim != 2:
            raise InvalidSeriesError("target_column requires 2-D input")
        col = _resolve_target_column(target_column, values.shape[1], feature_names)

    n = len(values)
    n_windows = count_windows(n, seq_length)

    xs = []
    for i in range(n_windows):
        xs.append(values[i:i + seq_length])
    inputs = np.array(xs)
    targets = values[seq_length:].copy()
    if col is not None:
        targets = targets[:, col]

    logger.debug(
        f"Built {len(inputs)} windows of length {seq_length} from {n} observations"
    )

    return WindowedDataset(
        inputs=inputs,
        targets=targets,
        seq_length=seq_length,
        target_index=index[seq_length:] if index is not None else None,
        feature_names=feature_names,
    )


class SequenceWindower:
    """Builds fixed-length input windows paired with next-step targets."""

    def __init__(
        self,
        seq_length: int,
        target_column: Optional[Union[int, str]] = None,
    ):
        self.seq_length = _validate_seq_length(seq_length)
        self.target_column = target_column

    def make_windows(
        self,
        series: SeriesLike,
        seq_length: Optional[int] = None,
    ) -> WindowedDataset:
        """
        Window a series.

        Args:
            series: Ordered observations
            seq_length: Overrides the configured window length

        Returns:
            WindowedDataset
        """
        return make_windows(
            series,
            self.seq_length if seq_length is None else seq_length,
            target_column=self.target_column,
        )

"""Normalization, windowing, splitting and validation of time series."""

from .normalizers import (
    Normalizer,
    ScalingParams,
    apply_scaling,
    fit_scaling_params,
    invert_scaling,
)
from .structs import DatasetSplit, SplitIndices, WindowedDataset
from .splitters import ChronologicalSplitter, compute_split_sizes, split
from .validators import SeriesValidator, ValidationResult
from .windowing import SequenceWindower, count_windows, make_windows

__all__ = [
    "Normalizer",
    "ScalingParams",
    "apply_scaling",
    "fit_scaling_params",
    "invert_scaling",
    "DatasetSplit",
    "SplitIndices",
    "WindowedDataset",
    "ChronologicalSplitter",
    "compute_split_sizes",
    "split",
    "SeriesValidator",
    "ValidationResult",
    "SequenceWindower",
    "count_windows",
    "make_windows",
]

"""Chronological train/validation/test splitting of window sequences."""

from numbers import Real
from typing import Any, List, Optional, Tuple
from pathlib import Path
from datetime import datetime
import logging

import pandas as pd

from .structs import DatasetSplit, SplitIndices, WindowedDataset
from ..utils.error_handling import InvalidFractionError, InvalidSeriesError
from ..utils.serialization import load_json, save_json

logger = logging.getLogger(__name__)


def _validate_fraction(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidFractionError(f"{name} must be a number in [0, 1), got {value!r}")
    if not 0.0 <= value < 1.0:
        raise InvalidFractionError(f"{name} must be in [0, 1), got {value}")
    return float(value)


def compute_split_sizes(
    n_windows: int,
    test_fraction: float,
    val_fraction: float,
) -> Tuple[int, int, int]:
    """
    Compute (n_train, n_val, n_test) for a chronological split.

    The test size is rounded from the whole, the validation size from what
    remains, and training absorbs the rest, so the three always sum to
    n_windows.

    Raises:
        InvalidFractionError: If a fraction is outside [0, 1) or no
            training windows would remain
    """
    test_fraction = _validate_fraction("test_fraction", test_fraction)
    val_fraction = _validate_fraction("val_fraction", val_fraction)

    n_test = round(n_windows * test_fraction)
    n_remaining = n_windows - n_test
    n_val = round(n_remaining * val_fraction)
    n_train = n_remaining - n_val

    if n_train <= 0:
        raise InvalidFractionError(
            f"Split of {n_windows} windows with test_fraction={test_fraction}, "
            f"val_fraction={val_fraction} leaves no training data"
        )
    return n_train, n_val, n_test


def _is_pair(windows: Any) -> bool:
    """
    An (inputs, targets) tuple of two sized sequences.

    Raises:
        InvalidSeriesError: If the two parts differ in length
    """
    if not (
        isinstance(windows, tuple)
        and len(windows) == 2
        and all(hasattr(part, "__len__") for part in windows)
    ):
        return False
    if len(windows[0]) != len(windows[1]):
        raise InvalidSeriesError(
            f"Inputs ({len(windows[0])}) and targets ({len(windows[1])}) "
            f"must have the same length"
        )
    return True


def _take(obj: Any, start: int, stop: int) -> Any:
    """Positional contiguous slice of a sequence-like object."""
    if isinstance(obj, (pd.Series, pd.DataFrame)):
        return obj.iloc[start:stop]
    return obj[start:stop]


class ChronologicalSplitter:
    """Order-preserving train/validation/test splitting. Never shuffles."""

    def __init__(self, save_dir: Optional[str] = None):
        """Initialize splitter with optional save directory."""
        self.save_dir = Path(save_dir) if save_dir else None
        if self.save_dir:
            self.save_dir.mkdir(parents=True, exist_ok=True)

    def compute_sizes(
        self,
        n_windows: int,
        test_fraction: float,
        val_fraction: float,
    ) -> Tuple[int, int, int]:
        """Compute (n_train, n_val, n_test) for n_windows."""
        return compute_split_sizes(n_windows, test_fraction, val_fraction)

    def split_indices(
        self,
        n_windows: int,
        test_fraction: float,
        val_fraction: float,
    ) -> SplitIndices:
        """
        Compute contiguous index ranges for each partition.

        Args:
            n_windows: Total number of windows M
            test_fraction: Fraction of M reserved for the final partition
            val_fraction: Fraction of the non-test remainder used for validation

        Returns:
            SplitIndices with indices for each partition
        """
        n_train, n_val, n_test = compute_split_sizes(
            n_windows, test_fraction, val_fraction
        )
        val_end = n_train + n_val

        metadata = {
            "split_type": "chronological",
            "test_fraction": test_fraction,
            "val_fraction": val_fraction,
            "total_samples": n_windows,
            "train_samples": n_train,
            "val_samples": n_val,
            "test_samples": n_test,
            "created_at": datetime.now().isoformat(),
        }

        return SplitIndices(
            train_indices=list(range(0, n_train)),
            validation_indices=list(range(n_train, val_end)),
            test_indices=list(range(val_end, n_windows)),
            metadata=metadata,
        )

    def split(
        self,
        windows: Any,
        test_fraction: float,
        val_fraction: float,
    ) -> DatasetSplit:
        """
        Split windows into train/validation/test, preserving order.

        Args:
            windows: WindowedDataset, (inputs, targets) tuple, pandas object
                or any sliceable sequence, in chronological order
            test_fraction: Fraction in [0, 1) for the test partition
            val_fraction: Fraction in [0, 1) of the remainder for validation

        Returns:
            DatasetSplit whose partitions have the same type as `windows`

        Raises:
            InvalidFractionError: If a fraction is invalid or training would be empty
            InvalidSeriesError: If an (inputs, targets) pair differs in length
        """
        paired = _is_pair(windows)
        n_windows = len(windows[0]) if paired else len(windows)
        indices = self.split_indices(n_windows, test_fraction, val_fraction)

        if isinstance(windows, WindowedDataset) and windows.target_index is not None:
            self._annotate_boundaries(indices, windows.target_index)

        train, val, test = self.apply_split(windows, indices)

        logger.info(
            f"Chronological split of {n_windows} windows: "
            f"train={len(indices.train_indices)}, "
            f"val={len(indices.validation_indices)}, "
            f"test={len(indices.test_indices)}"
        )
        return DatasetSplit(train=train, val=val, test=test, indices=indices)

    def apply_split(
        self,
        windows: Any,
        split: SplitIndices,
    ) -> Tuple[Any, Any, Any]:
        """
        Apply split indices to get train/val/test partitions.

        Indices must be contiguous ascending ranges that follow one another,
        so each partition is a slice.

        Raises:
            ValueError: If the indices are not consecutive ranges
        """
        bounds = []
        expected = 0
        for name, part in (
            ("train", split.train_indices),
            ("validation", split.validation_indices),
            ("test", split.test_indices),
        ):
            if list(part) != list(range(expected, expected + len(part))):
                raise ValueError(
                    f"{name} indices must be the consecutive range starting at {expected}"
                )
            bounds.append((expected, expected + len(part)))
            expected += len(part)

        if _is_pair(windows):
            inputs, targets = windows
            return tuple(
                (_take(inputs, start, stop), _take(targets, start, stop))
                for start, stop in bounds
            )
        return tuple(_take(windows, start, stop) for start, stop in bounds)

    def _annotate_boundaries(self, split: SplitIndices, target_index: pd.Index) -> None:
        for name, part in (
            ("train", split.train_indices),
            ("val", split.validation_indices),
            ("test", split.test_indices),
        ):
            if part:
                split.metadata[f"{name}_start"] = str(target_index[part[0]])
                split.metadata[f"{name}_end"] = str(target_index[part[-1]])

    def save_split_indices(
        self,
        split: SplitIndices,
        name: str
    ) -> Path:
        """
        Save split indices to a JSON file in the save directory.

        Returns:
            Path to saved file
        """
        if not self.save_dir:
            raise ValueError("No save directory configured")

        file_path = save_json(split.to_dict(), self.save_dir / f"{name}_split.json")
        logger.info(f"Split indices saved to {file_path}")
        return file_path

    def load_split_indices(self, name: str) -> SplitIndices:
        """Load split indices saved by save_split_indices."""
        if not self.save_dir:
            raise ValueError("No save directory configured")

        file_path = self.save_dir / f"{name}_split.json"
        if not file_path.exists():
            raise FileNotFoundError(f"Split file not found: {file_path}")

        return SplitIndices.from_dict(load_json(file_path))

    def validate_no_leakage(
        self,
        target_index: pd.Index,
        split: SplitIndices
    ) -> Tuple[bool, List[str]]:
        """
        Validate that a split has no temporal leakage.

        Args:
            target_index: Timestamps of each window's target
            split: SplitIndices to validate

        Returns:
            Tuple of (is_valid, list of issues)
        """
        issues: List[str] = []

        seen: set = set()
        for part in (split.train_indices, split.validation_indices, split.test_indices):
            overlap = seen.intersection(part)
            if overlap:
                issues.append(f"{len(overlap)} window(s) appear in more than one partition")
            seen.update(part)

        train_times = target_index[split.train_indices]
        val_times = target_index[split.validation_indices]
        test_times = target_index[split.test_indices]

        if len(train_times) > 0 and len(val_times) > 0:
            if train_times.max() >= val_times.min():
                issues.append(
                    f"Training data ({train_times.max()}) overlaps with "
                    f"validation data ({val_times.min()})"
                )

        if len(val_times) > 0 and len(test_times) > 0:
            if val_times.max() >= test_times.min():
                issues.append(
                    f"Validation data ({val_times.max()}) overlaps with "
                    f"test data ({test_times.min()})"
                )

        if len(train_times) > 0 and len(test_times) > 0:
            if train_times.max() >= test_times.min():
                issues.append(
                    f"Training data ({train_times.max()}) overlaps with "
                    f"test data ({test_times.min()})"
                )

        return len(issues) == 0, issues


def split(
    windows: Any,
    test_fraction: float,
    val_fraction: float,
) -> DatasetSplit:
    """Chronologically split windows into train/validation/test."""
    return ChronologicalSplitter().split(windows, test_fraction, val_fraction)

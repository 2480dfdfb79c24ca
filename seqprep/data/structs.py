"""Core data structures for sequence preparation."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
import numpy as np
import pandas as pd


@dataclass
class WindowedDataset:
    """
    Index-aligned input windows and next-step targets.

    Attributes:
        inputs: Array of shape (M, seq_length) or (M, seq_length, n_fields)
        targets: Array of shape (M,) or (M, n_fields); targets[k] follows inputs[k]
        seq_length: Number of observations per window
        target_index: Index labels (e.g. timestamps) of each target, if known
        feature_names: Field names of the source table, if known
    """
    inputs: np.ndarray
    targets: np.ndarray
    seq_length: int
    target_index: Optional[pd.Index] = None
    feature_names: Optional[List[str]] = None

    def __post_init__(self):
        """Validate consistency after initialization."""
        if len(self.inputs) != len(self.targets):
            raise ValueError(
                f"Length mismatch: inputs ({len(self.inputs)}) vs targets ({len(self.targets)})"
            )
        if self.target_index is not None and len(self.target_index) != len(self.targets):
            raise ValueError(
                f"Length mismatch: target_index ({len(self.target_index)}) vs targets ({len(self.targets)})"
            )

    def __len__(self) -> int:
        return len(self.targets)

    def __iter__(self) -> Iterator[np.ndarray]:
        # Unpacks as (inputs, targets).
        return iter((self.inputs, self.targets))

    def __getitem__(self, key: slice) -> "WindowedDataset":
        if not isinstance(key, slice):
            raise TypeError("WindowedDataset only supports slicing")
        return WindowedDataset(
            inputs=self.inputs[key],
            targets=self.targets[key],
            seq_length=self.seq_length,
            target_index=self.target_index[key] if self.target_index is not None else None,
            feature_names=self.feature_names,
        )


@dataclass
class SplitIndices:
    """Container for train/validation/test window indices with metadata."""
    train_indices: List[int]
    validation_indices: List[int]
    test_indices: List[int]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "train_indices": self.train_indices,
            "validation_indices": self.validation_indices,
            "test_indices": self.test_indices,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SplitIndices":
        """Create from dictionary."""
        return cls(
            train_indices=data["train_indices"],
            validation_indices=data["validation_indices"],
            test_indices=data["test_indices"],
            metadata=data.get("metadata", {}),
        )


@dataclass
class DatasetSplit:
    """Chronological train/validation/test partitions of a window sequence."""
    train: Any
    val: Any
    test: Any
    indices: SplitIndices

    def __iter__(self) -> Iterator[Any]:
        return iter((self.train, self.val, self.test))

    @property
    def sizes(self) -> Tuple[int, int, int]:
        return (
            len(self.indices.train_indices),
            len(self.indices.validation_indices),
            len(self.indices.test_indices),
        )

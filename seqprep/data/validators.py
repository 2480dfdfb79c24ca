"""Validation of raw series before normalization and windowing."""

from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass, field
import logging

import numpy as np
import pandas as pd

from ..utils.error_handling import InvalidSeriesError

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of raw series validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
        }


class SeriesValidator:
    """Checks the raw series invariants: ordered, unique, numeric, finite."""

    def validate_series(
        self,
        data: Union[pd.Series, pd.DataFrame],
        columns: Optional[List[str]] = None,
    ) -> ValidationResult:
        """
        Validate a raw series or table.

        Args:
            data: Series or DataFrame indexed by timestamp
            columns: Columns to check (defaults to all columns)

        Returns:
            ValidationResult listing every problem found
        """
        errors: List[str] = []
        warnings: List[str] = []

        if isinstance(data, pd.Series):
            data = data.to_frame()

        if columns is not None:
            missing = [c for c in columns if c not in data.columns]
            if missing:
                errors.append(f"Missing columns: {missing}")
            data = data[[c for c in columns if c in data.columns]]

        if len(data) == 0:
            errors.append("Series is empty")
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        index = data.index
        if index.has_duplicates:
            n_dupes = int(index.duplicated().sum())
            errors.append(f"Index has {n_dupes} duplicate timestamp(s)")
        if not index.is_monotonic_increasing:
            errors.append("Index is not sorted in increasing order")
        if not isinstance(index, pd.DatetimeIndex):
            warnings.append(f"Index is {type(index).__name__}, not DatetimeIndex")

        for col in data.columns:
            if not pd.api.types.is_numeric_dtype(data[col]):
                errors.append(f"Column '{col}' is not numeric ({data[col].dtype})")
                continue
            values = data[col].to_numpy(dtype=float)
            n_nan = int(np.isnan(values).sum())
            n_inf = int(np.isinf(values).sum())
            if n_nan:
                errors.append(f"Column '{col}' has {n_nan} missing value(s)")
            if n_inf:
                errors.append(f"Column '{col}' has {n_inf} infinite value(s)")
            if n_nan + n_inf < len(values) and np.nanmin(values) == np.nanmax(values):
                warnings.append(f"Column '{col}' is constant")

        result = ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
        for warning in warnings:
            logger.warning(warning)
        return result

    def ensure_valid(
        self,
        data: Union[pd.Series, pd.DataFrame],
        columns: Optional[List[str]] = None,
    ) -> None:
        """
        Raise if the series breaks any invariant.

        Raises:
            InvalidSeriesError: With every error found, joined
        """
        result = self.validate_series(data, columns)
        if not result.is_valid:
            raise InvalidSeriesError("; ".join(result.errors))

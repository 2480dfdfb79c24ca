"""Reversible per-field scaling for numeric time series."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np
import pandas as pd

from ..utils.error_handling import (
    EmptyInputError,
    InvalidRangeError,
    InvalidSeriesError,
    NotFittedError,
)

logger = logging.getLogger(__name__)

SCALER_KINDS = ("minmax", "standard")

ArrayLike = Union[Sequence[float], np.ndarray, pd.Series, pd.DataFrame]


@dataclass(frozen=True)
class ScalingParams:
    """
    Fitted per-field scaling statistics.

    Attributes:
        kind: 'minmax' or 'standard'
        feature_range: (low, high) target interval for min-max scaling
        data_min: Per-field minimum of the fitting data
        data_max: Per-field maximum of the fitting data
        mean: Per-field mean of the fitting data
        std: Per-field population standard deviation of the fitting data
        columns: Field names when fitted on a DataFrame or named Series
    """
    kind: str
    feature_range: Tuple[float, float]
    data_min: Tuple[float, ...]
    data_max: Tuple[float, ...]
    mean: Tuple[float, ...]
    std: Tuple[float, ...]
    columns: Optional[Tuple[str, ...]] = None

    @property
    def n_fields(self) -> int:
        return len(self.data_min)

    def subset(self, fields: Union[int, str, Sequence[Union[int, str]]]) -> "ScalingParams":
        """
        Select the parameters of some fields, e.g. to invert a single target column.

        Args:
            fields: Field position(s) or column name(s)

        Returns:
            ScalingParams restricted to the selected fields, in the given order
        """
        if isinstance(fields, (int, str)):
            fields = [fields]

        positions: List[int] = []
        for f in fields:
            if isinstance(f, str):
                if self.columns is None or f not in self.columns:
                    raise KeyError(f"Unknown field: {f}")
                positions.append(self.columns.index(f))
            else:
                if not -self.n_fields <= f < self.n_fields:
                    raise KeyError(f"Field position out of range: {f}")
                positions.append(f % self.n_fields)

        def pick(values: Tuple[float, ...]) -> Tuple[float, ...]:
            return tuple(values[p] for p in positions)

        return ScalingParams(
            kind=self.kind,
            feature_range=self.feature_range,
            data_min=pick(self.data_min),
            data_max=pick(self.data_max),
            mean=pick(self.mean),
            std=pick(self.std),
            columns=pick(self.columns) if self.columns is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind,
            "feature_range": list(self.feature_range),
            "data_min": list(self.data_min),
            "data_max": list(self.data_max),
            "mean": list(self.mean),
            "std": list(self.std),
            "columns": list(self.columns) if self.columns is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScalingParams":
        """Create from dictionary."""
        columns = data.get("columns")
        return cls(
            kind=data["kind"],
            feature_range=tuple(data["feature_range"]),
            data_min=tuple(data["data_min"]),
            data_max=tuple(data["data_max"]),
            mean=tuple(data["mean"]),
            std=tuple(data["std"]),
            columns=tuple(columns) if columns is not None else None,
        )


def _validate_feature_range(feature_range: Tuple[float, float]) -> Tuple[float, float]:
    try:
        low, high = feature_range
        low, high = float(low), float(high)
    except (TypeError, ValueError):
        raise InvalidRangeError(
            f"feature_range must be a (low, high) pair, got {feature_range!r}"
        )
    if not low < high:
        raise InvalidRangeError(
            f"feature_range low ({low}) must be strictly less than high ({high})"
        )
    return low, high


def _as_2d(values: ArrayLike) -> np.ndarray:
    """Coerce input to a float array of shape (n_rows, n_fields)."""
    if isinstance(values, (pd.Series, pd.DataFrame)):
        arr = values.to_numpy(dtype=float)
    else:
        try:
            arr = np.asarray(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidSeriesError(f"Values must be numeric: {e}")

    if arr.ndim == 0:
        raise InvalidSeriesError("Values must be a sequence, got a scalar")
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    elif arr.ndim != 2:
        raise InvalidSeriesError(f"Values must be 1-D or 2-D, got {arr.ndim}-D")
    return arr


def _field_names(values: ArrayLike) -> Optional[Tuple[str, ...]]:
    if isinstance(values, pd.DataFrame):
        return tuple(str(c) for c in values.columns)
    if isinstance(values, pd.Series) and values.name is not None:
        return (str(values.name),)
    return None


def _restore(result: np.ndarray, like: ArrayLike) -> Union[np.ndarray, pd.Series, pd.DataFrame]:
    """Give the result the same container and shape as the input."""
    if isinstance(like, pd.DataFrame):
        return pd.DataFrame(result, index=like.index, columns=like.columns)
    if isinstance(like, pd.Series):
        return pd.Series(result[:, 0], index=like.index, name=like.name)
    if np.ndim(like) == 1:
        return result[:, 0]
    return result


def _check_fields(arr: np.ndarray, params: ScalingParams, values: ArrayLike) -> None:
    if arr.shape[1] != params.n_fields:
        raise InvalidSeriesError(
            f"Expected {params.n_fields} field(s), got {arr.shape[1]}"
        )
    names = _field_names(values)
    if params.columns is not None and names is not None and names != params.columns:
        raise InvalidSeriesError(
            f"Fields {list(names)} do not match the fitted fields {list(params.columns)}"
        )


def fit_scaling_params(
    values: ArrayLike,
    kind: str = "minmax",
    feature_range: Tuple[float, float] = (0.0, 1.0),
) -> ScalingParams:
    """
    Compute per-field scaling parameters.

    Args:
        values: Fitting data, 1-D (single field) or 2-D (rows x fields)
        kind: 'minmax' or 'standard'
        feature_range: (low, high) target interval, low < high

    Returns:
        Immutable ScalingParams

    Raises:
        InvalidRangeError: If low >= high
        EmptyInputError: If values has no rows
        InvalidSeriesError: If values holds NaN/inf or is not numeric
    """
    if kind not in SCALER_KINDS:
        raise ValueError(f"Unknown scaler kind: {kind}. Supported kinds are: {list(SCALER_KINDS)}")
    low, high = _validate_feature_range(feature_range)

    arr = _as_2d(values)
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise EmptyInputError("Cannot fit scaling parameters on empty input")
    if not np.isfinite(arr).all():
        raise InvalidSeriesError("Fitting data contains NaN or infinite values")

    params = ScalingParams(
        kind=kind,
        feature_range=(low, high),
        data_min=tuple(float(v) for v in arr.min(axis=0)),
        data_max=tuple(float(v) for v in arr.max(axis=0)),
        mean=tuple(float(v) for v in arr.mean(axis=0)),
        std=tuple(float(v) for v in arr.std(axis=0)),
        columns=_field_names(values),
    )
    logger.debug(f"Fitted {kind} scaling on {arr.shape[0]} rows x {arr.shape[1]} fields")
    return params


def apply_scaling(values: ArrayLike, params: ScalingParams):
    """
    Scale values with fitted parameters.

    Constant fields (max == min, or std == 0) map to `low` for min-max
    scaling and to 0.0 for standard scaling.
    """
    arr = _as_2d(values)
    _check_fields(arr, params, values)

    if params.kind == "minmax":
        low, high = params.feature_range
        data_min = np.asarray(params.data_min)
        span = np.asarray(params.data_max) - data_min
        constant = span == 0
        safe_span = np.where(constant, 1.0, span)
        scaled = low + (arr - data_min) * (high - low) / safe_span
        result = np.where(constant, low, scaled)
    else:
        mean = np.asarray(params.mean)
        std = np.asarray(params.std)
        constant = std == 0
        safe_std = np.where(constant, 1.0, std)
        result = np.where(constant, 0.0, (arr - mean) / safe_std)

    return _restore(result, values)


def invert_scaling(values: ArrayLike, params: ScalingParams):
    """
    Exact inverse of apply_scaling.

    Constant fields invert to the fitted constant.
    """
    arr = _as_2d(values)
    _check_fields(arr, params, values)

    if params.kind == "minmax":
        low, high = params.feature_range
        data_min = np.asarray(params.data_min)
        span = np.asarray(params.data_max) - data_min
        restored = data_min + (arr - low) * span / (high - low)
        result = np.where(span == 0, data_min, restored)
    else:
        mean = np.asarray(params.mean)
        std = np.asarray(params.std)
        result = np.where(std == 0, mean, arr * std + mean)

    return _restore(result, values)


class Normalizer:
    """
    Fits a reversible affine scaling and applies it to later data.

    The fitted state is a ScalingParams value object; `transform` and
    `inverse_transform` always use the one produced by the latest `fit`.
    """

    def __init__(
        self,
        kind: str = "minmax",
        feature_range: Tuple[float, float] = (0.0, 1.0),
    ):
        if kind not in SCALER_KINDS:
            raise ValueError(f"Unknown scaler kind: {kind}. Supported kinds are: {list(SCALER_KINDS)}")
        self.kind = kind
        self.feature_range = feature_range
        self.params: Optional[ScalingParams] = None

    @property
    def is_fitted(self) -> bool:
        return self.params is not None

    def fit(
        self,
        values: ArrayLike,
        feature_range: Optional[Tuple[float, float]] = None,
    ) -> "Normalizer":
        """
        Fit scaling parameters on values.

        Args:
            values: Fitting data
            feature_range: Overrides the range given at construction

        Returns:
            self
        """
        feature_range = self.feature_range if feature_range is None else feature_range
        # Only committed once every check has passed.
        params = fit_scaling_params(values, kind=self.kind, feature_range=feature_range)
        self.params = params
        self.feature_range = params.feature_range
        return self

    def transform(self, values: ArrayLike):
        """Scale values with the fitted parameters."""
        return apply_scaling(values, self._require_params())

    def inverse_transform(self, values: ArrayLike):
        """Map scaled values back to the original units."""
        return invert_scaling(values, self._require_params())

    def fit_transform(
        self,
        values: ArrayLike,
        feature_range: Optional[Tuple[float, float]] = None,
    ):
        """Fit on values, then scale them."""
        return self.fit(values, feature_range).transform(values)

    def _require_params(self) -> ScalingParams:
        if self.params is None:
            raise NotFittedError("Normalizer must be fitted before transforming")
        return self.params

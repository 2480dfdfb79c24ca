"""Error taxonomy, logging, configuration and serialization helpers."""

from .error_handling import (
    ConfigurationError,
    EmptyInputError,
    InsufficientDataError,
    InvalidFractionError,
    InvalidRangeError,
    InvalidSeqLengthError,
    InvalidSeriesError,
    NotFittedError,
    RecoveryContext,
    SequencePrepError,
)

__all__ = [
    "SequencePrepError",
    "EmptyInputError",
    "InvalidRangeError",
    "NotFittedError",
    "InvalidSeqLengthError",
    "InsufficientDataError",
    "InvalidFractionError",
    "InvalidSeriesError",
    "ConfigurationError",
    "RecoveryContext",
]

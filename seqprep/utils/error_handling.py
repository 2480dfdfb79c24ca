"""Error taxonomy and failure context capture."""

import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Dict


class SequencePrepError(ValueError):
    """Base class for caller misuse detected by the preparation core."""


class EmptyInputError(SequencePrepError):
    """Raised when a normalizer is fitted on an empty input."""


class InvalidRangeError(SequencePrepError):
    """Raised when a feature range does not satisfy low < high."""


class NotFittedError(SequencePrepError):
    """Raised when transform/inverse_transform is called before fit."""


class InvalidSeqLengthError(SequencePrepError):
    """Raised when the window length is not a positive integer."""


class InsufficientDataError(SequencePrepError):
    """Raised when a series is too short to yield a single window."""


class InvalidFractionError(SequencePrepError):
    """Raised for split fractions outside [0, 1) or splits without training data."""


class InvalidSeriesError(SequencePrepError):
    """Raised when input data breaks the raw series invariants."""


class ConfigurationError(SequencePrepError):
    """Raised when a configuration file is missing keys or fails its schema."""


@dataclass
class RecoveryContext:
    """Captures context of a failed pipeline run for debugging."""
    run_id: str
    timestamp: float = field(default_factory=time.time)
    exception_type: str = ""
    exception_message: str = ""
    stack_trace: str = ""
    local_variables: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, run_id: str, exc: BaseException) -> "RecoveryContext":
        """
        Create context from an exception.

        Locals are taken from the innermost frame of the traceback, which is
        where the precondition check fired.
        """
        stack_trace = "".join(traceback.format_tb(exc.__traceback__))

        locals_repr: Dict[str, str] = {}
        tb = exc.__traceback__
        if tb is not None:
            while tb.tb_next:
                tb = tb.tb_next
            for name, value in tb.tb_frame.f_locals.items():
                try:
                    text = repr(value)
                except Exception:
                    text = "<unprintable>"
                if len(text) > 200:
                    text = text[:200] + "..."
                locals_repr[name] = text

        return cls(
            run_id=run_id,
            exception_type=type(exc).__name__,
            exception_message=str(exc),
            stack_trace=stack_trace,
            local_variables=locals_repr,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "exception_type": self.exception_type,
            "exception_message": self.exception_message,
            "stack_trace": self.stack_trace,
            "local_variables": self.local_variables,
        }

"""Tests for the error taxonomy and recovery context capture."""

import pytest
from hypothesis import given, settings, strategies as st

from seqprep.data.normalizers import Normalizer
from seqprep.data.splitters import split
from seqprep.data.windowing import make_windows
from seqprep.utils.error_handling import (
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


@pytest.mark.parametrize("error_cls", [
    EmptyInputError,
    InvalidRangeError,
    NotFittedError,
    InvalidSeqLengthError,
    InsufficientDataError,
    InvalidFractionError,
    InvalidSeriesError,
    ConfigurationError,
])
def test_taxonomy_shares_a_base(error_cls):
    assert issubclass(error_cls, SequencePrepError)
    assert issubclass(error_cls, ValueError)


def test_errors_propagate_unchanged():
    """Each component raises its own error type to the caller."""
    with pytest.raises(NotFittedError):
        Normalizer().transform([1.0])
    with pytest.raises(InvalidSeqLengthError):
        make_windows([1.0, 2.0], 0)
    with pytest.raises(InvalidFractionError):
        split(list(range(10)), 1.0, 0.0)


def test_recovery_context_capture():
    """Verify context capture from exception."""
    try:
        seq_length = 12
        label = "daily_close"
        raise InsufficientDataError("Too short")
    except InsufficientDataError as e:
        ctx = RecoveryContext.from_exception(run_id="test_run", exc=e)

    assert ctx.run_id == "test_run"
    assert ctx.exception_type == "InsufficientDataError"
    assert ctx.exception_message == "Too short"
    assert ctx.local_variables["seq_length"] == "12"
    assert ctx.local_variables["label"] == "'daily_close'"


def test_recovery_context_uses_innermost_frame():
    try:
        make_windows([1.0, 2.0, 3.0], seq_length=5)
    except InsufficientDataError as e:
        ctx = RecoveryContext.from_exception(run_id="r1", exc=e)

    assert ctx.local_variables["n_observations"] == "3"
    assert "count_windows" in ctx.stack_trace


def test_recovery_context_truncates_long_values():
    try:
        payload = list(range(1000))
        raise EmptyInputError(f"{len(payload)}")
    except EmptyInputError as e:
        ctx = RecoveryContext.from_exception(run_id="r2", exc=e)

    assert len(ctx.local_variables["payload"]) == 203
    assert ctx.local_variables["payload"].endswith("...")


@given(st.text(min_size=1), st.text())
@settings(max_examples=30, deadline=None)
def test_recovery_context_to_dict(run_id, message):
    """Property: to_dict carries the run id and message verbatim."""
    try:
        raise InvalidSeriesError(message)
    except InvalidSeriesError as e:
        ctx = RecoveryContext.from_exception(run_id=run_id, exc=e)

    data = ctx.to_dict()
    assert data["run_id"] == run_id
    assert data["exception_message"] == message
    assert data["exception_type"] == "InvalidSeriesError"
    assert set(data) == {
        "run_id", "timestamp", "exception_type", "exception_message",
        "stack_trace", "local_variables",
    }

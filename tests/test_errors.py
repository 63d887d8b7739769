"""Tests for the exception taxonomy."""
import pickle
from pathlib import Path

import pytest

from terrainsweep.errors import (
    EncodingError,
    InvalidParameterError,
    JobFailure,
    OutputIOError,
    RenderingError,
    TerrainSweepError,
)


class _Unpicklable(Exception):
    def __init__(self, handle):
        super().__init__("needs a handle")
        self.handle = handle

    def __reduce__(self):
        raise TypeError("cannot pickle handle")


class TestErrorHierarchy:
    """Each error is also the builtin callers already catch."""

    @pytest.mark.parametrize(
        "cls, builtin",
        [
            (InvalidParameterError, ValueError),
            (RenderingError, RuntimeError),
            (EncodingError, RuntimeError),
            (OutputIOError, OSError),
            (JobFailure, TerrainSweepError),
        ],
    )
    def test_builtin_bases(self, cls, builtin):
        assert issubclass(cls, TerrainSweepError)
        assert issubclass(cls, builtin)


class TestJobFailure:
    """Tests for JobFailure."""

    def test_message_and_fields(self):
        failure = JobFailure("flat", "out/flat.gif", "RenderingError: boom")
        assert failure.job_name == "flat"
        assert failure.output_path == Path("out/flat.gif")
        assert str(failure) == "job 'flat' did not produce out/flat.gif: RenderingError: boom"

    def test_cause_chained(self):
        cause = RenderingError("failed to render frame at pitch 0.5000: boom")
        failure = JobFailure("flat", "out/flat.gif", "boom", cause=cause)
        assert failure.__cause__ is cause

    def test_cause_survives_pickling(self):
        cause = RenderingError("failed to render frame at pitch 0.5000: boom")
        clone = pickle.loads(pickle.dumps(JobFailure("flat", "out/flat.gif", "boom", cause=cause)))
        assert clone.job_name == "flat"
        assert clone.output_path == Path("out/flat.gif")
        assert isinstance(clone.__cause__, RenderingError)
        assert str(clone.__cause__) == str(cause)

    def test_unpicklable_cause_dropped(self):
        """The failure itself still pickles when its cause cannot."""
        failure = JobFailure("flat", "out/flat.gif", "boom", cause=_Unpicklable(object()))
        clone = pickle.loads(pickle.dumps(failure))
        assert clone.__cause__ is None
        assert clone.reason == "boom"

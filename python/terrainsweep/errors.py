# python/terrainsweep/errors.py
# Exception taxonomy for terrain sweep rendering
# Exists so each failure kind can be caught by the builtin callers already expect
# RELEVANT FILES: python/terrainsweep/jobs.py, python/terrainsweep/gif.py, tests/test_jobs.py
from __future__ import annotations

import pickle
from pathlib import Path
from typing import Optional


class TerrainSweepError(Exception):
    """Base class for every error raised by terrainsweep."""


class InvalidParameterError(TerrainSweepError, ValueError):
    """A divisor, range, size or count was rejected before rendering started."""


class RenderingError(TerrainSweepError, RuntimeError):
    """Projection or rasterization of a frame failed."""


class EncodingError(TerrainSweepError, RuntimeError):
    """A frame could not be appended, or the animation could not be finalized."""


class OutputIOError(TerrainSweepError, OSError):
    """The output path could not be opened, written or replaced."""


def _portable(exc: Optional[BaseException]) -> Optional[BaseException]:
    # A cause that cannot survive a round trip would break the whole result
    if exc is None:
        return None
    try:
        pickle.loads(pickle.dumps(exc))
    except Exception:
        return None
    return exc


class JobFailure(TerrainSweepError):
    """An animation job failed; the underlying error is chained as ``__cause__``.

    The cause travels with the failure when it is sent back from a worker
    process, as long as the cause itself can be pickled.
    """

    def __init__(
        self,
        job_name: str,
        output_path: Path | str,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.job_name = job_name
        self.output_path = Path(output_path)
        self.reason = reason or "unknown error"
        super().__init__(f"job {job_name!r} did not produce {self.output_path}: {self.reason}")
        if cause is not None:
            self.__cause__ = cause

    def __reduce__(self):
        return (type(self), (self.job_name, str(self.output_path), self.reason, _portable(self.__cause__)))


__all__ = [
    "TerrainSweepError",
    "InvalidParameterError",
    "RenderingError",
    "EncodingError",
    "OutputIOError",
    "JobFailure",
]

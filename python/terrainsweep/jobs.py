# python/terrainsweep/jobs.py
# Runs animation jobs end to end and in parallel, one worker per job
# Exists so each job's failure is reported on its own instead of taking siblings down
# RELEVANT FILES: python/terrainsweep/render.py, python/terrainsweep/gif.py, tests/test_jobs.py
"""
Animation jobs and the parallel job runner.

Provides:
    AnimationJob      - (height field, config, output path) unit of work
    JobResult         - Per-job outcome (path, frame count, timing or error)
    render_animation  - Run one job in the calling thread
    run_jobs          - Run many jobs concurrently and collect every result
    summarize         - Split results into succeeded / failed job names

Example:
    >>> from terrainsweep import AnimationConfig, AnimationJob, FlatField, run_jobs
    >>> results = run_jobs([AnimationJob(FlatField(2.0), AnimationConfig(), "out/flat.gif")])
    >>> all(r.ok for r in results)
    True
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import AnimationConfig
from .errors import InvalidParameterError, JobFailure
from .gif import AnimationAssembler
from .heightfield import HeightField, as_height_field
from .render import FrameRenderer, SurfaceStyle
from .schedule import PitchSchedule

logger = logging.getLogger(__name__)

_EXECUTORS = ("process", "thread")


@dataclass(frozen=True)
class AnimationJob:
    """One height field rendered with one config into one output file."""

    height_field: HeightField
    config: AnimationConfig
    output_path: Path
    name: Optional[str] = None
    style: Optional[SurfaceStyle] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "height_field", as_height_field(self.height_field))
        if not isinstance(self.config, AnimationConfig):
            raise InvalidParameterError(f"config must be an AnimationConfig, got {type(self.config).__name__}")
        object.__setattr__(self, "output_path", Path(self.output_path))
        if not self.name:
            object.__setattr__(self, "name", self.output_path.stem)


@dataclass
class JobResult:
    """Outcome of one job; ``error`` is None on success."""

    name: str
    output_path: Path
    frame_count: int = 0
    elapsed_s: float = 0.0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        status = "ok" if self.ok else f"failed: {self.error}"
        return f"JobResult({self.name!r}, {str(self.output_path)!r}, frames={self.frame_count}, {status})"


def render_animation(job: AnimationJob) -> Path:
    """Render every frame of ``job`` in pitch order and publish the GIF.

    Raises the underlying TerrainSweepError on failure; the output path is
    only written when all frames were encoded.
    """
    config = job.config
    schedule = PitchSchedule.from_config(config)
    renderer = FrameRenderer(job.height_field, config, style=job.style)
    logger.info(f"Rendering {job.name}: {len(schedule)} frames at {config.width}x{config.height} -> {job.output_path}")

    with AnimationAssembler(job.output_path, config.width, config.height, config.frame_delay_ms) as gif:
        for index, pitch in enumerate(schedule):
            gif.append(renderer.render_frame(pitch))
            logger.debug(f"{job.name}: frame {index + 1}/{len(schedule)} pitch={pitch:.4f}")
        path = gif.finalize()

    logger.info(f"Result has been saved to {path}")
    return path


def _execute(job: AnimationJob) -> JobResult:
    # Runs inside the worker; every outcome comes back as a JobResult
    start = time.perf_counter()
    try:
        render_animation(job)
    except Exception as exc:
        failure = JobFailure(job.name, job.output_path, f"{type(exc).__name__}: {exc}", cause=exc)
        return JobResult(job.name, job.output_path, elapsed_s=time.perf_counter() - start, error=failure)
    return JobResult(
        job.name,
        job.output_path,
        frame_count=job.config.frame_count,
        elapsed_s=time.perf_counter() - start,
    )


def _check_unique_outputs(jobs: Sequence[AnimationJob]) -> None:
    seen = {}
    for job in jobs:
        key = job.output_path.resolve()
        if key in seen:
            raise InvalidParameterError(
                f"jobs {seen[key]!r} and {job.name!r} both write {job.output_path}"
            )
        seen[key] = job.name


def _collect(job: AnimationJob, future: "Future[JobResult]") -> JobResult:
    try:
        return future.result()
    except Exception as exc:
        # The worker itself died (e.g. unpicklable job or broken process pool)
        failure = JobFailure(job.name, job.output_path, f"{type(exc).__name__}: {exc}", cause=exc)
        return JobResult(job.name, job.output_path, error=failure)


def run_jobs(
    jobs: Sequence[AnimationJob],
    executor: str = "process",
    max_workers: Optional[int] = None,
) -> List[JobResult]:
    """Run ``jobs`` concurrently and wait for all of them.

    Args:
        jobs: Independent jobs; their output paths must be distinct.
        executor: ``"process"`` (CPU-bound default) or ``"thread"``.
        max_workers: Worker count; defaults to one per job.

    Returns:
        One JobResult per job, in the order the jobs were given. A failed
        job never prevents its siblings from finishing.
    """
    jobs = list(jobs)
    if executor not in _EXECUTORS:
        raise InvalidParameterError(f"executor must be one of {_EXECUTORS}, got {executor!r}")
    for job in jobs:
        if not isinstance(job, AnimationJob):
            raise InvalidParameterError(f"expected AnimationJob, got {type(job).__name__}")
    if not jobs:
        return []
    _check_unique_outputs(jobs)

    workers = max_workers or len(jobs)
    pool_cls = ProcessPoolExecutor if executor == "process" else ThreadPoolExecutor
    logger.info(f"Running {len(jobs)} animation jobs on {workers} {executor} workers")

    with pool_cls(max_workers=workers) as pool:
        futures = [pool.submit(_execute, job) for job in jobs]
        results = [_collect(job, future) for job, future in zip(jobs, futures)]

    for result in results:
        if not result.ok:
            logger.warning(f"Job {result.name} failed: {result.error}")
    return results


def summarize(results: Sequence[JobResult]) -> Tuple[List[str], List[str]]:
    """Return ``(succeeded, failed)`` job names."""
    succeeded = [r.name for r in results if r.ok]
    failed = [r.name for r in results if not r.ok]
    return succeeded, failed


__all__ = [
    "AnimationJob",
    "JobResult",
    "render_animation",
    "run_jobs",
    "summarize",
]

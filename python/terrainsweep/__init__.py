# python/terrainsweep/__init__.py
# Public API for rendering height fields as pitch-sweep GIF animations
# Exists to give drivers one import for fields, config, jobs and results
# RELEVANT FILES: python/terrainsweep/jobs.py, examples/terrain_sweeps.py, tests/test_jobs.py
import logging

from .config import (
    AnimationConfig,
    AxisRange,
    load_animation_config,
    DEFAULT_SURFACE_LEVEL,
    DEFAULT_PERLIN_SEED,
    DEFAULT_AMPLITUDE_DIVISOR,
)
from .errors import (
    TerrainSweepError,
    InvalidParameterError,
    RenderingError,
    EncodingError,
    OutputIOError,
    JobFailure,
)
from .heightfield import (
    HeightField,
    FlatField,
    StochasticFlatField,
    SineField,
    PerlinField,
    FunctionField,
    as_height_field,
)
from .noise import perlin2d, fbm2d
from .sampling import SamplingGrid, axis_samples
from .schedule import PitchSchedule
from .projection import SurfaceProjector
from .render import FrameRenderer, SurfaceStyle
from .gif import AnimationAssembler, AnimationInfo, read_animation
from .jobs import AnimationJob, JobResult, render_animation, run_jobs, summarize

__version__ = "0.1.0"

# Library code never configures handlers; drivers call logging.basicConfig
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AnimationConfig",
    "AxisRange",
    "load_animation_config",
    "DEFAULT_SURFACE_LEVEL",
    "DEFAULT_PERLIN_SEED",
    "DEFAULT_AMPLITUDE_DIVISOR",
    "TerrainSweepError",
    "InvalidParameterError",
    "RenderingError",
    "EncodingError",
    "OutputIOError",
    "JobFailure",
    "HeightField",
    "FlatField",
    "StochasticFlatField",
    "SineField",
    "PerlinField",
    "FunctionField",
    "as_height_field",
    "perlin2d",
    "fbm2d",
    "SamplingGrid",
    "axis_samples",
    "PitchSchedule",
    "SurfaceProjector",
    "FrameRenderer",
    "SurfaceStyle",
    "AnimationAssembler",
    "AnimationInfo",
    "read_animation",
    "AnimationJob",
    "JobResult",
    "render_animation",
    "run_jobs",
    "summarize",
    "__version__",
]

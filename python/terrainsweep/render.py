# python/terrainsweep/render.py
# Composes one animation frame: background, axes, then the height-field mesh
# Exists to keep sampling, projection and rasterization in one ordered pass
# RELEVANT FILES: python/terrainsweep/projection.py, python/terrainsweep/sampling.py, tests/test_render.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from .config import AnimationConfig
from .errors import InvalidParameterError, RenderingError, TerrainSweepError
from .heightfield import HeightField, as_height_field
from .projection import SurfaceProjector
from .sampling import SamplingGrid

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


def _check_channels(value, count: int, label: str) -> None:
    if len(value) != count or any(not 0 <= int(c) <= 255 for c in value):
        raise InvalidParameterError(f"{label} must be {count} channels in 0..255, got {value!r}")


@dataclass(frozen=True)
class SurfaceStyle:
    """Colours for one frame; mesh colours are RGBA and blend over the axes."""

    background: RGB = (255, 255, 255)
    fill: RGBA = (0, 0, 255, 51)      # BLUE mixed at 0.2
    edge: RGBA = (0, 0, 160, 140)

    def __post_init__(self) -> None:
        _check_channels(self.background, 3, "background")
        _check_channels(self.fill, 4, "fill")
        _check_channels(self.edge, 4, "edge")


class FrameRenderer:
    """Rasterizes a height field under a given camera pitch.

    The sampling grid is built once per job. Deterministic fields are
    sampled once as well; stochastic fields are resampled for every frame.
    """

    def __init__(self, height_field: HeightField, config: AnimationConfig, style: Optional[SurfaceStyle] = None):
        self.height_field = as_height_field(height_field)
        self.config = config
        self.style = style or SurfaceStyle()
        self.grid = SamplingGrid(config.x_range, config.z_range, config.step_density)
        self._xs, self._zs = self.grid.mesh()
        self._heights = self.sample_heights() if self.height_field.deterministic else None
        logger.debug(f"Frame renderer ready: {self.grid!r}, {self.grid.quad_count} quads, field={self.height_field!r}")

    def sample_heights(self) -> np.ndarray:
        """Evaluate the height field on the grid; one elevation per sample."""
        heights = np.asarray(self.height_field.sample(self._xs, self._zs), dtype=np.float64)
        if heights.shape != self.grid.shape:
            raise RenderingError(
                f"height field returned shape {heights.shape}, expected {self.grid.shape}"
            )
        if not np.all(np.isfinite(heights)):
            raise RenderingError("height field returned non-finite elevations")
        return heights

    def projector(self, pitch: float) -> SurfaceProjector:
        return SurfaceProjector.from_config(self.config, pitch)

    def render_frame(self, pitch: float) -> Image.Image:
        """Return the fully composed RGB frame for ``pitch``."""
        try:
            image = Image.new("RGB", self.config.size, self.style.background)
            draw = ImageDraw.Draw(image, "RGBA")
            projector = self.projector(pitch)
            projector.draw_axes(draw)
            heights = self._heights if self._heights is not None else self.sample_heights()
            self._draw_mesh(draw, projector, heights)
        except TerrainSweepError:
            raise
        except Exception as exc:
            raise RenderingError(f"failed to render frame at pitch {pitch:.4f}: {exc}") from exc
        return image

    def _draw_mesh(self, draw: ImageDraw.ImageDraw, projector: SurfaceProjector, heights: np.ndarray) -> None:
        rows, cols = self.grid.shape
        points = np.stack([self._xs.ravel(), heights.ravel(), self._zs.ravel()], axis=1)
        screen, depth = projector.project(points)
        screen = screen.reshape(rows, cols, 2)
        depth = depth.reshape(rows, cols)

        # Corners in winding order; neighbouring quads reuse the same projected vertices
        quads = np.stack([screen[:-1, :-1], screen[:-1, 1:], screen[1:, 1:], screen[1:, :-1]], axis=2)
        quad_depth = (depth[:-1, :-1] + depth[:-1, 1:] + depth[1:, 1:] + depth[1:, :-1]) / 4.0

        # Painter's order: farthest first
        order = np.argsort(quad_depth.ravel(), kind="stable")
        flat = quads.reshape(-1, 8)[order]
        fill, edge = self.style.fill, self.style.edge
        for quad in flat.tolist():
            draw.polygon(quad, fill=fill, outline=edge)


__all__ = ["FrameRenderer", "SurfaceStyle"]

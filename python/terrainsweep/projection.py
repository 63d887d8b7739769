# python/terrainsweep/projection.py
# Pitch/yaw projection of the plotted volume onto the canvas, plus axis decoration
# Exists so mesh vertices and grid lines share one matrix per frame
# RELEVANT FILES: python/terrainsweep/render.py, python/terrainsweep/config.py, tests/test_projection.py
"""
3-D to 2-D projection for terrain sweep frames.

The plotted volume (x, y = elevation, z) is normalised onto a cube of side
``0.8 * min(width, height)`` centred at the origin, rotated by ``yaw`` about
the vertical axis, tilted by ``pitch`` towards the viewer, damped by a
constant ``scale`` and moved to the canvas centre. Pitch 0 looks at the
volume edge-on; pitch pi/2 looks straight down.
"""

from __future__ import annotations

import math
from typing import Dict, Sequence, Tuple

import numpy as np
from PIL import ImageDraw, ImageFont

from .config import DEFAULT_MAX_LIGHT_LINES, DEFAULT_SCALE, DEFAULT_YAW, AxisRange, RangeLike
from .errors import InvalidParameterError

CUBE_FRACTION = 0.8

# RGBA colours drawn through an "RGBA" ImageDraw so alpha blends with the canvas
AXIS_STYLE: Dict[str, Tuple[int, int, int, int]] = {
    "light_grid": (0, 0, 0, round(0.15 * 255)),  # BLACK mixed at 0.15
    "bold_grid": (0, 0, 0, round(0.35 * 255)),
    "panel_edge": (0, 0, 0, round(0.6 * 255)),
    "label": (0, 0, 0, 255),
}

_AXES = ("x", "y", "z")


def _translate(tx: float, ty: float, tz: float) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = (tx, ty, tz)
    return m


def _scale(sx: float, sy: float, sz: float) -> np.ndarray:
    return np.diag([sx, sy, sz, 1.0])


def _yaw(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, 0.0, -s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def _pitch(angle: float) -> np.ndarray:
    # Row 1 is screen-up, row 2 is depth towards the viewer
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, c, -s, 0.0],
        [0.0, s, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def nice_ticks(axis: AxisRange, target: int = 5) -> np.ndarray:
    """Round-numbered tick values (steps of 1, 2 or 5 x 10^k) inside ``axis``."""
    raw = axis.span / max(1, target)
    magnitude = 10.0 ** math.floor(math.log10(raw))
    step = magnitude
    for multiple in (1.0, 2.0, 5.0, 10.0):
        step = multiple * magnitude
        if axis.span / step <= target:
            break
    first = math.ceil(axis.start / step - 1e-9) * step
    count = int(math.floor((axis.end - first) / step + 1e-9)) + 1
    return first + step * np.arange(max(count, 0))


def light_ticks(axis: AxisRange, bold: np.ndarray, max_lines: int) -> np.ndarray:
    """Up to ``max_lines`` evenly spaced minor values between consecutive bold ticks."""
    if max_lines <= 0 or bold.size < 2:
        return np.empty(0)
    step = (bold[1] - bold[0]) / (max_lines + 1)
    offsets = step * np.arange(1, max_lines + 1)
    candidates = np.concatenate([bold[0] - step * np.arange(max_lines, 0, -1), (bold[:, None] + offsets).ravel()])
    inside = (candidates > axis.start) & (candidates < axis.end)
    return candidates[inside & ~np.isclose(candidates[:, None], bold[None, :]).any(axis=1)]


class SurfaceProjector:
    """Projection for one frame's pitch over fixed axis ranges."""

    def __init__(
        self,
        x_range: RangeLike,
        y_range: RangeLike,
        z_range: RangeLike,
        width: int,
        height: int,
        pitch: float,
        yaw: float = DEFAULT_YAW,
        scale: float = DEFAULT_SCALE,
        max_light_lines: int = DEFAULT_MAX_LIGHT_LINES,
    ):
        if width <= 0 or height <= 0:
            raise InvalidParameterError(f"Invalid canvas size: {width}x{height}")
        if not math.isfinite(pitch) or not math.isfinite(yaw):
            raise InvalidParameterError(f"pitch and yaw must be finite, got {pitch}, {yaw}")
        if scale <= 0:
            raise InvalidParameterError(f"scale must be > 0, got {scale}")
        self.ranges = {
            "x": AxisRange.coerce(x_range, "x_range"),
            "y": AxisRange.coerce(y_range, "y_range"),
            "z": AxisRange.coerce(z_range, "z_range"),
        }
        self.width = int(width)
        self.height = int(height)
        self.pitch = float(pitch)
        self.yaw = float(yaw)
        self.scale = float(scale)
        self.max_light_lines = int(max_light_lines)
        self.matrix = self._build_matrix()

    @classmethod
    def from_config(cls, config, pitch: float) -> "SurfaceProjector":
        return cls(
            config.x_range, config.y_range, config.z_range,
            config.width, config.height, pitch,
            yaw=config.yaw, scale=config.scale, max_light_lines=config.max_light_lines,
        )

    def _build_matrix(self) -> np.ndarray:
        side = CUBE_FRACTION * min(self.width, self.height)
        x, y, z = (self.ranges[a] for a in _AXES)
        normalize = _scale(side / x.span, side / y.span, side / z.span) @ _translate(-x.mid, -y.mid, -z.mid)
        screen = np.array([
            [1.0, 0.0, 0.0, self.width / 2.0],
            [0.0, -1.0, 0.0, self.height / 2.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ])
        s = self.scale
        return screen @ _scale(s, s, s) @ _pitch(self.pitch) @ _yaw(self.yaw) @ normalize

    def project(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Map ``(N, 3)`` data-space points to ``(N, 2)`` canvas coords and ``(N,)`` depth.

        Larger depth is nearer the viewer.
        """
        pts = np.asarray(points, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError(f"points must have shape (N, 3), got {pts.shape}")
        homo = np.concatenate([pts, np.ones((pts.shape[0], 1))], axis=1)
        out = homo @ self.matrix.T
        return out[:, :2], out[:, 2]

    def project_point(self, x: float, y: float, z: float) -> Tuple[float, float]:
        screen, _ = self.project(np.array([[x, y, z]]))
        return (float(screen[0, 0]), float(screen[0, 1]))

    def back_faces(self) -> Dict[str, float]:
        """For each axis, the bounding-box face (its coordinate) farthest from the viewer."""
        mids = {a: self.ranges[a].mid for a in _AXES}
        faces = {}
        for axis in _AXES:
            candidates = []
            for value in self.ranges[axis].as_tuple():
                centre = dict(mids)
                centre[axis] = value
                _, depth = self.project(np.array([[centre["x"], centre["y"], centre["z"]]]))
                candidates.append((float(depth[0]), value))
            # Farthest is smallest depth; ties keep the lower bound
            faces[axis] = min(candidates, key=lambda c: c[0])[1]
        return faces

    def _segment(self, draw: ImageDraw.ImageDraw, a: Sequence[float], b: Sequence[float], fill) -> None:
        (x0, y0), (x1, y1) = self.project(np.array([a, b]))[0].tolist()
        draw.line([(x0, y0), (x1, y1)], fill=fill, width=1)

    def _panel_lines(self, draw: ImageDraw.ImageDraw, faces: Dict[str, float]) -> None:
        for normal in _AXES:
            others = [a for a in _AXES if a != normal]
            for along, across in (others, others[::-1]):
                rng = self.ranges[along]
                bold = nice_ticks(rng)
                light = light_ticks(rng, bold, self.max_light_lines)
                span = self.ranges[across].as_tuple()
                for values, colour in ((light, AXIS_STYLE["light_grid"]), (bold, AXIS_STYLE["bold_grid"])):
                    for v in values:
                        ends = []
                        for c in span:
                            p = {normal: faces[normal], along: float(v), across: c}
                            ends.append((p["x"], p["y"], p["z"]))
                        self._segment(draw, ends[0], ends[1], colour)

    def _panel_edges(self, draw: ImageDraw.ImageDraw, faces: Dict[str, float]) -> None:
        # The three edges meeting at the far corner, plus the outlines of each back panel
        for normal in _AXES:
            others = [a for a in _AXES if a != normal]
            corners = []
            for u, w in ((0, 0), (1, 0), (1, 1), (0, 1)):
                p = {normal: faces[normal]}
                p[others[0]] = self.ranges[others[0]].as_tuple()[u]
                p[others[1]] = self.ranges[others[1]].as_tuple()[w]
                corners.append((p["x"], p["y"], p["z"]))
            for i in range(4):
                self._segment(draw, corners[i], corners[(i + 1) % 4], AXIS_STYLE["panel_edge"])

    def _labels(self, draw: ImageDraw.ImageDraw, faces: Dict[str, float]) -> None:
        font = ImageFont.load_default()
        near = {a: (self.ranges[a].start if faces[a] == self.ranges[a].end else self.ranges[a].end) for a in _AXES}
        for axis in _AXES:
            # Labels run along the front edge of the floor for x/z, and the back corner for y
            for v in nice_ticks(self.ranges[axis]):
                p = {"x": near["x"], "y": faces["y"], "z": near["z"]}
                if axis == "y":
                    p = {"x": faces["x"], "y": faces["y"], "z": near["z"]}
                p[axis] = float(v)
                sx, sy = self.project_point(p["x"], p["y"], p["z"])
                text = f"{v:g}"
                left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
                draw.text(
                    (sx - (right - left) / 2.0, sy - (bottom - top) / 2.0),
                    text,
                    fill=AXIS_STYLE["label"],
                    font=font,
                )

    def draw_axes(self, draw: ImageDraw.ImageDraw) -> None:
        """Draw back panels, grid lines and tick labels; call once, before the mesh."""
        faces = self.back_faces()
        self._panel_lines(draw, faces)
        self._panel_edges(draw, faces)
        self._labels(draw, faces)

    def __repr__(self) -> str:
        return (f"SurfaceProjector({self.width}x{self.height}, pitch={self.pitch:.4f}, "
                f"yaw={self.yaw:.4f}, scale={self.scale:g})")


__all__ = ["SurfaceProjector", "AXIS_STYLE", "CUBE_FRACTION", "nice_ticks", "light_ticks"]

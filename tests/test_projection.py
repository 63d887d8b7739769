"""Tests for SurfaceProjector and axis tick placement."""
import math

import numpy as np
import pytest
from PIL import Image, ImageDraw

from terrainsweep.config import AnimationConfig, AxisRange
from terrainsweep.errors import InvalidParameterError
from terrainsweep.projection import SurfaceProjector, light_ticks, nice_ticks

RANGES = ((-10.0, 10.0), (0.0, 6.0), (-10.0, 10.0))


def _projector(pitch, width=500, height=500, **kwargs):
    return SurfaceProjector(*RANGES, width, height, pitch, **kwargs)


class TestProjection:
    """Tests for the 3-D to canvas mapping."""

    @pytest.mark.parametrize("pitch", [0.0, 0.5, math.pi / 2])
    def test_volume_centre_maps_to_canvas_centre(self, pitch):
        sx, sy = _projector(pitch, 400, 300).project_point(0.0, 3.0, 0.0)
        assert sx == pytest.approx(200.0)
        assert sy == pytest.approx(150.0)

    def test_level_camera_sees_flat_plane_edge_on(self):
        """At pitch 0 a horizontal plane collapses onto one screen row."""
        xs, zs = np.meshgrid(np.linspace(-10, 10, 7), np.linspace(-10, 10, 7))
        pts = np.stack([xs.ravel(), np.full(xs.size, 2.0), zs.ravel()], axis=1)
        screen, _ = _projector(0.0).project(pts)
        np.testing.assert_allclose(screen[:, 1], screen[0, 1], atol=1e-9)
        assert screen[:, 0].max() - screen[:, 0].min() > 50

    def test_higher_points_drawn_higher_when_level(self):
        proj = _projector(0.0)
        _, low = proj.project_point(0.0, 0.0, 0.0)
        _, high = proj.project_point(0.0, 6.0, 0.0)
        assert high < low  # canvas y grows downwards

    def test_top_down_depth_follows_elevation(self):
        """Looking straight down, higher points are nearer the viewer."""
        proj = _projector(math.pi / 2)
        _, depth = proj.project(np.array([[1.0, 0.0, -4.0], [1.0, 6.0, -4.0]]))
        assert depth[1] > depth[0]
        # Elevation no longer moves a point on screen
        a = proj.project_point(3.0, 0.0, 2.0)
        b = proj.project_point(3.0, 6.0, 2.0)
        assert a == pytest.approx(b, abs=1e-9)

    def test_volume_fits_inside_canvas(self):
        proj = _projector(0.5)
        corners = np.array([[x, y, z] for x in (-10, 10) for y in (0, 6) for z in (-10, 10)], dtype=float)
        screen, _ = proj.project(corners)
        assert np.all(screen >= 0) and np.all(screen[:, 0] <= 500) and np.all(screen[:, 1] <= 500)

    def test_scale_shrinks_towards_centre(self):
        big = _projector(0.5, scale=1.0).project_point(10.0, 6.0, 10.0)
        small = _projector(0.5, scale=0.5).project_point(10.0, 6.0, 10.0)
        assert abs(small[0] - 250.0) == pytest.approx(abs(big[0] - 250.0) / 2)

    def test_bad_points_shape(self):
        with pytest.raises(ValueError, match=r"\(N, 3\)"):
            _projector(0.5).project(np.zeros((4, 2)))

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"width": 0}, "Invalid canvas size"),
            ({"pitch": float("nan")}, "finite"),
            ({"scale": 0.0}, "scale must be > 0"),
        ],
    )
    def test_invalid_arguments(self, kwargs, message):
        args = {"width": 500, "height": 500, "pitch": 0.5}
        args.update(kwargs)
        with pytest.raises(InvalidParameterError, match=message):
            SurfaceProjector(*RANGES, args.pop("width"), args.pop("height"), args.pop("pitch"), **args)

    def test_from_config(self):
        config = AnimationConfig(width=320, height=240, scale=0.5, yaw=0.25)
        proj = SurfaceProjector.from_config(config, 0.3)
        assert (proj.width, proj.height, proj.pitch, proj.yaw, proj.scale) == (320, 240, 0.3, 0.25, 0.5)


class TestAxes:
    """Tests for back-face selection, tick placement and axis drawing."""

    @pytest.mark.parametrize("pitch", [0.0, 0.4, 1.2, math.pi / 2])
    def test_floor_is_lower_elevation_bound(self, pitch):
        assert _projector(pitch).back_faces()["y"] == 0.0

    def test_back_faces_are_range_bounds(self):
        faces = _projector(0.5).back_faces()
        assert faces["x"] in (-10.0, 10.0)
        assert faces["z"] in (-10.0, 10.0)

    def test_nice_ticks(self):
        np.testing.assert_allclose(nice_ticks(AxisRange(-10.0, 10.0)), [-10, -5, 0, 5, 10])
        np.testing.assert_allclose(nice_ticks(AxisRange(0.0, 6.0)), [0, 2, 4, 6])

    def test_light_ticks_between_bold(self):
        axis = AxisRange(-10.0, 10.0)
        bold = nice_ticks(axis)
        light = light_ticks(axis, bold, 3)
        assert light.size == 12
        assert np.all((light > -10.0) & (light < 10.0))
        assert not np.any(np.isclose(light[:, None], bold[None, :]))
        assert light_ticks(axis, bold, 0).size == 0

    def test_draw_axes_marks_canvas(self):
        image = Image.new("RGB", (200, 200), (255, 255, 255))
        _projector(0.5, 200, 200).draw_axes(ImageDraw.Draw(image, "RGBA"))
        pixels = np.asarray(image)
        assert (pixels < 255).any()
        # Grid lines are neutral grey, never coloured
        marked = pixels[(pixels < 255).any(axis=2)]
        assert np.all(marked[:, 0] == marked[:, 2])
        # Corners stay blank
        assert pixels[0, 0].tolist() == [255, 255, 255]

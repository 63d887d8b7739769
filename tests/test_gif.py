"""Tests for streaming GIF assembly and atomic publication."""
import pytest
from PIL import Image

from terrainsweep.errors import EncodingError, InvalidParameterError, OutputIOError
from terrainsweep.gif import AnimationAssembler, read_animation


def _frame(colour, size=(32, 24)):
    return Image.new("RGB", size, colour)


def _leftovers(directory):
    return sorted(p.name for p in directory.glob(".*.tmp"))


class TestAnimationAssembler:
    """Tests for AnimationAssembler."""

    def test_roundtrip_frame_count_delay_and_loop(self, tmp_path):
        out = tmp_path / "sweep.gif"
        colours = [(255, 255, 255), (0, 0, 255), (255, 0, 0), (0, 0, 0), (0, 255, 0)]
        with AnimationAssembler(out, 32, 24, frame_delay_ms=50) as gif:
            for colour in colours:
                gif.append(_frame(colour))
        info = read_animation(out)
        assert info.frame_count == len(colours)
        assert info.durations_ms == (50,) * len(colours)
        assert info.size == (32, 24)
        assert info.loop == 0

    def test_identical_frames_kept(self, tmp_path):
        """Repeated frames are not merged into one."""
        out = tmp_path / "still.gif"
        with AnimationAssembler(out, 32, 24, frame_delay_ms=70) as gif:
            for _ in range(4):
                gif.append(_frame((0, 0, 255)))
        info = read_animation(out)
        assert info.frame_count == 4
        assert info.durations_ms == (70, 70, 70, 70)

    def test_single_frame(self, tmp_path):
        out = tmp_path / "one.gif"
        with AnimationAssembler(out, 32, 24, frame_delay_ms=50) as gif:
            gif.append(_frame((255, 255, 255)))
        assert read_animation(out).frame_count == 1

    def test_colours_survive_quantisation(self, tmp_path):
        out = tmp_path / "colours.gif"
        with AnimationAssembler(out, 32, 24, frame_delay_ms=50) as gif:
            gif.append(_frame((0, 0, 255)))
            gif.append(_frame((255, 255, 255)))
        with Image.open(out) as im:
            assert im.convert("RGB").getpixel((5, 5)) == (0, 0, 255)
            im.seek(1)
            assert im.convert("RGB").getpixel((5, 5)) == (255, 255, 255)

    def test_rgba_frames_accepted(self, tmp_path):
        out = tmp_path / "rgba.gif"
        with AnimationAssembler(out, 32, 24, frame_delay_ms=50) as gif:
            gif.append(Image.new("RGBA", (32, 24), (0, 0, 255, 255)))
        assert read_animation(out).frame_count == 1

    def test_overwrites_existing_file(self, tmp_path):
        out = tmp_path / "sweep.gif"
        out.write_bytes(b"stale")
        with AnimationAssembler(out, 32, 24, frame_delay_ms=50) as gif:
            gif.append(_frame((0, 0, 255)))
        assert out.read_bytes().startswith(b"GIF8")
        assert _leftovers(tmp_path) == []

    def test_output_only_appears_on_finalize(self, tmp_path):
        out = tmp_path / "sweep.gif"
        gif = AnimationAssembler(out, 32, 24, frame_delay_ms=50)
        gif.append(_frame((0, 0, 255)))
        assert not out.exists()
        assert gif.temp_path is not None and gif.temp_path.exists()
        assert gif.finalize() == out
        assert out.exists()
        assert gif.temp_path is None
        assert gif.frame_count == 1

    def test_failure_leaves_previous_output_untouched(self, tmp_path):
        """An exception mid-job discards the partial animation."""
        out = tmp_path / "sweep.gif"
        out.write_bytes(b"previous")
        with pytest.raises(RuntimeError, match="renderer died"):
            with AnimationAssembler(out, 32, 24, frame_delay_ms=50) as gif:
                gif.append(_frame((0, 0, 255)))
                raise RuntimeError("renderer died")
        assert out.read_bytes() == b"previous"
        assert _leftovers(tmp_path) == []

    def test_abort_is_idempotent(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "a.gif", 32, 24, frame_delay_ms=50)
        gif.append(_frame((0, 0, 0)))
        gif.abort()
        gif.abort()
        assert _leftovers(tmp_path) == []
        assert not (tmp_path / "a.gif").exists()


class TestAssemblerErrors:
    """Tests for encoding and I/O failures."""

    def test_size_mismatch(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "a.gif", 32, 24, frame_delay_ms=50)
        with pytest.raises(EncodingError, match="does not match canvas"):
            gif.append(_frame((0, 0, 0), size=(24, 32)))

    def test_not_an_image(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "a.gif", 32, 24, frame_delay_ms=50)
        with pytest.raises(EncodingError, match="PIL image"):
            gif.append(b"not an image")

    def test_zero_frames(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "a.gif", 32, 24, frame_delay_ms=50)
        with pytest.raises(EncodingError, match="no frames"):
            gif.finalize()
        assert not (tmp_path / "a.gif").exists()

    def test_append_after_finalize(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "a.gif", 32, 24, frame_delay_ms=50)
        gif.append(_frame((0, 0, 0)))
        gif.finalize()
        with pytest.raises(EncodingError, match="already finalized"):
            gif.append(_frame((0, 0, 0)))
        with pytest.raises(EncodingError, match="already finalized"):
            gif.finalize()

    @pytest.mark.parametrize(
        "width, height, delay, message",
        [
            (0, 24, 50, "Invalid dimensions"),
            (32, 24, 0, "multiple of 10"),
            (32, 24, 45, "multiple of 10"),
        ],
    )
    def test_invalid_parameters(self, tmp_path, width, height, delay, message):
        with pytest.raises(InvalidParameterError, match=message):
            AnimationAssembler(tmp_path / "a.gif", width, height, frame_delay_ms=delay)

    def test_missing_directory(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "missing" / "a.gif", 32, 24, frame_delay_ms=50)
        with pytest.raises(OutputIOError, match="cannot create temporary file"):
            gif.append(_frame((0, 0, 0)))

    def test_output_io_error_is_os_error(self, tmp_path):
        gif = AnimationAssembler(tmp_path / "missing" / "a.gif", 32, 24, frame_delay_ms=50)
        with pytest.raises(OSError):
            gif.append(_frame((0, 0, 0)))

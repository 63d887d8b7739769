# python/terrainsweep/gif.py
# Streams rendered frames into a looping animated GIF with an atomic finalize
# Exists so a failed job never leaves a truncated file at the output path
# RELEVANT FILES: python/terrainsweep/jobs.py, python/terrainsweep/render.py, tests/test_gif.py
"""
Animated GIF assembly.

Frames are quantised to one fixed palette and encoded as soon as they are
appended, so only the frame currently being encoded is held in memory.
Every appended frame becomes exactly one GIF frame: identical consecutive
frames are written as-is rather than merged.

Example:
    >>> with AnimationAssembler("out/flat.gif", 500, 500, frame_delay_ms=50) as gif:
    ...     for pitch in schedule:
    ...         gif.append(renderer.render_frame(pitch))
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from PIL import GifImagePlugin, Image, ImageSequence

from .errors import EncodingError, InvalidParameterError, OutputIOError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _build_palette() -> Image.Image:
    # 6x6x6 web-safe cube plus 40 greys so grid lines keep their tone
    levels = [i * 51 for i in range(6)]
    colours = [(r, g, b) for r in levels for g in levels for b in levels]
    colours += [(round(k * 255 / 41),) * 3 for k in range(1, 41)]
    palette = Image.new("P", (1, 1))
    palette.putpalette([c for rgb in colours for c in rgb])
    return palette


_PALETTE = _build_palette()


@dataclass(frozen=True)
class AnimationInfo:
    """What a GIF reports when read back."""

    frame_count: int
    durations_ms: Tuple[int, ...]
    size: Tuple[int, int]
    loop: Optional[int]


def read_animation(path: PathLike) -> AnimationInfo:
    """Read back frame count, per-frame delays, canvas size and loop count."""
    with Image.open(path) as im:
        # Seeking past frame 0 drops header-only keys such as "loop"
        size = im.size
        loop = im.info.get("loop")
        durations = tuple(int(frame.info.get("duration", 0)) for frame in ImageSequence.Iterator(im))
    return AnimationInfo(frame_count=len(durations), durations_ms=durations, size=size, loop=loop)


class AnimationAssembler:
    """Accumulates frames into one animated GIF and publishes it atomically.

    Frames go to a temporary file beside ``output_path``; :meth:`finalize`
    renames it into place exactly once, overwriting any existing file. If
    anything fails, or the context exits with an exception, the temporary
    file is removed and ``output_path`` is left untouched.
    """

    def __init__(self, output_path: PathLike, width: int, height: int, frame_delay_ms: int, loop: int = 0):
        if width <= 0 or height <= 0:
            raise InvalidParameterError(f"Invalid dimensions: {width}x{height}")
        if frame_delay_ms <= 0 or frame_delay_ms % 10:
            raise InvalidParameterError(
                f"frame_delay_ms must be a positive multiple of 10, got {frame_delay_ms}"
            )
        if not 0 <= loop <= 0xFFFF:
            raise InvalidParameterError(f"loop must be within 0..65535, got {loop}")
        self.output_path = Path(output_path)
        self.size = (int(width), int(height))
        self.frame_delay_ms = int(frame_delay_ms)
        self.loop = int(loop)
        self.frame_count = 0
        self.finalized = False
        self._fp: Optional[BinaryIO] = None
        self._tmp_path: Optional[Path] = None

    @property
    def temp_path(self) -> Optional[Path]:
        return self._tmp_path

    def _open(self) -> BinaryIO:
        parent = self.output_path.parent
        try:
            fd, tmp = tempfile.mkstemp(prefix=f".{self.output_path.name}.", suffix=".tmp", dir=parent)
        except OSError as exc:
            raise OutputIOError(f"cannot create temporary file in {parent}: {exc}") from exc
        self._tmp_path = Path(tmp)
        self._fp = os.fdopen(fd, "wb")
        return self._fp

    def _write(self, chunks) -> None:
        try:
            for chunk in chunks:
                self._fp.write(chunk)
        except OSError as exc:
            raise OutputIOError(f"failed writing {self._tmp_path}: {exc}") from exc

    def append(self, frame: Image.Image) -> None:
        """Quantise and encode ``frame`` as the next animation frame."""
        if self.finalized:
            raise EncodingError(f"{self.output_path} is already finalized")
        if not isinstance(frame, Image.Image):
            raise EncodingError(f"frame must be a PIL image, got {type(frame).__name__}")
        if frame.size != self.size:
            raise EncodingError(f"frame size {frame.size} does not match canvas {self.size}")

        try:
            rgb = frame if frame.mode == "RGB" else frame.convert("RGB")
            indexed = rgb.quantize(palette=_PALETTE, dither=Image.Dither.NONE)
            if self.frame_count == 0:
                header, _ = GifImagePlugin.getheader(
                    indexed, info={"loop": self.loop, "duration": self.frame_delay_ms}
                )
            else:
                header = []
            data = GifImagePlugin.getdata(indexed, offset=(0, 0), duration=self.frame_delay_ms)
        except (ValueError, TypeError, OSError) as exc:
            self.abort()
            raise EncodingError(f"failed to encode frame {self.frame_count} for {self.output_path}: {exc}") from exc

        try:
            if self._fp is None:
                self._open()
            self._write(header)
            self._write(data)
        except OutputIOError:
            self.abort()
            raise
        self.frame_count += 1
        logger.debug(f"Encoded frame {self.frame_count} into {self._tmp_path}")

    def finalize(self) -> Path:
        """Write the trailer and move the animation to ``output_path``."""
        if self.finalized:
            raise EncodingError(f"{self.output_path} is already finalized")
        if self.frame_count == 0:
            self.abort()
            raise EncodingError(f"no frames appended for {self.output_path}")
        try:
            self._fp.write(b";")
            self._fp.flush()
            os.fsync(self._fp.fileno())
            self._fp.close()
            self._fp = None
            os.chmod(self._tmp_path, 0o644)
            os.replace(self._tmp_path, self.output_path)
        except OSError as exc:
            self.abort()
            raise OutputIOError(f"failed to finalize {self.output_path}: {exc}") from exc
        self._tmp_path = None
        self.finalized = True
        return self.output_path

    def abort(self) -> None:
        """Drop the partial animation; safe to call more than once."""
        if self._fp is not None:
            try:
                self._fp.close()
            except OSError:
                logger.warning(f"Could not close temporary file {self._tmp_path}")
            self._fp = None
        if self._tmp_path is not None:
            try:
                self._tmp_path.unlink()
            except FileNotFoundError:
                pass
            self._tmp_path = None

    def __enter__(self) -> "AnimationAssembler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()
        elif not self.finalized:
            self.finalize()

    def __repr__(self) -> str:
        return (f"AnimationAssembler({str(self.output_path)!r}, {self.size[0]}x{self.size[1]}, "
                f"delay={self.frame_delay_ms}ms, frames={self.frame_count})")


__all__ = ["AnimationAssembler", "AnimationInfo", "read_animation"]

"""Animated GIF decoder producing a normalized AnimationSpec."""

from __future__ import annotations

from PIL import Image, ImageSequence

from .errors import DecodeError
from .image import open_image
from .models import DEFAULT_HEIGHT, DEFAULT_WIDTH, AnimationSpec, Frame, GifOptions, Repeat
from .normalize import normalize


def _frame_delay(raw: object, options: GifOptions) -> int:
    try:
        delay = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return options.default_delay_ms
    if delay < options.min_delay_ms:
        return options.default_delay_ms
    return delay


def decode_gif(
    data: bytes,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    options: GifOptions | None = None,
) -> AnimationSpec:
    """Decode GIF bytes, keeping frame order, per-frame delay (ms) and loop semantics.

    A stream without loop metadata plays once; loop count 0 plays forever and
    any positive count plays exactly that many cycles.
    """
    options = options or GifOptions()
    image = open_image(data)
    if image.format != "GIF":
        raise DecodeError(f"Expected GIF data, got {image.format or 'unknown format'}")

    repeat = Repeat.from_loop_count(image.info.get("loop"))
    frames: list[Frame] = []
    try:
        for frame in ImageSequence.Iterator(image):
            delay = _frame_delay(frame.info.get("duration"), options)
            frames.append(Frame(canvas=normalize(frame.convert("RGBA"), width, height), delay_ms=delay))
    except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Corrupt GIF stream at frame {len(frames)}: {exc}") from exc

    if not frames:
        raise DecodeError("GIF stream contains no frames")

    start = options.start_frame % len(frames)
    if start:
        frames = frames[start:] + frames[:start]
    return AnimationSpec.from_frames(frames, repeat)

"""Fit arbitrary source imagery onto the fixed-size canvas."""

from __future__ import annotations

from typing import Iterable

from PIL import Image, ImageColor

from .errors import InvalidSourceKind
from .models import DEFAULT_HEIGHT, DEFAULT_WIDTH, Canvas


def fit_size(src_w: int, src_h: int, width: int, height: int) -> tuple[int, int]:
    """Largest aspect-preserving size that fits inside width x height."""
    if src_w <= 0 or src_h <= 0:
        raise InvalidSourceKind(f"Source image has degenerate size {src_w}x{src_h}")
    scale = min(width / src_w, height / src_h)
    # Rounding may overshoot by one pixel on the constrained axis.
    new_w = min(width, max(1, round(src_w * scale)))
    new_h = min(height, max(1, round(src_h * scale)))
    return new_w, new_h


def normalize(image: Image.Image, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Canvas:
    new_w, new_h = fit_size(image.width, image.height, width, height)
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    if (new_w, new_h) != image.size:
        image = image.resize((new_w, new_h), resample=Image.Resampling.NEAREST)

    target = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    target.paste(image, ((width - new_w) // 2, (height - new_h) // 2))
    return Canvas.from_image(target)


def normalize_frames(
    images: Iterable[Image.Image], width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT
) -> list[Canvas]:
    return [normalize(image, width, height) for image in images]


def solid_canvas(color: str | tuple[int, ...], width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Canvas:
    """Canvas filled with a single color, e.g. for placeholders or backgrounds."""
    rgba = ImageColor.getcolor(color, "RGBA") if isinstance(color, str) else tuple(color)
    if len(rgba) == 3:
        rgba = (*rgba, 255)
    return Canvas.from_image(Image.new("RGBA", (width, height), rgba))

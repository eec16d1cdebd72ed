"""Static raster decoder: fetch once, decode the first frame, normalize."""

from __future__ import annotations

from io import BytesIO
from typing import Callable

from PIL import Image

from .errors import DecodeError, FetchError
from .models import DEFAULT_HEIGHT, DEFAULT_WIDTH, Canvas
from .normalize import normalize

Fetch = Callable[[str], bytes]


def open_image(data: bytes) -> Image.Image:
    """Open and fully load image bytes, mapping Pillow failures to DecodeError."""
    if not data:
        raise DecodeError("Image data is empty")
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (OSError, EOFError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Could not decode image: {exc}") from exc
    return image


def decode_image_bytes(data: bytes, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Canvas:
    return normalize(open_image(data), width, height)


def decode_image(url: str, fetch: Fetch, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Canvas:
    # Single attempt; retry policy belongs to the caller.
    try:
        data = fetch(url)
    except FetchError:
        raise
    except OSError as exc:
        raise FetchError(f"Could not fetch {url}: {exc}") from exc
    return decode_image_bytes(data, width, height)

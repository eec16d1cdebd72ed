"""RGB565 export and frame diff helpers for consumers that push pixels to a device."""

from __future__ import annotations

import numpy as np
from PIL import ImageColor

from .models import Canvas, DirtyRect, FrameBuffer


def rgb888_bytes_to_rgb565_le(rgb: bytes) -> bytes:
    if len(rgb) % 3 != 0:
        raise ValueError("RGB888 data length must be divisible by 3")
    arr = np.frombuffer(rgb, dtype=np.uint8).reshape((-1, 3))
    return _pack_rgb565(arr[:, 0], arr[:, 1], arr[:, 2]).tobytes()


def _pack_rgb565(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    r = r.astype(np.uint16)
    g = g.astype(np.uint16)
    b = b.astype(np.uint16)
    return (((r >> 3) << 11) | ((g >> 2) << 5) | (b >> 3)).astype("<u2")


def flatten(canvas: Canvas, background: str = "#000000") -> np.ndarray:
    """Composite the canvas over an opaque background, returning (h, w, 3) uint8."""
    bg = np.array(ImageColor.getrgb(background)[:3], dtype=np.float32)
    px = canvas.pixels.astype(np.float32)
    alpha = px[:, :, 3:4] / 255.0
    out = px[:, :, :3] * alpha + bg * (1.0 - alpha)
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def canvas_to_rgb565_le(canvas: Canvas, background: str = "#000000") -> bytes:
    rgb = flatten(canvas, background)
    return _pack_rgb565(rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]).tobytes()


def canvas_frame_buffer(canvas: Canvas, background: str = "#000000") -> FrameBuffer:
    return FrameBuffer(
        width=canvas.width,
        height=canvas.height,
        pixel_format="RGB565_LE",
        bytes=canvas_to_rgb565_le(canvas, background),
    )


def compute_dirty_rects(
    previous: Canvas,
    current: Canvas,
    tile: int = 16,
    max_ratio: float = 0.35,
) -> list[DirtyRect]:
    """Bounding rect of changed tiles, or the whole canvas past max_ratio."""
    if previous.size != current.size:
        raise ValueError("Canvas sizes must match")

    width, height = current.size
    changed = np.any(previous.pixels != current.pixels, axis=2)
    changed_tiles: list[tuple[int, int]] = []
    for y in range(0, height, tile):
        for x in range(0, width, tile):
            if changed[y : y + tile, x : x + tile].any():
                changed_tiles.append((x, y))

    if not changed_tiles:
        return []

    changed_pixels = len(changed_tiles) * tile * tile
    if changed_pixels / (width * height) > max_ratio:
        return [DirtyRect(x=0, y=0, w=width, h=height)]

    min_x = min(t[0] for t in changed_tiles)
    min_y = min(t[1] for t in changed_tiles)
    max_x = max(t[0] for t in changed_tiles)
    max_y = max(t[1] for t in changed_tiles)
    rect_w = min(width - min_x, (max_x - min_x) + tile)
    rect_h = min(height - min_y, (max_y - min_y) + tile)
    return [DirtyRect(x=min_x, y=min_y, w=rect_w, h=rect_h)]

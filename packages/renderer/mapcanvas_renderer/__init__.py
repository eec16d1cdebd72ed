"""Content-to-canvas decoding, normalization, renderers and dispatch."""

from .dispatcher import Dispatcher
from .errors import CanvasError, DecodeError, FetchError, InvalidSourceKind, LayoutError, UnsupportedKind
from .gif import decode_gif
from .image import decode_image, decode_image_bytes
from .models import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    AnimatedTextOptions,
    AnimationSpec,
    Canvas,
    ContentKind,
    ContentRequest,
    DirtyRect,
    Frame,
    FrameBuffer,
    GifOptions,
    RendererState,
    RenderOptions,
    Repeat,
    RepeatMode,
    TextOptions,
)
from .normalize import normalize, normalize_frames, solid_canvas
from .renderer import MapRenderer
from .rgb565 import canvas_frame_buffer, canvas_to_rgb565_le, compute_dirty_rects, rgb888_bytes_to_rgb565_le
from .text import decode_animated_text, decode_text

__all__ = [
    "DEFAULT_HEIGHT",
    "DEFAULT_WIDTH",
    "AnimatedTextOptions",
    "AnimationSpec",
    "Canvas",
    "CanvasError",
    "ContentKind",
    "ContentRequest",
    "DecodeError",
    "DirtyRect",
    "Dispatcher",
    "FetchError",
    "Frame",
    "FrameBuffer",
    "GifOptions",
    "InvalidSourceKind",
    "LayoutError",
    "MapRenderer",
    "RenderOptions",
    "RendererState",
    "Repeat",
    "RepeatMode",
    "TextOptions",
    "UnsupportedKind",
    "canvas_frame_buffer",
    "canvas_to_rgb565_le",
    "compute_dirty_rects",
    "decode_animated_text",
    "decode_gif",
    "decode_image",
    "decode_image_bytes",
    "decode_text",
    "normalize",
    "normalize_frames",
    "rgb888_bytes_to_rgb565_le",
    "solid_canvas",
]

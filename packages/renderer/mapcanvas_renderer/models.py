"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import numpy as np
from PIL import Image

DEFAULT_WIDTH = 128
DEFAULT_HEIGHT = 128
ANIMATED_TEXT_STYLES = ("scroll", "typewriter")


class ContentKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    ANIMATED_TEXT = "atext"
    GIF = "gif"

    @classmethod
    def from_token(cls, token: str) -> "ContentKind":
        """Parse an inbound literal token. Unknown tokens are a caller error."""
        for kind in cls:
            if kind.value == token:
                return kind
        raise ValueError(f"Unknown content kind token: {token!r}")


class RendererState(str, Enum):
    READY = "Ready"
    ACTIVE = "Active"
    EXHAUSTED = "Exhausted"
    DETACHED = "Detached"


class RepeatMode(str, Enum):
    ONCE = "once"
    FOREVER = "forever"
    COUNT = "count"


@dataclass(frozen=True)
class Repeat:
    mode: RepeatMode
    count: int | None = None

    def __post_init__(self) -> None:
        if self.mode is RepeatMode.COUNT:
            if self.count is None or self.count <= 0:
                raise ValueError("Repeat count must be positive")
        elif self.count is not None:
            raise ValueError(f"Repeat mode {self.mode.value} takes no count")

    @classmethod
    def once(cls) -> "Repeat":
        return cls(RepeatMode.ONCE)

    @classmethod
    def forever(cls) -> "Repeat":
        return cls(RepeatMode.FOREVER)

    @classmethod
    def times(cls, count: int) -> "Repeat":
        return cls(RepeatMode.COUNT, count)

    @classmethod
    def from_loop_count(cls, loop: int | None) -> "Repeat":
        """Map a GIF loop count: absent -> once, 0 -> forever, n -> n cycles."""
        if loop is None:
            return cls.once()
        loop = int(loop)
        if loop < 0:
            raise ValueError("Loop count must not be negative")
        if loop == 0:
            return cls.forever()
        return cls.times(loop)

    @property
    def cycles(self) -> int | None:
        """Number of full cycles to play, or None when unbounded."""
        if self.mode is RepeatMode.FOREVER:
            return None
        if self.mode is RepeatMode.ONCE:
            return 1
        return self.count


@dataclass(frozen=True, eq=False)
class Canvas:
    """Fixed-size RGBA pixel grid. Pixels are a read-only (height, width, 4) uint8 array."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = np.array(self.pixels, dtype=np.uint8, copy=True)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError("Canvas pixels must have shape (height, width, 4)")
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @classmethod
    def blank(cls, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> "Canvas":
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def from_image(cls, image: Image.Image) -> "Canvas":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.asarray(image))

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    def is_blank(self) -> bool:
        return not bool(self.pixels[:, :, 3].any())

    def bounding_box(self) -> tuple[int, int, int, int] | None:
        """Return (x0, y0, x1, y1) of non-transparent pixels, exclusive end, or None."""
        alpha = self.pixels[:, :, 3]
        rows = np.flatnonzero(alpha.any(axis=1))
        cols = np.flatnonzero(alpha.any(axis=0))
        if rows.size == 0:
            return None
        return int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1

    def same_pixels(self, other: "Canvas") -> bool:
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))


@dataclass(frozen=True)
class Frame:
    canvas: Canvas
    delay_ms: int = 0

    def __post_init__(self) -> None:
        if self.delay_ms < 0:
            raise ValueError("Frame delay must not be negative")


@dataclass(frozen=True)
class AnimationSpec:
    frames: tuple[Frame, ...]
    repeat: Repeat = field(default_factory=Repeat.once)

    def __post_init__(self) -> None:
        frames = tuple(self.frames)
        if not frames:
            raise ValueError("Animation needs at least one frame")
        size = frames[0].canvas.size
        if any(f.canvas.size != size for f in frames):
            raise ValueError("The frames must all have the same size")
        object.__setattr__(self, "frames", frames)

    @classmethod
    def still(cls, canvas: Canvas) -> "AnimationSpec":
        return cls(frames=(Frame(canvas=canvas, delay_ms=0),), repeat=Repeat.once())

    @classmethod
    def from_frames(cls, frames: Iterable[Frame], repeat: Repeat) -> "AnimationSpec":
        return cls(frames=tuple(frames), repeat=repeat)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def cycle_ms(self) -> int:
        return sum(f.delay_ms for f in self.frames)

    @property
    def size(self) -> tuple[int, int]:
        return self.frames[0].canvas.size


@dataclass(frozen=True)
class ContentRequest:
    kind: ContentKind
    payload: bytes | str
    consumers: frozenset = frozenset()


@dataclass(frozen=True)
class TextOptions:
    color: str = "#1E1E1E"
    font_path: str | None = None
    min_font_size: int = 8
    max_font_size: int = 32
    line_spacing: int = 2
    padding: int = 2

    def __post_init__(self) -> None:
        if self.min_font_size < 1:
            raise ValueError("min_font_size must be at least 1")
        if self.max_font_size < self.min_font_size:
            raise ValueError("max_font_size must not be below min_font_size")
        if self.line_spacing < 0 or self.padding < 0:
            raise ValueError("line_spacing and padding must not be negative")


@dataclass(frozen=True)
class AnimatedTextOptions:
    style: str = "scroll"
    font_size: int = 24
    scroll_step_px: int = 2
    frame_delay_ms: int = 50
    chars_per_second: int = 20
    start_delay_ms: int = 0
    max_frames: int = 4096

    def __post_init__(self) -> None:
        if self.style not in ANIMATED_TEXT_STYLES:
            raise ValueError(f"Unknown animated text style: {self.style}")
        for name in ("font_size", "scroll_step_px", "frame_delay_ms", "chars_per_second", "max_frames"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.start_delay_ms < 0:
            raise ValueError("start_delay_ms must not be negative")


@dataclass(frozen=True)
class GifOptions:
    min_delay_ms: int = 20
    default_delay_ms: int = 100
    start_frame: int = 0

    def __post_init__(self) -> None:
        if self.min_delay_ms < 0 or self.start_frame < 0:
            raise ValueError("min_delay_ms and start_frame must not be negative")
        if self.default_delay_ms < 1:
            raise ValueError("default_delay_ms must be at least 1")


@dataclass(frozen=True)
class RenderOptions:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    text: TextOptions = field(default_factory=TextOptions)
    animated_text: AnimatedTextOptions = field(default_factory=AnimatedTextOptions)
    gif: GifOptions = field(default_factory=GifOptions)

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")


@dataclass(frozen=True)
class DirtyRect:
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True)
class FrameBuffer:
    width: int
    height: int
    pixel_format: str
    bytes: bytes

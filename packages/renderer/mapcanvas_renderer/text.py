"""Text layout onto the canvas: static, scrolling and typewriter presentations."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from .errors import LayoutError
from .models import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    AnimatedTextOptions,
    AnimationSpec,
    Canvas,
    Frame,
    Repeat,
    TextOptions,
)

SUPPORTED_GLYPHS = frozenset(chr(c) for c in range(32, 127)) | {"\n"}


@dataclass(frozen=True)
class TextLayout:
    font: ImageFont.FreeTypeFont
    lines: tuple[str, ...]
    line_height: int
    line_spacing: int

    @property
    def block_height(self) -> int:
        n = len(self.lines)
        return n * self.line_height + max(0, n - 1) * self.line_spacing


def check_glyphs(text: str) -> str:
    if not text or not text.strip():
        raise LayoutError("Text is empty")
    unsupported = sorted({ch for ch in text if ch not in SUPPORTED_GLYPHS})
    if unsupported:
        raise LayoutError(f"Unsupported glyphs: {''.join(unsupported)!r}")
    return text


def load_font(size: int, font_path: str | None = None) -> ImageFont.FreeTypeFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError as exc:
            raise LayoutError(f"Could not load font {font_path}: {exc}") from exc
    return ImageFont.load_default(size=size)


def _line_height(font: ImageFont.FreeTypeFont) -> int:
    ascent, descent = font.getmetrics()
    return ascent + descent


def _longest_prefix(word: str, font: ImageFont.FreeTypeFont, max_width: int) -> int:
    cut = 0
    for i in range(1, len(word) + 1):
        if font.getlength(word[:i]) > max_width:
            break
        cut = i
    return cut


def wrap_lines(text: str, font: ImageFont.FreeTypeFont, max_width: int) -> list[str] | None:
    """Greedy word wrap; words wider than a line are broken. None if a glyph alone is too wide."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if font.getlength(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            while font.getlength(word) > max_width:
                cut = _longest_prefix(word, font, max_width)
                if cut == 0:
                    return None
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


def layout_text(
    text: str,
    options: TextOptions | None = None,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
) -> TextLayout:
    """Pick the largest font size whose wrapped text fits the canvas."""
    options = options or TextOptions()
    check_glyphs(text)
    max_w = width - 2 * options.padding
    max_h = height - 2 * options.padding
    for size in range(options.max_font_size, options.min_font_size - 1, -1):
        font = load_font(size, options.font_path)
        lines = wrap_lines(text, font, max_w)
        if lines is None:
            continue
        layout = TextLayout(font=font, lines=tuple(lines), line_height=_line_height(font), line_spacing=options.line_spacing)
        if layout.block_height <= max_h:
            return layout
    raise LayoutError(f"Text does not fit a {width}x{height} canvas at {options.min_font_size}px")


def _draw_layout(
    layout: TextLayout,
    fill: tuple[int, ...],
    width: int,
    height: int,
    reveal: int | None = None,
) -> Canvas:
    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    y = (height - layout.block_height) // 2
    remaining = reveal
    for line in layout.lines:
        # Offsets come from the full line so partially revealed text does not shift.
        x = (width - int(math.ceil(layout.font.getlength(line)))) // 2
        shown = line if remaining is None else line[: max(0, remaining)]
        if shown:
            draw.text((x, y), shown, font=layout.font, fill=fill)
        if remaining is not None:
            remaining -= len(line) + 1
        y += layout.line_height + layout.line_spacing
    return Canvas.from_image(image)


def decode_text(
    text: str,
    options: TextOptions | None = None,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
) -> Canvas:
    options = options or TextOptions()
    layout = layout_text(text, options, width, height)
    return _draw_layout(layout, ImageColor.getcolor(options.color, "RGBA"), width, height)


def _scroll_frames(
    text: str,
    text_options: TextOptions,
    options: AnimatedTextOptions,
    width: int,
    height: int,
) -> AnimationSpec:
    line = check_glyphs(text).replace("\n", " ")
    font = load_font(options.font_size, text_options.font_path)
    line_h = _line_height(font)
    if line_h > height:
        raise LayoutError(f"Font size {options.font_size} is taller than the canvas")

    text_w = int(math.ceil(font.getlength(line)))
    period = text_w + width
    frame_count = int(math.ceil(period / options.scroll_step_px))
    if frame_count > options.max_frames:
        raise LayoutError(f"Text too long to scroll ({frame_count} frames > {options.max_frames})")

    strip = Image.new("RGBA", (period, height), (0, 0, 0, 0))
    ImageDraw.Draw(strip).text(
        (0, (height - line_h) // 2), line, font=font, fill=ImageColor.getcolor(text_options.color, "RGBA")
    )
    # Two periods side by side so every window of canvas width is contiguous.
    arr = np.asarray(strip)
    doubled = np.concatenate([arr, arr], axis=1)

    frames = [
        Frame(canvas=Canvas(doubled[:, offset : offset + width]), delay_ms=options.frame_delay_ms)
        for offset in range(0, frame_count * options.scroll_step_px, options.scroll_step_px)
    ]
    return AnimationSpec.from_frames(frames, Repeat.forever())


def _typewriter_frames(
    text: str,
    text_options: TextOptions,
    options: AnimatedTextOptions,
    width: int,
    height: int,
) -> AnimationSpec:
    layout = layout_text(text, text_options, width, height)
    fill = ImageColor.getcolor(text_options.color, "RGBA")

    ms_per_char = 1000.0 / options.chars_per_second
    if ms_per_char >= options.frame_delay_ms:
        chars_per_frame = 1
        delay = int(round(ms_per_char))
    else:
        chars_per_frame = int(options.frame_delay_ms // ms_per_char)
        delay = options.frame_delay_ms

    # Revealed count indexes the wrapped text, one separator per line break.
    total = sum(len(line) for line in layout.lines) + len(layout.lines) - 1
    counts = list(range(chars_per_frame, total, chars_per_frame)) + [total]
    if len(counts) > options.max_frames:
        raise LayoutError(f"Text too long to animate ({len(counts)} frames > {options.max_frames})")

    frames = []
    for i, count in enumerate(counts):
        frame_delay = delay + (options.start_delay_ms if i == 0 else 0)
        frames.append(Frame(canvas=_draw_layout(layout, fill, width, height, reveal=count), delay_ms=frame_delay))
    return AnimationSpec.from_frames(frames, Repeat.once())


def decode_animated_text(
    text: str,
    options: AnimatedTextOptions | None = None,
    text_options: TextOptions | None = None,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
) -> AnimationSpec:
    options = options or AnimatedTextOptions()
    text_options = text_options or TextOptions()
    if options.style == "typewriter":
        return _typewriter_frames(text, text_options, options, width, height)
    if options.style == "scroll":
        return _scroll_frames(text, text_options, options, width, height)
    raise ValueError(f"Unknown animated text style: {options.style}")

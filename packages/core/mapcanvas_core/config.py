"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from mapcanvas_renderer.models import (
    ANIMATED_TEXT_STYLES,
    AnimatedTextOptions,
    GifOptions,
    RenderOptions,
    TextOptions,
)


CONFIG_VERSION = 2


@dataclass
class CanvasConfig:
    width: int = 128
    height: int = 128


@dataclass
class TextConfig:
    color: str = "#1E1E1E"
    font_path: str | None = None
    min_font_size: int = 8
    max_font_size: int = 32
    line_spacing: int = 2
    padding: int = 2


@dataclass
class AnimatedTextConfig:
    style: str = "scroll"
    font_size: int = 24
    scroll_step_px: int = 2
    frame_delay_ms: int = 50
    chars_per_second: int = 20
    start_delay_ms: int = 0
    max_frames: int = 4096


@dataclass
class GifConfig:
    min_delay_ms: int = 20
    default_delay_ms: int = 100
    start_frame: int = 0


@dataclass
class FetchConfig:
    timeout_s: float = 10.0
    max_bytes: int = 16 * 1024 * 1024
    user_agent: str = "Mozilla/5.0 (X11; Linux x86_64) MapCanvas/0.1"


@dataclass
class TickerConfig:
    interval_ms: int = 50


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class PerformanceConfig:
    cpu_percent_max: float = 8.0
    rss_mb_max: float = 300.0
    tick_ms_max: float = 10.0


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    text: TextConfig = field(default_factory=TextConfig)
    animated_text: AnimatedTextConfig = field(default_factory=AnimatedTextConfig)
    gif: GifConfig = field(default_factory=GifConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    ticker: TickerConfig = field(default_factory=TickerConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    def to_render_options(self) -> RenderOptions:
        return RenderOptions(
            width=self.canvas.width,
            height=self.canvas.height,
            text=TextOptions(**asdict(self.text)),
            animated_text=AnimatedTextOptions(**asdict(self.animated_text)),
            gif=GifOptions(**asdict(self.gif)),
        )


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "MapCanvas"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "MapCanvas"
    return Path.home() / ".config" / "mapcanvas"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_canvas(cfg: AppConfig) -> None:
    cfg.canvas.width = max(8, min(1024, int(cfg.canvas.width)))
    cfg.canvas.height = max(8, min(1024, int(cfg.canvas.height)))


def _normalize_text(cfg: AppConfig) -> None:
    cfg.text.min_font_size = max(4, int(cfg.text.min_font_size))
    cfg.text.max_font_size = max(cfg.text.min_font_size, int(cfg.text.max_font_size))
    cfg.text.line_spacing = max(0, int(cfg.text.line_spacing))
    cfg.text.padding = max(0, int(cfg.text.padding))


def _normalize_animated_text(cfg: AppConfig) -> None:
    at = cfg.animated_text
    if at.style not in ANIMATED_TEXT_STYLES:
        at.style = "scroll"
    at.font_size = max(4, int(at.font_size))
    at.scroll_step_px = max(1, int(at.scroll_step_px))
    at.frame_delay_ms = max(1, int(at.frame_delay_ms))
    at.chars_per_second = max(1, int(at.chars_per_second))
    at.start_delay_ms = max(0, int(at.start_delay_ms))
    at.max_frames = max(1, int(at.max_frames))


def _normalize_gif(cfg: AppConfig) -> None:
    cfg.gif.min_delay_ms = max(0, int(cfg.gif.min_delay_ms))
    cfg.gif.default_delay_ms = max(1, int(cfg.gif.default_delay_ms))
    cfg.gif.start_frame = max(0, int(cfg.gif.start_frame))


def _normalize_runtime(cfg: AppConfig) -> None:
    cfg.fetch.timeout_s = float(max(1.0, min(120.0, float(cfg.fetch.timeout_s))))
    cfg.fetch.max_bytes = max(1024, int(cfg.fetch.max_bytes))
    cfg.ticker.interval_ms = max(10, min(1000, int(cfg.ticker.interval_ms)))
    cfg.performance.cpu_percent_max = float(max(1.0, cfg.performance.cpu_percent_max))
    cfg.performance.rss_mb_max = float(max(64.0, cfg.performance.rss_mb_max))
    cfg.performance.tick_ms_max = float(max(0.1, cfg.performance.tick_ms_max))


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept the canvas size at top level and a single "text" section for both styles.
        canvas = dict(data.get("canvas", {}) or {})
        if "size" in data:
            canvas.setdefault("width", data["size"])
            canvas.setdefault("height", data["size"])
            data.pop("size")
        data["canvas"] = canvas
        text = dict(data.get("text", {}) or {})
        animated = dict(data.get("animated_text", {}) or {})
        for key in ("scroll_step_px", "frame_delay_ms"):
            if key in text:
                animated.setdefault(key, text.pop(key))
        data["text"] = text
        data["animated_text"] = animated
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        canvas=_merge(CanvasConfig, data.get("canvas", {})),
        text=_merge(TextConfig, data.get("text", {})),
        animated_text=_merge(AnimatedTextConfig, data.get("animated_text", {})),
        gif=_merge(GifConfig, data.get("gif", {})),
        fetch=_merge(FetchConfig, data.get("fetch", {})),
        ticker=_merge(TickerConfig, data.get("ticker", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
        performance=_merge(PerformanceConfig, data.get("performance", {})),
    )

    _normalize_canvas(cfg)
    _normalize_text(cfg)
    _normalize_animated_text(cfg)
    _normalize_gif(cfg)
    _normalize_runtime(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path

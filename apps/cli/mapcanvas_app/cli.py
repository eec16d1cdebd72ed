"""CLI entrypoints for rendering content requests to PNG frames and inspecting settings."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from mapcanvas_core import HttpFetcher, TickDriver, config_path, load_config
from mapcanvas_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from mapcanvas_renderer import CanvasError, ContentKind, Dispatcher, RendererState


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _read_payload(args: argparse.Namespace) -> bytes | str:
    if args.file:
        return Path(args.file).expanduser().read_bytes()
    if args.payload is None:
        raise SystemExit("render: one of --payload or --file is required")
    return args.payload


def cmd_render(args: argparse.Namespace) -> int:
    log = get_logger("cli")
    cfg = load_config()
    kind = ContentKind.from_token(args.kind)
    payload = _read_payload(args)

    dispatcher = Dispatcher(options=cfg.to_render_options(), fetch=HttpFetcher(cfg.fetch))
    try:
        renderer = dispatcher.dispatch(kind, payload, consumers={"cli"})
    except CanvasError as exc:
        log.error("render failed: %s", exc, extra={"event": "render_failed"})
        _print_json({"success": False, "kind": kind.value, "error": type(exc).__name__, "message": str(exc)})
        return 2

    out_dir = Path(args.out).expanduser().resolve()
    out_dir.mkdir(parents=True, exist_ok=True)
    driver = TickDriver(interval_ms=args.tick_ms or cfg.ticker.interval_ms)
    driver.register(renderer)

    files: list[str] = []

    def _save(index: int) -> None:
        path = out_dir / f"frame_{index:04d}.png"
        renderer.current_canvas().to_image().save(path, format="PNG")
        files.append(str(path))

    _save(0)
    seen = renderer.frame_changes
    ticks = 0
    while ticks < args.ticks and renderer.state is RendererState.ACTIVE:
        driver.tick()
        ticks += 1
        if renderer.frame_changes != seen and len(files) < args.max_files:
            seen = renderer.frame_changes
            _save(len(files))

    spec = renderer.spec
    _print_json(
        {
            "success": True,
            "kind": kind.value,
            "state": renderer.state.value,
            "ticks": ticks,
            "frame_count": spec.frame_count,
            "cycle_ms": spec.cycle_ms,
            "repeat": {"mode": spec.repeat.mode.value, "count": spec.repeat.count},
            "size": list(spec.size),
            "files": files,
        }
    )
    renderer.close()
    return 0


def cmd_config_show(_args: argparse.Namespace) -> int:
    _print_json(asdict(load_config()))
    return 0


def cmd_config_path(_args: argparse.Namespace) -> int:
    print(config_path())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mapcanvas", description="Render content onto fixed-size pixel canvases")
    sub = parser.add_subparsers(dest="command", required=True)

    render_cmd = sub.add_parser("render", help="Dispatch a content request and write its frames as PNG")
    render_cmd.add_argument("--kind", required=True, choices=[k.value for k in ContentKind])
    render_cmd.add_argument("--payload", default=None, help="URL for image/gif, text for text/atext")
    render_cmd.add_argument("--file", default=None, help="Read the payload from a local file instead")
    render_cmd.add_argument("--ticks", type=int, default=200, help="Maximum ticks to drive the renderer")
    render_cmd.add_argument("--tick-ms", type=int, default=None, help="Tick length, defaults to the configured cadence")
    render_cmd.add_argument("--max-files", type=int, default=500)
    render_cmd.add_argument("--out", default="mapcanvas-frames", help="Output directory for PNG frames")
    render_cmd.set_defaults(func=cmd_render)

    config_cmd = sub.add_parser("config", help="Inspect settings")
    config_sub = config_cmd.add_subparsers(dest="config_cmd", required=True)
    show_cmd = config_sub.add_parser("show", help="Print effective settings")
    show_cmd.set_defaults(func=cmd_config_show)
    path_cmd = config_sub.add_parser("path", help="Print settings file path")
    path_cmd.set_defaults(func=cmd_config_path)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    install_crash_hooks()
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())

import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from mapcanvas_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(Path(tmp) / "missing.json")
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual((cfg.canvas.width, cfg.canvas.height), (128, 128))
            self.assertEqual(cfg.animated_text.style, "scroll")

    def test_corrupt_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_config(path).ticker.interval_ms, 50)

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg = load_config(path)
            cfg.gif.start_frame = 2
            cfg.animated_text.style = "typewriter"
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.gif.start_frame, 2)
            self.assertEqual(reloaded.animated_text.style, "typewriter")

    def test_values_are_clamped(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "config_version": 2,
                "canvas": {"width": 0, "height": 99999},
                "animated_text": {"style": "marquee", "scroll_step_px": 0},
                "text": {"min_font_size": 20, "max_font_size": 10},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual((cfg.canvas.width, cfg.canvas.height), (8, 1024))
            self.assertEqual(cfg.animated_text.style, "scroll")
            self.assertEqual(cfg.animated_text.scroll_step_px, 1)
            self.assertEqual(cfg.text.max_font_size, 20)

    def test_migrate_v1_shape(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            old = {"size": 64, "text": {"color": "#FF0000", "frame_delay_ms": 80}}
            path.write_text(json.dumps(old), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.config_version, 2)
            self.assertEqual((cfg.canvas.width, cfg.canvas.height), (64, 64))
            self.assertEqual(cfg.text.color, "#FF0000")
            self.assertEqual(cfg.animated_text.frame_delay_ms, 80)

    def test_render_options_are_frozen_copies(self):
        cfg = AppConfig()
        cfg.canvas.width = 64
        cfg.gif.default_delay_ms = 70
        options = cfg.to_render_options()
        self.assertEqual(options.width, 64)
        self.assertEqual(options.gif.default_delay_ms, 70)
        cfg.canvas.width = 32
        self.assertEqual(options.width, 64)


if __name__ == "__main__":
    unittest.main()

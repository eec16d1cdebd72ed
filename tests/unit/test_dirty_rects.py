import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from mapcanvas_renderer.models import Canvas
from mapcanvas_renderer.rgb565 import compute_dirty_rects


class DirtyRectTests(unittest.TestCase):
    def test_detect_change(self):
        prev = Canvas.blank(32, 32)
        arr = np.zeros((32, 32, 4), dtype=np.uint8)
        arr[5, 20] = (1, 2, 3, 255)
        rects = compute_dirty_rects(prev, Canvas(arr), tile=8)
        self.assertEqual(len(rects), 1)
        self.assertEqual((rects[0].x, rects[0].y, rects[0].w, rects[0].h), (16, 0, 8, 8))

    def test_no_change(self):
        frame = Canvas.blank(16, 16)
        self.assertEqual(compute_dirty_rects(frame, frame), [])

    def test_large_change_is_full_frame(self):
        prev = Canvas.blank(16, 16)
        full = Canvas(np.full((16, 16, 4), 255, dtype=np.uint8))
        rects = compute_dirty_rects(prev, full, tile=4)
        self.assertEqual((rects[0].w, rects[0].h), (16, 16))

    def test_size_mismatch(self):
        with self.assertRaises(ValueError):
            compute_dirty_rects(Canvas.blank(8, 8), Canvas.blank(16, 16))


if __name__ == "__main__":
    unittest.main()

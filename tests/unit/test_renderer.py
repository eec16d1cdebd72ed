import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from mapcanvas_renderer.models import AnimationSpec, Frame, RendererState, Repeat
from mapcanvas_renderer.normalize import solid_canvas
from mapcanvas_renderer.renderer import MapRenderer


def make_spec(repeat, count=3, delay=100):
    colors = ["#FF0000", "#00FF00", "#0000FF", "#FFFFFF", "#000000"]
    frames = [Frame(solid_canvas(colors[i % len(colors)], 4, 4), delay_ms=delay) for i in range(count)]
    return AnimationSpec.from_frames(frames, repeat)


class RendererLifecycleTests(unittest.TestCase):
    def test_ready_until_first_attach(self):
        renderer = MapRenderer(make_spec(Repeat.forever()))
        self.assertIs(renderer.state, RendererState.READY)
        renderer.advance(1000)
        self.assertEqual(renderer.frame_index, 0)
        self.assertTrue(renderer.attach("p1"))
        self.assertIs(renderer.state, RendererState.ACTIVE)

    def test_attach_and_detach_are_idempotent(self):
        renderer = MapRenderer(make_spec(Repeat.forever()))
        renderer.attach("p1")
        self.assertFalse(renderer.attach("p1"))
        renderer.attach("p2")
        self.assertTrue(renderer.detach("p1"))
        self.assertFalse(renderer.detach("p1"))
        self.assertIs(renderer.state, RendererState.ACTIVE)
        self.assertEqual(renderer.consumers, frozenset({"p2"}))

    def test_detaching_all_consumers_is_terminal_once_attached(self):
        for prepare in (lambda r: r.attach("p1"), lambda r: (r.attach("p1"), r.advance(10_000))):
            renderer = MapRenderer(make_spec(Repeat.once()))
            prepare(renderer)
            renderer.detach("p1")
            self.assertIs(renderer.state, RendererState.DETACHED)
            renderer.detach("p1")
            self.assertIs(renderer.state, RendererState.DETACHED)
            self.assertFalse(renderer.attach("p3"))
            self.assertIs(renderer.state, RendererState.DETACHED)
            with self.assertRaises(RuntimeError):
                renderer.current_canvas()

    def test_detaching_unknown_consumer_keeps_ready_renderer(self):
        renderer = MapRenderer(make_spec(Repeat.forever()))
        self.assertFalse(renderer.detach("stranger"))
        self.assertIs(renderer.state, RendererState.READY)
        self.assertTrue(renderer.attach("p1"))
        self.assertIs(renderer.state, RendererState.ACTIVE)

    def test_close_ends_a_ready_renderer(self):
        renderer = MapRenderer(make_spec(Repeat.forever()))
        renderer.close()
        self.assertIs(renderer.state, RendererState.DETACHED)
        self.assertFalse(renderer.attach("p1"))

    def test_consumers_share_the_same_canvas(self):
        renderer = MapRenderer(make_spec(Repeat.forever()))
        renderer.attach_all(["a", "b"])
        self.assertIs(renderer.current_canvas(), renderer.current_canvas())


class RendererTimingTests(unittest.TestCase):
    def test_frame_advances_after_its_delay(self):
        renderer = MapRenderer(make_spec(Repeat.forever(), delay=100))
        renderer.attach("p")
        renderer.advance(50)
        self.assertEqual(renderer.frame_index, 0)
        renderer.advance(50)
        self.assertEqual(renderer.frame_index, 1)
        renderer.advance(250)
        self.assertEqual(renderer.frame_index, 0)
        self.assertEqual(renderer.frame_changes, 3)

    def test_forever_never_exhausts(self):
        renderer = MapRenderer(make_spec(Repeat.forever(), count=3, delay=100))
        renderer.attach("p")
        for _ in range(3 * 10 * 5):
            renderer.advance(100)
        self.assertIs(renderer.state, RendererState.ACTIVE)

    def test_count_exhausts_after_exactly_n_cycles(self):
        for n in (1, 2, 5):
            renderer = MapRenderer(make_spec(Repeat.times(n), count=3, delay=100))
            renderer.attach("p")
            for _ in range(3 * n - 1):
                renderer.advance(100)
            self.assertIs(renderer.state, RendererState.ACTIVE, f"n={n}")
            renderer.advance(100)
            self.assertIs(renderer.state, RendererState.EXHAUSTED, f"n={n}")
            self.assertEqual(renderer.remaining_cycles, 0)

    def test_once_exhausts_on_last_frame_and_keeps_it(self):
        spec = make_spec(Repeat.once(), count=2, delay=100)
        renderer = MapRenderer(spec)
        renderer.attach("p")
        renderer.advance(200)
        self.assertIs(renderer.state, RendererState.EXHAUSTED)
        self.assertIs(renderer.current_canvas(), spec.frames[-1].canvas)
        renderer.advance(1000)
        self.assertEqual(renderer.frame_index, 1)

    def test_static_frame_exhausts_on_next_advance(self):
        canvas = solid_canvas("#123456", 4, 4)
        renderer = MapRenderer(AnimationSpec.still(canvas))
        renderer.attach("p")
        self.assertIs(renderer.current_canvas(), canvas)
        renderer.advance(50)
        self.assertIs(renderer.state, RendererState.EXHAUSTED)
        self.assertIs(renderer.current_canvas(), canvas)

    def test_zero_delay_loop_does_not_spin(self):
        frames = [Frame(solid_canvas("#FF0000", 2, 2)), Frame(solid_canvas("#00FF00", 2, 2))]
        renderer = MapRenderer(AnimationSpec.from_frames(frames, Repeat.forever()))
        renderer.attach("p")
        renderer.advance(10)
        self.assertEqual(renderer.frame_index, 1)
        renderer.advance(10)
        self.assertEqual(renderer.frame_index, 0)

    def test_negative_elapsed_rejected(self):
        renderer = MapRenderer(make_spec(Repeat.forever()))
        renderer.attach("p")
        with self.assertRaises(ValueError):
            renderer.advance(-1)


if __name__ == "__main__":
    unittest.main()

import sys
import time
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from mapcanvas_core.performance import BudgetStatus
from mapcanvas_core.ticker import TickDriver
from mapcanvas_renderer.models import AnimationSpec, Frame, RendererState, Repeat
from mapcanvas_renderer.normalize import solid_canvas
from mapcanvas_renderer.renderer import MapRenderer


def make_renderer(repeat, delay=50, consumer="p"):
    frames = [Frame(solid_canvas(c, 2, 2), delay_ms=delay) for c in ("#FF0000", "#00FF00")]
    renderer = MapRenderer(AnimationSpec.from_frames(frames, repeat))
    renderer.attach(consumer)
    return renderer


class _FakePerformance:
    def __init__(self, interval):
        self.interval = interval
        self.samples = 0

    def sample(self, tick_ms, interval_ms):
        self.samples += 1
        return BudgetStatus(
            cpu_percent=50.0,
            rss_mb=10.0,
            tick_ms=tick_ms,
            overloaded=True,
            warning="resource_overload",
            recommended_interval_ms=self.interval,
        )


class TickDriverTests(unittest.TestCase):
    def test_tick_advances_all_renderers(self):
        driver = TickDriver(interval_ms=50)
        a = make_renderer(Repeat.forever())
        b = make_renderer(Repeat.once())
        driver.register(a)
        driver.register(b)
        driver.register(a)
        self.assertEqual(len(driver.renderers), 2)

        report = driver.tick()
        self.assertEqual(report.advanced, 2)
        self.assertEqual(report.frame_changes, 2)
        report = driver.tick()
        self.assertEqual(report.exhausted, 1)
        self.assertIs(b.state, RendererState.EXHAUSTED)
        self.assertEqual(len(driver.renderers), 2)

    def test_explicit_elapsed(self):
        driver = TickDriver(interval_ms=50)
        renderer = make_renderer(Repeat.forever(), delay=100)
        driver.register(renderer)
        driver.tick(elapsed_ms=10)
        self.assertEqual(renderer.frame_index, 0)
        driver.tick(elapsed_ms=90)
        self.assertEqual(renderer.frame_index, 1)

    def test_register_detached_rejected(self):
        renderer = make_renderer(Repeat.forever())
        renderer.close()
        with self.assertRaises(ValueError):
            TickDriver().register(renderer)

    def test_unregister(self):
        driver = TickDriver()
        renderer = make_renderer(Repeat.forever())
        driver.register(renderer)
        driver.unregister(renderer)
        driver.unregister(renderer)
        self.assertEqual(driver.renderers, [])
        events = [e["event"] for e in driver.recent_events()]
        self.assertEqual(events, ["register", "unregister"])

    def test_budget_sampling_adjusts_interval(self):
        perf = _FakePerformance(interval=80)
        driver = TickDriver(interval_ms=50, performance=perf, sample_every=5)
        driver.run_for(10)
        self.assertEqual(perf.samples, 2)
        self.assertEqual(driver.interval_ms, 80)
        self.assertTrue(driver.last_budget.overloaded)

    def test_background_thread(self):
        driver = TickDriver(interval_ms=10)
        renderer = make_renderer(Repeat.forever(), delay=10)
        driver.register(renderer)
        driver.start()
        try:
            self.assertTrue(driver.running)
            deadline = time.monotonic() + 2.0
            while renderer.frame_changes == 0 and time.monotonic() < deadline:
                time.sleep(0.02)
        finally:
            driver.stop()
        self.assertFalse(driver.running)
        self.assertGreater(renderer.frame_changes, 0)


if __name__ == "__main__":
    unittest.main()

"""Fixed-cadence tick driver advancing every registered renderer."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from mapcanvas_renderer.models import RendererState
from mapcanvas_renderer.renderer import MapRenderer

from .performance import BudgetStatus, PerformanceController

logger = logging.getLogger("mapcanvas.ticker")


@dataclass
class TickReport:
    ticks: int = 0
    advanced: int = 0
    frame_changes: int = 0
    exhausted: int = 0
    dropped: int = 0
    duration_ms: float = 0.0


class TickDriver:
    """Host-side scheduler. Renderers themselves define no threads.

    ``tick`` can be called directly (tests, CLI) or from the background thread
    started by ``start``.
    """

    def __init__(
        self,
        interval_ms: int = 50,
        performance: PerformanceController | None = None,
        sample_every: int = 20,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval_ms = interval_ms
        self.performance = performance
        self.sample_every = max(1, sample_every)
        self._clock = clock
        self._renderers: list[MapRenderer] = []
        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._ticks = 0
        self._events: list[dict[str, Any]] = []
        self.last_budget: BudgetStatus | None = None

    @property
    def renderers(self) -> list[MapRenderer]:
        with self._lock:
            return list(self._renderers)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event}
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def register(self, renderer: MapRenderer) -> None:
        with self._lock:
            if renderer.state is RendererState.DETACHED:
                raise ValueError("Cannot register a detached renderer")
            if renderer not in self._renderers:
                self._renderers.append(renderer)
                self._log_event("register", renderer=repr(renderer))

    def unregister(self, renderer: MapRenderer) -> None:
        with self._lock:
            if renderer in self._renderers:
                self._renderers.remove(renderer)
                self._log_event("unregister", renderer=repr(renderer))

    def tick(self, elapsed_ms: float | None = None) -> TickReport:
        elapsed = self.interval_ms if elapsed_ms is None else elapsed_ms
        report = TickReport(ticks=1)
        start = time.perf_counter()
        with self._lock:
            self._ticks += 1
            for renderer in list(self._renderers):
                before_state = renderer.state
                before_changes = renderer.frame_changes
                renderer.advance(elapsed)
                if renderer.state is RendererState.ACTIVE or before_state is RendererState.ACTIVE:
                    report.advanced += 1
                report.frame_changes += renderer.frame_changes - before_changes

                if renderer.state is not before_state:
                    self._log_event("state", renderer=repr(renderer), before=before_state.value, after=renderer.state.value)
                    logger.info(
                        "renderer %s -> %s", before_state.value, renderer.state.value, extra={"event": "renderer_state"}
                    )
                    if renderer.state is RendererState.EXHAUSTED:
                        report.exhausted += 1
                if renderer.state is RendererState.DETACHED:
                    self._renderers.remove(renderer)
                    report.dropped += 1
                    self._log_event("dropped", renderer=repr(renderer))

        report.duration_ms = (time.perf_counter() - start) * 1000.0
        if self.performance is not None and self._ticks % self.sample_every == 0:
            self.apply_budget(self.performance.sample(report.duration_ms, self.interval_ms))
        return report

    def apply_budget(self, budget: BudgetStatus) -> None:
        self.last_budget = budget
        if budget.recommended_interval_ms != self.interval_ms:
            logger.info(
                "tick interval %d -> %d ms (%s)",
                self.interval_ms,
                budget.recommended_interval_ms,
                budget.warning or "recovered",
                extra={"event": "tick_interval"},
            )
            self._log_event(
                "tick_interval",
                before=self.interval_ms,
                after=budget.recommended_interval_ms,
                warning=budget.warning,
            )
            self.interval_ms = budget.recommended_interval_ms

    def run_for(self, ticks: int, elapsed_ms: float | None = None) -> TickReport:
        total = TickReport()
        for _ in range(ticks):
            report = self.tick(elapsed_ms)
            total.ticks += report.ticks
            total.advanced += report.advanced
            total.frame_changes += report.frame_changes
            total.exhausted += report.exhausted
            total.dropped += report.dropped
            total.duration_ms += report.duration_ms
        return total

    def _loop(self) -> None:
        last = self._clock()
        while not self._stop.wait(self.interval_ms / 1000.0):
            now = self._clock()
            self.tick((now - last) * 1000.0)
            last = now

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="mapcanvas-ticker", daemon=True)
        self._thread.start()
        logger.info("tick driver started interval_ms=%d", self.interval_ms, extra={"event": "ticker_started"})

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("tick driver stopped", extra={"event": "ticker_stopped"})

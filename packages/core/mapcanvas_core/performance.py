"""Tick cost budgeting and adaptive cadence hints."""

from __future__ import annotations

from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class PerformanceTargets:
    cpu_percent_max: float = 8.0
    rss_mb_max: float = 300.0
    tick_ms_max: float = 10.0


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    tick_ms: float
    overloaded: bool
    warning: str | None
    recommended_interval_ms: int


class PerformanceController:
    def __init__(self, targets: PerformanceTargets | None = None, base_interval_ms: int = 50) -> None:
        self.targets = targets or PerformanceTargets()
        self.base_interval_ms = base_interval_ms
        self._process = psutil.Process()
        # Prime non-blocking CPU measurement.
        self._process.cpu_percent(interval=None)

    def sample(self, tick_ms: float, interval_ms: int) -> BudgetStatus:
        cpu = float(self._process.cpu_percent(interval=None))
        rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        overloaded = cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max

        warning = None
        rec_interval = interval_ms

        if overloaded:
            warning = "resource_overload"
            rec_interval = min(1000, int(interval_ms * 1.25) + 5)
        elif tick_ms > self.targets.tick_ms_max:
            warning = "tick_over_budget"
            rec_interval = min(1000, interval_ms + 10)
        elif interval_ms > self.base_interval_ms:
            rec_interval = max(self.base_interval_ms, interval_ms - 10)

        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            tick_ms=float(tick_ms),
            overloaded=overloaded,
            warning=warning,
            recommended_interval_ms=rec_interval,
        )

"""Host-side services: settings, logging, HTTP fetch, tick driving and budgets."""

from .config import AppConfig, config_path, load_config, save_config
from .fetch import HttpFetcher
from .performance import BudgetStatus, PerformanceController, PerformanceTargets
from .ticker import TickDriver, TickReport

__all__ = [
    "AppConfig",
    "BudgetStatus",
    "HttpFetcher",
    "PerformanceController",
    "PerformanceTargets",
    "TickDriver",
    "TickReport",
    "config_path",
    "load_config",
    "save_config",
]

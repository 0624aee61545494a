"""
Performance monitoring: bounded timing history, per-name statistics,
timing helpers for sync and async operations, and an ASGI middleware that
records request handling time.
"""

import functools
import logging
import threading
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, TypeVar

from pydantic import BaseModel

from wayne_rm.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PerformanceMetric(BaseModel):
    name: str
    duration_ms: float
    timestamp: float
    memory_usage: Optional[int] = None


class PerformanceStats(BaseModel):
    average_ms: float = 0.0
    slowest_ms: float = 0.0
    fastest_ms: float = 0.0
    total: int = 0
    memory_trend: List[int] = []


class PerformanceMonitor:
    def __init__(self, max_metrics: int = 100, slow_threshold_ms: float = 16.0):
        self.max_metrics = max_metrics
        self.slow_threshold_ms = slow_threshold_ms
        self._metrics: Deque[PerformanceMetric] = deque(maxlen=max_metrics)
        self._lock = threading.Lock()

    @property
    def metrics(self) -> List[PerformanceMetric]:
        with self._lock:
            return list(self._metrics)

    def add_metric(self, metric: PerformanceMetric):
        with self._lock:
            self._metrics.append(metric)
        if metric.duration_ms > self.slow_threshold_ms:
            logger.warning(
                "Slow operation detected: %s (%.2fms, threshold %.2fms)",
                metric.name, metric.duration_ms, self.slow_threshold_ms,
            )

    def record(self, name: str, duration_ms: float, memory_usage: Optional[int] = None):
        self.add_metric(PerformanceMetric(
            name=name,
            duration_ms=duration_ms,
            timestamp=time.time(),
            memory_usage=memory_usage,
        ))

    def get_stats(self, name: Optional[str] = None) -> PerformanceStats:
        metrics = [m for m in self.metrics if name is None or m.name == name]
        if not metrics:
            return PerformanceStats()
        durations = [m.duration_ms for m in metrics]
        memory = [m.memory_usage for m in metrics if m.memory_usage]
        return PerformanceStats(
            average_ms=sum(durations) / len(durations),
            slowest_ms=max(durations),
            fastest_ms=min(durations),
            total=len(metrics),
            memory_trend=memory[-10:],
        )

    def get_slow_components(self, threshold_ms: Optional[float] = None) -> List[str]:
        """Names whose average duration exceeds the threshold, in first-seen order."""
        threshold_ms = self.slow_threshold_ms if threshold_ms is None else threshold_ms
        by_name: Dict[str, List[float]] = {}
        for m in self.metrics:
            by_name.setdefault(m.name, []).append(m.duration_ms)
        return [name for name, times in by_name.items() if sum(times) / len(times) > threshold_ms]

    def clear(self):
        with self._lock:
            self._metrics.clear()


# Shared monitor for request timings
performance_monitor = PerformanceMonitor(slow_threshold_ms=settings.slow_request_ms)


async def measure_async(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    slow_ms: Optional[float] = None,
) -> T:
    """Await operation(), logging its duration; failures are logged and re-raised."""
    slow_ms = settings.slow_request_ms if slow_ms is None else slow_ms
    start = time.perf_counter()
    try:
        result = await operation()
    except Exception as e:
        duration = (time.perf_counter() - start) * 1000
        logger.error("Async operation failed: %s (%.2fms): %s", operation_name, duration, e)
        raise
    duration = (time.perf_counter() - start) * 1000
    logger.debug("Async operation finished: %s (%.2fms)", operation_name, duration)
    if duration > slow_ms:
        logger.warning("Slow async operation: %s (%.2fms)", operation_name, duration)
    return result


def measure_function(name: Optional[str] = None, monitor: Optional[PerformanceMonitor] = None):
    """Decorator that times each call and records it in the monitor."""
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        metric_name = name or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                duration = (time.perf_counter() - start) * 1000
                logger.debug("Function executed: %s (%.2fms)", metric_name, duration)
                (monitor or performance_monitor).record(metric_name, duration)
        return wrapper
    return decorator


class RequestTimingMiddleware:
    """Records each HTTP request's handling time as '<METHOD> <route path>'."""

    def __init__(self, app, monitor: Optional[PerformanceMonitor] = None):
        self.app = app
        self.monitor = monitor or performance_monitor

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        try:
            await self.app(scope, receive, send)
        finally:
            duration = (time.perf_counter() - start) * 1000
            route = scope.get("route")
            path = getattr(route, "path", None) or scope.get("path", "")
            self.monitor.record(f"{scope['method']} {path}", duration)

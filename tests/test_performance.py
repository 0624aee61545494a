import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from wayne_rm.core.performance import (
    PerformanceMonitor, RequestTimingMiddleware, measure_async, measure_function,
)


def test_history_is_bounded():
    monitor = PerformanceMonitor(max_metrics=100)
    for i in range(150):
        monitor.record(f"op-{i}", 1.0)
    assert len(monitor.metrics) == 100
    assert monitor.metrics[0].name == "op-50"


def test_slow_operations_are_logged(caplog):
    monitor = PerformanceMonitor(slow_threshold_ms=16)
    with caplog.at_level(logging.WARNING, logger="wayne_rm.core.performance"):
        monitor.record("fast", 5)
        monitor.record("render", 20)
    assert len(caplog.records) == 1
    assert "render" in caplog.records[0].getMessage()


def test_stats():
    monitor = PerformanceMonitor()
    monitor.record("a", 10, memory_usage=512)
    monitor.record("a", 30)
    monitor.record("b", 100)

    stats = monitor.get_stats("a")
    assert stats.average_ms == 20
    assert stats.slowest_ms == 30
    assert stats.fastest_ms == 10
    assert stats.total == 2
    assert stats.memory_trend == [512]

    assert monitor.get_stats().total == 3
    assert monitor.get_stats("missing").total == 0


def test_slow_components():
    monitor = PerformanceMonitor(slow_threshold_ms=16)
    monitor.record("a", 10)
    monitor.record("a", 30)
    monitor.record("b", 100)
    monitor.record("c", 1)
    assert monitor.get_slow_components() == ["a", "b"]
    assert monitor.get_slow_components(50) == ["b"]

    monitor.clear()
    assert monitor.metrics == []


async def test_measure_async_returns_result():
    async def load():
        return 42

    assert await measure_async(load, "load") == 42


async def test_measure_async_reraises(caplog):
    async def fail():
        raise ValueError("boom")

    with caplog.at_level(logging.ERROR, logger="wayne_rm.core.performance"):
        with pytest.raises(ValueError):
            await measure_async(fail, "fail")
    assert "fail" in caplog.records[0].getMessage()


def test_measure_function_records_calls():
    monitor = PerformanceMonitor()

    @measure_function("add", monitor=monitor)
    def add(a, b):
        return a + b

    @measure_function(monitor=monitor)
    def broken():
        raise RuntimeError("nope")

    assert add(1, 2) == 3
    with pytest.raises(RuntimeError):
        broken()

    assert monitor.get_stats("add").total == 1
    assert monitor.get_stats("test_measure_function_records_calls.<locals>.broken").total == 1


def test_request_timing_middleware():
    monitor = PerformanceMonitor()
    app = FastAPI()
    app.add_middleware(RequestTimingMiddleware, monitor=monitor)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    client = TestClient(app)
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    assert monitor.get_stats("GET /ping").total == 2

"""
Unit tests for the circuit breaker.

A fake clock drives the window and open-duration timing.
"""
import asyncio

import pytest

from ecoswap.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError, CircuitState


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _fail():
    raise RuntimeError("backend down")


def _breaker(clock, **kwargs) -> CircuitBreaker:
    options = {
        "failure_threshold": 0.5,
        "time_window_seconds": 60,
        "open_duration_seconds": 30,
        "min_calls": 4,
        "clock": clock,
    }
    options.update(kwargs)
    return CircuitBreaker("test", **options)


def _fail_times(cb: CircuitBreaker, count: int) -> None:
    for _ in range(count):
        with pytest.raises(RuntimeError):
            cb.call(_fail)


def test_closed_state_passes_calls():
    cb = _breaker(FakeClock())

    assert cb.state == CircuitState.CLOSED
    assert cb.call(lambda: "success") == "success"


def test_needs_min_calls_before_tripping():
    cb = _breaker(FakeClock())

    _fail_times(cb, 3)

    assert cb.state == CircuitState.CLOSED


def test_opens_at_error_rate_threshold():
    cb = _breaker(FakeClock())

    cb.call(lambda: "ok")
    cb.call(lambda: "ok")
    _fail_times(cb, 2)

    assert cb.state == CircuitState.OPEN
    with pytest.raises(CircuitBreakerOpenError):
        cb.call(lambda: "should not execute")


def test_stays_closed_below_threshold():
    cb = _breaker(FakeClock())

    for _ in range(3):
        cb.call(lambda: "ok")
    _fail_times(cb, 1)

    assert cb.state == CircuitState.CLOSED


def test_old_failures_leave_the_window():
    clock = FakeClock()
    cb = _breaker(clock)

    _fail_times(cb, 3)
    clock.now += 61
    _fail_times(cb, 1)

    assert cb.state == CircuitState.CLOSED
    assert cb.get_metrics()["recent_failures"] == 1


def test_half_open_recovery():
    clock = FakeClock()
    cb = _breaker(clock)
    _fail_times(cb, 4)
    assert cb.state == CircuitState.OPEN

    clock.now += 30
    assert cb.state == CircuitState.HALF_OPEN

    cb.call(lambda: "ok")
    assert cb.state == CircuitState.HALF_OPEN
    cb.call(lambda: "ok")
    assert cb.state == CircuitState.CLOSED


def test_half_open_failure_reopens():
    clock = FakeClock()
    cb = _breaker(clock)
    _fail_times(cb, 4)
    clock.now += 30

    _fail_times(cb, 1)

    assert cb.state == CircuitState.OPEN


def test_half_open_limits_probes():
    clock = FakeClock()
    cb = _breaker(clock, half_open_max_calls=1)
    _fail_times(cb, 4)
    clock.now += 30

    cb.call(lambda: "ok")

    with pytest.raises(CircuitBreakerOpenError):
        cb.call(lambda: "ok")


@pytest.mark.asyncio
async def test_call_async():
    cb = _breaker(FakeClock())

    async def succeed():
        return 42

    async def fail():
        raise RuntimeError("nope")

    assert await cb.call_async(succeed) == 42
    with pytest.raises(RuntimeError):
        await cb.call_async(fail)
    assert cb.get_metrics()["recent_requests"] == 2


def test_get_metrics():
    cb = _breaker(FakeClock())
    cb.call(lambda: "ok")
    _fail_times(cb, 1)

    metrics = cb.get_metrics()

    assert metrics["name"] == "test"
    assert metrics["state"] == "closed"
    assert metrics["recent_requests"] == 2
    assert metrics["recent_failures"] == 1
    assert metrics["error_rate"] == 0.5
    assert metrics["opened_at"] is None


@pytest.mark.asyncio
async def test_cancelled_probes_release_their_slots():
    clock = FakeClock()
    cb = _breaker(clock, min_calls=1, half_open_max_calls=3)
    _fail_times(cb, 1)
    clock.now += 30
    assert cb.state == CircuitState.HALF_OPEN

    async def hang():
        await asyncio.Event().wait()

    tasks = [asyncio.create_task(cb.call_async(hang)) for _ in range(3)]
    await asyncio.sleep(0)
    for task in tasks:
        task.cancel()
    for task in tasks:
        with pytest.raises(asyncio.CancelledError):
            await task

    async def succeed():
        return "ok"

    assert await cb.call_async(succeed) == "ok"
    assert await cb.call_async(succeed) == "ok"
    assert cb.state == CircuitState.CLOSED

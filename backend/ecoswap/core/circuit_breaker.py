"""
Circuit breaker guarding the copy-generation LLM backend.

While the breaker is open, calls are rejected immediately so the caller
goes straight to deterministic fallback copy instead of waiting on a
failing upstream. Defaults:
- Open when at least half of the calls in the last minute failed
  (once min_calls have been observed)
- Stay open for 30 seconds
- Half-open: admit up to 3 probe calls; 2 successes close the breaker,
  any probe failure reopens it
"""
import time
from collections import deque
from enum import Enum
from threading import Lock
from typing import Any, Awaitable, Callable, Deque, Optional, Tuple

from ecoswap.core.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpenError(Exception):
    """Raised when the breaker rejects a call without executing it."""


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: float = 0.5,
        time_window_seconds: float = 60,
        open_duration_seconds: float = 30,
        min_calls: int = 4,
        half_open_max_calls: int = 3,
        half_open_success_threshold: int = 2,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.time_window_seconds = time_window_seconds
        self.open_duration_seconds = open_duration_seconds
        self.min_calls = min_calls
        self.half_open_max_calls = half_open_max_calls
        self.half_open_success_threshold = half_open_success_threshold
        self._clock = clock

        self._lock = Lock()
        self._state = CircuitState.CLOSED
        self._outcomes: Deque[Tuple[float, bool]] = deque()
        self._opened_at: Optional[float] = None
        self._probes_admitted = 0
        self._probe_successes = 0

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._refresh(self._clock())
            return self._state

    def _refresh(self, now: float) -> None:
        """Expire old outcomes and move OPEN -> HALF_OPEN once the cool-down passed."""
        cutoff = now - self.time_window_seconds
        while self._outcomes and self._outcomes[0][0] < cutoff:
            self._outcomes.popleft()

        if (
            self._state == CircuitState.OPEN
            and self._opened_at is not None
            and now - self._opened_at >= self.open_duration_seconds
        ):
            self._state = CircuitState.HALF_OPEN
            self._probes_admitted = 0
            self._probe_successes = 0
            logger.info("circuit_breaker_half_open", circuit_breaker=self.name)

    def _trip(self, now: float) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._outcomes.clear()

    def _admit(self) -> None:
        with self._lock:
            self._refresh(self._clock())
            if self._state == CircuitState.OPEN:
                raise CircuitBreakerOpenError(f"Circuit breaker {self.name} is OPEN")
            if self._state == CircuitState.HALF_OPEN:
                if self._probes_admitted >= self.half_open_max_calls:
                    raise CircuitBreakerOpenError(
                        f"Circuit breaker {self.name} is HALF_OPEN and probes are in flight"
                    )
                self._probes_admitted += 1

    def _release(self) -> None:
        """Hand back a half-open probe slot for a call that ended without an outcome."""
        with self._lock:
            if self._state == CircuitState.HALF_OPEN and self._probes_admitted > 0:
                self._probes_admitted -= 1

    def _record(self, success: bool) -> None:
        with self._lock:
            now = self._clock()
            if self._state == CircuitState.HALF_OPEN:
                if not success:
                    self._trip(now)
                    logger.warning("circuit_breaker_reopened", circuit_breaker=self.name)
                    return
                self._probe_successes += 1
                if self._probe_successes >= self.half_open_success_threshold:
                    self._state = CircuitState.CLOSED
                    self._opened_at = None
                    self._outcomes.clear()
                    logger.info("circuit_breaker_closed", circuit_breaker=self.name)
                return

            self._outcomes.append((now, success))
            total = len(self._outcomes)
            if total < self.min_calls:
                return
            failures = sum(1 for _, ok in self._outcomes if not ok)
            error_rate = failures / total
            if error_rate >= self.failure_threshold:
                self._trip(now)
                logger.warning(
                    "circuit_breaker_opened",
                    circuit_breaker=self.name,
                    error_rate=error_rate,
                    failures=failures,
                    total=total,
                )

    def call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a sync callable under breaker protection."""
        self._admit()
        try:
            result = func(*args, **kwargs)
        except Exception:
            self._record(False)
            raise
        except BaseException:
            self._release()
            raise
        self._record(True)
        return result

    async def call_async(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await a coroutine function under breaker protection."""
        self._admit()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._record(False)
            raise
        except BaseException:
            # Cancelled (e.g. asyncio.CancelledError): no outcome to record.
            self._release()
            raise
        self._record(True)
        return result

    def get_metrics(self) -> dict:
        with self._lock:
            self._refresh(self._clock())
            total = len(self._outcomes)
            failures = sum(1 for _, ok in self._outcomes if not ok)
            return {
                "name": self.name,
                "state": self._state.value,
                "recent_requests": total,
                "recent_failures": failures,
                "error_rate": failures / total if total else 0.0,
                "opened_at": self._opened_at,
            }

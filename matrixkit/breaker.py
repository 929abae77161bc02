"""Circuit breaker that stops calling an operation after repeated failures.

The breaker is closed while calls go through, open while they are refused,
and half-open while a limited number of trial calls test for recovery.
"""

from __future__ import annotations

import dataclasses
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import Generic, TypeVar

T = TypeVar("T")

STATE_CLOSED = "CLOSED"
STATE_OPEN = "OPEN"
STATE_HALF = "HALF"

DEFAULT_INTERVAL = 0.0
DEFAULT_TIMEOUT = 60.0


class State(IntEnum):
    """The three states of a circuit breaker."""

    CLOSED = 0
    HALF_OPEN = 1
    OPEN = 2

    def __str__(self) -> str:
        return _STATE_NAMES[self]


_STATE_NAMES = {
    State.CLOSED: STATE_CLOSED,
    State.HALF_OPEN: STATE_HALF,
    State.OPEN: STATE_OPEN,
}


class CircuitBreakerError(Exception):
    """A request was refused by a circuit breaker."""


class TooManyRequestsError(CircuitBreakerError):
    """The breaker is half-open and its trial requests are used up."""

    def __init__(self) -> None:
        super().__init__("too many requests")


class OpenStateError(CircuitBreakerError):
    """The breaker is open and refuses every request."""

    def __init__(self) -> None:
        super().__init__("too many failures, try again later")


@dataclass
class Counts:
    """Request counters of the current generation."""

    requests: int = 0
    total_successes: int = 0
    total_failures: int = 0
    consecutive_successes: int = 0
    consecutive_failures: int = 0

    def _on_request(self) -> None:
        self.requests += 1

    def _on_success(self) -> None:
        self.total_successes += 1
        self.consecutive_successes += 1
        self.consecutive_failures = 0

    def _on_failure(self) -> None:
        self.total_failures += 1
        self.consecutive_failures += 1
        self.consecutive_successes = 0

    def _clear(self) -> None:
        self.requests = 0
        self.total_successes = 0
        self.total_failures = 0
        self.consecutive_successes = 0
        self.consecutive_failures = 0


@dataclass
class Settings:
    """Configuration of a circuit breaker.

    ``max_requests`` of 0 means 1. ``interval`` (seconds) clears the counts
    of a closed breaker periodically; 0 or less never clears them.
    ``timeout`` (seconds) is how long the breaker stays open; 0 or less
    means 60. Without ``ready_to_trip`` the breaker opens after more than 5
    consecutive failures; without ``is_successful`` any exception is a
    failure. ``clock`` returns monotonic seconds.
    """

    name: str = ""
    max_requests: int = 0
    interval: float | timedelta = 0.0
    timeout: float | timedelta = 0.0
    ready_to_trip: Callable[[Counts], bool] | None = None
    on_state_change: Callable[[str, State, State], None] | None = None
    is_successful: Callable[[BaseException | None], bool] | None = None
    clock: Callable[[], float] = time.monotonic


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _default_ready_to_trip(counts: Counts) -> bool:
    return counts.consecutive_failures > 5


def _default_is_successful(err: BaseException | None) -> bool:
    return err is None


class CircuitBreaker(Generic[T]):
    """Wraps calls and refuses them while the protected operation keeps failing."""

    def __init__(self, settings: Settings) -> None:
        self._name = settings.name
        self._on_state_change = settings.on_state_change
        self._max_requests = settings.max_requests if settings.max_requests > 0 else 1
        interval = _seconds(settings.interval)
        self._interval = interval if interval > 0 else DEFAULT_INTERVAL
        timeout = _seconds(settings.timeout)
        self._timeout = timeout if timeout > 0 else DEFAULT_TIMEOUT
        self._ready_to_trip = settings.ready_to_trip or _default_ready_to_trip
        self._is_successful = settings.is_successful or _default_is_successful
        self._clock = settings.clock

        self._lock = threading.RLock()
        self._state = State.CLOSED
        self._generation = 0
        self._counts = Counts()
        self._expiry: float | None = None
        self._to_new_generation(self._clock())

    @property
    def name(self) -> str:
        """The breaker's name."""
        return self._name

    @property
    def state(self) -> State:
        """The current state, after applying any due transition."""
        with self._lock:
            state, _ = self._current_state(self._clock())
            return state

    @property
    def counts(self) -> Counts:
        """A copy of the current counters."""
        with self._lock:
            return dataclasses.replace(self._counts)

    def execute(self, req: Callable[[], T]) -> T:
        """Call ``req`` if the breaker allows it and return its result.

        Raises OpenStateError or TooManyRequestsError when the request is
        refused. An exception from ``req`` is recorded and raised again.
        """
        generation = self._before_request()
        try:
            result = req()
        except Exception as exc:
            self._after_request(generation, self._is_successful(exc))
            raise
        except BaseException:
            self._after_request(generation, False)
            raise
        self._after_request(generation, self._is_successful(None))
        return result

    def _before_request(self) -> int:
        with self._lock:
            state, generation = self._current_state(self._clock())
            if state == State.OPEN:
                raise OpenStateError()
            if state == State.HALF_OPEN and self._counts.requests >= self._max_requests:
                raise TooManyRequestsError()
            self._counts._on_request()
            return generation

    def _after_request(self, before: int, success: bool) -> None:
        with self._lock:
            now = self._clock()
            state, generation = self._current_state(now)
            if generation != before:
                return
            if success:
                self._on_success(state, now)
            else:
                self._on_failure(state, now)

    def _on_success(self, state: State, now: float) -> None:
        if state == State.CLOSED:
            self._counts._on_success()
        elif state == State.HALF_OPEN:
            self._counts._on_success()
            if self._counts.consecutive_successes >= self._max_requests:
                self._set_state(State.CLOSED, now)

    def _on_failure(self, state: State, now: float) -> None:
        if state == State.CLOSED:
            self._counts._on_failure()
            if self._ready_to_trip(dataclasses.replace(self._counts)):
                self._set_state(State.OPEN, now)
        elif state == State.HALF_OPEN:
            self._set_state(State.OPEN, now)

    def _current_state(self, now: float) -> tuple[State, int]:
        if self._state == State.CLOSED:
            if self._expiry is not None and self._expiry < now:
                self._to_new_generation(now)
        elif self._state == State.OPEN:
            if self._expiry is not None and self._expiry < now:
                self._set_state(State.HALF_OPEN, now)
        return self._state, self._generation

    def _set_state(self, state: State, now: float) -> None:
        if self._state == state:
            return
        previous = self._state
        self._state = state
        self._to_new_generation(now)
        if self._on_state_change is not None:
            self._on_state_change(self._name, previous, state)

    def _to_new_generation(self, now: float) -> None:
        self._generation += 1
        self._counts._clear()
        if self._state == State.CLOSED:
            self._expiry = None if self._interval == 0 else now + self._interval
        elif self._state == State.OPEN:
            self._expiry = now + self._timeout
        else:
            self._expiry = None


class TwoStepCircuitBreaker(Generic[T]):
    """A breaker that only admits requests; the caller reports each outcome."""

    def __init__(self, settings: Settings) -> None:
        self._breaker: CircuitBreaker[T] = CircuitBreaker(settings)

    @property
    def name(self) -> str:
        """The breaker's name."""
        return self._breaker.name

    @property
    def state(self) -> State:
        """The current state."""
        return self._breaker.state

    @property
    def counts(self) -> Counts:
        """A copy of the current counters."""
        return self._breaker.counts

    def allow(self) -> Callable[[bool], None]:
        """Admit one request and return a function to report whether it succeeded.

        Raises OpenStateError or TooManyRequestsError when refused.
        """
        generation = self._breaker._before_request()

        def done(success: bool) -> None:
            self._breaker._after_request(generation, success)

        return done
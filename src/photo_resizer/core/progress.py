"""Progress reporting and stale-result handling for pipeline callers."""

import threading
from typing import Callable, Generic, Optional, TypeVar

ProgressCallback = Callable[[float], None]

T = TypeVar("T")

# Checkpoints emitted by the orchestrator, in pipeline order.
STARTED = 5
DECODED = 15
INTERMEDIATE_READY = 25
SCALED = 40
RECOLORED = 45
BAND_DRAWN = 50
ENCODE_START = 65
ENCODE_SPAN = 30
ENCODED = 95
COMPLETE = 100


class ProgressReporter:
    """Forward progress to a callback, never letting it go backwards.

    Values are clamped to ``[0, 100]``; a value below the last reported one
    is reported again as the last value so the callback only ever sees a
    non-decreasing sequence.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self._last = 0.0

    @property
    def last(self) -> float:
        return self._last

    def report(self, percent: float) -> None:
        value = max(self._last, min(100.0, max(0.0, float(percent))))
        self._last = value
        if self._callback is not None:
            self._callback(value)

    __call__ = report


class LatestResultGate(Generic[T]):
    """Request-generation counter for callers that may start overlapping runs.

    Call :meth:`begin` before starting an invocation and pass the returned
    generation to :meth:`accept` with its result. Results from a generation
    older than the newest accepted one are rejected.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._issued = 0
        self._accepted = 0
        self._result: Optional[T] = None

    def begin(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def accept(self, generation: int, result: T) -> bool:
        with self._lock:
            if generation <= self._accepted:
                return False
            self._accepted = generation
            self._result = result
            return True

    def is_current(self, generation: int) -> bool:
        """True when no newer invocation has been started."""
        with self._lock:
            return generation == self._issued

    @property
    def result(self) -> Optional[T]:
        return self._result

"""Local progress estimate, independent of what the server reports."""

import time
from enum import Enum
from typing import Callable, Optional


class EstimatorState(str, Enum):
    """States of the local estimate."""

    IDLE = "idle"
    ESTIMATING = "estimating"
    PINNED = "pinned"
    DONE = "done"


# (upper bound, label) pairs checked in order
STAGE_LABELS = [
    (20, "Uploading file..."),
    (40, "Extracting text..."),
    (60, "Analyzing content..."),
    (80, "Generating insights..."),
    (100, "Finalizing report..."),
]


class LocalProgressEstimator:
    """Advances a fake progress value on a timer so the UI stays alive.

    The value grows by ``step`` per tick and stops at ``cap`` (below 100)
    until the poller learns the real outcome. Server state is never written
    into the estimate; the two only meet when the poller finishes.
    """

    def __init__(
        self,
        step: int = 10,
        cap: int = 90,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not 0 < cap < 100:
            raise ValueError(f"cap must be between 1 and 99, got {cap}")
        self._step = step
        self._cap = cap
        self._clock = clock
        self._value = 0
        self._state = EstimatorState.IDLE
        self._pinned_since: Optional[float] = None

    @property
    def value(self) -> int:
        return self._value

    @property
    def state(self) -> EstimatorState:
        return self._state

    @property
    def stage_label(self) -> str:
        """Activity label matching the current estimate."""
        if self._state == EstimatorState.DONE:
            return "Analysis complete!"
        for bound, label in STAGE_LABELS:
            if self._value < bound:
                return label
        return STAGE_LABELS[-1][1]

    def start(self) -> None:
        """Begin estimating from zero."""
        self._value = 0
        self._state = EstimatorState.ESTIMATING
        self._pinned_since = None

    def tick(self) -> int:
        """Advance one step; returns the new value."""
        if self._state != EstimatorState.ESTIMATING:
            return self._value

        self._value = min(self._cap, self._value + self._step)
        if self._value >= self._cap:
            self._state = EstimatorState.PINNED
            self._pinned_since = self._clock()
        return self._value

    def pinned_for(self) -> float:
        """Seconds spent at the cap (0 if not pinned)."""
        if self._state != EstimatorState.PINNED or self._pinned_since is None:
            return 0.0
        return self._clock() - self._pinned_since

    def finish(self) -> None:
        """Jump to 100 once the outcome is known."""
        self._value = 100
        self._state = EstimatorState.DONE

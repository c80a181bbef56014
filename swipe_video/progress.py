"""Progress timing helpers for per-frame rendering logs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from time import perf_counter
from typing import Callable


def format_duration(seconds: float) -> str:
    """Return a compact human-readable duration string."""
    total_seconds = int(round(seconds))
    if total_seconds <= 0:
        return "<1s"
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds_remaining = divmod(remainder, 60)
    if hours:
        return f"{hours}h{minutes:02d}m{seconds_remaining:02d}s"
    if minutes:
        return f"{minutes}m{seconds_remaining:02d}s"
    return f"{seconds_remaining}s"


def eta_string(elapsed: float, completed: int, total: int) -> str:
    """Format an ETA string given elapsed time and progress counters."""
    if completed <= 0 or total <= 0 or completed > total or elapsed <= 0.0:
        return "ETA estimating"

    remaining = max(0.0, elapsed * (total - completed) / completed)
    finish_time = datetime.now() + timedelta(seconds=remaining)
    return f"ETA {format_duration(remaining)} (finish {finish_time.strftime('%H:%M:%S')})"


class FrameProgress:
    """Count finished frames and log each one with percentage and ETA."""

    def __init__(
        self,
        total: int,
        *,
        logger: logging.Logger,
        label: str = "Frame",
        clock: Callable[[], float] = perf_counter,
    ) -> None:
        self.total = total
        self.logger = logger
        self.label = label
        self.completed = 0
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    def advance(self, detail: str = "") -> str:
        """Mark one more frame done and return the logged line."""
        self.completed += 1
        percent = (self.completed / self.total * 100.0) if self.total else 100.0
        message = (
            f"{self.label} {self.completed}/{self.total} ({percent:.1f}%) "
            f"{eta_string(self.elapsed, self.completed, self.total)}"
        )
        if detail:
            message = f"{message} - {detail}"
        self.logger.info(message)
        return message


__all__ = ["FrameProgress", "eta_string", "format_duration"]

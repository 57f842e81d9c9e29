"""Manual-clock scheduler standing in for an asyncio event loop."""

from collections.abc import Callable
from typing import Any


class FakeTimer:
    """Timer handle recorded by FakeScheduler."""

    def __init__(self, when: float, delay: float, callback: Callable[..., object], args: tuple[Any, ...]) -> None:
        self.when = when
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback regardless of cancellation, like a late event-loop callback."""
        self.fired = True
        self.callback(*self.args)


class FakeScheduler:
    """Scheduler with a manually advanced clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[..., object], *args: Any) -> FakeTimer:
        timer = FakeTimer(self.now + delay, delay, callback, args)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every due timer in order."""
        target = self.now + seconds + 1e-9
        while True:
            due = [t for t in self.pending if t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.now = timer.when
            timer.fire()
        self.now = max(self.now, target)

    def run_until_idle(self, max_steps: int = 100_000) -> int:
        """Fire pending timers until none remain; returns the number fired."""
        steps = 0
        while self.pending and steps < max_steps:
            timer = min(self.pending, key=lambda t: t.when)
            self.now = timer.when
            timer.fire()
            steps += 1
        return steps

"""Timed playback state machine over a TokenIndex."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any, Protocol

from src.token_stream.token_index import TokenIndex

logger = logging.getLogger(__name__)

ALLOWED_SPEEDS_MS: tuple[int, ...] = (50, 100, 200)
DEFAULT_SPEED_MS = 100


class PlaybackState(Enum):
    """Playback lifecycle states."""

    STOPPED = "stopped"
    PLAYING = "playing"


class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running."""
        ...


class Scheduler(Protocol):
    """Schedules delayed callbacks; ``asyncio.AbstractEventLoop`` satisfies it."""

    def call_later(self, delay: float, callback: Callable[..., object], *args: Any) -> TimerHandle:
        """Run callback(*args) after delay seconds."""
        ...


class _Tick:
    """A pending tick, bound to the generation it was scheduled against."""

    __slots__ = ("generation", "handle")

    def __init__(self, generation: int) -> None:
        self.generation = generation
        self.handle: TimerHandle | None = None


Listener = Callable[["PlaybackController"], None]


class PlaybackController:
    """Drives the cursor of a TokenIndex through time and discrete steps.

    Autoplay advances the cursor by one token per tick while PLAYING and
    stops by itself once every token is revealed. Any manual navigation
    (step, jump, seek) stops autoplay.

    A tick only acts if it is still the pending tick and the index has not
    been reset since it was scheduled; otherwise it does nothing. Ticks are
    also cancelled eagerly whenever playback stops.
    """

    def __init__(
        self,
        index: TokenIndex,
        scheduler: Scheduler,
        *,
        speed_ms: int = DEFAULT_SPEED_MS,
        allowed_speeds: Sequence[int] = ALLOWED_SPEEDS_MS,
    ) -> None:
        """Initialize a stopped controller.

        Args:
            index: Token index whose cursor is driven.
            scheduler: Source of delayed callbacks.
            speed_ms: Initial tick interval in milliseconds.
            allowed_speeds: Enumerated tick intervals accepted by set_speed.

        Raises:
            ValueError: If allowed_speeds is empty or speed_ms is not one of them.
        """
        if not allowed_speeds:
            raise ValueError("allowed_speeds must not be empty")
        if speed_ms not in allowed_speeds:
            raise ValueError(f"Speed {speed_ms}ms is not one of {list(allowed_speeds)}")

        self._index = index
        self._scheduler = scheduler
        self._allowed_speeds = tuple(allowed_speeds)
        self._speed_ms = speed_ms
        self._state = PlaybackState.STOPPED
        self._pending: _Tick | None = None
        self._listeners: list[Listener] = []

    @property
    def index(self) -> TokenIndex:
        return self._index

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def speed_ms(self) -> int:
        return self._speed_ms

    @property
    def allowed_speeds(self) -> tuple[int, ...]:
        return self._allowed_speeds

    @property
    def cursor(self) -> int:
        return self._index.cursor

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked after every state or cursor change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def play(self) -> None:
        """Start autoplay; does nothing if already playing or exhausted."""
        if self.is_playing or self._index.is_exhausted:
            return
        self._state = PlaybackState.PLAYING
        self._schedule_tick()
        logger.debug("Playback started at %d/%d", self._index.cursor, len(self._index))
        self._notify()

    def pause(self) -> None:
        """Stop autoplay, keeping the cursor where it is."""
        if not self.is_playing:
            return
        self._stop()
        self._notify()

    def toggle(self) -> None:
        """Pause if playing, otherwise play."""
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def set_speed(self, speed_ms: int) -> int:
        """Change the tick interval used from the next tick on.

        A tick that is already pending keeps its original delay. Values
        outside the allowed set are ignored.

        Args:
            speed_ms: Requested interval in milliseconds.

        Returns:
            The interval in effect after the call.
        """
        if speed_ms not in self._allowed_speeds:
            logger.warning("Ignoring speed %rms, allowed: %s", speed_ms, list(self._allowed_speeds))
            return self._speed_ms
        if speed_ms != self._speed_ms:
            self._speed_ms = speed_ms
            self._notify()
        return self._speed_ms

    def _schedule_tick(self) -> None:
        tick = _Tick(self._index.generation)
        self._pending = tick
        tick.handle = self._scheduler.call_later(self._speed_ms / 1000.0, self._on_tick, tick)

    def _on_tick(self, tick: _Tick) -> None:
        if tick is not self._pending or tick.generation != self._index.generation or not self.is_playing:
            logger.debug("Dropping stale tick (generation %d)", tick.generation)
            return
        self._pending = None

        if not self._index.is_exhausted:
            self._index.set_cursor(self._index.cursor + 1)

        if self._index.is_exhausted:
            self._state = PlaybackState.STOPPED
            logger.debug("Playback finished at %d tokens", len(self._index))
        else:
            self._schedule_tick()
        self._notify()

    def _stop(self) -> None:
        self._state = PlaybackState.STOPPED
        if self._pending is not None:
            if self._pending.handle is not None:
                self._pending.handle.cancel()
            self._pending = None

    def step_forward(self) -> None:
        self._seek(self._index.cursor + 1)

    def step_back(self) -> None:
        self._seek(self._index.cursor - 1)

    def jump_to_start(self) -> None:
        self._seek(0)

    def jump_to_end(self) -> None:
        self._seek(len(self._index))

    def jump_to(self, position: int) -> None:
        """Move the cursor to position, clamped into range, and stop."""
        self._seek(position)

    def select_token(self, token_index: int) -> None:
        """Seek so that the selected token is the last one revealed."""
        self._seek(token_index + 1)

    def _seek(self, position: int) -> None:
        self._stop()
        self._index.set_cursor(position)
        self._notify()

    def handle_key(self, key: str) -> bool:
        """Apply a keyboard command.

        Args:
            key: Key name ("ArrowLeft", "ArrowRight", " ", "Home", "End").

        Returns:
            True if the key was recognised.
        """
        action = _KEY_ACTIONS.get(key)
        if action is None:
            return False
        action(self)
        return True

    def reset(self, text: str) -> None:
        """Stop playback and replace the index contents with a new text."""
        self._stop()
        self._index.reset(text)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


_KEY_ACTIONS: dict[str, Callable[[PlaybackController], None]] = {
    "ArrowLeft": PlaybackController.step_back,
    "ArrowRight": PlaybackController.step_forward,
    " ": PlaybackController.toggle,
    "Home": PlaybackController.jump_to_start,
    "End": PlaybackController.jump_to_end,
}

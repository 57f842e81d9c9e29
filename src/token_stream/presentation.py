"""Per-step view data handed to an external renderer."""

import math
from dataclasses import dataclass

from src.token_stream.playback import PlaybackController, PlaybackState

TAB_MARKER = "→"
NEWLINE_MARKER = "⤶"
EMPTY_MARKER = "∅"


def format_token_label(text: str) -> str:
    """Make whitespace in a token visible for display."""
    return text.replace("\t", TAB_MARKER).replace("\n", NEWLINE_MARKER) or EMPTY_MARKER


@dataclass(frozen=True)
class TokenView:
    """Display data for one token.

    Attributes:
        index: Position of the token in the sequence.
        token_id: Vocabulary id of the token.
        text: Best-effort decoded text of this token alone.
        label: Text with tabs and newlines made visible.
        active: True if the token is revealed (index < cursor).
        is_newline: True if the token text contains a line break.
    """

    index: int
    token_id: int
    text: str
    label: str
    active: bool
    is_newline: bool


@dataclass(frozen=True)
class Frame:
    """Everything a renderer needs to draw one playback step."""

    prefix_text: str
    cursor: int
    total: int
    state: PlaybackState
    speed_ms: int
    tokens: tuple[TokenView, ...]

    @property
    def progress(self) -> float:
        """Fraction of tokens revealed, 0.0 for an empty document."""
        return self.cursor / self.total if self.total else 0.0

    @property
    def percent(self) -> int:
        """Percentage of tokens revealed, rounded half up."""
        return math.floor(self.progress * 100 + 0.5)

    @property
    def status(self) -> str:
        return f"Token {self.cursor} / {self.total}"


class PresentationBridge:
    """Builds frames from the state of a PlaybackController.

    Token labels depend only on the token sequence, so they are decoded once
    per index generation and reused across frames.
    """

    def __init__(self, controller: PlaybackController) -> None:
        self._controller = controller
        self._cached_generation = -1
        self._cached_texts: tuple[str, ...] = ()

    def _token_texts(self) -> tuple[str, ...]:
        index = self._controller.index
        if self._cached_generation != index.generation:
            self._cached_texts = tuple(index.token_text(i) for i in range(len(index)))
            self._cached_generation = index.generation
        return self._cached_texts

    def token_views(self) -> tuple[TokenView, ...]:
        """Views of every token, flagged active up to the cursor."""
        index = self._controller.index
        cursor = index.cursor
        return tuple(
            TokenView(
                index=i,
                token_id=token_id,
                text=text,
                label=format_token_label(text),
                active=i < cursor,
                is_newline="\n" in text,
            )
            for i, (token_id, text) in enumerate(zip(index.tokens, self._token_texts(), strict=True))
        )

    def frame(self) -> Frame:
        """Snapshot of the current playback step."""
        index = self._controller.index
        return Frame(
            prefix_text=index.current_prefix_text(),
            cursor=index.cursor,
            total=len(index),
            state=self._controller.state,
            speed_ms=self._controller.speed_ms,
            tokens=self.token_views(),
        )

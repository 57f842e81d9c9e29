"""Token sequence and playback cursor for one source text."""

import logging

from src.token_stream.errors import EncodeError, TokenDecodeError
from src.token_stream.tokenizer import TokenizerAdapter

logger = logging.getLogger(__name__)


class TokenIndex:
    """Holds the encoded tokens of the current text together with the cursor.

    The text, its tokens and the cursor are only ever replaced together by
    ``reset``. The cursor always lies in ``[0, len(tokens)]``.

    Each reset bumps ``generation``. Work scheduled against an older
    generation refers to a sequence that no longer exists.
    """

    def __init__(self, tokenizer: TokenizerAdapter, text: str = "") -> None:
        """Initialize the index and encode the initial text.

        Args:
            tokenizer: Shared tokenizer adapter.
            text: Initial source text.
        """
        self._tokenizer = tokenizer
        self._text = ""
        self._tokens: tuple[int, ...] = ()
        self._cursor = 0
        self._generation = 0
        self.reset(text)

    @property
    def text(self) -> str:
        """Source text the current tokens were produced from."""
        return self._text

    @property
    def tokens(self) -> tuple[int, ...]:
        """Current token sequence."""
        return self._tokens

    @property
    def cursor(self) -> int:
        """Number of tokens currently revealed."""
        return self._cursor

    @property
    def generation(self) -> int:
        """Counter incremented on every reset."""
        return self._generation

    @property
    def is_exhausted(self) -> bool:
        """True when every token has been revealed."""
        return self._cursor >= len(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def reset(self, text: str) -> None:
        """Replace the source text, re-encode it and rewind the cursor.

        Calling reset twice with the same text leaves the index in the same
        state; the existing tokens are reused instead of re-encoding.

        An encoding failure is not raised: the document is treated as having
        zero tokens so the text, tokens and cursor stay consistent.

        Args:
            text: New source text.
        """
        if self._generation > 0 and text == self._text:
            tokens = self._tokens
        else:
            try:
                tokens = self._tokenizer.encode(text)
            except EncodeError as e:
                logger.warning("Tokenization failed, treating document as empty: %s", e)
                tokens = ()

        self._text = text
        self._tokens = tokens
        self._cursor = 0
        self._generation += 1
        logger.info("Token index reset: generation=%d, %d chars, %d tokens", self._generation, len(text), len(tokens))

    def set_cursor(self, position: int) -> int:
        """Move the cursor, clamping it into ``[0, len(tokens)]``.

        Args:
            position: Requested cursor position; any integer is accepted.

        Returns:
            The cursor value actually stored.
        """
        self._cursor = max(0, min(position, len(self._tokens)))
        return self._cursor

    def current_prefix_text(self) -> str:
        """Text revealed by the first ``cursor`` tokens; empty at cursor 0."""
        if self._cursor == 0:
            return ""
        try:
            return self._tokenizer.decode_prefix(self._tokens[: self._cursor])
        except TokenDecodeError as e:
            logger.warning("Failed to decode prefix of %d tokens: %s", self._cursor, e)
            return ""

    def token_text(self, index: int) -> str:
        """Best-effort text of the token at ``index``, independent of the cursor.

        Raises:
            IndexError: If index is outside the token sequence.
        """
        if index < 0 or index >= len(self._tokens):
            raise IndexError(f"Token index {index} out of range (0-{len(self._tokens) - 1})")
        return self._tokenizer.token_text(self._tokens[index])

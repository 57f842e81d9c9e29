"""Sub-word tokenizer adapter built on a fixed tiktoken encoding.

The adapter is the only component that talks to tiktoken. It is constructed
once per encoding and then shared read-only by every consumer, so the
vocabulary load cost is paid a single time per process.

Note: prefix decoding is exact only for prefixes of a sequence produced by
``encode``. Decoding an arbitrary subset of ids (e.g. a single token for a
display label) is best effort, since one token may carry only part of a
multi-byte character.
"""

import codecs
import logging
from collections.abc import Sequence
from functools import lru_cache

import tiktoken

from src.token_stream.errors import EncodeError, TokenDecodeError, VocabularyLoadError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING_NAME = "o200k_base"


class TokenizerAdapter:
    """Encode text into token ids and decode ids back into text.

    Example:
        >>> tokenizer = TokenizerAdapter.from_encoding_name("o200k_base")
        >>> tokens = tokenizer.encode("Hello, world!")
        >>> tokenizer.decode(tokens)
        'Hello, world!'
    """

    def __init__(self, encoding: tiktoken.Encoding) -> None:
        """Wrap an already loaded encoding.

        Args:
            encoding: The tiktoken encoding to use for every call.
        """
        self._encoding = encoding

    @classmethod
    def from_encoding_name(cls, encoding_name: str = DEFAULT_ENCODING_NAME) -> "TokenizerAdapter":
        """Load a named tiktoken encoding.

        Args:
            encoding_name: Registered tiktoken encoding name (e.g. "o200k_base").

        Returns:
            A ready-to-use TokenizerAdapter.

        Raises:
            VocabularyLoadError: If the encoding is unknown or cannot be fetched.
        """
        try:
            encoding = tiktoken.get_encoding(encoding_name)
        except Exception as e:
            raise VocabularyLoadError(encoding_name, str(e) or type(e).__name__) from e

        logger.info("Loaded vocabulary %s (%d tokens)", encoding_name, encoding.n_vocab)
        return cls(encoding)

    @property
    def name(self) -> str:
        """Name of the underlying encoding."""
        return self._encoding.name

    @property
    def n_vocab(self) -> int:
        """Number of token ids in the vocabulary."""
        return self._encoding.n_vocab

    def encode(self, text: str) -> tuple[int, ...]:
        """Convert text to an immutable token sequence.

        Special-token markers inside the text (such as ``<|endoftext|>``) are
        encoded as ordinary text, so any user document can be tokenized.

        Args:
            text: Source text, possibly empty.

        Returns:
            Tuple of token ids; empty for empty text.

        Raises:
            EncodeError: If the underlying encoder fails.
        """
        if not text:
            return ()
        try:
            return tuple(self._encoding.encode(text, disallowed_special=()))
        except (ValueError, TypeError) as e:
            raise EncodeError(f"Failed to tokenize text ({len(text)} chars): {e}") from e

    def decode(self, tokens: Sequence[int]) -> str:
        """Convert token ids to text.

        Byte sequences that are not valid UTF-8 on their own are decoded with
        replacement characters.

        Args:
            tokens: Token ids, possibly empty.

        Returns:
            Decoded text.

        Raises:
            TokenDecodeError: If any id is not part of the vocabulary.
        """
        return self._decode_bytes(tokens).decode("utf-8", errors="replace")

    def decode_prefix(self, tokens: Sequence[int]) -> str:
        """Decode a prefix of an encoded sequence.

        A multi-byte character whose bytes are split across the boundary is
        withheld until the token that completes it is included, so the result
        is always a prefix of the original text.

        Args:
            tokens: The first k tokens of a sequence returned by ``encode``.

        Returns:
            Decoded prefix text.

        Raises:
            TokenDecodeError: If any id is not part of the vocabulary.
        """
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        return decoder.decode(self._decode_bytes(tokens), final=False)

    def token_text(self, token_id: int) -> str:
        """Best-effort text of a single token, for display labels."""
        return self.decode((token_id,))

    def _decode_bytes(self, tokens: Sequence[int]) -> bytes:
        if not tokens:
            return b""
        n_vocab = self._encoding.n_vocab
        for token in tokens:
            if not 0 <= token < n_vocab:
                raise TokenDecodeError(f"Token id {token} is outside the vocabulary (0-{n_vocab - 1})")
        try:
            return self._encoding.decode_bytes(list(tokens))
        except (KeyError, ValueError) as e:
            raise TokenDecodeError(f"Failed to decode {len(tokens)} tokens: {e}") from e


@lru_cache(maxsize=None)
def get_tokenizer(encoding_name: str = DEFAULT_ENCODING_NAME) -> TokenizerAdapter:
    """Return the process-wide adapter for an encoding, loading it on first use.

    Raises:
        VocabularyLoadError: If the encoding cannot be loaded.
    """
    return TokenizerAdapter.from_encoding_name(encoding_name)

"""Exception types for the token stream player."""


class TokenStreamError(Exception):
    """Base class for all token stream player errors."""


class VocabularyLoadError(TokenStreamError):
    """Raised when the token vocabulary cannot be loaded at startup."""

    def __init__(self, encoding_name: str, reason: str) -> None:
        """Initialize the exception with the failing encoding.

        Args:
            encoding_name: Name of the tiktoken encoding that failed to load.
            reason: Human-readable cause of the failure.
        """
        self.encoding_name = encoding_name
        self.reason = reason
        super().__init__(f"Failed to load vocabulary '{encoding_name}': {reason}")


class EncodeError(TokenStreamError):
    """Raised when text cannot be tokenized because of an adapter fault."""


class TokenDecodeError(TokenStreamError):
    """Raised when a token sequence contains ids unknown to the vocabulary."""


class ShareDecodeError(TokenStreamError, ValueError):
    """Raised when a share token is malformed or corrupted."""

    def __init__(self, message: str, token: str) -> None:
        """Initialize the exception with the offending token.

        Args:
            message: Description of what went wrong.
            token: The share token that failed to decode.
        """
        self.token = token
        preview = token if len(token) <= 32 else f"{token[:32]}..."
        super().__init__(f"{message} (token: {preview!r})")

"""Compact URL-safe encoding of source text for shareable links.

A share token is the UTF-8 source text, zlib-compressed and encoded with the
URL-safe base64 alphabet with padding stripped. Only the text is encoded;
restoring a token always starts playback from the beginning.
"""

import base64
import binascii
import re
import zlib
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from src.token_stream.errors import ShareDecodeError

DEFAULT_QUERY_PARAM = "md"

_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class ShareCodec:
    """Serialize source text to a share token and back.

    Example:
        >>> codec = ShareCodec()
        >>> codec.deserialize(codec.serialize("# Hello"))
        '# Hello'
    """

    def __init__(self, compression_level: int = 9) -> None:
        """Initialize the codec.

        Args:
            compression_level: zlib compression level (0-9).

        Raises:
            ValueError: If compression_level is outside 0-9.
        """
        if not 0 <= compression_level <= 9:
            raise ValueError(f"compression_level must be 0-9, got {compression_level}")
        self.compression_level = compression_level

    def serialize(self, text: str) -> str:
        """Compress text into a URL-safe share token."""
        compressed = zlib.compress(text.encode("utf-8"), self.compression_level)
        return base64.urlsafe_b64encode(compressed).rstrip(b"=").decode("ascii")

    def deserialize(self, token: str) -> str:
        """Restore the text encoded in a share token.

        Args:
            token: Share token produced by ``serialize``.

        Returns:
            The original text.

        Raises:
            ShareDecodeError: If the token is empty, uses characters outside the
                URL-safe alphabet, is truncated or has trailing data, or does
                not decompress to valid UTF-8.
        """
        if not _TOKEN_PATTERN.fullmatch(token):
            raise ShareDecodeError("Share token is empty or contains invalid characters", token)

        padded = token + "=" * (-len(token) % 4)
        try:
            compressed = base64.urlsafe_b64decode(padded)
        except (binascii.Error, ValueError) as e:
            raise ShareDecodeError(f"Share token is not valid base64: {e}", token) from e

        decompressor = zlib.decompressobj()
        try:
            raw = decompressor.decompress(compressed)
        except zlib.error as e:
            raise ShareDecodeError(f"Share token is corrupted: {e}", token) from e
        if not decompressor.eof:
            raise ShareDecodeError("Share token is truncated", token)
        if decompressor.unused_data:
            raise ShareDecodeError(f"Share token has {len(decompressor.unused_data)} bytes after the compressed data", token)

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ShareDecodeError(f"Share token does not contain UTF-8 text: {e}", token) from e


def build_share_url(base_url: str, token: str, query_param: str = DEFAULT_QUERY_PARAM) -> str:
    """Set the share token on a URL, keeping its other query parameters.

    Args:
        base_url: Address of the player (may already carry a query string).
        token: Share token from ``ShareCodec.serialize``.
        query_param: Name of the query parameter holding the token.

    Returns:
        The shareable URL.
    """
    parts = urlsplit(base_url)
    params = [(key, value) for key, values in parse_qs(parts.query, keep_blank_values=True).items() for value in values if key != query_param]
    params.append((query_param, token))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))


def extract_share_token(url: str, query_param: str = DEFAULT_QUERY_PARAM) -> str | None:
    """Return the share token carried by a URL, or None if absent or blank."""
    values = parse_qs(urlsplit(url).query).get(query_param)
    if not values:
        return None
    return values[0]

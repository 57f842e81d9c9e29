"""A player session tying the source text to tokens, playback and sharing."""

import logging
from collections.abc import Sequence

from src.config import Config
from src.token_stream.defaults import DEFAULT_DOCUMENT
from src.token_stream.errors import ShareDecodeError
from src.token_stream.playback import ALLOWED_SPEEDS_MS, DEFAULT_SPEED_MS, PlaybackController, Scheduler
from src.token_stream.presentation import PresentationBridge
from src.token_stream.share import DEFAULT_QUERY_PARAM, ShareCodec, build_share_url, extract_share_token
from src.token_stream.token_index import TokenIndex
from src.token_stream.tokenizer import TokenizerAdapter, get_tokenizer

logger = logging.getLogger(__name__)


class StreamSession:
    """Owns the source text of one player and everything derived from it.

    ``set_text`` is the only way to change the source text. It stops
    playback, re-encodes the text and rewinds the cursor in one step.
    """

    def __init__(
        self,
        tokenizer: TokenizerAdapter,
        scheduler: Scheduler,
        *,
        text: str = DEFAULT_DOCUMENT,
        codec: ShareCodec | None = None,
        speed_ms: int = DEFAULT_SPEED_MS,
        allowed_speeds: Sequence[int] = ALLOWED_SPEEDS_MS,
        query_param: str = DEFAULT_QUERY_PARAM,
    ) -> None:
        """Initialize the session with a text and a stopped controller.

        Args:
            tokenizer: Shared tokenizer adapter.
            scheduler: Source of delayed callbacks for autoplay.
            text: Initial source text.
            codec: Share codec; a default ShareCodec is used when omitted.
            speed_ms: Initial autoplay interval in milliseconds.
            allowed_speeds: Enumerated autoplay intervals.
            query_param: URL query parameter carrying share tokens.
        """
        self._codec = codec or ShareCodec()
        self._query_param = query_param
        self._index = TokenIndex(tokenizer, text)
        self._controller = PlaybackController(
            self._index,
            scheduler,
            speed_ms=speed_ms,
            allowed_speeds=allowed_speeds,
        )
        self._bridge = PresentationBridge(self._controller)

    @classmethod
    def from_config(cls, config: Config, scheduler: Scheduler, *, text: str = DEFAULT_DOCUMENT) -> "StreamSession":
        """Build a session from configuration.

        Raises:
            VocabularyLoadError: If the configured encoding cannot be loaded.
        """
        playback = config.get_playback_config()
        share = config.get_share_config()
        return cls(
            get_tokenizer(playback.encoding_name),
            scheduler,
            text=text,
            codec=ShareCodec(share.compression_level),
            speed_ms=playback.default_speed_ms,
            allowed_speeds=playback.speeds_ms,
            query_param=share.query_param,
        )

    @property
    def text(self) -> str:
        return self._index.text

    @property
    def index(self) -> TokenIndex:
        return self._index

    @property
    def controller(self) -> PlaybackController:
        return self._controller

    @property
    def bridge(self) -> PresentationBridge:
        return self._bridge

    def set_text(self, text: str) -> None:
        """Replace the source text; playback stops and restarts from token 0."""
        self._controller.reset(text)

    def restore(self, share_token: str) -> bool:
        """Replace the text with the one carried by a share token.

        A malformed token leaves the current text untouched.

        Returns:
            True if the text was restored.
        """
        try:
            text = self._codec.deserialize(share_token)
        except ShareDecodeError as e:
            logger.warning("Keeping current text, share token could not be restored: %s", e)
            return False

        self.set_text(text)
        logger.info("Restored %d chars from share token", len(text))
        return True

    def restore_from_url(self, url: str) -> bool:
        """Restore the text from the share token in a URL's query string.

        Returns:
            True if the URL carried a valid share token.
        """
        token = extract_share_token(url, self._query_param)
        if token is None:
            logger.debug("No '%s' parameter in URL, keeping current text", self._query_param)
            return False
        return self.restore(token)

    def share_token(self) -> str:
        """Compact token encoding the current source text."""
        return self._codec.serialize(self.text)

    def share_url(self, base_url: str) -> str:
        """Shareable URL reopening this session's text from the start."""
        return build_share_url(base_url, self.share_token(), self._query_param)

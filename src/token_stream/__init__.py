"""Token-by-token replay of a document, as a streaming LLM response would reveal it."""

from src.token_stream.errors import (
    EncodeError,
    ShareDecodeError,
    TokenDecodeError,
    TokenStreamError,
    VocabularyLoadError,
)
from src.token_stream.playback import PlaybackController, PlaybackState, Scheduler
from src.token_stream.presentation import Frame, PresentationBridge, TokenView, format_token_label
from src.token_stream.session import StreamSession
from src.token_stream.share import ShareCodec, build_share_url, extract_share_token
from src.token_stream.token_index import TokenIndex
from src.token_stream.tokenizer import TokenizerAdapter, get_tokenizer

__all__ = [
    "EncodeError",
    "Frame",
    "PlaybackController",
    "PlaybackState",
    "PresentationBridge",
    "Scheduler",
    "ShareCodec",
    "ShareDecodeError",
    "StreamSession",
    "TokenDecodeError",
    "TokenIndex",
    "TokenStreamError",
    "TokenView",
    "TokenizerAdapter",
    "VocabularyLoadError",
    "build_share_url",
    "extract_share_token",
    "format_token_label",
    "get_tokenizer",
]

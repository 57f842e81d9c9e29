"""Shared fixtures: a small offline vocabulary and a manual-clock scheduler."""

import pytest
import tiktoken

from src.token_stream.tokenizer import TokenizerAdapter
from tests.fakes import FakeScheduler

# GPT-2 style pre-tokenization: words keep their leading space.
PAT_STR = r"""'s|'t|'re|'ve|'m|'ll|'d| ?\p{L}+| ?\p{N}+| ?[^\s\p{L}\p{N}]+|\s+(?!\S)|\s+"""

# Every single byte is a token; a handful of multi-byte merges on top.
MERGES = [b" b", b" c", b"Hello", b" world", b"\n\n"]


def build_tiny_encoding() -> tiktoken.Encoding:
    """Byte-level encoding with a few merges, usable without network access."""
    ranks = {bytes([i]): i for i in range(256)}
    for offset, piece in enumerate(MERGES):
        ranks[piece] = 256 + offset
    return tiktoken.Encoding(
        name="tiny_test",
        pat_str=PAT_STR,
        mergeable_ranks=ranks,
        special_tokens={"<|endoftext|>": 300},
    )


@pytest.fixture(scope="session")
def tiny_encoding() -> tiktoken.Encoding:
    return build_tiny_encoding()


@pytest.fixture
def tokenizer(tiny_encoding: tiktoken.Encoding) -> TokenizerAdapter:
    return TokenizerAdapter(tiny_encoding)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()

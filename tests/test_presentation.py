"""Tests for frames and token views."""

import pytest

from src.token_stream.playback import PlaybackController, PlaybackState
from src.token_stream.presentation import Frame, PresentationBridge, format_token_label
from src.token_stream.token_index import TokenIndex
from src.token_stream.tokenizer import TokenizerAdapter

from tests.fakes import FakeScheduler


def _bridge(tokenizer: TokenizerAdapter, scheduler: FakeScheduler, text: str) -> tuple[PlaybackController, PresentationBridge]:
    controller = PlaybackController(TokenIndex(tokenizer, text), scheduler)
    return controller, PresentationBridge(controller)


class TestFormatTokenLabel:
    """Tests for format_token_label."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("word", "word"),
            (" b", " b"),
            ("\t", "→"),
            ("\n\n", "⤶⤶"),
            ("a\tb\nc", "a→b⤶c"),
            ("", "∅"),
        ],
    )
    def test_labels(self, text: str, expected: str) -> None:
        """Test that whitespace is made visible and empty text gets a marker."""
        assert format_token_label(text) == expected


class TestFrame:
    """Tests for the Frame value object."""

    def _frame(self, cursor: int, total: int) -> Frame:
        return Frame(prefix_text="", cursor=cursor, total=total, state=PlaybackState.STOPPED, speed_ms=100, tokens=())

    def test_empty_document_progress(self) -> None:
        """Test that an empty document reports 0% without dividing by zero."""
        frame = self._frame(0, 0)
        assert frame.progress == 0.0
        assert frame.percent == 0

    @pytest.mark.parametrize(("cursor", "total", "percent"), [(0, 3, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (1, 8, 13)])
    def test_percent_rounds_half_up(self, cursor: int, total: int, percent: int) -> None:
        """Test the rounded percentage."""
        assert self._frame(cursor, total).percent == percent

    def test_status(self) -> None:
        """Test the token counter text."""
        assert self._frame(2, 7).status == "Token 2 / 7"


class TestPresentationBridge:
    """Tests for PresentationBridge."""

    def test_frame_at_start(self, tokenizer: TokenizerAdapter, scheduler: FakeScheduler) -> None:
        """Test the frame before any token is revealed."""
        _, bridge = _bridge(tokenizer, scheduler, "a b c")
        frame = bridge.frame()
        assert frame.prefix_text == ""
        assert frame.cursor == 0
        assert frame.total == 3
        assert frame.state is PlaybackState.STOPPED
        assert frame.speed_ms == 100
        assert [view.active for view in frame.tokens] == [False, False, False]

    def test_frame_tracks_cursor(self, tokenizer: TokenizerAdapter, scheduler: FakeScheduler) -> None:
        """Test that active flags and prefix follow the cursor."""
        controller, bridge = _bridge(tokenizer, scheduler, "a b c")
        controller.jump_to(2)
        frame = bridge.frame()
        assert frame.prefix_text == "a b"
        assert [view.active for view in frame.tokens] == [True, True, False]
        assert [view.text for view in frame.tokens] == ["a", " b", " c"]
        assert [view.index for view in frame.tokens] == [0, 1, 2]
        assert [view.token_id for view in frame.tokens] == list(controller.index.tokens)

    def test_frame_while_playing(self, tokenizer: TokenizerAdapter, scheduler: FakeScheduler) -> None:
        """Test that the frame reports the playing state."""
        controller, bridge = _bridge(tokenizer, scheduler, "a b c")
        controller.play()
        scheduler.advance(0.1)
        frame = bridge.frame()
        assert frame.state is PlaybackState.PLAYING
        assert frame.prefix_text == "a"

    def test_newline_tokens_are_flagged(self, tokenizer: TokenizerAdapter, scheduler: FakeScheduler) -> None:
        """Test that tokens containing a line break are marked and labelled."""
        _, bridge = _bridge(tokenizer, scheduler, "Hello\n\nworld")
        views = bridge.token_views()
        newline_views = [view for view in views if view.is_newline]
        assert newline_views
        assert all("⤶" in view.label for view in newline_views)
        assert not any(view.is_newline for view in views if "\n" not in view.text)

    def test_labels_follow_text_changes(self, tokenizer: TokenizerAdapter, scheduler: FakeScheduler) -> None:
        """Test that cached labels are rebuilt after the text changes."""
        controller, bridge = _bridge(tokenizer, scheduler, "a b c")
        assert [view.text for view in bridge.token_views()] == ["a", " b", " c"]
        controller.reset("Hello world")
        assert [view.text for view in bridge.token_views()] == ["Hello", " world"]

    def test_empty_document(self, tokenizer: TokenizerAdapter, scheduler: FakeScheduler) -> None:
        """Test the frame of an empty document."""
        _, bridge = _bridge(tokenizer, scheduler, "")
        frame = bridge.frame()
        assert frame.tokens == ()
        assert frame.percent == 0
        assert frame.status == "Token 0 / 0"

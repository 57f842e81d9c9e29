"""Token Stream Player - command-line entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TextIO

from src.config import Config
from src.token_stream.defaults import DEFAULT_DOCUMENT
from src.token_stream.errors import ShareDecodeError, TokenStreamError
from src.token_stream.playback import PlaybackController
from src.token_stream.session import StreamSession
from src.token_stream.share import ShareCodec, extract_share_token

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"


def read_document(source: str | None) -> str:
    """Read the document to play.

    Args:
        source: File path, "-" for stdin, or None for the built-in document.

    Returns:
        Document text.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if source is None:
        return DEFAULT_DOCUMENT
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Document not found: {path}")
    return path.read_text(encoding="utf-8")


def _open_session(args: argparse.Namespace, config: Config) -> StreamSession:
    session = StreamSession.from_config(config, asyncio.get_running_loop(), text=read_document(args.file))
    if args.from_url:
        session.restore_from_url(args.from_url)
    return session


async def replay(session: StreamSession, out: TextIO) -> int:
    """Stream the session's document to ``out`` until playback stops.

    Returns:
        Number of tokens revealed.

    Raises:
        OSError: If writing to ``out`` fails; playback is paused first.
    """
    finished = asyncio.Event()
    written = 0
    write_error: OSError | None = None

    def on_change(controller: PlaybackController) -> None:
        nonlocal written, write_error
        if write_error is not None:
            return
        text = session.index.current_prefix_text()
        try:
            out.write(text[written:])
            out.flush()
        except OSError as e:
            write_error = e
            finished.set()
            controller.pause()
            return
        written = len(text)
        if not controller.is_playing:
            finished.set()

    controller = session.controller
    controller.add_listener(on_change)
    try:
        controller.play()
        if controller.is_playing:
            await finished.wait()
    finally:
        controller.remove_listener(on_change)
    if write_error is not None:
        raise write_error
    out.write("\n")
    return controller.cursor


async def _cmd_replay(args: argparse.Namespace, config: Config) -> int:
    session = _open_session(args, config)
    if args.speed is not None:
        session.controller.set_speed(args.speed)
    logger.info("Replaying %d tokens at %dms per token", len(session.index), session.controller.speed_ms)
    await replay(session, sys.stdout)
    return 0


async def _cmd_tokens(args: argparse.Namespace, config: Config) -> int:
    session = _open_session(args, config)
    session.controller.jump_to_end()
    frame = session.bridge.frame()
    for view in frame.tokens:
        print(f"{view.index:>6}  {view.token_id:>7}  {view.label}")
    print(f"Showing all {frame.total} tokens.")
    return 0


async def _cmd_share(args: argparse.Namespace, config: Config) -> int:
    session = _open_session(args, config)
    print(session.share_url(args.base_url or config.get_share_config().base_url))
    return 0


async def _cmd_restore(args: argparse.Namespace, config: Config) -> int:
    share = config.get_share_config()
    token = extract_share_token(args.token, share.query_param) if "?" in args.token else args.token
    if token is None:
        print(f"Error: no '{share.query_param}' parameter in {args.token}", file=sys.stderr)
        return 1
    try:
        text = ShareCodec(share.compression_level).deserialize(token)
    except ShareDecodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    sys.stdout.write(text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(prog="token-stream", description="Replay a document token by token")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to config.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_document_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("file", nargs="?", help="Document to play ('-' for stdin, default: built-in demo)")
        sub.add_argument("--from-url", help="Restore the document from a share URL")

    replay_parser = subparsers.add_parser("replay", help="Stream the document to stdout")
    add_document_args(replay_parser)
    replay_parser.add_argument("--speed", type=int, help="Milliseconds per token (one of the configured speeds)")
    replay_parser.set_defaults(handler=_cmd_replay)

    tokens_parser = subparsers.add_parser("tokens", help="List every token of the document")
    add_document_args(tokens_parser)
    tokens_parser.set_defaults(handler=_cmd_tokens)

    share_parser = subparsers.add_parser("share", help="Print a share URL for the document")
    add_document_args(share_parser)
    share_parser.add_argument("--base-url", help="Override the configured base URL")
    share_parser.set_defaults(handler=_cmd_share)

    restore_parser = subparsers.add_parser("restore", help="Print the document carried by a share token or URL")
    restore_parser.add_argument("token", help="Share token or URL containing one")
    restore_parser.set_defaults(handler=_cmd_restore)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main function to run the CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = Config(args.config)
        exit_code = asyncio.run(args.handler(args, config))
    except BrokenPipeError:
        # Reader went away (e.g. piped into head)
        logger.debug("Output closed by reader, stopping")
        sys.exit(1)
    except (TokenStreamError, FileNotFoundError, KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""Room publisher: publish synthetic audio and video into a LiveKit room.

Usage:
    # Publish until Ctrl-C
    room-publisher --url wss://example.livekit.cloud --token <token>

    # Credentials from the environment (or env.local)
    LIVEKIT_URL=wss://... LIVEKIT_TOKEN=... room-publisher

    # Check that the SDK can be set up and torn down, without connecting
    room-publisher --self-test
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass

from loguru import logger

from room_publisher.app_config import get_app_environ_config
from room_publisher.domain.publisher import LifecycleController, ShutdownSignal
from room_publisher.schemas import PublisherSettings
from room_publisher.services.integrations.livekit_service import (
    LivekitSession,
    LogSink,
    livekit_runtime,
)
from room_publisher.shared.logger import init_logger
from room_publisher.utils.app_errors import AppErrorCode, UsageError

PROG = "room-publisher"

USAGE = (
    "Usage:\n"
    "  {prog} --url <ws-url> --token <token>\n"
    "Env fallbacks:\n"
    "  LIVEKIT_URL, LIVEKIT_TOKEN\n"
)


HELP_FLAGS = ("-h", "--help")
SELF_TEST_FLAGS = ("--self-test",)


def _first_index(argv: list[str], flags: tuple[str, ...]) -> int:
    return next((i for i, arg in enumerate(argv) if arg in flags), len(argv))


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise UsageError(message)


@dataclass
class CliOptions:
    url: str = ""
    token: str = ""
    self_test: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, add_help=False, allow_abbrev=False)
    parser.add_argument(*HELP_FLAGS, action="store_true", help="Show usage and exit")
    parser.add_argument("--url", default="", help="LiveKit server URL (ws:// or wss://)")
    parser.add_argument("--token", default="", help="Access token for the room")
    parser.add_argument(
        *SELF_TEST_FLAGS,
        action="store_true",
        help="Initialize and shut down the SDK without connecting",
    )
    return parser


def parse_args(argv: list[str]) -> CliOptions:
    """Parse CLI arguments, falling back to LIVEKIT_URL / LIVEKIT_TOKEN.

    Raises:
        UsageError: On help, malformed flags, or a missing url/token
    """
    args, unknown = build_parser().parse_known_args(argv)
    if unknown:
        logger.debug(f"Ignoring unknown arguments: {unknown}")

    # Whichever of help and self-test appears first wins
    if args.help or args.self_test:
        if _first_index(argv, SELF_TEST_FLAGS) < _first_index(argv, HELP_FLAGS):
            return CliOptions(self_test=True)
        raise UsageError("Help requested")

    cfg = get_app_environ_config()
    url = args.url or cfg.LIVEKIT_URL or ""
    token = args.token or cfg.LIVEKIT_TOKEN or ""
    if not url or not token:
        raise UsageError("Both url and token are required", errcode=AppErrorCode.E_MISSING_ARGUMENT)

    return CliOptions(url=url, token=token)


def print_usage() -> None:
    print(USAGE.format(prog=PROG), file=sys.stderr, end="", flush=True)


def run_self_test() -> int:
    livekit_runtime.initialize(LogSink.CONSOLE)
    livekit_runtime.shutdown()
    print("self-test ok", flush=True)
    return 0


async def run_publisher(
    options: CliOptions,
    *,
    session: LivekitSession | None = None,
    shutdown: ShutdownSignal | None = None,
    settings: PublisherSettings | None = None,
) -> int:
    shutdown = shutdown or ShutdownSignal()
    shutdown.install()
    livekit_runtime.initialize(LogSink.CONSOLE)
    try:
        controller = LifecycleController(
            session or LivekitSession(),
            shutdown,
            settings=settings,
        )
        return await controller.run(options.url, options.token)
    finally:
        livekit_runtime.shutdown()
        shutdown.restore()


def main(argv: list[str] | None = None) -> int:
    init_logger()

    try:
        options = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as exc:
        logger.debug(f"{exc.errcode} {exc.erresid} msg={exc.errmesg}")
        print_usage()
        return 1

    if options.self_test:
        return run_self_test()

    return asyncio.run(run_publisher(options))


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()

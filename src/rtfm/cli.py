"""CLI bootstrap entry point for rtfm."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import time
import traceback
from typing import Optional, Sequence

from . import __version__
from .catalog import load_catalog
from .command_index import CommandIndex
from .config import load_config, validate_section
from .constants import APP_NAME
from .cache import DocumentCache
from .errors import AppError, ConfigError, ParseFailure, UsageError
from .fetch import FetchCoordinator
from .formatters import (
    format_command_names,
    format_document,
    format_help,
    format_search_results,
)
from .logging import build_run_log_path, log_event, setup_logging
from .models import AppConfig, DocumentKey, SourceKind
from .path_utils import map_path
from .providers import SubprocessProvider
from .session import SessionController
from .time_utils import elapsed_ms

COMMANDS = ("search", "getman", "getmans", "help", "version")


def _map_cli_arg(path: Optional[str], arg_name: str) -> Optional[str]:
    """Map CLI path argument with descriptive error messages.

    Raises:
        UsageError: With descriptive message including arg_name
    """
    if path is None:
        return None
    try:
        return map_path(path)
    except ValueError as e:
        raise UsageError(f"Invalid {arg_name} path: {e}") from e


def _section_arg(value: Optional[int], option: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return validate_section(value, option)
    except ConfigError as e:
        raise UsageError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="rtfm - browse man and tldr pages with instant prefix search",
        add_help=False,
    )
    parser.add_argument(
        "-m", "--manpage", type=int, metavar="N", help="Default man section (1-9)"
    )
    parser.add_argument(
        "-s", "--section", type=int, metavar="N", help="Man section for getman"
    )
    parser.add_argument("-l", "--log", help="Path to log file (optional)")
    parser.add_argument("--config", help="Path to config file (optional)")
    parser.add_argument("-h", "--help", action="store_true", help="Show help")
    parser.add_argument(
        "-V", "--version", action="version", version=f"{APP_NAME} {__version__}"
    )
    parser.add_argument("command", nargs="?", help=f"One of: {', '.join(COMMANDS)}")
    parser.add_argument("args", nargs="*", help="Command arguments")
    return parser


def _build_provider(config: AppConfig) -> SubprocessProvider:
    return SubprocessProvider(
        timeout=config.fetch_timeout_sec,
        man_width=config.man_width,
    )


def _single_arg(args: argparse.Namespace, usage: str) -> str:
    if len(args.args) != 1 or not args.args[0].strip():
        raise UsageError(f"Usage: {APP_NAME} {usage}")
    return args.args[0]


async def _build_index(config: AppConfig) -> CommandIndex:
    entries = await load_catalog(_build_provider(config))
    return CommandIndex.build(entries)


async def run_search(config: AppConfig, query: str, *, names_only: bool) -> str:
    index = await _build_index(config)
    entries = index.prefix_query(query)
    if names_only:
        return format_command_names(entries)
    return format_search_results(entries)


async def run_getman(config: AppConfig, command: str, section: int) -> str:
    """Fetch and render one man page as plain text.

    Raises:
        FetchError: If the page does not exist or man fails
    """
    coordinator = FetchCoordinator(_build_provider(config), DocumentCache(1))
    result = await coordinator.get_or_fetch(DocumentKey(command, section, SourceKind.MAN))
    if result.error is not None and not isinstance(result.error, ParseFailure):
        raise result.error
    assert result.document is not None
    return format_document(result.document)


async def run_session(config: AppConfig) -> str:
    from .ui import run_interactive

    index = await _build_index(config)
    coordinator = FetchCoordinator(
        _build_provider(config), DocumentCache(config.cache_capacity)
    )
    controller = SessionController(
        index,
        coordinator,
        default_section=config.default_section,
        debounce_interval=config.debounce_sec,
        auto_preview=config.auto_preview,
    )
    return await run_interactive(controller)


def _dispatch(args: argparse.Namespace, config: AppConfig) -> Optional[str]:
    """Run the selected command; returns text to print, if any."""
    command = args.command
    if command == "search":
        query = _single_arg(args, "search <query>")
        return asyncio.run(run_search(config, query, names_only=False))
    if command == "getmans":
        prefix = _single_arg(args, "getmans <prefix>")
        return asyncio.run(run_search(config, prefix, names_only=True))
    if command == "getman":
        name = _single_arg(args, "getman <command> [--section N]")
        section = args.section if args.section is not None else config.default_section
        return asyncio.run(run_getman(config, name, section))

    if args.args:
        raise UsageError(f"Unexpected arguments: {' '.join(args.args)}")
    asyncio.run(run_session(config))
    return None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the rtfm CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    app_started = time.perf_counter()

    if args.help or args.command == "help":
        print(format_help(APP_NAME))
        sys.exit(0)
    if args.command == "version":
        print(f"{APP_NAME} {__version__}")
        sys.exit(0)

    mode = args.command or "interactive"
    try:
        if args.command is not None and args.command not in COMMANDS:
            raise UsageError(
                f"unknown command '{args.command}'. Supported commands: {', '.join(COMMANDS)}"
            )
        if args.section is not None and args.command != "getman":
            raise UsageError("--section is only valid with getman")

        config = load_config(_map_cli_arg(args.config, "config"))
        manpage = _section_arg(args.manpage, "--manpage")
        if manpage is not None:
            config.default_section = manpage
        args.section = _section_arg(args.section, "--section")

        log_path = _map_cli_arg(args.log, "log")
        if log_path is None and config.logs_dir:
            log_path = build_run_log_path(config.logs_dir)
        setup_logging(log_path)

        log_event(
            "app_start",
            mode=mode,
            default_section=config.default_section,
            config_file=config.config_path,
            log_file=log_path,
            cache_capacity=config.cache_capacity,
            debounce_ms=config.debounce_ms,
            fetch_timeout_sec=config.fetch_timeout_sec,
        )

        output = _dispatch(args, config)
        if output is not None:
            print(output)

        log_event(
            "app_stop",
            reason="normal",
            uptime_ms=elapsed_ms(app_started, time.perf_counter()),
        )
    except KeyboardInterrupt:
        log_event(
            "app_stop",
            reason="keyboard_interrupt",
            uptime_ms=elapsed_ms(app_started, time.perf_counter()),
        )
        sys.exit(0)
    except AppError as e:
        print(f"Error: {e}", file=sys.stderr)
        log_event(
            "app_stop",
            level=logging.ERROR,
            reason="error",
            error_type=type(e).__name__,
            error=str(e),
            uptime_ms=elapsed_ms(app_started, time.perf_counter()),
        )
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if os.environ.get("RTFM_DEBUG"):
            traceback.print_exc()
        log_event(
            "app_stop",
            level=logging.ERROR,
            reason="fatal_error",
            error_type=type(e).__name__,
            error=str(e),
            uptime_ms=elapsed_ms(app_started, time.perf_counter()),
        )
        logging.error("Fatal error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

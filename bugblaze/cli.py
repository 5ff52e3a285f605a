"""Command-line entry point for ``bugblaze``.

Parses arguments, loads the configuration once, applies premium gating and
runs the selected command handler under ``asyncio.run``. Handled failures
(``BugBlazeError``) are rendered as friendly messages at this boundary.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Sequence

from dotenv import find_dotenv, load_dotenv
from rich.markup import escape

from bugblaze import __version__
from bugblaze.chat import cmd_chat
from bugblaze.commands import (
    GENERATE_TYPES,
    cmd_analyze,
    cmd_config,
    cmd_fun,
    cmd_generate,
    cmd_health_scan,
    cmd_init,
    cmd_mentor,
)
from bugblaze.config import AppConfig
from bugblaze.errors import BugBlazeError, ConfigError, EmptyResultError
from bugblaze.premium import is_allowed
from bugblaze.utils import console, print_hint, print_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bugblaze",
        description="BugBlaze -- syntax diagnostics and AI help for your code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  bugblaze fun app.py --explain\n"
            "  bugblaze generate codebase \"todo app with react and express\"\n"
            "  bugblaze config set apikey <your-groq-api-key>\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", metavar="<command>")

    fun = sub.add_parser("fun", help="Detect syntax errors in a file")
    fun.add_argument("file", help="Source file to check")
    fun.add_argument("--explain", action="store_true", help="Explain the first error with AI")

    analyze = sub.add_parser("analyze", help="Find logical or runtime issues in a file")
    analyze.add_argument("file", help="Source file to analyze")

    generate = sub.add_parser("generate", help="Generate a codebase, tests, docs or a refactor (premium)")
    generate.add_argument("type", choices=GENERATE_TYPES, help="What to generate")
    generate.add_argument("input", help="Project description (codebase) or source file")

    scan = sub.add_parser("health-scan", help="Scan a whole project (premium)")
    scan.add_argument("path", nargs="?", default=".", help="Project directory (default: .)")

    mentor = sub.add_parser("mentor", help="Get a mentoring review of a file (premium)")
    mentor.add_argument("file", help="Source file to review")

    sub.add_parser("chat", help="Interactive chat about your code (premium)")

    config = sub.add_parser("config", help="Manage the local configuration")
    config.add_argument("action", nargs="?", choices=("set", "show", "delete"), help="Config action")
    config.add_argument("key", nargs="?", help="apikey or licensekey")
    config.add_argument("value", nargs="?", help="Value to store")

    sub.add_parser("init", help="Create a config file and show what BugBlaze can do")
    return parser


async def dispatch(args: argparse.Namespace, config: AppConfig) -> Any:
    """Run the handler for the parsed command."""
    command = args.command
    if command == "fun":
        return await cmd_fun(config, args.file, explain=args.explain)
    if command == "analyze":
        return await cmd_analyze(config, args.file)
    if command == "generate":
        return await cmd_generate(config, args.type, args.input)
    if command == "health-scan":
        return await cmd_health_scan(config, args.path)
    if command == "mentor":
        return await cmd_mentor(config, args.file)
    if command == "chat":
        return await cmd_chat(config)
    if command == "config":
        return await cmd_config(config, args.action, args.key, args.value)
    if command == "init":
        return await cmd_init(config)
    raise ValueError(f"Unknown command: {command}")


def render_error(exc: BugBlazeError) -> None:
    if isinstance(exc, EmptyResultError):
        print_warning(escape(str(exc)))
    else:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    if exc.hint:
        print_hint(escape(exc.hint))


def run(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, run the command and return the process exit code."""
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        config = AppConfig.load()
    except ConfigError as exc:
        if args.command != "config" or args.action != "delete":
            render_error(exc)
            return 1
        # A corrupt file can still be removed.
        config = AppConfig()

    if not is_allowed(args.command, config):
        print_warning(f"'{args.command}' is a premium feature.")
        print_hint("Activate it with: bugblaze config set licensekey <your-license-key>")
        return 0

    try:
        asyncio.run(dispatch(args, config))
    except ConfigError as exc:
        render_error(exc)
        return 1
    except BugBlazeError as exc:
        render_error(exc)
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/dim]")
        return 130
    return 0


def main() -> None:
    """Console-script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()

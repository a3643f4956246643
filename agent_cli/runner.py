"""Entry point for the CLI: load settings, discover extensions, run the command loop."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Sequence

from dotenv import load_dotenv

from agent_cli.cli import parse_args, split_names
from agent_cli.commands import (
    NO_EXTENSIONS_MESSAGE,
    CommandDispatcher,
    CommandResult,
    build_dispatcher,
    parse_command,
)
from agent_cli.extensions import (
    DiagnosticLog,
    Extension,
    ExtensionSession,
    discover_extensions,
    load_context_text,
)
from agent_cli.logging_config import setup_logging
from agent_cli.settings import get_setting, load_settings

logger = logging.getLogger(__name__)

_EXIT_COMMANDS = ("quit", "exit")


def _setting_names(settings: dict[str, Any], path: str) -> list[str]:
    """Names from a settings key that may hold a list or one comma-separated string."""
    value = get_setting(settings, path)
    if isinstance(value, str):
        return split_names([value]) or []
    if isinstance(value, list):
        return split_names([str(v) for v in value if v is not None]) or []
    return []


def build_session(
    workspace: Path,
    settings: dict[str, Any],
    args: argparse.Namespace,
    home_dir: Path | None = None,
    diagnostics: DiagnosticLog | None = None,
) -> ExtensionSession:
    """Discover extensions and compute the startup activation. Flags override settings."""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    extensions = discover_extensions(workspace, home_dir, diagnostics)
    enabled_names = (
        args.extensions
        if args.extensions is not None
        else _setting_names(settings, "extensions.enabled")
    )
    additional = _setting_names(settings, "extensions.additional_enabled")
    additional.extend(args.enable_extension or [])
    session = ExtensionSession(extensions, enabled_names, additional)
    session.active_extensions(diagnostics)
    return session


def format_extension_list(extensions: Sequence[Extension]) -> str:
    """Output of --list-extensions."""
    if not extensions:
        return NO_EXTENSIONS_MESSAGE
    return "\n".join(f"{ext.name} (v{ext.version})" for ext in extensions)


def _render(result: CommandResult) -> None:
    stream = sys.stderr if result.message_type == "error" else sys.stdout
    print(result.content, file=stream)
    print(file=stream)


def _log_session_resources(session: ExtensionSession, settings: dict[str, Any]) -> None:
    servers = session.mcp_servers(get_setting(settings, "mcp_servers", {}) or {})
    excluded = session.excluded_tools()
    context = load_context_text(session.context_files())
    logger.info(
        "Session resources: %d tool server(s), %d excluded tool(s), %d chars of context",
        len(servers),
        len(excluded),
        len(context),
    )


async def run_interactive(
    session: ExtensionSession,
    dispatcher: CommandDispatcher,
    read_line: Callable[[str], str] = input,
) -> None:
    """Read lines until EOF or /quit; slash commands are dispatched one at a time."""
    while True:
        try:
            line = await asyncio.to_thread(read_line, "> ")
        except (EOFError, KeyboardInterrupt):
            logger.info("CLI input stream closed")
            break
        line = line.strip()
        if not line:
            continue
        command = parse_command(line)
        if command is None:
            print("Only slash commands are available here. Try /help.")
            continue
        if command.name in _EXIT_COMMANDS:
            break
        if command.name == "help":
            for help_text in dispatcher.help.values():
                print(help_text)
            print()
            continue
        _render(await dispatcher.dispatch(command))


def main(argv: Sequence[str] | None = None) -> int:
    """Synchronous entry for the CLI process."""
    args = parse_args(argv)
    workspace = Path(args.workspace).absolute() if args.workspace else Path.cwd()
    load_dotenv(workspace / ".env")
    settings = load_settings(workspace / ".gemini")
    setup_logging(workspace, settings, verbose=args.verbose)

    diagnostics = DiagnosticLog()
    session = build_session(workspace, settings, args, diagnostics=diagnostics)
    if not (args.verbose or get_setting(settings, "logging.log_to_console", False)):
        # console logging is off, so skipped entries would only reach the log file
        for record in diagnostics.warnings:
            print(record.message, file=sys.stderr)
    if args.list_extensions:
        print(format_extension_list(session.all_extensions))
        return 0

    _log_session_resources(session, settings)
    try:
        asyncio.run(run_interactive(session, build_dispatcher(session)))
    except KeyboardInterrupt:
        pass
    return 0


__all__ = ["build_session", "format_extension_list", "main", "run_interactive"]

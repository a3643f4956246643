"""Slash commands: parser, /extensions handler and dispatch table."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal

from agent_cli.extensions.session import ExtensionSession

logger = logging.getLogger(__name__)

MessageType = Literal["info", "error"]

EXTENSIONS_USAGE = "Usage: /extensions <list|enable|disable> [extension_name]"
NO_EXTENSIONS_MESSAGE = "No extensions installed."


@dataclass(frozen=True)
class CommandResult:
    """What a command hands back to the CLI for rendering."""

    message_type: MessageType
    content: str
    type: str = "message"

    @classmethod
    def info(cls, content: str) -> "CommandResult":
        return cls(message_type="info", content=content)

    @classmethod
    def error(cls, content: str) -> "CommandResult":
        return cls(message_type="error", content=content)


@dataclass
class ParsedCommand:
    """A parsed slash command."""

    name: str
    args: str
    raw: str


def parse_command(text: str) -> ParsedCommand | None:
    """Parse a /command from input text.

    Returns None if text does not start with '/'.
    """
    stripped = text.strip()
    if not stripped.startswith("/"):
        return None
    parts = stripped.split(maxsplit=1)
    args = parts[1] if len(parts) > 1 else ""
    return ParsedCommand(name=parts[0][1:], args=args, raw=stripped)


class ExtensionsCommand:
    """/extensions list|enable|disable. Mutates only the session's override flags."""

    name = "extensions"
    description = "Manage extensions for the current session"

    def __init__(self, session: ExtensionSession) -> None:
        self._session = session

    async def handle(self, args: str) -> CommandResult:
        parts = args.split()
        subcommand = parts[0] if parts else ""
        extension_name = parts[1] if len(parts) > 1 else ""

        if not subcommand:
            return CommandResult.error(EXTENSIONS_USAGE)
        if subcommand == "list":
            return self._list()
        if subcommand in ("enable", "disable"):
            if not extension_name:
                return CommandResult.error(
                    f"Usage: /extensions {subcommand} <extension_name>"
                )
            if subcommand == "enable":
                await self._session.enable_extension(extension_name)
                return CommandResult.info(
                    f'Enabled extension "{extension_name}" for this session.'
                )
            await self._session.disable_extension(extension_name)
            return CommandResult.info(
                f'Disabled extension "{extension_name}" for this session.'
            )
        return CommandResult.error(f"Unknown subcommand: {subcommand}. {EXTENSIONS_USAGE}")

    def _list(self) -> CommandResult:
        all_extensions = self._session.all_extensions
        if not all_extensions:
            return CommandResult.info(NO_EXTENSIONS_MESSAGE)
        active = {e.key for e in self._session.active_extensions()}
        lines = ["Available extensions:"]
        for ext in all_extensions:
            status = "enabled" if ext.key in active else "disabled"
            lines.append(f"- {ext.name} (v{ext.version}) ({status})")
        return CommandResult.info("\n".join(lines))


Handler = Callable[[str], Awaitable[CommandResult]]


class CommandDispatcher:
    """Routes parsed slash commands to registered handlers by name."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        help_text: str = "",
        aliases: tuple[str, ...] = (),
    ) -> None:
        for key in (name, *aliases):
            self._handlers[key] = handler
        self._help[name] = help_text

    @property
    def help(self) -> dict[str, str]:
        return dict(self._help)

    async def dispatch(self, command: ParsedCommand) -> CommandResult:
        handler = self._handlers.get(command.name)
        if handler is None:
            return CommandResult.error(f"Unknown command: /{command.name}")
        logger.debug("Dispatching /%s %s", command.name, command.args)
        return await handler(command.args)


def build_dispatcher(session: ExtensionSession) -> CommandDispatcher:
    dispatcher = CommandDispatcher()
    extensions = ExtensionsCommand(session)
    dispatcher.register(
        extensions.name,
        extensions.handle,
        help_text=f"{EXTENSIONS_USAGE}: {extensions.description}",
        aliases=("extension",),
    )
    return dispatcher

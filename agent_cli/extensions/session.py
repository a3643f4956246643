"""Session-scoped extension state: override flags and on-demand activation."""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Sequence

from agent_cli.extensions.activation import filter_active_extensions
from agent_cli.extensions.diagnostics import DiagnosticLog
from agent_cli.extensions.loader import Extension

logger = logging.getLogger(__name__)


class OverrideState(Enum):
    NONE = "none"
    ENABLED = "enabled"
    DISABLED = "disabled"


class SessionOverrides:
    """Per-session enable/disable flags keyed by lower-cased name. Never persisted."""

    def __init__(self) -> None:
        self._enabled: set[str] = set()
        self._disabled: set[str] = set()

    def enable(self, name: str) -> None:
        key = name.strip().lower()
        self._enabled.add(key)
        self._disabled.discard(key)

    def disable(self, name: str) -> None:
        key = name.strip().lower()
        self._disabled.add(key)
        self._enabled.discard(key)

    def state(self, name: str) -> OverrideState:
        key = name.strip().lower()
        if key in self._enabled:
            return OverrideState.ENABLED
        if key in self._disabled:
            return OverrideState.DISABLED
        return OverrideState.NONE

    @property
    def enabled(self) -> frozenset[str]:
        return frozenset(self._enabled)

    @property
    def disabled(self) -> frozenset[str]:
        return frozenset(self._disabled)


class ExtensionSession:
    """Everything the session knows about extensions. Created at startup, passed to commands.

    Activation is recomputed on every call to active_extensions(), so override
    changes take effect immediately. Overrides win over manifest defaults and
    over the --extensions allow-list.
    """

    def __init__(
        self,
        extensions: Sequence[Extension],
        enabled_names: Iterable[str] = (),
        additional_enabled: Iterable[str] = (),
        overrides: SessionOverrides | None = None,
    ) -> None:
        self._extensions = list(extensions)
        self._enabled_names = list(enabled_names)
        self._additional_enabled = list(additional_enabled)
        self.overrides = overrides if overrides is not None else SessionOverrides()
        self._lock = asyncio.Lock()

    @property
    def all_extensions(self) -> list[Extension]:
        return list(self._extensions)

    def get_extension(self, name: str) -> Extension | None:
        key = name.strip().lower()
        return next((e for e in self._extensions if e.key == key), None)

    def active_extensions(self, diagnostics: DiagnosticLog | None = None) -> list[Extension]:
        """Recompute the active set. Without a log, decisions are collected silently."""
        base = filter_active_extensions(
            self._extensions,
            self._enabled_names,
            self._additional_enabled,
            diagnostics if diagnostics is not None else DiagnosticLog(forward=False),
        )
        base_keys = {e.key for e in base}
        forced_on = self.overrides.enabled
        forced_off = self.overrides.disabled
        return [
            e
            for e in self._extensions
            if e.key in forced_on or (e.key in base_keys and e.key not in forced_off)
        ]

    async def enable_extension(self, name: str) -> None:
        """Force-enable ``name`` for the rest of the session."""
        async with self._lock:
            if self.get_extension(name) is None:
                logger.warning("enable: extension %s is not installed", name)
            self.overrides.enable(name)
            logger.info("Extension %s enabled for this session", name)

    async def disable_extension(self, name: str) -> None:
        """Force-disable ``name`` for the rest of the session."""
        async with self._lock:
            if self.get_extension(name) is None:
                logger.warning("disable: extension %s is not installed", name)
            self.overrides.disable(name)
            logger.info("Extension %s disabled for this session", name)

    def mcp_servers(self, base: dict[str, Any] | None = None) -> dict[str, Any]:
        """Tool-server configs from settings plus active extensions. Earlier definitions win."""
        servers: dict[str, Any] = dict(base or {})
        for ext in self.active_extensions():
            for server_name, cfg in ext.manifest.mcp_servers.items():
                if server_name in servers:
                    logger.warning(
                        "Skipping tool server %s from extension %s: already defined",
                        server_name,
                        ext.name,
                    )
                    continue
                servers[server_name] = cfg
        return servers

    def excluded_tools(self) -> list[str]:
        """Union of excludeTools across active extensions, first-seen order."""
        seen: dict[str, None] = {}
        for ext in self.active_extensions():
            for tool in ext.manifest.exclude_tools:
                seen.setdefault(tool, None)
        return list(seen)

    def context_files(self) -> list[Path]:
        files: list[Path] = []
        for ext in self.active_extensions():
            files.extend(ext.context_files)
        return files

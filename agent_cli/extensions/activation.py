"""Activation filter: which discovered extensions are active for this invocation.

Precedence, first match wins:
1. Explicit allow-list (``--extensions``). The single name ``none`` disables
   everything; otherwise exactly the listed extensions are active.
2. Manifest default (``enabled``, default true), widened by the
   additionally-enabled names (``--enable-extension``).

Matching is case-insensitive on trimmed names. Output keeps input order.
"""

import logging
from typing import Iterable, Sequence

from agent_cli.extensions.diagnostics import DiagnosticCode, DiagnosticLog
from agent_cli.extensions.loader import Extension

logger = logging.getLogger(__name__)

NONE_SENTINEL = "none"


def normalize_names(names: Iterable[str]) -> set[str]:
    """Trim and lower-case; blank entries are dropped."""
    return {n.strip().lower() for n in names if n and n.strip()}


def _activated(diagnostics: DiagnosticLog, ext: Extension) -> None:
    diagnostics.info(
        DiagnosticCode.ACTIVATED,
        f"Activated extension: {ext.name} (version: {ext.version})",
        ext.name,
        source=logger,
    )


def _disabled(diagnostics: DiagnosticLog, ext: Extension) -> None:
    diagnostics.info(
        DiagnosticCode.DISABLED, f"Disabled extension: {ext.name}", ext.name, source=logger
    )


def filter_active_extensions(
    extensions: Sequence[Extension],
    enabled_names: Iterable[str],
    additional_enabled: Iterable[str] = (),
    diagnostics: DiagnosticLog | None = None,
) -> list[Extension]:
    """Return the active subset of ``extensions``. Pure apart from the diagnostics it emits."""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    requested = normalize_names(enabled_names)

    if requested:
        if requested == {NONE_SENTINEL}:
            if extensions:
                diagnostics.info(
                    DiagnosticCode.ALL_DISABLED, "All extensions are disabled.", source=logger
                )
            return []

        active: list[Extension] = []
        not_found = set(requested)
        for ext in extensions:
            if ext.key in requested:
                _activated(diagnostics, ext)
                active.append(ext)
                not_found.discard(ext.key)
            else:
                _disabled(diagnostics, ext)
        for name in sorted(not_found):
            diagnostics.warning(
                DiagnosticCode.NAME_NOT_FOUND,
                f"Extension not found: {name}",
                name,
                source=logger,
            )
        return active

    additional = normalize_names(additional_enabled)
    active = []
    for ext in extensions:
        if ext.enabled or ext.key in additional:
            _activated(diagnostics, ext)
            active.append(ext)
        else:
            _disabled(diagnostics, ext)
    return active

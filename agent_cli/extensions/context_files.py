"""Combine context files of active extensions into one memory text.

Plain files are read as-is; ``*.jinja2`` files are rendered with template_vars.
"""

import logging
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

logger = logging.getLogger(__name__)


def read_context_file(path: Path, template_vars: dict[str, Any] | None = None) -> str:
    """Return stripped file content; templates are rendered first. Raises OSError or TemplateError."""
    if path.name.endswith(".jinja2"):
        env = Environment(
            loader=FileSystemLoader(path.parent),
            autoescape=select_autoescape(enabled_extensions=()),
        )
        template = env.get_template(path.name)
        return template.render(**(template_vars or {})).strip()
    return path.read_text(encoding="utf-8").strip()


def load_context_text(
    paths: Iterable[Path], template_vars: dict[str, Any] | None = None
) -> str:
    """Read every path in order and join non-empty contents with a blank line.

    A file that disappeared or fails to render is skipped with a warning.
    """
    parts: list[str] = []
    for path in paths:
        try:
            content = read_context_file(path, template_vars)
        except (OSError, UnicodeDecodeError, TemplateError) as e:
            logger.warning("Skipping context file %s: %s", path, e)
            continue
        if content:
            parts.append(content)
    return "\n\n".join(parts)

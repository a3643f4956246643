"""Extension system: manifest, discovery, activation, session overrides."""

from agent_cli.extensions.activation import filter_active_extensions
from agent_cli.extensions.context_files import load_context_text
from agent_cli.extensions.diagnostics import Diagnostic, DiagnosticCode, DiagnosticLog
from agent_cli.extensions.loader import (
    Extension,
    discover_extensions,
    find_extension_config_path,
    load_extension,
)
from agent_cli.extensions.manifest import ExtensionManifest, ManifestError, load_manifest
from agent_cli.extensions.session import ExtensionSession, OverrideState, SessionOverrides

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticLog",
    "Extension",
    "ExtensionManifest",
    "ExtensionSession",
    "ManifestError",
    "OverrideState",
    "SessionOverrides",
    "discover_extensions",
    "filter_active_extensions",
    "find_extension_config_path",
    "load_context_text",
    "load_extension",
    "load_manifest",
]

"""Loader: locate extension directories, load manifests, merge workspace and user sets."""

import logging
from dataclasses import dataclass
from pathlib import Path

from agent_cli.extensions.diagnostics import DiagnosticCode, DiagnosticLog
from agent_cli.extensions.manifest import (
    MANIFEST_FILENAME,
    ExtensionManifest,
    ManifestError,
    load_manifest,
)

logger = logging.getLogger(__name__)

EXTENSIONS_DIRECTORY_NAME = Path(".gemini") / "extensions"


@dataclass(frozen=True)
class Extension:
    """Loaded extension: manifest plus context files that existed at load time."""

    manifest: ExtensionManifest
    path: Path
    context_files: tuple[Path, ...] = ()

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def enabled(self) -> bool:
        return self.manifest.enabled

    @property
    def key(self) -> str:
        """Case-insensitive identity used for matching and deduplication."""
        return self.manifest.name.lower()


def extensions_dir_for(root: Path) -> Path:
    return root / EXTENSIONS_DIRECTORY_NAME


def load_extension(
    extension_dir: Path, diagnostics: DiagnosticLog | None = None
) -> Extension | None:
    """Load one extension directory. Returns None (with a warning) if it is not a valid extension."""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    if not extension_dir.is_dir():
        diagnostics.warning(
            DiagnosticCode.NOT_A_DIRECTORY,
            f"Warning: unexpected file {extension_dir} in extensions directory.",
            str(extension_dir),
            source=logger,
        )
        return None

    manifest_path = extension_dir / MANIFEST_FILENAME
    if not manifest_path.is_file():
        diagnostics.warning(
            DiagnosticCode.MISSING_MANIFEST,
            f"Warning: extension directory {extension_dir} does not contain "
            f"a config file {manifest_path}.",
            str(extension_dir),
            source=logger,
        )
        return None

    try:
        manifest = load_manifest(manifest_path)
    except ManifestError as e:
        diagnostics.warning(
            DiagnosticCode.MALFORMED_MANIFEST,
            f"Warning: invalid extension config in {manifest_path}: {e}",
            str(manifest_path),
            source=logger,
        )
        return None

    base = extension_dir.absolute()
    context_files = tuple(
        p
        for p in (_context_path(base, n) for n in manifest.context_file_names)
        if p is not None and p.is_file()
    )
    return Extension(manifest=manifest, path=base, context_files=context_files)


def _context_path(base: Path, file_name: str) -> Path | None:
    """``base / file_name`` if it stays inside ``base``; absolute or escaping names give None."""
    path = base / file_name
    if not path.resolve().is_relative_to(base.resolve()):
        logger.warning("Ignoring context file %s outside extension directory %s", file_name, base)
        return None
    return path


def load_extensions_from_dir(
    root: Path, diagnostics: DiagnosticLog | None = None
) -> list[Extension]:
    """Load every extension under <root>/.gemini/extensions. Missing dir means none."""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    extensions_dir = extensions_dir_for(root)
    if not extensions_dir.is_dir():
        return []
    try:
        entries = sorted(extensions_dir.iterdir())
    except OSError as e:
        diagnostics.warning(
            DiagnosticCode.UNREADABLE_DIRECTORY,
            f"Warning: cannot read extensions directory {extensions_dir}: {e}",
            str(extensions_dir),
            source=logger,
        )
        return []
    extensions: list[Extension] = []
    for entry in entries:
        ext = load_extension(entry, diagnostics)
        if ext is not None:
            extensions.append(ext)
    return extensions


def discover_extensions(
    workspace_dir: Path,
    home_dir: Path | None = None,
    diagnostics: DiagnosticLog | None = None,
) -> list[Extension]:
    """Workspace extensions first, then user-level ones; same name (any case) keeps the workspace copy."""
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    home_dir = home_dir if home_dir is not None else Path.home()
    roots = [workspace_dir]
    if home_dir.absolute() != workspace_dir.absolute():
        roots.append(home_dir)

    unique: dict[str, Extension] = {}
    for root in roots:
        for ext in load_extensions_from_dir(root, diagnostics):
            if ext.key in unique:
                logger.debug(
                    "Extension %s at %s shadowed by %s", ext.name, ext.path, unique[ext.key].path
                )
                continue
            diagnostics.info(
                DiagnosticCode.LOADED,
                f"Loading extension: {ext.name} (version: {ext.version}, "
                f"enabled: {'yes' if ext.enabled else 'no'})",
                ext.name,
                source=logger,
            )
            unique[ext.key] = ext
    return list(unique.values())


def find_extension_config_path(
    extension_name: str, workspace_dir: Path, home_dir: Path | None = None
) -> Path | None:
    """Manifest path of the named extension directory, workspace first. None if absent."""
    home_dir = home_dir if home_dir is not None else Path.home()
    for root in (workspace_dir, home_dir):
        manifest_path = extensions_dir_for(root) / extension_name / MANIFEST_FILENAME
        if manifest_path.is_file():
            return manifest_path
    return None

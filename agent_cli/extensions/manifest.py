"""Extension manifest: Pydantic model and JSON loader.

Union-shaped fields (contextFileName, enabled) are normalized here, once, so
callers always see a list of names and a plain bool.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

MANIFEST_FILENAME = "gemini-extension.json"
DEFAULT_CONTEXT_FILENAME = "GEMINI.md"


class ManifestError(ValueError):
    """Manifest file could not be read, parsed or validated."""


class ExtensionManifest(BaseModel):
    """Manifest schema for .gemini/extensions/<name>/gemini-extension.json."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    enabled: bool = True
    # server name -> launch config; opaque here, consumed by the tool-server layer
    mcp_servers: dict[str, Any] = Field(default_factory=dict, alias="mcpServers")
    context_file_names: list[str] = Field(
        default_factory=lambda: [DEFAULT_CONTEXT_FILENAME], alias="contextFileName"
    )
    exclude_tools: list[str] = Field(default_factory=list, alias="excludeTools")

    @field_validator("enabled", mode="before")
    @classmethod
    def _default_enabled(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("mcp_servers", mode="before")
    @classmethod
    def _mcp_servers_none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("exclude_tools", mode="before")
    @classmethod
    def _exclude_tools_none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("context_file_names", mode="before")
    @classmethod
    def _normalize_context_file_names(cls, value: Any) -> Any:
        if value is None or value == "":
            return [DEFAULT_CONTEXT_FILENAME]
        if isinstance(value, str):
            return [value]
        return value


def load_manifest(path: Path) -> ExtensionManifest:
    """Read and validate gemini-extension.json. Raises ManifestError on any failure."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"Cannot decode manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest must be a JSON object: {path}")
    try:
        return ExtensionManifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e

"""Structured diagnostics emitted by discovery and activation.

Decision logic appends Diagnostic records to a DiagnosticLog; the log also
forwards every record to the emitting module's logger, so decision logic never
renders output itself.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

__all__ = ["Diagnostic", "DiagnosticCode", "DiagnosticLog"]

logger = logging.getLogger(__name__)


class DiagnosticCode(Enum):
    # skip-and-continue conditions
    NOT_A_DIRECTORY = "not_a_directory"
    MISSING_MANIFEST = "missing_manifest"
    MALFORMED_MANIFEST = "malformed_manifest"
    UNREADABLE_DIRECTORY = "unreadable_directory"
    NAME_NOT_FOUND = "name_not_found"

    # informational
    LOADED = "loaded"
    ACTIVATED = "activated"
    DISABLED = "disabled"
    ALL_DISABLED = "all_disabled"


@dataclass(frozen=True)
class Diagnostic:
    """Immutable record: one decision or skipped entry."""

    level: int
    code: DiagnosticCode
    message: str
    subject: str = ""
    source: str = ""


@dataclass
class DiagnosticLog:
    """Ordered sequence of diagnostics.

    With forward=True each record is also logged through the emitting module's
    logger (the ``source`` passed to emit), falling back to this module's logger.
    """

    forward: bool = True
    records: list[Diagnostic] = field(default_factory=list)

    def emit(
        self,
        level: int,
        code: DiagnosticCode,
        message: str,
        subject: str = "",
        source: logging.Logger | None = None,
    ) -> Diagnostic:
        source = source if source is not None else logger
        record = Diagnostic(
            level=level, code=code, message=message, subject=subject, source=source.name
        )
        self.records.append(record)
        if self.forward:
            source.log(level, message)
        return record

    def info(
        self,
        code: DiagnosticCode,
        message: str,
        subject: str = "",
        source: logging.Logger | None = None,
    ) -> Diagnostic:
        return self.emit(logging.INFO, code, message, subject, source)

    def warning(
        self,
        code: DiagnosticCode,
        message: str,
        subject: str = "",
        source: logging.Logger | None = None,
    ) -> Diagnostic:
        return self.emit(logging.WARNING, code, message, subject, source)

    def by_code(self, code: DiagnosticCode) -> list[Diagnostic]:
        """Records with the given code, in emission order."""
        return [r for r in self.records if r.code == code]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [r for r in self.records if r.level >= logging.WARNING]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

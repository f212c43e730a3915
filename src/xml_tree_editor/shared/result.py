"""Error records and the per-document error log.

Parse failures are reported by lxml as log entries. This module turns them into
immutable ``ErrorRecord`` objects and keeps them in an ``ErrorLog`` owned by a
single document, together with the collection mode that decides whether
failures are raised immediately or only recorded.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterable, Iterator, List, Optional


class ErrorSeverity(Enum):
    """Severity levels reported by the XML parser."""

    WARNING = auto()    # Recoverable oddities in the input
    ERROR = auto()      # Errors the parser could report but not repair
    FATAL = auto()      # Well-formedness violations that abort parsing

    @classmethod
    def from_level_name(cls, level_name: Optional[str]) -> "ErrorSeverity":
        """Map an lxml ``level_name`` to a severity, defaulting to ERROR."""
        if level_name and level_name.upper() in cls.__members__:
            return cls[level_name.upper()]
        return cls.ERROR


@dataclass(frozen=True)
class ErrorRecord:
    """Single structured parse or load error."""

    severity: ErrorSeverity
    message: str
    line: int = 0
    column: int = 0
    domain: Optional[str] = None
    filename: Optional[str] = None
    timestamp: float = field(default_factory=time.time, compare=False)

    def __post_init__(self) -> None:
        """Validate error record."""
        if not self.message:
            raise ValueError("Error message cannot be empty")
        if self.line < 0 or self.column < 0:
            raise ValueError("line and column must be >= 0")

    @classmethod
    def from_log_entry(cls, entry: Any) -> "ErrorRecord":
        """Build a record from an ``lxml.etree._LogEntry``."""
        message = (entry.message or "").strip() or "Unknown parser error"
        return cls(
            severity=ErrorSeverity.from_level_name(getattr(entry, "level_name", None)),
            message=message,
            line=max(entry.line or 0, 0),
            column=max(entry.column or 0, 0),
            domain=getattr(entry, "domain_name", None),
            filename=getattr(entry, "filename", None),
        )

    @classmethod
    def from_os_error(cls, error: OSError, filename: Optional[str] = None) -> "ErrorRecord":
        """Build a record for a file that could not be read."""
        return cls(
            severity=ErrorSeverity.FATAL,
            message=str(error) or error.__class__.__name__,
            domain="IO",
            filename=filename,
        )

    def __str__(self) -> str:
        location = f"{self.line}:{self.column}"
        if self.filename:
            location = f"{self.filename}:{location}"
        return f"{self.severity.name} {location} {self.message}"


class ErrorLog:
    """Append-only list of error records plus the active collection mode.

    In immediate mode (the default) parse failures are raised to the caller.
    In collection mode they are appended here and the failing load returns
    ``None`` instead.
    """

    def __init__(self, collecting: bool = False) -> None:
        self._records: List[ErrorRecord] = []
        self._collecting = collecting

    @property
    def collecting(self) -> bool:
        """Whether parse failures are collected instead of raised."""
        return self._collecting

    def use_internal_errors(self, errors: bool = False) -> bool:
        """Set the collection mode, clear the log and return the previous mode."""
        previous = self._collecting
        self.clear()
        self._collecting = bool(errors)
        return previous

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._records.extend(records)

    def clear(self) -> None:
        self._records.clear()

    @property
    def records(self) -> List[ErrorRecord]:
        """Copy of the recorded errors, oldest first."""
        return list(self._records)

    @property
    def last(self) -> Optional[ErrorRecord]:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(list(self._records))

    def __repr__(self) -> str:
        return f"ErrorLog(collecting={self._collecting}, records={len(self._records)})"

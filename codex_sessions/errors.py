"""Error types raised by the session catalog pipeline."""
from __future__ import annotations

from pathlib import Path


class SessionCatalogError(Exception):
    """Base class for catalog failures."""


class DirectoryReadError(SessionCatalogError):
    """A session directory could not be enumerated."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read directory {self.path}: {reason}")


class MalformedRecordError(SessionCatalogError):
    """A session file contains a line that is not valid JSON."""

    def __init__(self, source: Path | str | None, line_number: int, reason: str):
        self.source = str(source) if source is not None else "<memory>"
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed record in {self.source} at line {line_number}: {reason}")


class DeleteError(SessionCatalogError):
    """A session file could not be removed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot delete {self.path}: {reason}")

    @property
    def not_found(self) -> bool:
        return isinstance(self.__cause__, FileNotFoundError)

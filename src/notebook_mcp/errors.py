"""Exception taxonomy for notebook storage and service code."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class NotebookError(Exception):
    pass


class InvalidArgumentError(NotebookError, ValueError):
    def __init__(self, param_name: str, message: str = "") -> None:
        self.param_name = param_name
        super().__init__(message or f"{param_name} must be a non-empty string.")


class NotebookStorageError(NotebookError):
    """A notebook file exists but could not be read, parsed or written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        super().__init__(message)


class OperationCancelledError(NotebookError):
    pass

from __future__ import annotations

"""Shared loader error utilities."""

import os

from pydantic import ValidationError

from outline_tree.utils.error_formatting import format_validation_errors


class LoaderError(RuntimeError):
    """Wraps loader failures with file path context."""

    def __init__(self, file_path: str, message: str, *, cause: Exception | None = None):
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        path = self._relative_path(self.file_path)
        base = f"{self.message} ({path})"
        if isinstance(self.cause, ValidationError):
            return f"{base}: {format_validation_errors(self.cause.errors())}"
        if self.cause:
            return f"{base}: {self.cause}"
        return base

    @staticmethod
    def _relative_path(path: str) -> str:
        try:
            return os.path.relpath(path)
        except ValueError:  # pragma: no cover - different drive on Windows
            return path

    def __str__(self) -> str:
        return self._build_message()

"""Exceptions raised while reading persisted traces."""

from __future__ import annotations


class TraceParseError(ValueError):
    """A persisted trace record could not be decoded.

    ``path`` and ``line_number`` (1-based) are filled in by the loader once the
    failing line is known; they stay None when a record is decoded directly.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line_number: int | None = None,
    ) -> None:
        self.path = path
        self.line_number = line_number
        self.reason = message
        if path is not None and line_number is not None:
            message = f"{path}:{line_number}: {message}"
        super().__init__(message)

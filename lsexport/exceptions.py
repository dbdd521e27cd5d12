"""Custom exception hierarchy for lsexport.

All library-specific exceptions inherit from ``LsExportError`` so consumers
can catch ``except LsExportError`` to handle any lsexport failure.
"""

from __future__ import annotations


class LsExportError(Exception):
    """Base exception for all lsexport errors."""


class ConfigError(LsExportError):
    """Raised when required settings are missing or invalid."""


class TransportError(LsExportError):
    """Raised when a Label Studio request fails on the wire or with a bad status."""

    def __init__(self, url: str, message: str, status: int | None = None) -> None:
        """Store the failing URL and HTTP status (if the server answered)."""
        self.url = url
        self.status = status
        prefix = f"HTTP {status} " if status is not None else ""
        super().__init__(f"{prefix}GET {url}: {message}")


class SchemaError(LsExportError):
    """Raised when a Label Studio response does not have the expected shape."""


class ProjectExportError(LsExportError):
    """Raised in strict mode when a single project cannot be exported."""

    def __init__(self, project_name: str, project_id: int, cause: Exception) -> None:
        """Keep the project identity; the original error is chained as cause."""
        self.project_name = project_name
        self.project_id = project_id
        super().__init__(
            f"Project {project_name!r} (id={project_id}) failed: {cause}"
        )

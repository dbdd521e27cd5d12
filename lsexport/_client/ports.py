"""Protocol defining the Label Studio API boundary.

``LabelStudioApiPort`` is the single seam between export logic and HTTP.
In production it is satisfied by ``RequestsLabelStudioApi``; in tests a
trivial fake returning fixture payloads is used instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from lsexport.models import ExportedTask, PredictionSet, ProjectInfo


class LabelStudioApiPort(Protocol):
    """Minimal interface for Label Studio operations used by ``LabelStudioClient``."""

    def list_projects(self) -> list[ProjectInfo]:
        """Return well-formed rows of the project catalog (first page only)."""
        ...

    def export_project_tasks(self, project_id: int) -> list[ExportedTask]:
        """Return every task of a project with its embedded annotation sets."""
        ...

    def get_task_predictions(self, project_id: int, task_id: int) -> list[PredictionSet]:
        """Return all prediction sets of one task."""
        ...

"""Flatten an ExportResult into a pandas DataFrame (one row per label region)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from lsexport.models import ExportResult, ProjectRecord, TaskRecord, TimeSpan

TABLE_COLUMNS: tuple[str, ...] = (
    "project_name",
    "project_id",
    "task_id",
    "file_upload",
    "kind",
    "set_id",
    "result_id",
    "from_name",
    "to_name",
    "origin",
    "start",
    "end",
    "instant",
    "labels",
)

Row = dict[str, str | int | float | bool | None]


def _region_fields(value: TimeSpan) -> Row:
    return {
        "start": value.start,
        "end": value.end,
        "instant": value.instant,
        "labels": json.dumps(value.labels, ensure_ascii=False),
    }


def _task_rows(project_name: str, project_id: int, task: TaskRecord) -> list[Row]:
    """Rows for one task: annotation results first, then prediction results."""
    base: Row = {
        "project_name": project_name,
        "project_id": project_id,
        "task_id": task.id,
        "file_upload": task.file_upload,
    }
    rows: list[Row] = []
    for annotation_set in task.annotation_sets:
        for result in annotation_set.results:
            rows.append(
                {
                    **base,
                    "kind": "annotation",
                    "set_id": annotation_set.id,
                    "result_id": result.id,
                    "from_name": result.from_field,
                    "to_name": result.to_field,
                    "origin": result.origin,
                    **_region_fields(result.value),
                }
            )
    for prediction_set in task.prediction_sets:
        for prediction in prediction_set.results:
            rows.append(
                {
                    **base,
                    "kind": "prediction",
                    "set_id": prediction_set.id,
                    "result_id": prediction.id,
                    "from_name": prediction.from_field,
                    "to_name": prediction.to_field,
                    "origin": None,
                    **_region_fields(prediction.value),
                }
            )
    return rows


def project_rows(project_name: str, project: ProjectRecord) -> list[Row]:
    """Build flat rows for every task of *project*, in task order."""
    rows: list[Row] = []
    for task in project.tasks:
        rows.extend(_task_rows(project_name, project.id, task))
    return rows


def export_to_dataframe(result: ExportResult) -> pd.DataFrame:
    """Build a DataFrame with ``TABLE_COLUMNS`` from all exported projects.

    Projects are ordered by name.  Tasks without results add no rows.
    """
    rows: list[Row] = []
    for name in sorted(result.projects):
        rows.extend(project_rows(name, result.projects[name]))
    return pd.DataFrame(rows, columns=list(TABLE_COLUMNS))

"""Pydantic models for Label Studio export data."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_validator,
)

# ------------------------------------------------------------------
# Catalog models
# ------------------------------------------------------------------


class ProjectInfo(BaseModel):
    """One row of the Label Studio project catalog (title + id)."""

    model_config = ConfigDict(frozen=True)

    title: str
    id: NonNegativeInt


# ------------------------------------------------------------------
# Label region
# ------------------------------------------------------------------


def _coerce_offset(v: object) -> float:
    """Normalize a region offset to a float.

    Annotations carry native numbers, predictions carry numeric strings
    (``"12"``).  Both end up as the same float.
    """
    if isinstance(v, bool):
        msg = f"offset must be a number or numeric string, got {v!r}"
        raise ValueError(msg)  # noqa: TRY004
    if isinstance(v, (int, float)):
        value = float(v)
    elif isinstance(v, str):
        try:
            value = float(v.strip())
        except ValueError:
            msg = f"offset string is not numeric: {v!r}"
            raise ValueError(msg) from None
    else:
        msg = f"offset must be a number or numeric string, got {v!r}"
        raise ValueError(msg)  # noqa: TRY004
    if not math.isfinite(value):
        msg = f"offset must be finite, got {v!r}"
        raise ValueError(msg)
    return value


class TimeSpan(BaseModel):
    """Time-series label region: start/end offsets, instant flag and labels."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start: float
    end: float
    instant: bool = False
    labels: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("labels", "timeserieslabels"),
    )

    validate_offsets = field_validator("start", "end", mode="before")(_coerce_offset)


# ------------------------------------------------------------------
# Annotations and predictions
# ------------------------------------------------------------------

Origin = Literal["manual", "other"]
"""Provenance of an annotation result; anything but ``manual`` is ``other``."""

MANUAL_ORIGIN = "manual"


def _normalize_origin(v: object) -> str:
    if not isinstance(v, str):
        msg = f"origin must be a string, got {v!r}"
        raise ValueError(msg)  # noqa: TRY004
    return MANUAL_ORIGIN if v == MANUAL_ORIGIN else "other"


class AnnotationResult(BaseModel):
    """Single region inside an annotation set."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_field: str = Field(alias="from_name")
    to_field: str = Field(alias="to_name")
    origin: Origin
    value: TimeSpan

    validate_origin = field_validator("origin", mode="before")(_normalize_origin)

    @property
    def is_manual(self) -> bool:
        """True when a human created this result."""
        return self.origin == MANUAL_ORIGIN


class AnnotationSet(BaseModel):
    """One annotator's submission for a task."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    created_at: str
    task_id: int = Field(alias="task")
    project_id: int = Field(alias="project")
    results: list[AnnotationResult] = Field(alias="result")


class PredictionResult(BaseModel):
    """Single model-generated region.  Predictions are never filtered."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_field: str = Field(alias="from_name")
    to_field: str = Field(alias="to_name")
    value: TimeSpan


class PredictionSet(BaseModel):
    """Predictions produced for a task by one model run."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    created_ago: str
    results: list[PredictionResult] = Field(alias="result")


# ------------------------------------------------------------------
# Task / project tree
# ------------------------------------------------------------------


def _none_to_empty(v: object) -> object:
    return "" if v is None else v


class ExportedTask(BaseModel):
    """Task entry exactly as the JSON export returns it.

    ``predictions`` only lists prediction IDs; the full prediction sets are
    fetched separately per task.
    """

    id: int
    file_upload: str = ""
    annotations: list[AnnotationSet] = []
    predictions: list[Any] = []
    data: dict[str, Any] = {}

    validate_file_upload = field_validator("file_upload", mode="before")(
        _none_to_empty
    )


class TaskRecord(BaseModel):
    """Task with manual annotations and its fetched prediction sets."""

    id: int
    file_upload: str
    annotation_sets: list[AnnotationSet]
    prediction_sets: list[PredictionSet]
    data: dict[str, Any] = {}


class ProjectRecord(BaseModel):
    """All tasks of one project."""

    id: int
    tasks: list[TaskRecord]

    @property
    def result_counts(self) -> tuple[int, int]:
        """Return ``(annotation_results, prediction_results)`` over all tasks."""
        annotations = sum(
            len(s.results) for t in self.tasks for s in t.annotation_sets
        )
        predictions = sum(
            len(s.results) for t in self.tasks for s in t.prediction_sets
        )
        return annotations, predictions


class ProjectFailure(BaseModel):
    """A project that could not be exported in partial mode."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    project_id: int
    error_type: str
    message: str


class ExportResult(BaseModel):
    """Result of a run: project name -> record, plus per-project failures."""

    projects: dict[str, ProjectRecord] = {}
    failures: list[ProjectFailure] = []

    @property
    def ok(self) -> bool:
        """True when every resolved project was exported."""
        return not self.failures

    def __getitem__(self, project_name: str) -> ProjectRecord:
        return self.projects[project_name]

    def __contains__(self, project_name: object) -> bool:
        return project_name in self.projects

    def __len__(self) -> int:
        return len(self.projects)

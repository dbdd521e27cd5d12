"""Conversion of raw Label Studio JSON payloads into pydantic models.

Top-level shape problems raise ``SchemaError``.  Catalog rows are the one
place where a malformed entry is skipped instead of failing the call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from lsexport.exceptions import SchemaError
from lsexport.models import ExportedTask, PredictionSet, ProjectInfo

if TYPE_CHECKING:
    from collections.abc import Callable

_M = TypeVar("_M", bound=BaseModel)


def _catalog_row(row: object) -> ProjectInfo | None:
    """Return the project described by *row*, or None if the row is malformed."""
    if not isinstance(row, dict):
        logger.debug(f"Skipping catalog row that is not an object: {row!r}")
        return None
    title = row.get("title")
    project_id = row.get("id")
    if not isinstance(title, str):
        logger.debug(f"Skipping catalog row with non-string title: {title!r}")
        return None
    # bool is an int subclass; JSON true/false is not an ID.
    if isinstance(project_id, bool) or not isinstance(project_id, int):
        logger.debug(f"Skipping catalog row {title!r}: id is not an integer")
        return None
    if project_id < 0:
        logger.debug(f"Skipping catalog row {title!r}: negative id {project_id}")
        return None
    return ProjectInfo(title=title, id=project_id)


def parse_catalog(payload: object) -> list[ProjectInfo]:
    """Parse ``GET /api/projects/`` into catalog rows, in response order."""
    if not isinstance(payload, dict):
        msg = (
            "Expected the project list to be a JSON object, "
            f"got {type(payload).__name__}"
        )
        raise SchemaError(msg)
    results = payload.get("results")
    if not isinstance(results, list):
        msg = "Expected the project list to have a 'results' array at top level"
        raise SchemaError(msg)
    projects: list[ProjectInfo] = []
    skipped = 0
    for row in results:
        info = _catalog_row(row)
        if info is None:
            skipped += 1
            continue
        projects.append(info)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed project catalog row(s)")
    return projects


def _validate_entries(
    payload: object,
    model: type[_M],
    where: str,
) -> list[_M]:
    """Validate every entry of a JSON array against *model*."""
    if not isinstance(payload, list):
        msg = f"Expected {where} to be a JSON array, got {type(payload).__name__}"
        raise SchemaError(msg)
    parsed: list[_M] = []
    for index, entry in enumerate(payload):
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError as e:
            msg = f"Invalid entry #{index} in {where}: {e}"
            raise SchemaError(msg) from e
    return parsed


def parse_task_export(payload: object, project_id: int) -> list[ExportedTask]:
    """Parse a project's JSON export into task entries.

    Task IDs must be unique within the export.
    """
    tasks = _validate_entries(
        payload, ExportedTask, f"task export of project {project_id}"
    )
    seen: set[int] = set()
    for task in tasks:
        if task.id in seen:
            msg = f"Duplicate task id {task.id} in export of project {project_id}"
            raise SchemaError(msg)
        seen.add(task.id)
    return tasks


def parse_predictions(
    payload: object,
    project_id: int,
    task_id: int,
) -> list[PredictionSet]:
    """Parse ``GET /api/predictions`` for one task."""
    return _validate_entries(
        payload,
        PredictionSet,
        f"predictions of task {task_id} (project {project_id})",
    )


def decode_json(response_json: Callable[[], Any], url: str) -> Any:  # noqa: ANN401
    """Call a response's ``json()`` and turn decode failures into SchemaError."""
    try:
        return response_json()
    except ValueError as e:
        msg = f"Response from {url} is not valid JSON: {e}"
        raise SchemaError(msg) from e

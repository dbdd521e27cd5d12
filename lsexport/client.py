"""Label Studio client logic: resolve projects, export tasks, attach predictions."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import requests
from loguru import logger
from tqdm import tqdm

from lsexport._client.filters import _keep_manual_results
from lsexport._client.http_adapter import RequestsLabelStudioApi
from lsexport._client.mapping import _build_name_map, _missing_names
from lsexport.config import LabelStudioConfig
from lsexport.exceptions import LsExportError, ProjectExportError
from lsexport.models import (
    ExportedTask,
    ExportResult,
    PredictionSet,
    ProjectFailure,
    ProjectInfo,
    ProjectRecord,
    TaskRecord,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
    from types import TracebackType

    from typing_extensions import Self

    from lsexport._client.ports import LabelStudioApiPort


def _task_to_record(
    task: ExportedTask,
    prediction_sets: list[PredictionSet],
) -> TaskRecord:
    """Merge one export entry with the predictions fetched for it."""
    annotation_sets = _keep_manual_results(task.annotations)
    logger.trace(f"Manual annotation sets of task {task.id}: {annotation_sets}")
    return TaskRecord(
        id=task.id,
        file_upload=task.file_upload,
        annotation_sets=annotation_sets,
        prediction_sets=prediction_sets,
        data=task.data,
    )


class LabelStudioClient:
    """High-level Label Studio client that assembles per-project exports.

    Can be used as a context manager to keep one HTTP session open
    across multiple calls::

        with LabelStudioClient(cfg) as client:
            project_map = client.resolve_projects()
            result = client.fetch_all(project_map)

    Without the context manager, each public method opens and closes
    its own session.
    """

    def __init__(
        self,
        cfg: LabelStudioConfig | None = None,
        session_factory: Callable[[], requests.Session] | None = None,
        *,
        api: LabelStudioApiPort | None = None,
    ) -> None:
        """Store client configuration and optional API port for DI.

        When *cfg* is ``None``, configuration is loaded from the config
        file and environment variables via :meth:`LabelStudioConfig.load`.

        When *api* is provided it is used directly.  Otherwise a
        ``RequestsLabelStudioApi`` is built around a session created by
        *session_factory* (``requests.Session`` by default).
        """
        self._cfg = cfg or LabelStudioConfig.load()
        self._session_factory = session_factory or requests.Session
        self._api = api
        # Persistent adapter opened by __enter__, closed by __exit__.
        self._persistent_api: RequestsLabelStudioApi | None = None
        self._session: requests.Session | None = None

    # ------------------------------------------------------------------
    # Context manager (optional session reuse)
    # ------------------------------------------------------------------

    def __enter__(self) -> Self:
        """Open a persistent HTTP session for the lifetime of this block."""
        if self._api is not None:
            return self
        self._cfg.require_connection()
        self._session = self._session_factory()
        self._persistent_api = self._make_adapter(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the persistent HTTP session."""
        self._persistent_api = None
        if self._session is not None:
            self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _make_adapter(self, session: requests.Session) -> RequestsLabelStudioApi:
        return RequestsLabelStudioApi(
            session,
            host=self._cfg.host,
            token=self._cfg.token or "",
            timeout=self._cfg.timeout,
        )

    @contextmanager
    def _open_adapter(self) -> Iterator[RequestsLabelStudioApi]:
        """Open a session and yield an adapter wrapping it."""
        self._cfg.require_connection()
        session = self._session_factory()
        try:
            yield self._make_adapter(session)
        finally:
            session.close()

    def _get_api(self) -> LabelStudioApiPort | None:
        """Return the best available API port (injected > persistent > None)."""
        return self._api or self._persistent_api

    @contextmanager
    def _api_or_adapter(self) -> Iterator[LabelStudioApiPort]:
        """Yield the best API port (injected/persistent or a new adapter)."""
        api = self._get_api()
        if api is not None:
            yield api
        else:
            with self._open_adapter() as adapter:
                yield adapter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_projects(self) -> list[ProjectInfo]:
        """Fetch the project catalog (title and id of every well-formed row)."""
        with self._api_or_adapter() as source:
            return source.list_projects()

    def resolve_projects(self, names: Iterable[str] | None = None) -> dict[str, int]:
        """Map project names to IDs using the remote catalog.

        *names* defaults to the configured project names.  Names missing
        from the catalog are left out of the result; that is not an error.
        """
        wanted = set(self._cfg.projects if names is None else names)
        with self._api_or_adapter() as source:
            return self._resolve_projects(source, wanted)

    def export_tasks(self, project_id: int) -> list[ExportedTask]:
        """Fetch the full JSON export (tasks with annotations) of a project."""
        with self._api_or_adapter() as source:
            return source.export_project_tasks(project_id)

    def fetch_predictions(self, project_id: int, task_id: int) -> list[PredictionSet]:
        """Fetch all prediction sets of one task."""
        with self._api_or_adapter() as source:
            return source.get_task_predictions(project_id, task_id)

    def fetch_project(self, project_id: int) -> ProjectRecord:
        """Export one project: tasks, manual annotations and predictions."""
        with self._api_or_adapter() as source:
            return self._fetch_project(source, project_id, self._cfg.max_workers)

    def fetch_all(self, project_map: dict[str, int] | None = None) -> ExportResult:
        """Export every project in *project_map* (resolved from config if omitted).

        Projects are processed in name order.  In strict mode the first
        failing project raises ``ProjectExportError``; otherwise the failure
        is recorded on the result and the remaining projects still run.
        A failing catalog fetch always raises.
        """
        with self._api_or_adapter() as source:
            if project_map is None:
                project_map = self._resolve_projects(source, set(self._cfg.projects))
            return self._fetch_all(
                source,
                project_map,
                strict=self._cfg.strict,
                max_workers=self._cfg.max_workers,
            )

    # ------------------------------------------------------------------
    # Core export logic (single code path for all API backends)
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_projects(api: LabelStudioApiPort, names: set[str]) -> dict[str, int]:
        projects = api.list_projects()
        name_to_id = _build_name_map(projects, names)
        missing = _missing_names(names, name_to_id)
        if missing:
            logger.warning(
                f"Projects not found in Label Studio: {', '.join(map(repr, missing))}"
            )
        logger.debug(f"Resolved {len(name_to_id)} of {len(names)} project name(s)")
        return name_to_id

    @staticmethod
    def _fetch_task_predictions(
        api: LabelStudioApiPort,
        project_id: int,
        tasks: Sequence[ExportedTask],
        max_workers: int,
    ) -> list[list[PredictionSet]]:
        """Fetch predictions for *tasks*, returned in the same order as *tasks*.

        With ``max_workers > 1`` the requests run on a thread pool.  The
        first failure cancels requests that have not started yet.
        """
        if max_workers <= 1 or len(tasks) <= 1:
            return [
                api.get_task_predictions(project_id, task.id)
                for task in tqdm(
                    tasks, desc="Fetching predictions", unit="task", leave=False
                )
            ]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(api.get_task_predictions, project_id, task.id)
                for task in tasks
            ]
            try:
                for future in tqdm(
                    as_completed(futures),
                    total=len(futures),
                    desc="Fetching predictions",
                    unit="task",
                    leave=False,
                ):
                    future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
        return [future.result() for future in futures]

    @staticmethod
    def _fetch_project(
        api: LabelStudioApiPort,
        project_id: int,
        max_workers: int = 1,
    ) -> ProjectRecord:
        tasks = api.export_project_tasks(project_id)
        if not tasks:
            logger.warning(f"No tasks in project id={project_id}.")
        predictions = LabelStudioClient._fetch_task_predictions(
            api, project_id, tasks, max_workers
        )
        records = [
            _task_to_record(task, prediction_sets)
            for task, prediction_sets in zip(tasks, predictions)
        ]
        project = ProjectRecord(id=project_id, tasks=records)
        annotation_count, prediction_count = project.result_counts
        logger.trace(
            f"Project id={project_id}: {len(records)} task(s), "
            f"{annotation_count} manual annotation result(s), "
            f"{prediction_count} prediction result(s)"
        )
        return project

    @staticmethod
    def _fetch_all(
        api: LabelStudioApiPort,
        project_map: dict[str, int],
        *,
        strict: bool = False,
        max_workers: int = 1,
    ) -> ExportResult:
        projects: dict[str, ProjectRecord] = {}
        failures: list[ProjectFailure] = []
        for name in sorted(project_map):
            project_id = project_map[name]
            logger.info(f"Exporting project {name!r} (id={project_id})")
            try:
                projects[name] = LabelStudioClient._fetch_project(
                    api, project_id, max_workers
                )
            except LsExportError as e:
                if strict:
                    raise ProjectExportError(name, project_id, e) from e
                logger.warning(f"Project {name!r} (id={project_id}) skipped: {e}")
                failures.append(
                    ProjectFailure(
                        project_name=name,
                        project_id=project_id,
                        error_type=type(e).__name__,
                        message=str(e),
                    )
                )
        return ExportResult(projects=projects, failures=failures)


def fetch_export(
    cfg: LabelStudioConfig | None = None,
    *,
    api: LabelStudioApiPort | None = None,
    **overrides: Any,  # noqa: ANN401
) -> ExportResult:
    """Resolve configured projects and export them in one call.

    Keyword *overrides* (e.g. ``strict=True``) replace config values.
    """
    cfg = cfg or LabelStudioConfig.load()
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    cfg.require_complete()
    with LabelStudioClient(cfg, api=api) as client:
        return client.fetch_all()

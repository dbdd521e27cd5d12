"""``requests``-backed adapter implementing ``LabelStudioApiPort``.

This is the only module that talks HTTP.  It turns JSON payloads into
models from ``lsexport.models`` and maps transport failures onto the
lsexport exception hierarchy.  Requests are never retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import requests
from loguru import logger

from lsexport._client.parsing import (
    decode_json,
    parse_catalog,
    parse_predictions,
    parse_task_export,
)
from lsexport.exceptions import TransportError

if TYPE_CHECKING:
    from lsexport.models import ExportedTask, PredictionSet, ProjectInfo

PROJECTS_PATH = "/api/projects/"
EXPORT_PATH = "/api/projects/{project_id}/export"
PREDICTIONS_PATH = "/api/predictions"


class RequestsLabelStudioApi:
    """``LabelStudioApiPort`` implementation backed by a ``requests.Session``.

    The caller owns the session (opens and closes it).  The adapter only
    adds the token header and the timeout to every call.
    """

    def __init__(
        self,
        session: requests.Session,
        host: str,
        token: str,
        timeout: float,
    ) -> None:
        """Wrap an open session for *host* authenticated with *token*."""
        self.session = session
        self.host = host.rstrip("/")
        self.timeout = timeout
        self._headers = {"Authorization": f"Token {token}"}

    # ------------------------------------------------------------------
    # Public API (satisfies LabelStudioApiPort)
    # ------------------------------------------------------------------

    def list_projects(self) -> list[ProjectInfo]:
        """Return well-formed rows of the project catalog (first page only)."""
        payload = self._get_json(PROJECTS_PATH)
        return parse_catalog(payload)

    def export_project_tasks(self, project_id: int) -> list[ExportedTask]:
        """Return every task of a project with its embedded annotation sets."""
        payload = self._get_json(
            EXPORT_PATH.format(project_id=project_id),
            params={"exportType": "JSON", "download_all_tasks": "true"},
        )
        return parse_task_export(payload, project_id)

    def get_task_predictions(self, project_id: int, task_id: int) -> list[PredictionSet]:
        """Return all prediction sets of one task."""
        payload = self._get_json(
            PREDICTIONS_PATH,
            params={"project": project_id, "task": task_id},
        )
        return parse_predictions(payload, project_id, task_id)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401
        url = f"{self.host}{path}"
        logger.trace(f"GET {url} params={params}")
        try:
            response = self.session.get(
                url,
                params=params,
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError(url, f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TransportError(url, str(e)) from e
        if not response.ok:
            raise TransportError(
                url,
                response.reason or "request failed",
                status=response.status_code,
            )
        return decode_json(response.json, url)

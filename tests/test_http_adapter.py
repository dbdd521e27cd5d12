"""Tests for the requests-backed Label Studio adapter (no network)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from lsexport._client.http_adapter import RequestsLabelStudioApi
from lsexport.exceptions import SchemaError, TransportError
from tests.fixtures import label_studio_payloads as payloads

_HOST = "http://label-studio.test"


def _response(payload: object, status: int = 200, reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    response.reason = reason
    response.json.return_value = payload
    return response


def _adapter(session: MagicMock, timeout: float = 7.5) -> RequestsLabelStudioApi:
    return RequestsLabelStudioApi(session, host=_HOST + "/", token="secret", timeout=timeout)


# ---------------------------------------------------------------------------
# Requests sent
# ---------------------------------------------------------------------------


def test_list_projects_request() -> None:
    session = MagicMock()
    session.get.return_value = _response(payloads.catalog(("Torque", 5)))

    projects = _adapter(session).list_projects()

    assert [(p.title, p.id) for p in projects] == [("Torque", 5)]
    session.get.assert_called_once_with(
        f"{_HOST}/api/projects/",
        params=None,
        headers={"Authorization": "Token secret"},
        timeout=7.5,
    )


def test_session_state_left_untouched() -> None:
    """Auth travels per request; the shared session itself is never modified."""
    session = requests.Session()
    headers_before = dict(session.headers)
    adapters_before = dict(session.adapters)
    session.get = MagicMock(return_value=_response([]))  # type: ignore[method-assign]

    adapter = _adapter(session)  # type: ignore[arg-type]
    adapter.get_task_predictions(5, 10)
    adapter.get_task_predictions(5, 11)

    assert dict(session.headers) == headers_before
    assert dict(session.adapters) == adapters_before
    assert "Authorization" not in session.headers
    session.close()


def test_export_request_query() -> None:
    session = MagicMock()
    session.get.return_value = _response([payloads.task_entry(10)])

    tasks = _adapter(session).export_project_tasks(5)

    assert [t.id for t in tasks] == [10]
    args, kwargs = session.get.call_args
    assert args == (f"{_HOST}/api/projects/5/export",)
    assert kwargs["params"] == {"exportType": "JSON", "download_all_tasks": "true"}
    assert kwargs["headers"] == {"Authorization": "Token secret"}


def test_predictions_request_query() -> None:
    session = MagicMock()
    session.get.return_value = _response([payloads.prediction_set(100)])

    sets = _adapter(session).get_task_predictions(5, 10)

    assert [s.id for s in sets] == [100]
    args, kwargs = session.get.call_args
    assert args == (f"{_HOST}/api/predictions",)
    assert kwargs["params"] == {"project": 5, "task": 10}


# ---------------------------------------------------------------------------
# Failure mapping
# ---------------------------------------------------------------------------


def test_http_error_status_is_transport_error() -> None:
    session = MagicMock()
    session.get.return_value = _response({}, status=401, reason="Unauthorized")

    with pytest.raises(TransportError) as excinfo:
        _adapter(session).list_projects()

    assert excinfo.value.status == 401
    assert "Unauthorized" in str(excinfo.value)


def test_connection_error_is_transport_error() -> None:
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(TransportError) as excinfo:
        _adapter(session).export_project_tasks(5)

    assert excinfo.value.status is None
    assert excinfo.value.url == f"{_HOST}/api/projects/5/export"


def test_timeout_is_transport_error() -> None:
    session = MagicMock()
    session.get.side_effect = requests.Timeout()

    with pytest.raises(TransportError, match="timed out after 2.0s"):
        _adapter(session, timeout=2.0).get_task_predictions(5, 10)


def test_invalid_json_is_schema_error() -> None:
    session = MagicMock()
    response = _response(None)
    response.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
    session.get.return_value = response

    with pytest.raises(SchemaError, match="not valid JSON"):
        _adapter(session).list_projects()


def test_missing_results_is_schema_error() -> None:
    session = MagicMock()
    session.get.return_value = _response({"count": 2})

    with pytest.raises(SchemaError, match="results"):
        _adapter(session).list_projects()


def test_requests_are_not_retried() -> None:
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("reset")

    with pytest.raises(TransportError):
        _adapter(session).list_projects()

    assert session.get.call_count == 1

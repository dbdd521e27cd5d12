"""Internal helpers for splitting `lsexport.client` responsibilities."""

from lsexport._client.filters import _keep_manual_results
from lsexport._client.http_adapter import RequestsLabelStudioApi
from lsexport._client.mapping import _build_name_map, _missing_names
from lsexport._client.parsing import (
    parse_catalog,
    parse_predictions,
    parse_task_export,
)
from lsexport._client.ports import LabelStudioApiPort

__all__ = [
    "LabelStudioApiPort",
    "RequestsLabelStudioApi",
    "_build_name_map",
    "_keep_manual_results",
    "_missing_names",
    "parse_catalog",
    "parse_predictions",
    "parse_task_export",
]

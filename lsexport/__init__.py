"""lsexport -- Label Studio task, annotation and prediction export."""

from lsexport._client.ports import LabelStudioApiPort
from lsexport.client import LabelStudioClient, fetch_export
from lsexport.config import LabelStudioConfig
from lsexport.exceptions import (
    ConfigError,
    LsExportError,
    ProjectExportError,
    SchemaError,
    TransportError,
)
from lsexport.export_table import TABLE_COLUMNS, export_to_dataframe
from lsexport.models import (
    AnnotationResult,
    AnnotationSet,
    ExportResult,
    PredictionResult,
    PredictionSet,
    ProjectFailure,
    ProjectInfo,
    ProjectRecord,
    TaskRecord,
    TimeSpan,
)

__all__ = [
    "TABLE_COLUMNS",
    "AnnotationResult",
    "AnnotationSet",
    "ConfigError",
    "ExportResult",
    "LabelStudioApiPort",
    "LabelStudioClient",
    "LabelStudioConfig",
    "LsExportError",
    "PredictionResult",
    "PredictionSet",
    "ProjectExportError",
    "ProjectFailure",
    "ProjectInfo",
    "ProjectRecord",
    "SchemaError",
    "TaskRecord",
    "TimeSpan",
    "TransportError",
    "export_to_dataframe",
    "fetch_export",
]

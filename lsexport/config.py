"""Configuration loading with priority: env > positional args > config file > defaults."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from lsexport.exceptions import ConfigError

if TYPE_CHECKING:
    from collections.abc import Sequence

CONFIG_DIR = Path.home() / ".config" / "lsexport"
CONFIG_PATH = CONFIG_DIR / "config.yaml"

HOST_ENV = "LABEL_STUDIO_HOST"
TOKEN_ENV = "LABEL_STUDIO_TOKEN"
PROJECTS_ENV = "LABEL_STUDIO_PROJECTS"
TIMEOUT_ENV = "LSEXPORT_TIMEOUT"
STRICT_ENV = "LSEXPORT_STRICT"
MAX_WORKERS_ENV = "LSEXPORT_MAX_WORKERS"
CONFIG_ENV = "LSEXPORT_CONFIG"

DEFAULT_TIMEOUT = 30.0

# Positional values are taken from the end of the list in this order,
# so the full command line reads ``TOKEN HOST PROJECTS``.
POSITIONAL_FIELDS: tuple[str, ...] = ("projects", "host", "token")

_ENV_FIELDS: dict[str, str] = {
    "host": HOST_ENV,
    "token": TOKEN_ENV,
    "projects": PROJECTS_ENV,
    "timeout": TIMEOUT_ENV,
    "strict": STRICT_ENV,
    "max_workers": MAX_WORKERS_ENV,
}


def get_config_path(config_path: Path | None = None) -> Path:
    """Return path to config file.

    Uses *config_path* if provided, otherwise LSEXPORT_CONFIG env var,
    otherwise default CONFIG_PATH.
    """
    if config_path is not None:
        return config_path
    path = os.environ.get(CONFIG_ENV)
    return Path(path) if path else CONFIG_PATH


def _load_raw_yaml(path: Path) -> dict[str, object]:
    """Load a YAML file and return its top-level mapping (or empty dict)."""
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        logger.warning(f"Invalid config format in {path}; expected mapping.")
        return {}
    return data


def parse_project_names(raw: object) -> list[str]:
    """Split a comma separated string (or list) into unique, non-empty names."""
    if raw is None:
        return []
    if isinstance(raw, str):
        items: list[object] = list(raw.split(","))
    elif isinstance(raw, (list, tuple, set)):
        items = list(raw)
    else:
        msg = f"project names must be a string or a list, got {raw!r}"
        raise ValueError(msg)  # noqa: TRY004
    names: list[str] = []
    for item in items:
        name = str(item).strip()
        if name and name not in names:
            names.append(name)
    return names


class LabelStudioConfig(BaseModel):
    """Label Studio connection and export settings."""

    host: str = ""
    token: str | None = None
    projects: list[str] = []
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    strict: bool = False
    max_workers: int = Field(default=1, ge=1)

    @field_validator("host", mode="before")
    @classmethod
    def _strip_host(cls, v: object) -> object:
        return v.strip().rstrip("/") if isinstance(v, str) else v

    @field_validator("projects", mode="before")
    @classmethod
    def _split_projects(cls, v: object) -> list[str]:
        return parse_project_names(v)

    @classmethod
    def _build(cls, data: dict[str, object], source: str) -> LabelStudioConfig:
        """Validate *data* and report bad values as ``ConfigError``."""
        try:
            return cls(**data)  # type: ignore[arg-type]
        except ValidationError as e:
            msg = f"Invalid configuration in {source}: {e}"
            raise ConfigError(msg) from e

    @classmethod
    def from_file(cls, path: Path = CONFIG_PATH) -> LabelStudioConfig:
        """Load the ``label_studio`` section of a YAML file.

        Returns an empty config if the file or the section is missing.
        """
        if not path.is_file():
            return cls()
        logger.trace(f"Loading config from {path}")
        section = _load_raw_yaml(path).get("label_studio", {})
        if not isinstance(section, dict):
            logger.warning(f"Invalid 'label_studio' section in {path}; ignored.")
            return cls()
        data = {k: v for k, v in section.items() if k in cls.model_fields}
        return cls._build(data, str(path))

    @classmethod
    def from_env(cls) -> LabelStudioConfig:
        """Build config from the environment variables that are set."""
        data: dict[str, object] = {}
        for field_name, env_var in _ENV_FIELDS.items():
            value = os.environ.get(env_var)
            if value:
                data[field_name] = value
        return cls._build(data, "environment")

    @classmethod
    def from_args(
        cls,
        values: Sequence[str],
        fields: Sequence[str] = POSITIONAL_FIELDS,
    ) -> LabelStudioConfig:
        """Build config from positional command-line values.

        Values are consumed from the end in *fields* order (project names,
        then host, then token by default).  A slot whose environment
        variable is set does not consume a value.
        """
        remaining = list(values)
        data: dict[str, object] = {}
        for field_name in fields:
            if os.environ.get(_ENV_FIELDS[field_name]):
                continue
            if not remaining:
                break
            data[field_name] = remaining.pop()
        if remaining:
            msg = f"Unexpected positional values: {', '.join(remaining)}"
            raise ConfigError(msg)
        return cls._build(data, "command line")

    def merge(self, override: LabelStudioConfig) -> LabelStudioConfig:
        """Return a new config where values explicitly set on *override* win."""
        update = {k: getattr(override, k) for k in override.model_fields_set}
        return self.model_copy(update=update)

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        args: Sequence[str] = (),
        positional_fields: Sequence[str] = POSITIONAL_FIELDS,
    ) -> LabelStudioConfig:
        """Merge defaults, file, positional args and env: defaults < file < args < env."""
        path = get_config_path(config_path)
        file_cfg = cls.from_file(path)
        args_cfg = cls.from_args(args, positional_fields)
        env_cfg = cls.from_env()
        return cls().merge(file_cfg).merge(args_cfg).merge(env_cfg)

    def require_connection(self) -> LabelStudioConfig:
        """Raise ``ConfigError`` unless host and token are set."""
        self._raise_if_missing(projects=False)
        return self

    def require_complete(self) -> LabelStudioConfig:
        """Raise ``ConfigError`` unless host, token and project names are set."""
        self._raise_if_missing(projects=True)
        return self

    def _raise_if_missing(self, *, projects: bool) -> None:
        missing: list[str] = []
        if projects and not self.projects:
            missing.append(
                "project names (comma separated) as the last positional value "
                f"or {PROJECTS_ENV}"
            )
        if not self.host:
            missing.append(f"host as the second positional value or {HOST_ENV}")
        if not self.token:
            missing.append(f"API token as the first positional value or {TOKEN_ENV}")
        if missing:
            msg = "Missing configuration: " + "; ".join(missing)
            raise ConfigError(msg)

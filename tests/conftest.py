"""Shared pytest fixtures for lsexport tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import yaml

from lsexport.client import LabelStudioClient
from lsexport.config import LabelStudioConfig
from tests.fixtures import label_studio_payloads as payloads
from tests.fixtures.fake_label_studio_api import FakeLabelStudioApi

if TYPE_CHECKING:
    from pathlib import Path

_ENV_VARS = (
    "LABEL_STUDIO_HOST",
    "LABEL_STUDIO_TOKEN",
    "LABEL_STUDIO_PROJECTS",
    "LSEXPORT_TIMEOUT",
    "LSEXPORT_STRICT",
    "LSEXPORT_MAX_WORKERS",
    "LSEXPORT_CONFIG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate every test from the developer's environment and config file."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("LSEXPORT_CONFIG", str(tmp_path / "missing-config.yaml"))


@pytest.fixture
def two_project_api() -> FakeLabelStudioApi:
    """Catalog with Torque (5) and Pressure (9); two tasks in Torque, one in Pressure."""
    return FakeLabelStudioApi(
        catalog=payloads.catalog(("Torque", 5), ("Pressure", 9)),
        exports={
            5: [
                payloads.task_entry(
                    10,
                    project_id=5,
                    annotations=[
                        payloads.annotation_set(
                            1,
                            task_id=10,
                            project_id=5,
                            results=[
                                payloads.annotation_result("r1", origin="manual"),
                                payloads.annotation_result("r2", origin="prediction"),
                            ],
                        )
                    ],
                ),
                payloads.task_entry(11, project_id=5),
            ],
            9: [payloads.task_entry(20, project_id=9)],
        },
        predictions={
            (5, 10): [payloads.prediction_set(100)],
            (5, 11): [],
            (9, 20): [payloads.prediction_set(200), payloads.prediction_set(201)],
        },
    )


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_config(**overrides: object) -> LabelStudioConfig:
    """Create a complete config with sensible defaults."""
    defaults: dict[str, object] = {
        "host": "http://label-studio.test",
        "token": "test-token",
        "projects": ["Torque", "Pressure"],
    }
    defaults.update(overrides)
    return LabelStudioConfig(**defaults)  # type: ignore[arg-type]


def make_fake_client(api: FakeLabelStudioApi, **overrides: object) -> LabelStudioClient:
    """Create a LabelStudioClient backed by a fake API port."""
    return LabelStudioClient(make_config(**overrides), api=api)


def write_test_config(path: Path, **section: object) -> None:
    """Write a config YAML with the given ``label_studio`` section."""
    path.write_text(yaml.safe_dump({"label_studio": section}), encoding="utf-8")

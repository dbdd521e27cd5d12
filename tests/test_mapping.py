"""Unit tests for project name -> ID mapping."""

from __future__ import annotations

from lsexport._client.mapping import _build_name_map, _missing_names
from lsexport.models import ProjectInfo


def _catalog(*rows: tuple[str, int]) -> list[ProjectInfo]:
    return [ProjectInfo(title=title, id=pid) for title, pid in rows]


def test_unknown_configured_name_is_absent() -> None:
    """Torque resolves, Gamma is silently missing, Pressure is not requested."""
    projects = _catalog(("Torque", 5), ("Pressure", 9))

    name_map = _build_name_map(projects, {"Torque", "Gamma"})

    assert name_map == {"Torque": 5}
    assert _missing_names({"Torque", "Gamma"}, name_map) == ["Gamma"]


def test_duplicate_catalog_title_last_wins() -> None:
    projects = _catalog(("Torque", 5), ("Pressure", 9), ("Torque", 12))

    assert _build_name_map(projects, ["Torque"]) == {"Torque": 12}


def test_duplicate_requested_names_collapse() -> None:
    projects = _catalog(("Torque", 5))

    assert _build_name_map(projects, ["Torque", "Torque"]) == {"Torque": 5}


def test_title_match_is_exact() -> None:
    projects = _catalog(("torque", 5), ("Torque ", 6))

    assert _build_name_map(projects, ["Torque"]) == {}


def test_empty_inputs() -> None:
    assert _build_name_map([], ["Torque"]) == {}
    assert _build_name_map(_catalog(("Torque", 5)), []) == {}

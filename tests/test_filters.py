"""Unit tests for manual-origin annotation filtering."""

from __future__ import annotations

from lsexport._client.filters import _keep_manual_results
from lsexport.models import AnnotationSet
from tests.fixtures import label_studio_payloads as payloads


def _set(set_id: int, origins: list[str]) -> AnnotationSet:
    results = [
        payloads.annotation_result(f"r{i}", origin=origin)
        for i, origin in enumerate(origins)
    ]
    return AnnotationSet.model_validate(payloads.annotation_set(set_id, results=results))


def test_keeps_only_manual_result() -> None:
    """Manual result survives, prediction-origin result is dropped."""
    filtered = _keep_manual_results([_set(1, ["manual", "prediction"])])

    assert len(filtered) == 1
    assert [r.id for r in filtered[0].results] == ["r0"]


def test_every_surviving_result_is_manual_and_order_kept() -> None:
    original = [
        _set(1, ["manual", "prediction", "manual", "prediction-changed", "manual"]),
        _set(2, ["prediction", "manual"]),
    ]

    filtered = _keep_manual_results(original)

    assert [r.id for r in filtered[0].results] == ["r0", "r2", "r4"]
    assert [r.id for r in filtered[1].results] == ["r1"]
    for before, after in zip(original, filtered):
        assert len(after.results) <= len(before.results)
        assert all(r.origin == "manual" for r in after.results)


def test_sets_left_empty_are_kept() -> None:
    filtered = _keep_manual_results([_set(1, ["prediction"]), _set(2, ["manual"])])

    assert [s.id for s in filtered] == [1, 2]
    assert filtered[0].results == []


def test_filter_is_idempotent() -> None:
    once = _keep_manual_results([_set(1, ["manual", "prediction", "manual"])])
    twice = _keep_manual_results(once)

    assert twice == once


def test_input_sets_are_not_modified() -> None:
    original = _set(1, ["manual", "prediction"])

    _keep_manual_results([original])

    assert len(original.results) == 2


def test_set_metadata_preserved() -> None:
    original = _set(3, ["prediction"])

    (filtered,) = _keep_manual_results([original])

    assert filtered.id == 3
    assert filtered.created_at == original.created_at
    assert filtered.task_id == original.task_id
    assert filtered.project_id == original.project_id

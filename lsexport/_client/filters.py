"""Annotation provenance filtering."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lsexport.models import AnnotationSet


def _keep_manual_results(annotation_sets: Iterable[AnnotationSet]) -> list[AnnotationSet]:
    """Return copies of *annotation_sets* holding only manual results.

    Order is preserved and sets left empty are kept.
    """
    return [
        s.model_copy(update={"results": [r for r in s.results if r.is_manual]})
        for s in annotation_sets
    ]

"""Internal helpers for mapping configured project names to catalog IDs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lsexport.models import ProjectInfo


def _build_name_map(
    projects: Iterable[ProjectInfo],
    names: Iterable[str],
) -> dict[str, int]:
    """Map each configured name found in *projects* to its project ID.

    Catalog rows whose title is not requested are ignored.  When two rows
    share a title the later one wins.  Requested names with no catalog row
    are simply absent from the result.
    """
    wanted = set(names)
    name_to_id: dict[str, int] = {}
    for project in projects:
        logger.trace(f"Catalog row from API: {project}")
        if project.title in wanted:
            if project.title in name_to_id:
                logger.debug(
                    f"Project title {project.title!r} appears more than once; "
                    f"using id={project.id}"
                )
            name_to_id[project.title] = project.id
    return name_to_id


def _missing_names(names: Iterable[str], name_to_id: dict[str, int]) -> list[str]:
    """Return requested names that were not resolved, sorted."""
    return sorted(set(names) - name_to_id.keys())

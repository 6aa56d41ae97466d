"""Project file load/save."""

import logging
from pathlib import Path
from typing import Iterable, Union

from pydantic import ValidationError

from ..core.errors import ProjectIOError
from ..core.models.project import SfMProject

logger = logging.getLogger(__name__)

ALL_SECTIONS = ("views", "intrinsics", "rigs")


def load_project(path: Union[str, Path]) -> SfMProject:
    """Load a project from a JSON file.

    Raises:
        ProjectIOError: If the file cannot be read or is not a valid project
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectIOError(f"Cannot read project file '{path}': {e}") from e

    try:
        project = SfMProject.model_validate_json(content)
    except ValidationError as e:
        raise ProjectIOError(f"Invalid project file '{path}': {e}") from e

    logger.debug(
        f"Loaded project '{path}': {len(project.views)} views, "
        f"{len(project.intrinsics)} intrinsics, {len(project.rigs)} rigs"
    )
    return project


def save_project(
    project: SfMProject,
    path: Union[str, Path],
    sections: Iterable[str] = ALL_SECTIONS
) -> None:
    """Save a project as JSON, creating the parent folder if needed.

    Args:
        project: Project to save
        path: Output file
        sections: Which of "views", "intrinsics" and "rigs" to write

    Raises:
        ProjectIOError: If a section is unknown or the file cannot be written
    """
    sections = set(sections)
    unknown = sections.difference(ALL_SECTIONS)
    if unknown:
        raise ProjectIOError(f"Unknown project section(s): {sorted(unknown)}")

    path = Path(path)
    content = project.model_dump_json(
        include={"version", *sections},
        indent=4,
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ProjectIOError(f"Cannot write project file '{path}': {e}") from e

    logger.info(f"Project saved to '{path}'")

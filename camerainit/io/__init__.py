"""Reading images and project files."""

from .images import (
    IMAGE_EXTENSIONS,
    list_image_files,
    project_from_images,
    read_image_metadata,
    view_from_image,
)
from .project_io import load_project, save_project

__all__ = [
    "IMAGE_EXTENSIONS",
    "list_image_files",
    "project_from_images",
    "read_image_metadata",
    "view_from_image",
    "load_project",
    "save_project",
]

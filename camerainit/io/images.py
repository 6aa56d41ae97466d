"""Image folder listing and EXIF metadata reading."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from PIL import ExifTags, Image, UnidentifiedImageError

from ..core.errors import NoViewsError, ProjectIOError
from ..core.math.hashing import path_hash
from ..core.models.entities import View
from ..core.models.project import SfMProject

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".tif", ".tiff")

# Base IFD tags
MAKE_TAG = 0x010F
MODEL_TAG = 0x0110
# Exif IFD tags
FOCAL_LENGTH_TAG = 0x920A
FOCAL_IN_35MM_TAG = 0xA405
BODY_SERIAL_TAG = 0xA431
LENS_SERIAL_TAG = 0xA435

_BASE_TAGS = {
    MAKE_TAG: "Make",
    MODEL_TAG: "Model",
}
_EXIF_TAGS = {
    FOCAL_LENGTH_TAG: "Exif:FocalLength",
    FOCAL_IN_35MM_TAG: "Exif:FocalLengthIn35mmFilm",
    BODY_SERIAL_TAG: "Exif:BodySerialNumber",
    LENS_SERIAL_TAG: "Exif:LensSerialNumber",
}


def list_image_files(
    folder_or_file: Union[str, Path],
    extensions: Iterable[str] = IMAGE_EXTENSIONS
) -> List[str]:
    """Recursively list image files, sorted.

    Args:
        folder_or_file: Folder to walk, or a single image file
        extensions: Accepted lower-case extensions, with the dot

    Returns:
        Image paths

    Raises:
        ProjectIOError: If the path is neither a file nor a folder
    """
    path = Path(folder_or_file)
    extensions = tuple(e.lower() for e in extensions)

    if path.is_file():
        return [str(path)] if path.suffix.lower() in extensions else []
    if not path.is_dir():
        raise ProjectIOError(f"'{path}' is not a valid folder or file path.")

    return sorted(
        str(p) for p in path.rglob("*")
        if p.is_file() and p.suffix.lower() in extensions
    )


def _exif_text(value) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        return value.strip("\x00 ").strip()
    # IFDRational and plain numbers
    return repr(float(value))


def read_image_metadata(image_path: Union[str, Path]) -> Tuple[int, int, Dict[str, str]]:
    """Read image dimensions and camera EXIF tags.

    Returns:
        (width, height, metadata) with keys "Make", "Model",
        "Exif:FocalLength", "Exif:FocalLengthIn35mmFilm",
        "Exif:BodySerialNumber" and "Exif:LensSerialNumber" when present

    Raises:
        ProjectIOError: If the file is not a readable image
    """
    try:
        with Image.open(image_path) as im:
            width, height = im.size
            exif = im.getexif()
            exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    except (OSError, UnidentifiedImageError) as e:
        raise ProjectIOError(f"Cannot read image '{image_path}': {e}") from e

    metadata = {}
    for tags, source in ((_BASE_TAGS, exif), (_EXIF_TAGS, exif_ifd)):
        for tag, key in tags.items():
            if tag not in source:
                continue
            try:
                text = _exif_text(source[tag])
            except (TypeError, ValueError, ZeroDivisionError):
                logger.debug(f"Ignoring unreadable {key} tag in '{image_path}'")
                continue
            if text:
                metadata[key] = text
    return width, height, metadata


def view_from_image(image_path: Union[str, Path], view_id: Optional[int] = None) -> View:
    """Create an incomplete view from an image file."""
    width, height, metadata = read_image_metadata(image_path)
    return View(
        view_id=path_hash(str(image_path)) if view_id is None else view_id,
        path=str(image_path),
        width=width,
        height=height,
        metadata=metadata,
    )


def project_from_images(
    folder_or_file: Union[str, Path],
    extensions: Iterable[str] = IMAGE_EXTENSIONS,
    max_workers: int = 4
) -> SfMProject:
    """Create a project with one view per image found.

    View ids are hashes of the image paths, moved to the next free id on
    collision.

    Raises:
        NoViewsError: If no image was found
        ProjectIOError: If the path or an image cannot be read
    """
    image_paths = list_image_files(folder_or_file, extensions)
    if not image_paths:
        raise NoViewsError(f"No images found in '{folder_or_file}'.")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        views = list(executor.map(view_from_image, image_paths))

    project = SfMProject()
    for view in views:
        view.view_id = project.next_free_view_id(view.view_id)
        project.add_view(view)

    logger.info(f"Listed {len(project.views)} images from '{folder_or_file}'")
    return project

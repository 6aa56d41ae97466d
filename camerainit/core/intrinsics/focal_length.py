"""Focal length resolution in millimeters."""

from typing import Optional

from ..math.intrinsics import FILM_DIAGONAL_MM, sensor_diagonal


def resolve_focal_length(
    metadata_focal_mm: Optional[float],
    focal_in_35mm: Optional[float],
    sensor_width_mm: Optional[float],
    image_ratio: float,
    preset_focal_mm: Optional[float] = None
) -> Optional[float]:
    """Resolve the true focal length of a view.

    Must run after ``resolve_sensor_width``: a focal length derived there
    from the 35mm-equivalent tag is passed as ``preset_focal_mm`` and kept.

    Args:
        metadata_focal_mm: EXIF focal length, None if absent or non-positive
        focal_in_35mm: 35mm-equivalent focal length, None if absent
        sensor_width_mm: Resolved sensor width, None if unresolved
        image_ratio: Image width divided by height
        preset_focal_mm: Focal length already set by the sensor width cascade

    Returns:
        Focal length in mm, or None if unresolved
    """
    if metadata_focal_mm is not None and metadata_focal_mm > 0:
        return metadata_focal_mm

    if preset_focal_mm is not None and preset_focal_mm > 0:
        return preset_focal_mm

    if sensor_width_mm is not None and focal_in_35mm is not None:
        sensor_diag = sensor_diagonal(sensor_width_mm, image_ratio)
        return sensor_diag * focal_in_35mm / FILM_DIAGONAL_MM

    return None

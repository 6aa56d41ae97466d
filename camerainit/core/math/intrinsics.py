"""Sensor and lens geometry helpers for pinhole intrinsics."""

import numpy as np

# 24x36 mm full-frame film
FILM_WIDTH_MM = 36.0
FILM_HEIGHT_MM = 24.0
FILM_DIAGONAL_MM = float(np.hypot(FILM_WIDTH_MM, FILM_HEIGHT_MM))


def width_from_diagonal(diagonal: float, image_ratio: float) -> float:
    """Width of a rectangle of given diagonal and width/height ratio.

    Args:
        diagonal: Diagonal length
        image_ratio: Width divided by height

    Returns:
        Width, in the diagonal's unit
    """
    inv_ratio = 1.0 / image_ratio
    return diagonal * np.sqrt(1.0 / (1.0 + inv_ratio * inv_ratio))


def sensor_diagonal(sensor_width_mm: float, image_ratio: float) -> float:
    """Diagonal of a sensor of given width and width/height ratio."""
    return np.sqrt(sensor_width_mm ** 2 + (sensor_width_mm / image_ratio) ** 2)


def focal_to_35mm_equivalent(
    focal_length_mm: float,
    sensor_width_mm: float,
    image_ratio: float
) -> float:
    """Convert a true focal length to its 35mm-film equivalent.

    Args:
        focal_length_mm: Focal length on the real sensor
        sensor_width_mm: Real sensor width
        image_ratio: Width divided by height

    Returns:
        Focal length giving the same diagonal field of view on 24x36 film
    """
    return focal_length_mm * FILM_DIAGONAL_MM / sensor_diagonal(sensor_width_mm, image_ratio)


def focal_pix_from_mm(focal_length_mm: float, sensor_width_mm: float, width_pix: int) -> float:
    """Focal length in pixels from millimeters and the sensor width."""
    return focal_length_mm * width_pix / sensor_width_mm


def focal_pix_from_fov(field_of_view_deg: float, width_pix: int) -> float:
    """Focal length in pixels for a horizontal field of view.

    Args:
        field_of_view_deg: Horizontal field of view in degrees
        width_pix: Image width in pixels

    Returns:
        Pinhole focal length in pixels
    """
    return (width_pix / 2.0) / np.tan(np.deg2rad(field_of_view_deg) / 2.0)

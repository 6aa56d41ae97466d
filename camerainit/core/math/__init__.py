"""Math primitives for camera initialization."""

from .hashing import stable_hash, path_hash
from .intrinsics import (
    FILM_DIAGONAL_MM,
    focal_pix_from_fov,
    focal_pix_from_mm,
    focal_to_35mm_equivalent,
    sensor_diagonal,
    width_from_diagonal,
)

__all__ = [
    "stable_hash",
    "path_hash",
    "FILM_DIAGONAL_MM",
    "focal_pix_from_fov",
    "focal_pix_from_mm",
    "focal_to_35mm_equivalent",
    "sensor_diagonal",
    "width_from_diagonal",
]

"""Data models for camera initialization."""

from .entities import View, Intrinsic, Rig, CameraModel, InitializationMode
from .project import (
    SfMProject,
    CameraInitOptions,
    CameraInitReport,
    SensorIssue,
    parse_intrinsic_matrix,
)

__all__ = [
    "View",
    "Intrinsic",
    "Rig",
    "CameraModel",
    "InitializationMode",
    "SfMProject",
    "CameraInitOptions",
    "CameraInitReport",
    "SensorIssue",
    "parse_intrinsic_matrix",
]

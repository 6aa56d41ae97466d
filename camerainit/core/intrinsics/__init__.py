"""Intrinsic resolution: sensor width, focal length, building and grouping."""

from .sensor_width import Diagnostic, SensorWidthResolution, resolve_sensor_width
from .focal_length import resolve_focal_length
from .builder import build_intrinsic, choose_camera_model
from .grouping import GroupingEngine, IdGenerator, CounterIdGenerator

__all__ = [
    "Diagnostic",
    "SensorWidthResolution",
    "resolve_sensor_width",
    "resolve_focal_length",
    "build_intrinsic",
    "choose_camera_model",
    "GroupingEngine",
    "IdGenerator",
    "CounterIdGenerator",
]

"""camerainit - initial camera intrinsics for image datasets

Lists images (or loads a project), resolves sensor width and focal length
from EXIF metadata and a sensor database, groups views into shared
intrinsics and detects multi-camera rigs.
"""

__version__ = "0.1.0"

# Core models
from .core.models.entities import View, Intrinsic, Rig, CameraModel, InitializationMode
from .core.models.project import SfMProject, CameraInitOptions, CameraInitReport

# Errors
from .core.errors import (
    CameraInitError,
    NoViewsError,
    RigStructureError,
    IncompleteOutputError,
    ProjectIOError,
    SensorDatabaseError,
    InvalidIntrinsicStringError,
)

# Sensor database
from .core.sensors.database import Datasheet, SensorDatabase

# Pipeline
from .core.pipeline.engine import CameraInitEngine, run_camera_init

# IO
from .io.images import project_from_images
from .io.project_io import load_project, save_project

__all__ = [
    # Version
    "__version__",
    # Models
    "View",
    "Intrinsic",
    "Rig",
    "CameraModel",
    "InitializationMode",
    "SfMProject",
    "CameraInitOptions",
    "CameraInitReport",
    # Errors
    "CameraInitError",
    "NoViewsError",
    "RigStructureError",
    "IncompleteOutputError",
    "ProjectIOError",
    "SensorDatabaseError",
    "InvalidIntrinsicStringError",
    # Sensor database
    "Datasheet",
    "SensorDatabase",
    # Pipeline
    "CameraInitEngine",
    "run_camera_init",
    # IO
    "project_from_images",
    "load_project",
    "save_project",
]

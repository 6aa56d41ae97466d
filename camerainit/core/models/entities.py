"""Core entities: View, Intrinsic, Rig."""

from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Mapping
import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator

from ..math.hashing import stable_hash


class CameraModel(str, Enum):
    """Supported pinhole-family camera models."""

    PINHOLE = "pinhole"
    RADIAL1 = "radial1"
    RADIAL3 = "radial3"
    BROWN = "brown"
    FISHEYE4 = "fisheye4"
    FISHEYE1 = "fisheye1"

    @property
    def distortion_size(self) -> int:
        """Number of distortion coefficients carried by the model."""
        return _DISTORTION_SIZES[self]

    @property
    def has_focal_length_pix(self) -> bool:
        """Whether the model is parameterized by a focal length in pixels."""
        return self in _PINHOLE_FAMILY

    @property
    def is_fisheye(self) -> bool:
        return self in (CameraModel.FISHEYE4, CameraModel.FISHEYE1)


_DISTORTION_SIZES = {
    CameraModel.PINHOLE: 0,
    CameraModel.RADIAL1: 1,
    CameraModel.RADIAL3: 3,
    CameraModel.BROWN: 5,
    CameraModel.FISHEYE4: 4,
    CameraModel.FISHEYE1: 1,
}

_PINHOLE_FAMILY = frozenset(_DISTORTION_SIZES)


class InitializationMode(str, Enum):
    """How the initial focal length of an intrinsic was obtained."""

    CALIBRATED = "calibrated"
    COMPUTED_FROM_METADATA = "computed_from_metadata"
    ESTIMATED_FROM_METADATA = "estimated_from_metadata"
    SET_FROM_DEFAULT_FOCAL = "set_from_default_focal"
    SET_FROM_DEFAULT_FOV = "set_from_default_fov"
    NONE = "none"


# Metadata keys, most specific first. Lookup is case-insensitive.
MAKE_KEYS = ("Make", "cameraMake", "camera make")
MODEL_KEYS = ("Model", "cameraModel", "camera model")
FOCAL_LENGTH_KEYS = ("Exif:FocalLength", "FocalLength")
FOCAL_IN_35MM_KEYS = ("Exif:FocalLengthIn35mmFilm", "FocalLengthIn35mmFilm")
BODY_SERIAL_KEYS = ("Exif:BodySerialNumber", "BodySerialNumber", "SerialNumber")
LENS_SERIAL_KEYS = ("Exif:LensSerialNumber", "LensSerialNumber")


class View(BaseModel):
    """One input image with its metadata and assigned ids."""

    view_id: int = Field(ge=0, description="Unique identifier for the view")
    path: str = Field(description="Path to image file")
    width: int = Field(gt=0, description="Image width in pixels")
    height: int = Field(gt=0, description="Image height in pixels")
    metadata: Dict[str, str] = Field(
        default_factory=dict,
        description="Image metadata tags (EXIF and others)"
    )
    intrinsic_id: Optional[int] = Field(
        default=None,
        description="Assigned intrinsic ID, None when undefined"
    )
    pose_id: Optional[int] = Field(default=None, description="Pose ID")
    rig_id: Optional[int] = Field(default=None, description="Rig ID if part of a rig")
    sub_pose_id: Optional[int] = Field(default=None, description="Camera index within the rig")
    frame_id: Optional[int] = Field(default=None, description="Synchronized capture index")

    @field_validator('metadata', mode='before')
    @classmethod
    def validate_metadata(cls, v):
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            raise ValueError(f"metadata must be a mapping of tag names to values, got {type(v).__name__}")
        return {str(key): str(value) for key, value in v.items()}

    def aspect_ratio(self) -> float:
        """Get image aspect ratio."""
        return self.width / self.height

    def get_metadata(self, *keys: str) -> str:
        """Get the value of the first present metadata key, or an empty string."""
        key = self._find_key(keys)
        return self.metadata[key] if key is not None else ""

    def get_make(self) -> str:
        return self.get_metadata(*MAKE_KEYS).strip()

    def get_model(self) -> str:
        return self.get_metadata(*MODEL_KEYS).strip()

    def get_body_serial_number(self) -> str:
        return self.get_metadata(*BODY_SERIAL_KEYS).strip()

    def get_lens_serial_number(self) -> str:
        return self.get_metadata(*LENS_SERIAL_KEYS).strip()

    def has_camera_metadata(self) -> bool:
        """Check if the view has a camera make or model."""
        return bool(self.get_make() or self.get_model())

    def get_focal_length_mm(self) -> Optional[float]:
        """Get the EXIF focal length in millimeters if present and positive."""
        focal = self._get_float(FOCAL_LENGTH_KEYS)
        if focal is None or focal <= 0:
            return None
        return focal

    def get_focal_in_35mm(self) -> Optional[float]:
        """Get the 35mm-equivalent focal length if present and positive."""
        focal = self._get_float(FOCAL_IN_35MM_KEYS)
        if focal is None or focal <= 0:
            return None
        return focal

    def is_part_of_rig(self) -> bool:
        return self.rig_id is not None and self.sub_pose_id is not None

    def set_rig_and_sub_pose(self, rig_id: int, sub_pose_id: int) -> None:
        self.rig_id = rig_id
        self.sub_pose_id = sub_pose_id

    def folder(self) -> str:
        """Get the containing folder of the image."""
        return str(Path(self.path).parent)

    def _find_key(self, keys) -> Optional[str]:
        lowered = {k.lower(): k for k in self.metadata}
        for key in keys:
            found = lowered.get(key.lower())
            if found is not None:
                return found
        return None

    def _get_float(self, keys) -> Optional[float]:
        raw = self.get_metadata(*keys).strip()
        if not raw:
            return None
        # EXIF rationals may come through as "50/1"
        try:
            if "/" in raw:
                num, den = raw.split("/", 1)
                value = float(num) / float(den)
            else:
                value = float(raw)
        except (ValueError, ZeroDivisionError):
            return None
        if not np.isfinite(value):
            return None
        return value


class Intrinsic(BaseModel):
    """Pinhole-family camera intrinsic parameters."""

    model: CameraModel = Field(default=CameraModel.RADIAL3, description="Camera model family")
    width: int = Field(gt=0, description="Image width in pixels")
    height: int = Field(gt=0, description="Image height in pixels")
    focal_length_pix: float = Field(
        default=-1.0,
        description="Focal length in pixels, non-positive when unresolved"
    )
    initial_focal_length_pix: float = Field(
        default=-1.0,
        description="Focal length guess the intrinsic was created with"
    )
    principal_point: List[float] = Field(
        description="Principal point [ppx, ppy] in pixels",
        min_length=2,
        max_length=2
    )
    distortion_params: List[float] = Field(
        default_factory=list,
        description="Distortion coefficients, sized by the model"
    )
    serial_number: str = Field(default="", description="Grouping discriminator")
    initialization_mode: InitializationMode = Field(
        default=InitializationMode.NONE,
        description="Provenance of the initial focal length"
    )

    @field_validator('principal_point')
    @classmethod
    def validate_principal_point(cls, v):
        if len(v) != 2:
            raise ValueError("principal_point must have exactly 2 elements")
        return v

    @model_validator(mode='after')
    def validate_distortion_size(self):
        size = self.model.distortion_size
        if not self.distortion_params:
            self.distortion_params = [0.0] * size
        elif len(self.distortion_params) != size:
            raise ValueError(
                f"{self.model.value} expects {size} distortion parameters, "
                f"got {len(self.distortion_params)}"
            )
        return self

    def has_focal_length_pix(self) -> bool:
        """Check if the model family exposes a focal length in pixels."""
        return self.model.has_focal_length_pix

    def is_resolved(self) -> bool:
        """Check if the intrinsic has a usable focal length."""
        return self.has_focal_length_pix() and self.focal_length_pix > 0

    def get_principal_point(self) -> tuple[float, float]:
        """Get principal point (ppx, ppy)."""
        return self.principal_point[0], self.principal_point[1]

    def get_K(self) -> np.ndarray:
        """Get the 3x3 calibration matrix."""
        ppx, ppy = self.get_principal_point()
        f = self.focal_length_pix
        return np.array([
            [f, 0.0, ppx],
            [0.0, f, ppy],
            [0.0, 0.0, 1.0],
        ])

    def get_params(self) -> List[float]:
        """Get numeric parameters [f, ppx, ppy, *distortion]."""
        return [self.focal_length_pix, *self.principal_point, *self.distortion_params]

    def hash_value(self) -> int:
        """Deterministic content hash over the model and its parameters."""
        return stable_hash(
            "intrinsic",
            self.model.value,
            self.width,
            self.height,
            self.serial_number,
            [float(p) for p in self.get_params()],
        )


class Rig(BaseModel):
    """Multi-camera rig: a fixed assembly of synchronized cameras."""

    sub_pose_count: int = Field(ge=1, description="Number of cameras in the rig")

"""Project model, run options and report."""

import math
from typing import Dict, List, Optional, Literal, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator

from ..errors import InvalidIntrinsicStringError
from .entities import View, Intrinsic, Rig, CameraModel


def parse_intrinsic_matrix(k_matrix: str) -> Tuple[float, float, float]:
    """Parse a K matrix string "f;0;ppx;0;f;ppy;0;0;1".

    Args:
        k_matrix: Row-major 3x3 matrix, values separated by ';'

    Returns:
        (focal, ppx, ppy)

    Raises:
        InvalidIntrinsicStringError: If the string is not 9 numbers or the
            focal length is not a positive finite number
    """
    values = k_matrix.split(";")
    if len(values) != 9:
        raise InvalidIntrinsicStringError(
            f"K matrix string must have 9 ';'-separated values, got {len(values)}"
        )
    numbers = []
    for value in values:
        try:
            numbers.append(float(value))
        except ValueError:
            raise InvalidIntrinsicStringError(
                f"K matrix string has an invalid number: {value!r}"
            ) from None
    focal = numbers[0]
    if not (math.isfinite(focal) and focal > 0):
        raise InvalidIntrinsicStringError(f"K matrix focal length must be > 0, got {focal}")
    return focal, numbers[2], numbers[5]


class CameraInitOptions(BaseModel):
    """Options of a camera initialization run."""

    default_focal_length_pix: Optional[float] = Field(
        default=None,
        gt=0,
        description="Focal length in pixels for views without usable metadata"
    )
    default_field_of_view: Optional[float] = Field(
        default=None,
        gt=0,
        lt=180,
        description="Horizontal field of view in degrees for views without usable metadata"
    )
    default_intrinsic: Optional[str] = Field(
        default=None,
        description='K matrix "f;0;ppx;0;f;ppy;0;0;1"'
    )
    default_ppx: Optional[float] = Field(default=None, description="Principal point x in pixels")
    default_ppy: Optional[float] = Field(default=None, description="Principal point y in pixels")
    default_camera_model: Optional[CameraModel] = Field(
        default=None,
        description="Camera model, chosen per view when unset"
    )
    group_camera_model: Literal[0, 1, 2] = Field(
        default=2,
        description=(
            "0: each view has its own intrinsic; "
            "1: share by metadata, views without metadata are not grouped; "
            "2: share by metadata, views without metadata are grouped by folder"
        )
    )
    allow_incomplete_output: bool = Field(
        default=False,
        description="Write the result even if some views have no initialized intrinsic"
    )
    allow_single_view: bool = Field(
        default=False,
        description="Accept a result with a single initialized view"
    )
    max_workers: int = Field(default=4, gt=0, description="Worker threads for per-view resolution")
    id_seed: int = Field(default=0, description="Seed for ungrouped intrinsic ids")

    @field_validator('default_intrinsic')
    @classmethod
    def validate_default_intrinsic(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode='after')
    def validate_defaults(self):
        """Reject conflicting defaults and expand the K matrix string."""
        if self.default_intrinsic is not None:
            if self.default_focal_length_pix is not None:
                raise ValueError("Cannot combine default_intrinsic and default_focal_length_pix")
            if self.default_field_of_view is not None:
                raise ValueError("Cannot combine default_intrinsic and default_field_of_view")
            focal, ppx, ppy = parse_intrinsic_matrix(self.default_intrinsic)
            self.default_focal_length_pix = focal
            self.default_ppx = ppx
            self.default_ppy = ppy
            # The expanded focal now counts as set; keep the string out of later checks
            self.default_intrinsic = None
        elif self.default_focal_length_pix is not None and self.default_field_of_view is not None:
            raise ValueError("Cannot combine default_focal_length_pix and default_field_of_view")
        return self

    def has_default_focal(self) -> bool:
        """Check if a fallback focal length (pixels or FOV) was supplied."""
        return self.default_focal_length_pix is not None or self.default_field_of_view is not None


class SensorIssue(BaseModel):
    """A camera whose sensor width could not be used as-is."""

    make: str = Field(description="Camera make from metadata")
    model: str = Field(description="Camera model from metadata")
    image_path: str = Field(description="First image showing the issue")
    database_brand: Optional[str] = Field(default=None, description="Brand of the database entry")
    database_model: Optional[str] = Field(default=None, description="Model of the database entry")
    sensor_width_mm: Optional[float] = Field(default=None, description="Database sensor width")


class CameraInitReport(BaseModel):
    """Summary of a camera initialization run."""

    total_views: int = Field(default=0, description="Number of views listed")
    complete_views: int = Field(default=0, description="Views with an initialized intrinsic")
    intrinsic_count: int = Field(default=0, description="Number of intrinsics listed")
    rig_count: int = Field(default=0, description="Number of detected rigs")
    no_metadata_paths: List[str] = Field(
        default_factory=list,
        description="Images without camera make and model"
    )
    unknown_sensors: List[SensorIssue] = Field(
        default_factory=list,
        description="Cameras missing from the sensor database"
    )
    unsure_sensors: List[SensorIssue] = Field(
        default_factory=list,
        description="Cameras matched to a slightly different database model"
    )
    estimated_from_35mm: Dict[str, List[float]] = Field(
        default_factory=dict,
        description="Per-image [sensor width, focal length] from the 35mm-equivalent tag"
    )

    def summary(self) -> str:
        """Human-readable report."""
        return (
            "CameraInit report:"
            f"\n\t- # views listed: {self.total_views}"
            f"\n\t   - # views with an initialized intrinsic listed: {self.complete_views}"
            f"\n\t   - # views without metadata (with a default intrinsic): {len(self.no_metadata_paths)}"
            f"\n\t- # intrinsics listed: {self.intrinsic_count}"
            f"\n\t- # rigs detected: {self.rig_count}"
        )


class SfMProject(BaseModel):
    """Views, intrinsics and rigs of a reconstruction project."""

    version: str = Field(default="1.0", description="Project format version")
    views: Dict[int, View] = Field(
        default_factory=dict,
        description="Views by ID"
    )
    intrinsics: Dict[int, Intrinsic] = Field(
        default_factory=dict,
        description="Intrinsics by ID"
    )
    rigs: Dict[int, Rig] = Field(
        default_factory=dict,
        description="Rigs by ID"
    )

    @model_validator(mode='after')
    def validate_view_keys(self):
        for view_id, view in self.views.items():
            if view.view_id != view_id:
                raise ValueError(f"View key {view_id} does not match view_id {view.view_id}")
        return self

    def add_view(self, view: View) -> None:
        """Add a view to the project."""
        if view.view_id in self.views:
            raise ValueError(f"View {view.view_id} already exists")
        self.views[view.view_id] = view

    def add_intrinsic(self, intrinsic_id: int, intrinsic: Intrinsic) -> None:
        """Add an intrinsic to the project."""
        if intrinsic_id in self.intrinsics:
            raise ValueError(f"Intrinsic {intrinsic_id} already exists")
        self.intrinsics[intrinsic_id] = intrinsic

    def get_intrinsic(self, intrinsic_id: Optional[int]) -> Optional[Intrinsic]:
        """Get an intrinsic by ID, None if undefined or missing."""
        if intrinsic_id is None:
            return None
        return self.intrinsics.get(intrinsic_id)

    def get_view_ids(self) -> List[int]:
        """Get sorted list of all view IDs."""
        return sorted(self.views)

    def next_free_view_id(self, candidate: int) -> int:
        """Get the first unused view ID at or after the candidate."""
        view_id = candidate
        while view_id in self.views:
            view_id = (view_id + 1) & 0xFFFFFFFF
        return view_id

    def validate_project(self) -> List[str]:
        """Validate view references and return list of issues."""
        issues = []
        for view_id, view in self.views.items():
            if view.intrinsic_id is not None and view.intrinsic_id not in self.intrinsics:
                issues.append(f"View {view_id} references non-existent intrinsic {view.intrinsic_id}")
            if view.rig_id is not None and view.rig_id not in self.rigs:
                issues.append(f"View {view_id} references non-existent rig {view.rig_id}")
        return issues

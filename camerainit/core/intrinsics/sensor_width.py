"""Sensor width resolution from metadata and the sensor database."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..math.intrinsics import FILM_DIAGONAL_MM, FILM_WIDTH_MM, width_from_diagonal
from ..models.entities import InitializationMode
from ..sensors.database import Datasheet

SensorLookup = Callable[[str, str], Optional[Datasheet]]


class Diagnostic(str, Enum):
    """Per-view classification of the metadata cascade."""

    OK = "ok"
    NO_METADATA = "no_metadata"
    UNKNOWN_SENSOR_IN_DATABASE = "unknown_sensor_in_database"
    SENSOR_MISMATCH_WARNING = "sensor_mismatch_warning"


@dataclass
class SensorWidthResolution:
    """Result of the sensor width cascade.

    ``focal_length_mm`` is only set when the 35mm-equivalent branch had to
    derive the focal length together with the sensor width.
    """

    sensor_width_mm: Optional[float]
    focal_length_mm: Optional[float]
    diagnostic: Diagnostic
    initialization_mode: InitializationMode
    datasheet: Optional[Datasheet] = None

    def is_resolved(self) -> bool:
        return self.sensor_width_mm is not None


def resolve_sensor_width(
    make: str,
    model: str,
    focal_in_35mm: Optional[float],
    focal_length_hint: Optional[float],
    image_ratio: float,
    lookup: SensorLookup,
    initialization_mode: InitializationMode = InitializationMode.NONE
) -> SensorWidthResolution:
    """Resolve the sensor width of a view.

    Cascade: sensor database, then inversion of the 35mm-equivalent focal
    length, then unresolved.

    Args:
        make: Camera make, may be empty
        model: Camera model, may be empty
        focal_in_35mm: 35mm-equivalent focal length, None if absent
        focal_length_hint: True focal length in mm if already known
        image_ratio: Image width divided by height
        lookup: Sensor database lookup
        initialization_mode: Mode to report when no branch sets one

    Returns:
        Sensor width resolution with diagnostic
    """
    has_camera_metadata = bool(make or model)
    sensor_width = None
    focal_length = None
    diagnostic = Diagnostic.OK
    datasheet = None

    if has_camera_metadata:
        datasheet = lookup(make, model)
        if datasheet is not None:
            sensor_width = datasheet.sensor_width_mm
            if datasheet.model != model:
                diagnostic = Diagnostic.SENSOR_MISMATCH_WARNING
            if focal_length_hint is not None:
                initialization_mode = InitializationMode.COMPUTED_FROM_METADATA

    if focal_in_35mm is not None:
        if sensor_width is None:
            # Two independent cases; the no-hint case derives the focal too.
            if focal_length_hint is not None:
                sensor_diag = focal_length_hint * FILM_DIAGONAL_MM / focal_in_35mm
                sensor_width = width_from_diagonal(sensor_diag, image_ratio)
            else:
                sensor_width = width_from_diagonal(FILM_DIAGONAL_MM, image_ratio)
                focal_length = sensor_width * focal_in_35mm / FILM_WIDTH_MM
        initialization_mode = InitializationMode.ESTIMATED_FROM_METADATA

    if sensor_width is None:
        if has_camera_metadata:
            diagnostic = Diagnostic.UNKNOWN_SENSOR_IN_DATABASE
        else:
            diagnostic = Diagnostic.NO_METADATA

    return SensorWidthResolution(
        sensor_width_mm=sensor_width,
        focal_length_mm=focal_length,
        diagnostic=diagnostic,
        initialization_mode=initialization_mode,
        datasheet=datasheet,
    )

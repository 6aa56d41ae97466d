"""Aggregation of per-view outcomes into the run report."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..intrinsics.sensor_width import Diagnostic
from ..models.entities import InitializationMode, View
from ..models.project import CameraInitReport, SensorIssue
from ..sensors.database import Datasheet

logger = logging.getLogger(__name__)


@dataclass
class ResolutionOutcome:
    """What the metadata cascade found for one view."""

    sensor_width_mm: Optional[float]
    focal_length_mm: Optional[float]
    initialization_mode: InitializationMode
    diagnostic: Diagnostic
    used_focal_in_35mm: bool = False
    datasheet: Optional[Datasheet] = None


class ReportBuilder:
    """Collects outcomes in merge order; first image wins per camera."""

    def __init__(self):
        self.no_metadata_paths: List[str] = []
        self.unknown_sensors: Dict[Tuple[str, str], SensorIssue] = {}
        self.unsure_sensors: Dict[Tuple[str, str], SensorIssue] = {}
        self.estimated_from_35mm: Dict[str, List[float]] = {}

    def add(self, view: View, outcome: ResolutionOutcome) -> None:
        make, model = view.get_make(), view.get_model()

        if outcome.diagnostic == Diagnostic.SENSOR_MISMATCH_WARNING and outcome.datasheet is not None:
            self.unsure_sensors.setdefault((make, model), SensorIssue(
                make=make,
                model=model,
                image_path=view.path,
                database_brand=outcome.datasheet.brand,
                database_model=outcome.datasheet.model,
                sensor_width_mm=outcome.datasheet.sensor_width_mm,
            ))
        elif outcome.diagnostic == Diagnostic.UNKNOWN_SENSOR_IN_DATABASE:
            self.unknown_sensors.setdefault((make, model), SensorIssue(
                make=make,
                model=model,
                image_path=view.path,
            ))
        elif outcome.diagnostic == Diagnostic.NO_METADATA:
            self.no_metadata_paths.append(view.path)

        if outcome.used_focal_in_35mm:
            self.estimated_from_35mm[view.path] = [
                outcome.sensor_width_mm if outcome.sensor_width_mm is not None else -1.0,
                outcome.focal_length_mm if outcome.focal_length_mm is not None else -1.0,
            ]

    def build(self, total_views: int, complete_views: int, intrinsic_count: int, rig_count: int) -> CameraInitReport:
        return CameraInitReport(
            total_views=total_views,
            complete_views=complete_views,
            intrinsic_count=intrinsic_count,
            rig_count=rig_count,
            no_metadata_paths=list(self.no_metadata_paths),
            unknown_sensors=list(self.unknown_sensors.values()),
            unsure_sensors=list(self.unsure_sensors.values()),
            estimated_from_35mm=dict(self.estimated_from_35mm),
        )


def log_report_details(report: CameraInitReport) -> None:
    """Log the per-image diagnostics of a run."""
    if report.no_metadata_paths:
        lines = "".join(f"\t- '{path}'\n" for path in report.no_metadata_paths)
        logger.debug(f"No metadata in image(s):\n{lines}")

    if report.unsure_sensors:
        logger.warning("The camera found in the database is slightly different for image(s):")
        for issue in report.unsure_sensors:
            logger.warning(
                f"image: '{Path(issue.image_path).name}'\n"
                f"\t- image camera brand: {issue.make}\n"
                f"\t- image camera model: {issue.model}\n"
                f"\t- database camera brand: {issue.database_brand}\n"
                f"\t- database camera model: {issue.database_model}\n"
                f"\t- database camera sensor size: {issue.sensor_width_mm} mm"
            )
        logger.warning("Please check and correct camera model(s) name in the database.")

    if report.unknown_sensors:
        lines = "".join(
            f"\t- camera brand: {issue.make}\n"
            f"\t- camera model: {issue.model}\n"
            f"\t   - image: {Path(issue.image_path).name}\n"
            for issue in report.unknown_sensors
        )
        logger.warning(
            f"Sensor width doesn't exist in the database for image(s):\n{lines}"
            "Please add camera model(s) and sensor width(s) in the database."
        )

    if report.estimated_from_35mm:
        lines = "".join(
            f"\t- image: {Path(path).name}\n"
            f"\t   - sensor width: {values[0]}\n"
            f"\t   - focal length: {values[1]}\n"
            for path, values in report.estimated_from_35mm.items()
        )
        logger.debug(f"Intrinsic(s) initialized from 'FocalLengthIn35mmFilm' exif metadata in image(s):\n{lines}")
